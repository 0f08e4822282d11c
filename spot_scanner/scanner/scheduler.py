"""Fixed-interval loop around ScanOrchestrator.run_cycle."""

from __future__ import annotations
import logging
import threading
import time
from typing import Callable, Optional

from spot_scanner.scanner.orchestrator import ScanOrchestrator

logger = logging.getLogger("spot_scanner.scanner.scheduler")


def run_scheduler(
    orchestrator: ScanOrchestrator,
    interval_seconds: float,
    stop_event: Optional[threading.Event] = None,
    max_cycles: Optional[int] = None,
    time_fn: Callable[[], float] = time.monotonic,
) -> int:
    """
    Run one cycle immediately, then one per interval until stop_event is set.
    Cycles never overlap: if one overruns, the ticks it covered are skipped.
    Returns the number of cycles run.
    """
    if interval_seconds <= 0:
        raise ValueError("interval_seconds must be positive")
    stop_event = stop_event or threading.Event()
    cycles = 0
    next_run = time_fn()
    while not stop_event.is_set():
        try:
            orchestrator.run_cycle()
        except Exception as e:
            logger.exception("Error running scanner: %s", e)
        cycles += 1
        if max_cycles is not None and cycles >= max_cycles:
            break
        next_run += interval_seconds
        now = time_fn()
        if now > next_run:
            missed = int((now - next_run) // interval_seconds) + 1
            logger.warning("Scan cycle overran the %.0fs interval, skipping %d tick(s)", interval_seconds, missed)
            next_run += missed * interval_seconds
        stop_event.wait(max(0.0, next_run - now))
    return cycles
