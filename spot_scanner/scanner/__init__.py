"""Scanner: market screening, scan cycles and the periodic scheduler."""

from spot_scanner.scanner.screener import MarketScreener, select
from spot_scanner.scanner.orchestrator import CycleReport, ScanOrchestrator
from spot_scanner.scanner.scheduler import run_scheduler

__all__ = ["MarketScreener", "select", "CycleReport", "ScanOrchestrator", "run_scheduler"]
