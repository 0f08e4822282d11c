"""Exception hierarchy shared by scanner and execution."""

from __future__ import annotations
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from spot_scanner.core.types import FilledOrder


class SpotScannerError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(SpotScannerError):
    """Invalid configuration value."""


class InvalidFillError(SpotScannerError):
    """Bracket planning called on a buy without a usable average price or filled quantity."""


class ExchangeRejectedError(SpotScannerError):
    """The exchange refused an order. Message is the exchange's own text."""


class BracketSubmissionError(SpotScannerError):
    """
    The buy filled but the protective bracket could not be placed.
    The position is open and unprotected until someone intervenes.
    """

    def __init__(self, filled: "FilledOrder", cause: BaseException):
        self.filled = filled
        self.cause = cause
        super().__init__(
            f"Bracket for {filled.symbol} failed after buy filled "
            f"(qty={filled.filled_quantity}, avg={filled.average_price}): {cause}"
        )
