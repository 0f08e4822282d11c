"""Lot size and price filter helpers from exchange info."""

from __future__ import annotations
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional

from spot_scanner.core.types import PrecisionRule

DEFAULT_AMOUNT_STEP = "0.00000001"
DEFAULT_PRICE_STEP = "0.00000001"


def parse_symbol_filters(symbol: str, symbol_info: Optional[dict]) -> PrecisionRule:
    """
    Build a PrecisionRule from LOT_SIZE.stepSize and PRICE_FILTER.tickSize.
    Steps are kept as Decimal straight from the exchange strings.
    Falls back to 1e-8 steps if symbol_info or a filter is missing.
    """
    amount_step = DEFAULT_AMOUNT_STEP
    price_step = DEFAULT_PRICE_STEP
    for f in (symbol_info or {}).get("filters", []):
        if f.get("filterType") == "LOT_SIZE" and _positive(f.get("stepSize")):
            amount_step = str(f["stepSize"])
        if f.get("filterType") == "PRICE_FILTER" and _positive(f.get("tickSize")):
            price_step = str(f["tickSize"])
    return PrecisionRule(symbol=symbol, amount_step=Decimal(amount_step), price_step=Decimal(price_step))


def _positive(value) -> bool:
    try:
        return value is not None and Decimal(str(value)) > 0
    except ArithmeticError:
        return False


def to_step(value: float, step: Decimal, rounding: str) -> str:
    """Snap value to a multiple of step and format as a plain decimal string (no exponent)."""
    step = step.normalize()
    units = (Decimal(str(value)) / step).to_integral_value(rounding=rounding)
    snapped = units * step
    if step.as_tuple().exponent < 0:
        snapped = snapped.quantize(step)
    return format(snapped, "f")


def format_amount(qty: float, rule: PrecisionRule) -> str:
    """Round quantity down to the lot step so we never sell more than we hold."""
    return to_step(qty, rule.amount_step, ROUND_DOWN)


def format_price(price: float, rule: PrecisionRule) -> str:
    """Round price to the nearest tick."""
    return to_step(price, rule.price_step, ROUND_HALF_UP)
