"""
Bracket (OCO) planning from a filled buy: take-profit above, stop-limit below.
All arithmetic stays in float; exchange rounding is applied once at the end.
"""

from __future__ import annotations
import logging

from spot_scanner.core.errors import InvalidFillError
from spot_scanner.core.types import BracketPlan, FilledOrder, PrecisionRule
from spot_scanner.execution.base import ExchangeClient
from spot_scanner.utils.exchange_filters import format_amount, format_price

logger = logging.getLogger("spot_scanner.execution.bracket")

# Resting stop-limit sits 0.5% under the trigger so it can still fill in a falling market.
STOP_LIMIT_OFFSET = 0.995


def plan_bracket(
    filled: FilledOrder,
    precision: PrecisionRule,
    take_profit_factor: float,
    stop_loss_factor: float,
) -> BracketPlan:
    """
    take_profit = avg * take_profit_factor
    stop_trigger = avg * stop_loss_factor
    stop_limit = stop_trigger * 0.995
    Quantity rounds down to the lot step, prices to the nearest tick.
    """
    avg = filled.average_price
    qty = filled.filled_quantity
    if not avg or avg <= 0 or not qty or qty <= 0:
        raise InvalidFillError(
            f"Buy order for {filled.symbol} must have a positive average price and filled "
            f"quantity to place a bracket (average={avg}, filled={qty})"
        )
    take_profit = avg * take_profit_factor
    stop_trigger = avg * stop_loss_factor
    stop_limit = stop_trigger * STOP_LIMIT_OFFSET
    return BracketPlan(
        symbol=filled.symbol,
        quantity=format_amount(qty, precision),
        take_profit_price=format_price(take_profit, precision),
        stop_trigger_price=format_price(stop_trigger, precision),
        stop_limit_price=format_price(stop_limit, precision),
    )


class BracketOrderPlanner:
    """Plans and submits the OCO sell that protects a filled buy."""

    def __init__(self, exchange: ExchangeClient, take_profit_factor: float, stop_loss_factor: float):
        self.exchange = exchange
        self.take_profit_factor = take_profit_factor
        self.stop_loss_factor = stop_loss_factor

    def plan(self, filled: FilledOrder, precision: PrecisionRule) -> BracketPlan:
        return plan_bracket(filled, precision, self.take_profit_factor, self.stop_loss_factor)

    def place(self, filled: FilledOrder) -> tuple[BracketPlan, str]:
        """
        Plan and submit in one request. Exchange rejections propagate unchanged
        (ExchangeRejectedError); there is no retry and no per-leg fallback.
        """
        plan = self.plan(filled, self.exchange.precision_for(filled.symbol))
        logger.info(
            "Placing OCO for %s: qty=%s tp=%s stop=%s stop_limit=%s",
            plan.symbol, plan.quantity, plan.take_profit_price, plan.stop_trigger_price, plan.stop_limit_price,
        )
        order_id = self.exchange.submit_bracket(plan)
        logger.info("OCO placed for %s (order list %s)", plan.symbol, order_id)
        return plan, order_id
