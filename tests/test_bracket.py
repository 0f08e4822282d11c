"""Unit tests for execution.bracket and utils.exchange_filters."""

from decimal import Decimal

import pytest
from spot_scanner.core.errors import ExchangeRejectedError, InvalidFillError
from spot_scanner.core.types import FilledOrder, PrecisionRule
from spot_scanner.execution.bracket import BracketOrderPlanner, plan_bracket
from spot_scanner.utils.exchange_filters import format_amount, format_price, parse_symbol_filters

RULE = PrecisionRule("BTC/USDC", Decimal("0.001"), Decimal("0.01"))


def test_plan_scenario():
    plan = plan_bracket(FilledOrder("BTC/USDC", 100.0, 1.0), RULE, 1.025, 0.9875)
    assert plan.quantity == "1.000"
    assert plan.take_profit_price == "102.50"
    assert plan.stop_trigger_price == "98.75"
    assert plan.stop_limit_price == "98.25"


def test_prices_before_rounding():
    fine = PrecisionRule("BTC/USDC", Decimal("0.00000001"), Decimal("0.00000001"))
    plan = plan_bracket(FilledOrder("BTC/USDC", 100.0, 1.0), fine, 1.025, 0.9875)
    assert float(plan.take_profit_price) == pytest.approx(102.5)
    assert float(plan.stop_trigger_price) == pytest.approx(98.75)
    assert float(plan.stop_limit_price) == pytest.approx(98.25125)


def test_plan_is_idempotent():
    filled = FilledOrder("ETH/USDC", 2345.678, 0.0213)
    assert plan_bracket(filled, RULE, 1.025, 0.9875) == plan_bracket(filled, RULE, 1.025, 0.9875)


@pytest.mark.parametrize("avg,qty", [(0, 5), (10, 0), (None, 5), (10, None), (-1, 5)])
def test_rejects_invalid_fill(avg, qty):
    with pytest.raises(InvalidFillError):
        plan_bracket(FilledOrder("BTC/USDC", avg, qty), RULE, 1.025, 0.9875)


def test_quantity_rounds_down_price_rounds_nearest():
    assert format_amount(0.0219999, RULE) == "0.021"
    assert format_price(98.256, RULE) == "98.26"
    assert format_price(98.254, RULE) == "98.25"


def test_no_scientific_notation():
    rule = PrecisionRule("PEPE/USDC", Decimal("1"), Decimal("0.00000001"))
    assert format_price(0.0000123456, rule) == "0.00001235"
    assert format_amount(12345678.9, rule) == "12345678"


def test_parse_symbol_filters():
    info = {"filters": [
        {"filterType": "PRICE_FILTER", "tickSize": "0.01000000"},
        {"filterType": "LOT_SIZE", "stepSize": "0.00010000", "minQty": "0.00010000"},
    ]}
    rule = parse_symbol_filters("BTC/USDC", info)
    assert rule.price_step == Decimal("0.01")
    assert rule.amount_step == Decimal("0.0001")
    assert parse_symbol_filters("X/USDC", None).price_step == Decimal("0.00000001")


def test_planner_submits_single_oco(exchange):
    planner = BracketOrderPlanner(exchange, 1.025, 0.9875)
    plan, order_id = planner.place(FilledOrder("BTC/USDC", 100.0, 0.123456))
    assert order_id == "42"
    assert exchange.brackets == [plan]
    assert plan.quantity == "0.12345"


def test_planner_surfaces_rejection_verbatim(exchange):
    exchange.bracket_error = ExchangeRejectedError("APIError(code=-2010): Account has insufficient balance")
    with pytest.raises(ExchangeRejectedError, match="insufficient balance"):
        BracketOrderPlanner(exchange, 1.025, 0.9875).place(FilledOrder("BTC/USDC", 100.0, 1.0))
    assert exchange.brackets == []
