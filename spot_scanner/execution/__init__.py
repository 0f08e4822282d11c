"""Execution: exchange abstraction, Binance spot client, bracket planning, webhook gateway."""

from spot_scanner.execution.base import ExchangeClient
from spot_scanner.execution.bracket import BracketOrderPlanner, plan_bracket
from spot_scanner.execution.gateway import ExecutionGateway, GatewayResponse

__all__ = [
    "ExchangeClient",
    "BracketOrderPlanner",
    "plan_bracket",
    "ExecutionGateway",
    "GatewayResponse",
]
