"""
Execution gateway: validates a buy request from the operator's click, buys a
fixed notional and protects the fill with an OCO bracket.
"""

from __future__ import annotations
import hmac
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from spot_scanner.core.config import Config
from spot_scanner.core.errors import BracketSubmissionError, InvalidFillError
from spot_scanner.core.types import FilledOrder
from spot_scanner.execution.base import ExchangeClient
from spot_scanner.execution.bracket import BracketOrderPlanner
from spot_scanner.utils.telegram import Notifier

logger = logging.getLogger("spot_scanner.execution.gateway")

BUY_ACTION_PREFIX = "BUY_"


@dataclass
class GatewayResponse:
    """HTTP-shaped outcome: status code and JSON body (or plain text)."""
    status_code: int
    body: Any = field(default_factory=dict)


class SymbolLocks:
    """Non-blocking per-symbol locks: one execution per symbol at a time."""

    def __init__(self):
        self._guard = threading.Lock()
        self._busy: set[str] = set()

    def acquire(self, symbol: str) -> bool:
        with self._guard:
            if symbol in self._busy:
                return False
            self._busy.add(symbol)
            return True

    def release(self, symbol: str) -> None:
        with self._guard:
            self._busy.discard(symbol)


def _buy_order_body(filled: FilledOrder) -> Dict[str, Any]:
    if filled.raw:
        return filled.raw
    return {
        "symbol": filled.symbol,
        "orderId": filled.order_id,
        "average": filled.average_price,
        "filled": filled.filled_quantity,
    }


class ExecutionGateway:
    """Turns {token, action, symbol} into market buy + OCO, reporting the true outcome."""

    def __init__(
        self,
        config: Config,
        exchange: ExchangeClient,
        planner: Optional[BracketOrderPlanner] = None,
        notifier: Optional[Notifier] = None,
    ):
        self.config = config
        self.exchange = exchange
        self.planner = planner or BracketOrderPlanner(
            exchange, config.take_profit_factor, config.stop_loss_factor
        )
        self.notifier = notifier
        self._locks = SymbolLocks()

    def authorized(self, token: Optional[str]) -> bool:
        secret = self.config.webhook_token
        if not secret or not token:
            return False
        return hmac.compare_digest(token.encode(), secret.encode())

    def handle(self, token: Optional[str], action: Optional[str], symbol: Optional[str]) -> GatewayResponse:
        if not self.authorized(token):
            logger.warning("Rejected execution request with bad token")
            return GatewayResponse(401, "Unauthorized")
        if not action or not symbol or not action.startswith(BUY_ACTION_PREFIX):
            return GatewayResponse(400, "Missing or invalid action/symbol")

        symbol = symbol.strip().upper()
        if not self._locks.acquire(symbol):
            logger.warning("Execution already in progress for %s, rejecting duplicate", symbol)
            return GatewayResponse(409, {
                "message": f"Execution already in progress for {symbol}.",
                "error": "duplicate request",
            })
        try:
            return self.execute(symbol)
        finally:
            self._locks.release(symbol)

    def execute(self, symbol: str) -> GatewayResponse:
        logger.info("Executing market buy for %s with amount %s %s",
                    symbol, self.config.order_amount, self.config.quote_currency)
        try:
            filled = self.exchange.market_buy(symbol, self.config.order_amount)
            plan, order_id = self._protect(filled)
        except BracketSubmissionError as e:
            return self._unprotected(symbol, e)
        except Exception as e:
            logger.exception("Error during execution for %s: %s", symbol, e)
            return GatewayResponse(500, {
                "message": f"Failed to execute trade for {symbol}.",
                "error": str(e),
            })

        return GatewayResponse(200, {
            "message": f"Successfully placed market buy and OCO orders for {symbol}.",
            "buyOrder": _buy_order_body(filled),
            "bracketOrder": {"orderListId": order_id, **plan.to_dict()},
        })

    def _protect(self, filled: FilledOrder):
        """Bracket the fill. Anything but an invalid fill here leaves an open position."""
        try:
            return self.planner.place(filled)
        except InvalidFillError:
            raise
        except Exception as e:
            raise BracketSubmissionError(filled, e) from e

    def _unprotected(self, symbol: str, err: BracketSubmissionError) -> GatewayResponse:
        logger.critical("UNPROTECTED POSITION on %s: %s", symbol, err)
        if self.notifier is not None:
            try:
                sent = self.notifier.send(
                    self.config.telegram_chat_id,
                    f"UNPROTECTED POSITION on {symbol}\n"
                    f"Buy filled qty={err.filled.filled_quantity} avg={err.filled.average_price} "
                    f"but the OCO bracket failed: {err.cause}\n"
                    f"Place a stop-loss manually.",
                )
            except Exception as e:
                logger.exception("Could not alert operator about unprotected %s: %s", symbol, e)
            else:
                if not sent:
                    logger.warning("Unprotected-position alert for %s was not delivered", symbol)
        return GatewayResponse(502, {
            "message": f"Market buy for {symbol} filled but the OCO bracket failed. Position is unprotected.",
            "error": str(err.cause),
            "buyOrder": _buy_order_body(err.filled),
            "unprotectedPosition": True,
        })
