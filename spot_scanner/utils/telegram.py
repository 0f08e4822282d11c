"""Telegram notifications. Never log token or chat_id."""

from __future__ import annotations
import logging
from abc import ABC, abstractmethod
from typing import Optional

import requests

logger = logging.getLogger("spot_scanner.utils.telegram")


def send_telegram(
    text: str,
    bot_token: str = "",
    chat_id: str = "",
    button_text: Optional[str] = None,
    button_url: Optional[str] = None,
) -> bool:
    """
    Send message to Telegram, optionally with one inline URL button.
    Returns True on success. Skips silently if not configured.
    """
    if not bot_token or not chat_id:
        logger.debug("Telegram not configured, skipping message (len=%d)", len(text))
        return False
    try:
        url = f"https://api.telegram.org/bot{bot_token}/sendMessage"
        payload = {"chat_id": chat_id, "text": text, "disable_web_page_preview": True}
        if button_url:
            payload["reply_markup"] = {
                "inline_keyboard": [[{"text": button_text or "Open", "url": button_url}]]
            }
        r = requests.post(url, json=payload, timeout=10)
        if r.status_code != 200:
            logger.warning("Telegram send failed: %s %s", r.status_code, r.text[:200])
            return False
        return True
    except Exception as e:
        logger.exception("Telegram error: %s", e)
        return False


class Notifier(ABC):
    """Best-effort outbound message channel. Implementations must not raise."""

    @abstractmethod
    def send(self, chat_target: str, text: str, action_url: Optional[str] = None) -> bool:
        """Deliver text to chat_target, with an optional action link. True if delivered."""
        pass


class TelegramNotifier(Notifier):
    """Notifier backed by the Telegram Bot API; the action link becomes a "Buy" button."""

    def __init__(self, bot_token: str, button_text: str = "Buy"):
        self._bot_token = bot_token
        self.button_text = button_text

    def send(self, chat_target: str, text: str, action_url: Optional[str] = None) -> bool:
        return send_telegram(
            text,
            self._bot_token,
            chat_target,
            button_text=self.button_text if action_url else None,
            button_url=action_url,
        )
