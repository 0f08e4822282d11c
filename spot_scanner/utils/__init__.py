"""Utils: Telegram notifier, timeframes, exchange precision helpers."""

from spot_scanner.utils.telegram import Notifier, TelegramNotifier, send_telegram
from spot_scanner.utils.timeframes import timeframe_minutes

__all__ = ["Notifier", "TelegramNotifier", "send_telegram", "timeframe_minutes"]
