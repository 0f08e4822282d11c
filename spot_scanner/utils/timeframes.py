"""Timeframe string to minutes conversion."""

def timeframe_minutes(tf: str) -> int:
    """Convert Binance-style kline interval (e.g. '5m', '1h', '1d', '1w') to minutes."""
    tf = tf.strip()
    unit, count = tf[-1:], tf[:-1]
    if not count.isdigit() or int(count) <= 0:
        raise ValueError(f"Unsupported timeframe: {tf}")
    if unit == "m":
        return int(count)
    if unit == "h":
        return int(count) * 60
    if unit == "d":
        return int(count) * 60 * 24
    if unit == "w":
        return int(count) * 60 * 24 * 7
    raise ValueError(f"Unsupported timeframe: {tf}")
