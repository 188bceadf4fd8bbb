# spreadwatch/errors.py

class SpreadWatchError(Exception):
    """Base class for errors raised by the price-sync core."""

class UnsupportedMarketError(SpreadWatchError):
    """No market symbol is configured for this (exchange, pair)."""
    def __init__(self, exchange, pair):
        self.exchange = exchange
        self.pair = pair
        super().__init__(f"No market configured for {pair.label} on {exchange.label}")

class FetchError(SpreadWatchError):
    """An order book could not be retrieved (network, API or payload failure)."""
    def __init__(self, exchange, reason: str):
        self.exchange = exchange
        self.reason = reason
        super().__init__(f"[{exchange.label}] order book fetch failed: {reason}")

class EmptyBookError(SpreadWatchError):
    def __init__(self, exchange, side: str):
        self.exchange = exchange
        self.side = side
        super().__init__(f"[{exchange.label}] no {side} levels in order book")
