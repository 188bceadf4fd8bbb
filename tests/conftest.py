"""
pytest configuration and shared fixtures.

Provides fake exchange adapters that serve canned order books, so the
poll loop can be exercised without network access.
"""

import asyncio
import logging
from decimal import Decimal

import pytest

from spreadwatch.models import ExchangeId, OrderBookSnapshot, PriceLevel, TradingPair
from spreadwatch.markets import MarketMap
from spreadwatch.errors import FetchError


def make_snapshot(exchange, bids, asks, symbol="TEST"):
    """Builds a snapshot from plain price lists (size fixed at 1)."""
    return OrderBookSnapshot(
        exchange=exchange,
        symbol=symbol,
        bids=tuple(PriceLevel(Decimal(str(p)), Decimal("1")) for p in bids),
        asks=tuple(PriceLevel(Decimal(str(p)), Decimal("1")) for p in asks),
    )


class FakeExchangeClient:
    """
    Stand-in for ExchangeClient.

    `books` is a list consumed one entry per call; an entry may be a
    (bids, asks) tuple or an exception instance to raise. The last entry
    repeats once the list runs out.
    """

    def __init__(self, exchange, books, delay=0.0, completed=None):
        self.exchange = exchange
        self.books = list(books)
        self.delay = delay
        self.completed = completed
        self.calls = []

    async def order_book(self, symbol):
        self.calls.append(symbol)
        if self.delay:
            await asyncio.sleep(self.delay)
        entry = self.books.pop(0) if len(self.books) > 1 else self.books[0]
        if self.completed is not None:
            self.completed.append(self.exchange)
        if isinstance(entry, BaseException):
            raise entry
        bids, asks = entry
        return make_snapshot(self.exchange, bids, asks, symbol)


@pytest.fixture
def logger():
    return logging.getLogger("spreadwatch.tests")


@pytest.fixture
def markets():
    return MarketMap()


@pytest.fixture
def pair():
    return TradingPair.RDNT_USDT


@pytest.fixture
def fetch_error():
    return FetchError(ExchangeId.BINANCE, "RequestTimeout: simulated")
