"""
ExchangeClient adapter and MarketEngine diagnostic tests (ccxt mocked)
"""

import logging
from decimal import Decimal

import ccxt.async_support as ccxt
import pytest

from spreadwatch.models import ExchangeId
from spreadwatch.market_engine import ExchangeClient, MarketEngine
from spreadwatch.errors import FetchError


class StubCcxtClient:
    def __init__(self, book=None, error=None):
        self.book = book
        self.error = error
        self.requests = []
        self.closed = False
        self.markets = {"RDNT/USDT": {}}

    async def fetch_order_book(self, symbol, limit=None):
        self.requests.append((symbol, limit))
        if self.error:
            raise self.error
        return self.book

    async def load_markets(self):
        if self.error:
            raise self.error
        return self.markets

    async def close(self):
        self.closed = True


class TestExchangeClient:

    @pytest.mark.asyncio
    async def test_converts_levels_to_decimal(self):
        stub = StubCcxtClient(book={
            'bids': [[0.0512, 1500.0], [0.0511, 200.0]],
            'asks': [[0.0513, 50.0, 3]],
        })
        client = ExchangeClient(ExchangeId.BINANCE, stub, depth=5)

        snap = await client.order_book("RDNT/USDT")

        assert stub.requests == [("RDNT/USDT", 5)]
        assert snap.exchange == ExchangeId.BINANCE
        assert snap.symbol == "RDNT/USDT"
        assert snap.bids[0].price == Decimal("0.0512")
        assert snap.bids[0].size == Decimal("1500.0")
        assert snap.asks[0].price == Decimal("0.0513")

    @pytest.mark.asyncio
    async def test_ccxt_error_becomes_fetch_error(self):
        stub = StubCcxtClient(error=ccxt.RequestTimeout("timed out"))
        client = ExchangeClient(ExchangeId.HYPERLIQUID, stub)

        with pytest.raises(FetchError) as exc:
            await client.order_book("RDNT/USDC:USDC")

        assert exc.value.exchange == ExchangeId.HYPERLIQUID
        assert "RequestTimeout" in exc.value.reason

    @pytest.mark.asyncio
    async def test_malformed_payload_becomes_fetch_error(self):
        client = ExchangeClient(ExchangeId.BINANCE, StubCcxtClient(book={'bids': []}))

        with pytest.raises(FetchError) as exc:
            await client.order_book("RDNT/USDT")

        assert "malformed" in exc.value.reason

    @pytest.mark.asyncio
    async def test_non_numeric_price_becomes_fetch_error(self):
        client = ExchangeClient(ExchangeId.BINANCE, StubCcxtClient(book={'bids': [["abc", 1]], 'asks': []}))

        with pytest.raises(FetchError):
            await client.order_book("RDNT/USDT")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", [float('nan'), float('inf'), float('-inf')])
    async def test_non_finite_price_becomes_fetch_error(self, bad):
        stub = StubCcxtClient(book={'bids': [[bad, 1.0], [0.05, 1.0]], 'asks': [[0.06, 1.0]]})
        client = ExchangeClient(ExchangeId.BINANCE, stub)

        with pytest.raises(FetchError) as exc:
            await client.order_book("RDNT/USDT")

        assert "malformed" in exc.value.reason

    @pytest.mark.asyncio
    async def test_non_finite_size_becomes_fetch_error(self):
        stub = StubCcxtClient(book={'bids': [[0.05, float('nan')]], 'asks': [[0.06, 1.0]]})
        client = ExchangeClient(ExchangeId.HYPERLIQUID, stub)

        with pytest.raises(FetchError):
            await client.order_book("RDNT/USDC:USDC")


class TestMarketEngine:

    @pytest.fixture
    def config(self):
        return {
            'system': {'environment': 'live'},
            'performance': {'network_timeout_ms': 1000, 'order_book_depth': 10},
            'exchanges': {'binance': {}, 'hyperliquid': {}},
        }

    @pytest.mark.asyncio
    async def test_initialize_all_healthy(self, config, monkeypatch):
        stubs = {}

        def fake_build(self, exchange):
            stubs[exchange] = StubCcxtClient()
            return stubs[exchange]

        monkeypatch.setattr(MarketEngine, "_build_client", fake_build)
        engine = MarketEngine(config, logging.getLogger("spreadwatch.tests"))

        assert await engine.initialize() is True
        assert set(engine.clients) == set(ExchangeId)
        assert engine.client(ExchangeId.BINANCE).depth == 10

        await engine.shutdown()
        assert all(s.closed for s in stubs.values())

    @pytest.mark.asyncio
    async def test_initialize_reports_unavailable_exchange(self, config, monkeypatch):
        stubs = {}

        def fake_build(self, exchange):
            err = ccxt.ExchangeNotAvailable("maintenance") if exchange == ExchangeId.HYPERLIQUID else None
            stubs[exchange] = StubCcxtClient(error=err)
            return stubs[exchange]

        monkeypatch.setattr(MarketEngine, "_build_client", fake_build)
        engine = MarketEngine(config, logging.getLogger("spreadwatch.tests"))

        assert await engine.initialize() is False
        assert ExchangeId.HYPERLIQUID not in engine.clients
        assert stubs[ExchangeId.HYPERLIQUID].closed

    @pytest.mark.asyncio
    async def test_build_client_uses_config(self, config):
        config['exchanges']['binance'] = {'api_key': 'k', 'secret': 's'}
        engine = MarketEngine(config, logging.getLogger("spreadwatch.tests"))

        client = engine._build_client(ExchangeId.BINANCE)
        try:
            assert isinstance(client, ccxt.binance)
            assert client.timeout == 1000
            assert client.apiKey == 'k'
        finally:
            await client.close()
