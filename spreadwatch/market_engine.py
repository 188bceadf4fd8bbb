# spreadwatch/market_engine.py
import ccxt.async_support as ccxt
from decimal import Decimal, InvalidOperation
from typing import Dict, Tuple
from .models import ExchangeId, OrderBookSnapshot, PriceLevel
from .errors import FetchError

class ExchangeClient:
    """
    Read-only order book adapter around one ccxt exchange.
    Transport errors, timeouts and malformed payloads all surface as FetchError.
    """
    def __init__(self, exchange: ExchangeId, client, depth: int = 20):
        self.exchange = exchange
        self.client = client
        self.depth = depth

    async def order_book(self, symbol: str) -> OrderBookSnapshot:
        try:
            raw = await self.client.fetch_order_book(symbol, self.depth)
            return OrderBookSnapshot(
                exchange=self.exchange,
                symbol=symbol,
                bids=self._levels(raw['bids']),
                asks=self._levels(raw['asks']),
            )
        except ccxt.BaseError as e:
            raise FetchError(self.exchange, f"{type(e).__name__}: {e}") from e
        except (KeyError, IndexError, TypeError, InvalidOperation) as e:
            raise FetchError(self.exchange, f"malformed order book: {e!r}") from e

    @staticmethod
    def _levels(rows) -> Tuple[PriceLevel, ...]:
        levels = []
        for row in rows:
            # ccxt hands back floats; go through str() so Decimal keeps the printed value
            price = Decimal(str(row[0]))
            size = Decimal(str(row[1]))
            if not price.is_finite() or not size.is_finite():
                raise InvalidOperation(f"non-finite level {row!r}")
            levels.append(PriceLevel(price=price, size=size))
        return tuple(levels)

    async def close(self):
        await self.client.close()

class MarketEngine:
    """
    Manages REST API connections to both exchanges.
    Responsible for the startup connectivity diagnostic and for handing
    out one ExchangeClient per venue to the poller.
    """
    def __init__(self, config: dict, logger):
        self.clients: Dict[ExchangeId, ExchangeClient] = {}
        self.cfg = config
        self.logger = logger

    def _build_client(self, exchange: ExchangeId):
        timeout = self.cfg['performance']['network_timeout_ms']
        creds = (self.cfg.get('exchanges') or {}).get(exchange.value) or {}
        ex_class = getattr(ccxt, exchange.value)
        params = {
            'timeout': timeout,
            'enableRateLimit': True,
        }
        # Order books are public; keys are only passed through when configured
        if creds.get('api_key'):
            params['apiKey'] = creds['api_key']
            params['secret'] = creds.get('secret', '')
        if creds.get('password'):
            params['password'] = creds['password']
        client = ex_class(params)
        if self.cfg['system'].get('environment') == 'testnet':
            client.set_sandbox_mode(True)
        return client

    async def initialize(self) -> bool:
        """
        Connects to both exchanges and loads their markets.
        Returns False if ANY exchange fails the diagnostic.
        """
        depth = self.cfg['performance'].get('order_book_depth', 20)
        all_connected = True

        self.logger.info("📡 TESTING EXCHANGE CONNECTIONS...")

        for exchange in ExchangeId:
            name = exchange.value
            client = self._build_client(exchange)
            try:
                await client.load_markets()
                self.clients[exchange] = ExchangeClient(exchange, client, depth)
                self.logger.info(f"   ✅ {name.upper():<12} | Markets: {len(client.markets)}")

            except ccxt.AuthenticationError:
                self.logger.critical(f"   ❌ {name.upper():<12} | AUTH FAILED: Invalid API Key or Secret.")
                all_connected = False
                await client.close()

            except ccxt.RequestTimeout:
                self.logger.error(f"   ❌ {name.upper():<12} | TIMEOUT: Exchange API is slow or down.")
                all_connected = False
                await client.close()

            except ccxt.ExchangeNotAvailable:
                self.logger.error(f"   ❌ {name.upper():<12} | MAINTENANCE: Exchange is currently offline.")
                all_connected = False
                await client.close()

            except Exception as e:
                self.logger.critical(f"   ❌ {name.upper():<12} | UNKNOWN ERROR: {str(e)}")
                all_connected = False
                await client.close()

        return all_connected

    def client(self, exchange: ExchangeId) -> ExchangeClient:
        return self.clients[exchange]

    async def shutdown(self):
        """
        Gracefully closes all REST API sessions.
        """
        for c in self.clients.values():
            await c.close()
