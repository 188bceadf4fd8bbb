# spreadwatch/order_book.py
import asyncio
from decimal import Decimal
from typing import Optional, Sequence, Tuple
from .models import ExchangeId, FetchResult, OrderBookSnapshot, PriceLevel, TopOfBook, TradingPair
from .markets import MarketMap
from .errors import EmptyBookError, FetchError, UnsupportedMarketError

async def _fetch_one(client, pair: TradingPair, markets: MarketMap) -> OrderBookSnapshot:
    symbol = markets.market_symbol(client.exchange, pair)
    return await client.order_book(symbol)

async def fetch_both(client_a, client_b, pair: TradingPair, markets: MarketMap) -> Tuple[FetchResult, FetchResult]:
    """
    Pulls both order books concurrently and returns one result per exchange.

    The two requests go out together so the snapshots are as close in time
    as possible. A failure on one side never discards the other side.
    """
    clients = (client_a, client_b)
    # return_exceptions=True keeps one failed leg from cancelling the other
    results = await asyncio.gather(
        *(_fetch_one(c, pair, markets) for c in clients),
        return_exceptions=True,
    )

    out = []
    for client, res in zip(clients, results):
        if isinstance(res, OrderBookSnapshot):
            out.append(FetchResult(client.exchange, snapshot=res))
        elif isinstance(res, (FetchError, UnsupportedMarketError)):
            out.append(FetchResult(client.exchange, error=res))
        elif isinstance(res, Exception):
            out.append(FetchResult(client.exchange, error=FetchError(client.exchange, repr(res))))
        else:
            # CancelledError and friends are not adapter failures
            raise res
    return out[0], out[1]

def best_bid(exchange: ExchangeId, levels: Sequence[PriceLevel]) -> Decimal:
    if not levels:
        raise EmptyBookError(exchange, "bid")
    return max(level.price for level in levels)

def best_ask(exchange: ExchangeId, levels: Sequence[PriceLevel]) -> Decimal:
    if not levels:
        raise EmptyBookError(exchange, "ask")
    return min(level.price for level in levels)

def extract(snapshot: OrderBookSnapshot, logger=None) -> TopOfBook:
    """
    Reduces a snapshot to (highest bid, lowest ask).
    Exchange list ordering is not trusted. An empty side comes back as None.
    """
    bid: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    try:
        bid = best_bid(snapshot.exchange, snapshot.bids)
    except EmptyBookError as e:
        if logger:
            logger.debug(str(e))
    try:
        ask = best_ask(snapshot.exchange, snapshot.asks)
    except EmptyBookError as e:
        if logger:
            logger.debug(str(e))
    return TopOfBook(best_bid=bid, best_ask=ask)
