# spreadwatch/models.py
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple
import time

class ExchangeId(Enum):
    """
    The two venues being compared. Values are ccxt exchange ids.
    BINANCE is exchange A, HYPERLIQUID is exchange B.
    """
    BINANCE = "binance"
    HYPERLIQUID = "hyperliquid"

    @property
    def label(self) -> str:
        return self.value

class TradingPair(Enum):
    """
    Logical instrument tracked across both venues.
    Exchange-native symbols live in markets.MARKET_SYMBOLS.
    """
    RDNT_USDT = "RDNT/USDT"
    BTC_USDT = "BTC/USDT"
    ETH_USDT = "ETH/USDT"
    SOL_USDT = "SOL/USDT"

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> "TradingPair":
        for pair in cls:
            if pair.value == label:
                return pair
        raise ValueError(f"Unknown trading pair: {label}")

@dataclass(frozen=True, slots=True)
class PriceLevel:
    price: Decimal
    size: Decimal

@dataclass(frozen=True, slots=True)
class OrderBookSnapshot:
    """
    One order book as returned by a single adapter call.
    Only lives for the cycle that fetched it.
    """
    exchange: ExchangeId
    symbol: str
    bids: Tuple[PriceLevel, ...]
    asks: Tuple[PriceLevel, ...]
    timestamp: float = field(default_factory=time.time)

@dataclass(frozen=True, slots=True)
class TopOfBook:
    """Best bid / best ask pulled from one snapshot. None means that side was empty."""
    best_bid: Optional[Decimal]
    best_ask: Optional[Decimal]

@dataclass(frozen=True, slots=True)
class Quote:
    bid: Optional[Decimal] = None
    ask: Optional[Decimal] = None
    updated_at: Optional[float] = field(default=None, compare=False)

    @property
    def is_complete(self) -> bool:
        return self.bid is not None and self.ask is not None

    @property
    def spread(self) -> Optional[Decimal]:
        if not self.is_complete:
            return None
        return self.ask - self.bid

@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of one exchange's fetch within a cycle."""
    exchange: ExchangeId
    snapshot: Optional[OrderBookSnapshot] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.snapshot is not None

@dataclass(frozen=True, slots=True)
class OpportunityReport:
    """
    A detected cross-exchange crossing: buy at one venue's ask,
    sell at the other venue's bid.
    """
    timestamp: datetime
    pair: TradingPair
    buy_exchange: ExchangeId
    sell_exchange: ExchangeId
    buy_price: Decimal
    sell_price: Decimal

    @property
    def profit(self) -> Decimal:
        return self.sell_price - self.buy_price

    def describe(self) -> str:
        return (
            f"{self.timestamp:%c} | Arbitrage opportunity found | "
            f"Buy: {self.pair.label} at {self.buy_price} on {self.buy_exchange.label} | "
            f"Sell: {self.pair.label} at {self.sell_price} on {self.sell_exchange.label} | "
            f"Profit: {self.profit}"
        )

    def as_row(self) -> list:
        return [
            self.timestamp.isoformat(),
            self.pair.label,
            self.buy_exchange.label,
            str(self.buy_price),
            self.sell_exchange.label,
            str(self.sell_price),
            str(self.profit),
        ]
