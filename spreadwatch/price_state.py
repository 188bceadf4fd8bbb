# spreadwatch/price_state.py
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional
from .models import ExchangeId, Quote, TopOfBook, TradingPair

@dataclass(frozen=True)
class PriceView:
    """Read-only copy of the price state handed to the detector each cycle."""
    pair: TradingPair
    quotes: Mapping[ExchangeId, Quote]

    def quote(self, exchange: ExchangeId) -> Quote:
        return self.quotes[exchange]

    @property
    def is_ready(self) -> bool:
        return all(q.is_complete for q in self.quotes.values())

class PriceState:
    """
    Last-known best bid/ask per exchange for one trading pair.
    Only the poll loop writes to it.
    """
    def __init__(self, pair: TradingPair):
        self.pair = pair
        self._quotes: Dict[ExchangeId, Quote] = {ex: Quote() for ex in ExchangeId}

    def update(self, exchange: ExchangeId, top: TopOfBook, ts: Optional[float] = None) -> bool:
        """
        Replaces the exchange's quote in one assignment.
        A side that came back None keeps its previous value.
        Returns False when nothing was written.
        """
        prev = self._quotes[exchange]
        if top.best_bid is None and top.best_ask is None:
            return False

        self._quotes[exchange] = Quote(
            bid=top.best_bid if top.best_bid is not None else prev.bid,
            ask=top.best_ask if top.best_ask is not None else prev.ask,
            updated_at=ts if ts is not None else time.time(),
        )
        return True

    def quote(self, exchange: ExchangeId) -> Quote:
        return self._quotes[exchange]

    @property
    def is_ready(self) -> bool:
        return all(q.is_complete for q in self._quotes.values())

    def view(self) -> PriceView:
        return PriceView(pair=self.pair, quotes=MappingProxyType(dict(self._quotes)))
