# spreadwatch/strategy.py
from datetime import datetime
from typing import Optional
from .models import ExchangeId, OpportunityReport
from .price_state import PriceView

EXCHANGE_A = ExchangeId.BINANCE
EXCHANGE_B = ExchangeId.HYPERLIQUID

class OpportunityDetector:
    """
    Compares the two venues' top of book once per cycle.

    Reports buy-on-B/sell-on-A when bid(A) > ask(B), otherwise
    buy-on-A/sell-on-B when bid(B) > ask(A). Every positive crossing is
    reported; fees and minimum size are left to whoever consumes the report.
    """
    def __init__(self, logger=None):
        self.logger = logger

    def check(self, view: PriceView, now: Optional[datetime] = None) -> Optional[OpportunityReport]:
        # Nothing meaningful until both venues have a full quote
        if not view.is_ready:
            return None

        a = view.quote(EXCHANGE_A)
        b = view.quote(EXCHANGE_B)
        a_over_b = a.bid > b.ask
        b_over_a = b.bid > a.ask

        if a_over_b and b_over_a and self.logger:
            self.logger.warning(
                f"⚠️ Both books crossed on {view.pair.label}: "
                f"{EXCHANGE_A.label} {a.bid}/{a.ask} vs {EXCHANGE_B.label} {b.bid}/{b.ask}. Feed may be miscalibrated."
            )

        if a_over_b:
            buy_ex, sell_ex, buy_price, sell_price = EXCHANGE_B, EXCHANGE_A, b.ask, a.bid
        elif b_over_a:
            buy_ex, sell_ex, buy_price, sell_price = EXCHANGE_A, EXCHANGE_B, a.ask, b.bid
        else:
            return None

        return OpportunityReport(
            timestamp=now or datetime.now(),
            pair=view.pair,
            buy_exchange=buy_ex,
            sell_exchange=sell_ex,
            buy_price=buy_price,
            sell_price=sell_price,
        )
