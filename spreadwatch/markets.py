# spreadwatch/markets.py
from typing import Dict, Optional, Tuple
from .models import ExchangeId, TradingPair
from .errors import UnsupportedMarketError

# Exchange-native (ccxt unified) symbols.
# Hyperliquid quotes in USDC, so the USDT pairs map onto its USDC perps.
MARKET_SYMBOLS: Dict[Tuple[ExchangeId, TradingPair], str] = {
    (ExchangeId.BINANCE, TradingPair.RDNT_USDT): "RDNT/USDT",
    (ExchangeId.HYPERLIQUID, TradingPair.RDNT_USDT): "RDNT/USDC:USDC",
    (ExchangeId.BINANCE, TradingPair.BTC_USDT): "BTC/USDT",
    (ExchangeId.HYPERLIQUID, TradingPair.BTC_USDT): "BTC/USDC:USDC",
    (ExchangeId.BINANCE, TradingPair.ETH_USDT): "ETH/USDT",
    (ExchangeId.HYPERLIQUID, TradingPair.ETH_USDT): "ETH/USDC:USDC",
    (ExchangeId.BINANCE, TradingPair.SOL_USDT): "SOL/USDT",
    (ExchangeId.HYPERLIQUID, TradingPair.SOL_USDT): "SOL/USDC:USDC",
}

class MarketMap:
    """
    Lookup table from (exchange, pair) to the exchange's market symbol.

    The built-in table can be extended or overridden from the `markets`
    section of config.yaml:

        markets:
          hyperliquid:
            RDNT/USDT: "RDNT/USDC:USDC"
    """
    def __init__(self, overrides: Optional[dict] = None,
                 table: Optional[Dict[Tuple[ExchangeId, TradingPair], str]] = None):
        self._table = dict(MARKET_SYMBOLS if table is None else table)
        for ex_name, pairs in (overrides or {}).items():
            exchange = ExchangeId(ex_name)
            for label, symbol in (pairs or {}).items():
                self._table[(exchange, TradingPair.from_label(label))] = symbol

    def market_symbol(self, exchange: ExchangeId, pair: TradingPair) -> str:
        try:
            return self._table[(exchange, pair)]
        except KeyError:
            raise UnsupportedMarketError(exchange, pair) from None

    def validate(self, pair: TradingPair) -> Dict[ExchangeId, str]:
        """Resolves the pair on every exchange. Raises on the first gap."""
        return {ex: self.market_symbol(ex, pair) for ex in ExchangeId}
