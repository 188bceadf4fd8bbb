# spreadwatch/poller.py
import asyncio
import time
from typing import Awaitable, Callable, Dict, List, Optional
from .models import ExchangeId, FetchResult, OpportunityReport, TradingPair
from .markets import MarketMap
from .order_book import extract, fetch_both
from .price_state import PriceState
from .strategy import OpportunityDetector

ReportSink = Callable[[OpportunityReport], Awaitable[None]]

class PricePoller:
    """
    Drives the fetch -> extract -> update -> detect cycle for one pair.

    The poller is the only writer of its PriceState. Each cycle joins both
    fetches before anything is applied, so a snapshot is only ever used in
    the cycle that fetched it.
    """
    def __init__(self, pair: TradingPair, client_a, client_b, markets: MarketMap, logger,
                 min_cycle_interval: float = 0.0, heartbeat_seconds: float = 60.0):
        self.pair = pair
        self.client_a = client_a
        self.client_b = client_b
        self.markets = markets
        self.logger = logger
        self.min_cycle_interval = min_cycle_interval
        self.heartbeat_seconds = heartbeat_seconds

        self.state = PriceState(pair)
        self.detector = OpportunityDetector(logger)
        self.sinks: List[ReportSink] = []

        self.running = False
        self.cycles = 0
        self.opportunities = 0
        self.failures: Dict[ExchangeId, int] = {ex: 0 for ex in ExchangeId}
        self.last_report: Optional[OpportunityReport] = None

    def add_sink(self, sink: ReportSink):
        self.sinks.append(sink)

    def _apply(self, result: FetchResult):
        if not result.ok:
            self.failures[result.exchange] += 1
            self.logger.warning(f"[{result.exchange.label}] keeping last quote: {result.error}")
            return

        top = extract(result.snapshot, self.logger)
        if top.best_bid is None or top.best_ask is None:
            self.logger.warning(f"[{result.exchange.label}] empty side in order book, keeping last value")
        self.state.update(result.exchange, top, result.snapshot.timestamp)

    async def run_cycle(self) -> Optional[OpportunityReport]:
        res_a, res_b = await fetch_both(self.client_a, self.client_b, self.pair, self.markets)
        for res in (res_a, res_b):
            # one venue's bad book must not cost the other venue its update
            try:
                self._apply(res)
            except Exception as e:
                self.failures[res.exchange] += 1
                self.logger.error(f"[{res.exchange.label}] could not apply order book, keeping last quote: {e!r}")
        self.cycles += 1

        report = self.detector.check(self.state.view())
        if report is None:
            return None

        self.opportunities += 1
        self.last_report = report
        self.logger.info(report.describe())
        for sink in self.sinks:
            try:
                await sink(report)
            except Exception as e:
                self.logger.error(f"Report sink failed: {e}")
        return report

    async def run(self):
        """Polls until stop() is called or the task is cancelled."""
        self.running = True
        last_heartbeat = None

        while self.running:
            start_tick = time.monotonic()
            if last_heartbeat is None or start_tick - last_heartbeat >= self.heartbeat_seconds:
                self.logger.info(f"🔎 Seeking arbitrage opportunities on {self.pair.label}...")
                last_heartbeat = start_tick

            try:
                await self.run_cycle()
            except Exception:
                self.logger.error("Poll cycle failed", exc_info=True)

            elapsed = time.monotonic() - start_tick
            await asyncio.sleep(max(0, self.min_cycle_interval - elapsed))

    def stop(self):
        self.running = False
