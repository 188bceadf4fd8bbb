# main.py
import asyncio
import yaml
import sys
import questionary
from rich.live import Live
from rich.table import Table
from rich.layout import Layout
from rich.console import Console
from rich.panel import Panel

from spreadwatch.logger import setup_console_logger, OpportunityLog
from spreadwatch.market_engine import MarketEngine
from spreadwatch.markets import MarketMap
from spreadwatch.models import ExchangeId, TradingPair
from spreadwatch.errors import UnsupportedMarketError
from spreadwatch.poller import PricePoller
from spreadwatch.strategy import EXCHANGE_A, EXCHANGE_B

# --- UI HELPER FUNCTIONS ---

def startup_selection(config):
    """Interactive CLI to select the pair to watch."""
    print("\n🚀 SPREADWATCH \n")
    pair = questionary.select("Select Pair to Watch:", choices=config['supported_pairs']).ask()
    if not pair:
        print("No pair selected. Exiting.")
        sys.exit()
    return TradingPair.from_label(pair)

def generate_dashboard(poller: PricePoller):
    """
    Creates the Rich Console Dashboard layout.
    Shows top of book per venue and the most recent opportunity.
    """
    book_table = Table(title=f"📡 {poller.pair.label} Top of Book")
    book_table.add_column("Exchange", style="magenta")
    book_table.add_column("Bid", justify="right", style="green")
    book_table.add_column("Ask", justify="right", style="red")
    book_table.add_column("Spread", justify="right")
    book_table.add_column("Fetch Errors", justify="right", style="yellow")

    for ex in ExchangeId:
        q = poller.state.quote(ex)
        book_table.add_row(
            ex.label.upper(),
            str(q.bid) if q.bid is not None else "-",
            str(q.ask) if q.ask is not None else "-",
            str(q.spread) if q.spread is not None else "-",
            str(poller.failures[ex]),
        )

    last = poller.last_report
    if last:
        body = (
            f"[bold]{last.timestamp:%c}[/bold]\n"
            f"Buy  {last.buy_exchange.label.upper()} @ {last.buy_price}\n"
            f"Sell {last.sell_exchange.label.upper()} @ {last.sell_price}\n"
            f"[bold green]Profit: {last.profit}[/bold green]"
        )
    else:
        body = "[dim]No opportunity yet[/dim]"

    layout = Layout()
    layout.split_column(
        Layout(name="top"),
        Layout(name="bottom")
    )
    layout["top"].split_row(
        Layout(Panel(book_table)),
        Layout(Panel(body, title="💰 Last Opportunity"))
    )

    footer = Panel(
        f"[bold gold1]CYCLES: {poller.cycles} | OPPORTUNITIES: {poller.opportunities}[/bold gold1]",
        style="white on blue"
    )
    layout["bottom"].update(footer)
    layout["bottom"].size = 3

    return layout

# --- MAIN CONTROLLER ---

class SpreadWatchBot:
    def __init__(self, pair: TradingPair, config: dict):
        self.pair = pair
        self.config = config

        self.logger = setup_console_logger("SpreadWatch", self.config['system'].get('log_level', 'INFO'))
        self.report_log = OpportunityLog(self.config['audit']['opportunity_log'])
        self.markets = MarketMap(self.config.get('markets'))
        self.rest_engine = MarketEngine(self.config, self.logger)
        self.poller = None

    async def run(self):
        try:
            # Fatal at startup: a pair with no symbol on either venue can't be watched
            self.markets.validate(self.pair)
        except UnsupportedMarketError as e:
            print(f"❌ {e}")
            return

        poll_task = None
        try:
            print("Initializing Diagnostic Checks...")
            is_healthy = await self.rest_engine.initialize()
            if not is_healthy:
                print("❌ Diagnostic Failed. Check exchange connectivity.")
                return

            await self.report_log.start()

            polling = self.config.get('polling', {})
            self.poller = PricePoller(
                self.pair,
                self.rest_engine.client(EXCHANGE_A),
                self.rest_engine.client(EXCHANGE_B),
                self.markets,
                self.logger,
                min_cycle_interval=polling.get('min_cycle_interval_seconds', 0.0),
                heartbeat_seconds=polling.get('heartbeat_seconds', 60.0),
            )
            self.poller.add_sink(self.report_log.log_report)
            poll_task = asyncio.create_task(self.poller.run())

            console = Console()
            with Live(console=console, refresh_per_second=4) as live:
                while not poll_task.done():
                    live.update(generate_dashboard(self.poller))
                    await asyncio.sleep(0.25)
        finally:
            print("Shutting down resources...")
            if poll_task:
                self.poller.stop()
                poll_task.cancel()
                await asyncio.gather(poll_task, return_exceptions=True)
            await self.report_log.close()
            await self.rest_engine.shutdown()

def load_config(path="config.yaml"):
    with open(path, "r") as f: return yaml.safe_load(f)

if __name__ == "__main__":
    raw_conf = load_config()
    try:
        sel_pair = startup_selection(raw_conf)
        bot = SpreadWatchBot(sel_pair, raw_conf)
        try:
            import uvloop
            asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
        except ImportError:
            pass
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        print("\n🛑 Bot Stopped by User.")
        sys.exit()
