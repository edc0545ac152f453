"""
Command-line interface implementation.
"""

import argparse
import logging
import sys
from pathlib import Path

from ..analysis import PerformanceAnalyzer, PerformanceReport
from ..audit import last_traded_price
from ..bot_runner import BotRunner, RunResult
from ..config import ConfigurationError, ConfigurationManager, TradingConfig
from ..engine import DecisionEngine
from ..models import BotState
from ..persistence import StateManager
from ..price_feed import ExchangeQuoteFeed, PriceFeed, RandomWalkFeed, YahooQuoteFeed, yahoo_ticker_for
from ..risk import LiquidationReason


def setup_logging(level: str = "INFO") -> None:
    """Set up logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def positive_float(value: str) -> float:
    """argparse type for strictly positive floats."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not a number: {value}")
    if not number > 0:
        raise argparse.ArgumentTypeError(f"Must be positive: {value}")
    return number


def positive_int(value: str) -> int:
    """argparse type for strictly positive integers."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Not an integer: {value}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Must be at least 1: {value}")
    return number


def build_feed(args, engine: DecisionEngine, config: TradingConfig) -> PriceFeed:
    """Create the price feed selected on the command line."""
    if args.feed == "exchange":
        if engine.exchange.is_simulated:
            raise ValueError("The simulated venue has no market quotes; use --feed random or yahoo")
        return ExchangeQuoteFeed(engine.exchange, config.symbol)
    if args.feed == "yahoo":
        return YahooQuoteFeed(yahoo_ticker_for(config.symbol))
    return RandomWalkFeed(start_price=args.start_price, volatility=args.volatility, seed=args.seed)


def mark_price(state: BotState) -> float:
    """Best known market price for a state loaded from disk."""
    if state.current_price > 0:
        return state.current_price
    return last_traded_price(state.logs) or 0.0


def format_status(state: BotState, report: PerformanceReport) -> str:
    """Format the ledger and performance summary."""
    lines = []
    lines.append(f"\n📊 BOT STATUS - {state.symbol}")
    lines.append("=" * 50)
    lines.append(f"State: {'⏸️  PAUSED' if state.is_paused else '▶️  ACTIVE'}"
                 f" | Exchange: {'connected' if state.is_connected else 'disconnected'}")
    lines.append(f"Mark Price: ${report.current_price:,.2f}")
    lines.append(f"Free Balance: ${state.balance:,.2f}")
    lines.append(f"Equity: ${report.equity:,.2f} (peak ${report.peak_equity:,.2f}, "
                 f"drawdown {report.drawdown:.2%})")
    lines.append(f"Open Lots: {report.open_lots} of {state.effective_max_levels}"
                 f" | Deployed: ${report.capital_deployed:,.2f}")
    lines.append(f"Unrealized P&L: ${report.unrealized_pnl:,.2f}")
    lines.append(f"Realized P&L: ${report.realized_pnl:,.2f} | Daily Loss: ${state.daily_loss:,.2f}")

    if report.closed_lots:
        lines.append(f"Closed Lots: {report.closed_lots} ({report.win_rate:.1%} winners)")
        lines.append(f"Average P&L: ${report.average_pnl:,.2f} "
                     f"(best ${report.best_pnl:,.2f}, worst ${report.worst_pnl:,.2f})")
    lines.append("")

    if state.positions:
        lines.append("📈 OPEN LOTS (oldest first)")
        lines.append("-" * 30)
        for lot in sorted(state.positions, key=lambda p: p.entry_time):
            sl = f"${lot.sl_price:,.2f}" if lot.sl_price is not None else "off"
            lines.append(f"{lot.entry_time:%Y-%m-%d %H:%M:%S}: {lot.quantity:.8f} @ ${lot.entry_price:,.2f}"
                         f" | TP ${lot.tp_price:,.2f} | SL {sl}")
        lines.append("")

    recent = state.logs[:5]
    if recent:
        lines.append("🧾 RECENT EVENTS (Last 5)")
        lines.append("-" * 30)
        for event in recent:
            lines.append(f"{event.timestamp:%Y-%m-%d %H:%M:%S} {event.action.value:<6} {event.message}")

    return "\n".join(lines)


def format_run_result(result: RunResult, report: PerformanceReport) -> str:
    """Format the outcome of a bot run."""
    lines = []
    lines.append(f"\n🤖 RUN SUMMARY - {result.final_state.symbol}")
    lines.append("=" * 50)
    lines.append(f"Ticks Processed: {result.ticks_processed}")
    lines.append(f"Feed Errors: {result.feed_errors}")
    lines.append(f"Buys: {result.buys} | Sells: {result.sells} | Errors: {result.errors}")
    if result.stopped_by_pause:
        lines.append("⚠️  Run stopped because the bot is paused")
    lines.append("")
    lines.append(f"Equity: ${report.equity:,.2f}")
    lines.append(f"Realized P&L: ${report.realized_pnl:,.2f}")
    lines.append(f"Unrealized P&L: ${report.unrealized_pnl:,.2f}")
    lines.append(f"Open Lots: {report.open_lots}")
    return "\n".join(lines)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Ladder DCA Bot - dollar-cost averaging on dips with FIFO take-profit exits"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file"
    )

    parser.add_argument(
        "--state-dir",
        type=str,
        help="Directory holding saved bot state (default: ~/.ladder_dca/state)"
    )

    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level"
    )

    parser.add_argument(
        "--run",
        action="store_true",
        help="Run the bot against a price feed"
    )

    parser.add_argument(
        "--ticks",
        type=positive_int,
        help="Stop after this many price polls (default: run until interrupted)"
    )

    parser.add_argument(
        "--feed",
        choices=["random", "exchange", "yahoo"],
        default="random",
        help="Price source for --run (exchange needs a live venue)"
    )

    parser.add_argument(
        "--start-price",
        type=positive_float,
        default=50000.0,
        help="First price of the random feed"
    )

    parser.add_argument(
        "--volatility",
        type=float,
        default=0.002,
        help="Volatility of the random feed per tick"
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Seed for a reproducible random feed"
    )

    parser.add_argument(
        "--status",
        action="store_true",
        help="Show the ledger and performance summary"
    )

    parser.add_argument(
        "--price",
        type=positive_float,
        help="Mark price used by --status and --emergency-stop"
    )

    parser.add_argument(
        "--pause",
        action="store_true",
        help="Pause the bot"
    )

    parser.add_argument(
        "--resume",
        action="store_true",
        help="Resume the bot (combine with --run to start trading)"
    )

    parser.add_argument(
        "--emergency-stop",
        action="store_true",
        help="Close every open lot at market and pause"
    )

    parser.add_argument(
        "--reset-state",
        action="store_true",
        help="Discard saved state and start from the configured capital; "
             "the only way to clear a drawdown halt"
    )

    return parser


def main() -> None:
    """Main CLI entry point."""
    parser = create_parser()
    args = parser.parse_args()

    setup_logging(args.log_level)
    logger = logging.getLogger(__name__)

    try:
        if args.config:
            config_path = Path(args.config)
            if not config_path.exists():
                logger.error(f"Configuration file not found: {args.config}")
                sys.exit(1)

        config_manager = ConfigurationManager()
        if args.validate_config:
            try:
                config = config_manager.read_config(args.config or config_manager.get_default_config_path())
            except ConfigurationError as e:
                logger.error(f"Configuration validation failed: {e}")
                sys.exit(1)
        else:
            config = config_manager.load_config(args.config)

        logger.info(f"Loaded configuration for symbol: {config.symbol}")
        logger.info(f"Exchange: {config.exchange.value} ({'LIVE' if config.is_live_mode else 'paper'})")
        logger.info(f"Allocation rate: {config.allocation_rate:.1%} | Dip trigger: "
                    f"{config.dip_trigger_percent}% | Take profit: {config.take_profit_percent}%")

        if args.validate_config:
            logger.info("Configuration validation successful")
            return

        engine = DecisionEngine(config, state_store=StateManager(args.state_dir))
        analyzer = PerformanceAnalyzer()

        if args.reset_state:
            state = engine.reset()
            logger.info(f"State reset; balance {state.balance:.2f}")
            return

        if args.emergency_stop:
            saved = engine.get_state()
            price = args.price if args.price is not None else mark_price(saved)
            state = engine.liquidate_all(LiquidationReason.MANUAL_EMERGENCY_STOP, price=price or None)
            print(format_status(state, analyzer.summarize(state, mark_price(state))))
            return

        if args.pause:
            state = engine.pause()
            logger.info(f"Bot for {state.symbol} paused")
            return

        if args.resume:
            engine.resume()
            logger.info(f"Bot for {config.symbol} resumed")

        if args.run:
            if not engine.connect():
                logger.error(f"Could not connect to {config.exchange.value}")
                sys.exit(1)

            runner = BotRunner(engine, build_feed(args, engine, config))
            try:
                result = runner.run(args.ticks)
            except KeyboardInterrupt:
                logger.info("Interrupted; leaving bot state as saved")
                state = engine.get_state()
                print(format_status(state, analyzer.summarize(state, mark_price(state))))
                return

            state = result.final_state
            print(format_run_result(result, analyzer.summarize(state, mark_price(state))))

        elif args.status:
            state = engine.get_state()
            price = args.price if args.price is not None else mark_price(state)
            print(format_status(state, analyzer.summarize(state, price)))

        elif not args.resume:
            parser.print_help()

    except Exception as e:
        logger.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
