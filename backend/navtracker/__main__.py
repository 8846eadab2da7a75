"""CLI entry point for the NAV tracker.

Usage:
    python -m navtracker                      # daily update + alerts
    python -m navtracker --repair             # heal missing values
    python -m navtracker --export nav.csv     # dump the tabular history
    python -m navtracker --import-history nav.csv
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from navcore.errors import ConfigurationError, NoTradingDataFound
from navcore.gap_repair import GapRepair, RepairReport
from navcore.resolver import TradingDayResolver
from navcore.signal_engine import SignalEngine
from navtracker.clients import AmfiClient
from navtracker.config import Settings, get_settings
from navtracker.services import (
    DailyPipeline,
    EmailNotifier,
    LogNotifier,
    PipelineResult,
    PipelineStatus,
)
from navtracker.storage import Database, SeriesRepository
from navtracker.storage.history_io import export_history, import_history
from navtracker.tracker_config import TrackerConfig, load_tracker_config

EXIT_NO_DATA = 1
EXIT_CONFIG = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Track mutual fund NAVs, moving averages and buy signals",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m navtracker
  python -m navtracker --repair --lookback 7
  python -m navtracker --export nav_history.csv
  python -m navtracker --import-history sheet_export.csv
        """,
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--repair",
        action="store_true",
        help="Fill missing NAV values across the stored history",
    )
    mode.add_argument(
        "--export",
        type=Path,
        default=None,
        metavar="PATH",
        help="Export the tabular history to CSV",
    )
    mode.add_argument(
        "--import-history",
        type=Path,
        default=None,
        metavar="PATH",
        help="Seed history from a CSV with Date and '<fund> NAV' columns",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Tracker YAML config (default: NAV_TRACKER_CONFIG_PATH or tracker.yaml at the project root)",
    )
    parser.add_argument(
        "--lookback",
        type=int,
        default=None,
        help="Override the repair lookback per gap (days)",
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not send notifications for the daily run",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging",
    )
    return parser.parse_args(argv)


def repair_lookback(args: argparse.Namespace, settings: Settings) -> int:
    """--lookback wins when given; 0 means only the row's own date."""
    if args.lookback is not None:
        return args.lookback
    return settings.repair_lookback_days


def build_notifier(settings: Settings) -> EmailNotifier | LogNotifier:
    if settings.email_enabled:
        return EmailNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            mail_from=settings.mail_from,
            mail_to=settings.mail_to,
            username=settings.smtp_user,
            password=settings.smtp_password,
        )
    return LogNotifier()


def print_run_result(result: PipelineResult) -> None:
    if result.status == PipelineStatus.DUPLICATE:
        print("Latest available data is already stored. Nothing to do.")
        return

    row = result.row
    print(f"\nAppended {row.date.isoformat()}")
    print(f"{'Fund':<22} {'NAV':>12} {'Score':>7} {'Highlight':<10} Alerts")
    print("-" * 80)
    for signal in result.signals:
        value = row.value(signal.instrument)
        kinds = ", ".join(k.value for k in signal.kinds) or "-"
        print(
            f"{signal.instrument:<22} {str(value):>12} {signal.opportunity_score:>7.1f} "
            f"{signal.highlight.value:<10} {kinds}"
        )
    print(f"\nNotification sent: {'yes' if result.notified else 'no'}\n")


def print_repair_report(report: RepairReport) -> None:
    print(f"\nScanned {report.scanned_rows} rows")
    for name, count in report.repaired.items():
        print(f"  {name}: {count} entries updated")
    print(f"Total updates: {report.total}")
    if report.unresolved:
        print(f"Unresolved: {len(report.unresolved)}")
        for error in report.unresolved:
            print(f"  {error}")
    print()


async def cmd_daily(
    settings: Settings, config: TrackerConfig, repo: SeriesRepository, notify: bool
) -> PipelineResult:
    instruments = config.get_instruments()
    async with AmfiClient(settings.provider_base_url, settings.provider_timeout) as client:
        resolver = TradingDayResolver(client, config.get_calendar(), instruments)
        pipeline = DailyPipeline(
            store=repo,
            resolver=resolver,
            signal_engine=SignalEngine(config.signals),
            instruments=instruments,
            notifier=build_notifier(settings) if notify else None,
            max_lookback_days=settings.max_lookback_days,
            retry_lookback_days=settings.retry_lookback_days,
        )
        return await pipeline.run()


async def cmd_repair(
    settings: Settings, config: TrackerConfig, repo: SeriesRepository, lookback: int
) -> RepairReport:
    async with AmfiClient(settings.provider_base_url, settings.provider_timeout) as client:
        repair = GapRepair(repo, client, config.get_calendar(), config.get_instruments())
        return await repair.repair_missing(lookback)


async def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    for noisy in ("sqlalchemy", "httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logger = logging.getLogger("navtracker")

    settings = get_settings()
    try:
        config = load_tracker_config(args.config)
    except ConfigurationError as e:
        logger.error(f"{e}")
        print(f"Error: {e}")
        return EXIT_CONFIG

    db = Database(settings.database_url)
    await db.create_tables()
    repo = SeriesRepository(db)

    try:
        if args.repair:
            lookback = repair_lookback(args, settings)
            print_repair_report(await cmd_repair(settings, config, repo, lookback))
        elif args.export:
            count = await export_history(
                repo, config.get_instruments(), config.signals.ma_periods, args.export
            )
            print(f"Exported {count} rows to {args.export}")
        elif args.import_history:
            imported, skipped = await import_history(
                repo, config.get_instruments(), args.import_history
            )
            print(f"Imported {imported} rows ({skipped} already stored)")
        else:
            print_run_result(await cmd_daily(settings, config, repo, not args.no_notify))
    except NoTradingDataFound as e:
        logger.error(f"{e}")
        print(f"Error: {e}. Please try again later.")
        return EXIT_NO_DATA
    finally:
        await db.close()

    return 0


def run() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
