"""
Main orchestration module for the mint and resale profit tracker.

This module coordinates the full pipeline:
1. Build the registry of tracked addresses and collections
2. Load transaction histories (from cache, or from the FCD endpoint)
3. Classify transactions into mints and sales
4. Aggregate bot minting reports
5. Correlate sales against bot-minted inventory
6. Roll up totals and write the report
"""

import argparse
import logging
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from mintprofit.aggregator import build_bot_reports
from mintprofit.classifier import classify_all
from mintprofit.config import Config
from mintprofit.correlator import build_sale_reports
from mintprofit.errors import TrackerError
from mintprofit.history import HistoryLoader, load_all_histories
from mintprofit.models import (
    BotMintReport,
    CollectionSummary,
    FinalReport,
    MintRecord,
    SaleRecord,
    SaleReport,
)
from mintprofit.price_oracle import PriceOracle, create_price_oracle
from mintprofit.registry import Registry, load_registry
from mintprofit.reporter import build_report_document, print_report, save_report
from mintprofit.rollup import prepare_final_report, prepare_report_per_collection
from mintprofit.scheduler import ReportScheduler
from mintprofit.storage import TransactionCache


# Configure logging
def setup_logging() -> None:
    """Configure logging for the application."""
    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_level = getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]

    if Config.LOG_FILE:
        Config.ensure_directories()
        handlers.append(logging.FileHandler(Config.LOG_FILE))

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=handlers
    )


logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """All reports produced by one pipeline run."""
    bot_reports: dict[str, BotMintReport]
    sale_reports: dict[str, SaleReport]
    report_per_collection: dict[str, CollectionSummary]
    final_report: FinalReport
    document: dict


def split_records(
    histories: Mapping[str, list[dict]],
    registry: Registry
) -> tuple[dict[str, list[MintRecord]], dict[str, list[SaleRecord]]]:
    """
    Classify every address's history.

    Mints are only extracted for bot addresses; mint transactions of other
    addresses are never parsed. Sales are collected for every tracked address.

    Returns:
        (mint records by bot address, sale records by address), both in registry order
    """
    mints_by_bot: dict[str, list[MintRecord]] = {}
    sales_by_address: dict[str, list[SaleRecord]] = {}

    for address in registry.all_addresses:
        is_bot = registry.is_bot(address)
        records = classify_all(histories[address], registry, mints=is_bot)
        sales_by_address[address] = [r for r in records if isinstance(r, SaleRecord)]
        if is_bot:
            mints_by_bot[address] = [r for r in records if isinstance(r, MintRecord)]

    ordered_mints = {address: mints_by_bot[address] for address in registry.bot_addresses}
    return ordered_mints, sales_by_address


def run_pipeline(
    registry: Registry,
    cache: TransactionCache,
    oracle: PriceOracle,
    loader: Optional[HistoryLoader] = None,
    refresh: bool = False,
    max_workers: Optional[int] = None
) -> PipelineResult:
    """
    Execute the full profit pipeline.

    Args:
        registry: Tracked addresses and collections
        cache: Durable transaction cache
        oracle: Price oracle for non-stable sale currencies
        loader: History loader used when the cache must be (re)built
        refresh: Ignore any existing cache
        max_workers: Concurrent address loads

    Returns:
        PipelineResult with every report

    Raises:
        TrackerError: On any network, schema, or lookup failure
    """
    logger.info("=" * 80)
    logger.info("Starting mint and resale profit pipeline")
    logger.info("=" * 80)

    logger.info("Step 1: Loading transaction histories")
    histories = load_all_histories(
        registry, cache, loader=loader, max_workers=max_workers, refresh=refresh
    )

    logger.info("Step 2: Classifying transactions")
    mints_by_bot, sales_by_address = split_records(histories, registry)

    logger.info("Step 3: Preparing bots minting report")
    bot_reports = build_bot_reports(mints_by_bot)

    logger.info("Step 4: Preparing marketplace sales report")
    sale_reports = build_sale_reports(sales_by_address, bot_reports, oracle)

    logger.info("Step 5: Rolling up totals")
    report_per_collection = prepare_report_per_collection(bot_reports, sale_reports)
    final_report = prepare_final_report(bot_reports, sale_reports)

    document = build_report_document(
        bot_reports, sale_reports, report_per_collection, final_report
    )

    return PipelineResult(
        bot_reports=bot_reports,
        sale_reports=sale_reports,
        report_per_collection=report_per_collection,
        final_report=final_report,
        document=document,
    )


def run_pipeline_with_report(
    refresh: bool = False,
    output: Optional[Path] = None,
    print_console: bool = True
) -> PipelineResult:
    """
    Run the pipeline with configured collaborators and write the report.

    The report is only written after every stage succeeded.
    """
    registry = load_registry(Config.REGISTRY_FILE)
    cache = TransactionCache(Config.TX_CACHE_FILE)
    oracle = create_price_oracle()

    result = run_pipeline(registry, cache, oracle, refresh=refresh)

    logger.info("Step 6: Writing report")
    save_report(result.document, output)

    if print_console:
        print("\n" + "=" * 80)
        print_report(
            result.report_per_collection,
            result.final_report,
            bot_count=len(registry.bot_addresses),
            address_count=len(registry.all_addresses),
        )
        print("=" * 80 + "\n")

    logger.info("Pipeline completed successfully")
    return result


def main() -> int:
    """
    Main entry point for the profit tracker.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(
        description="NFT minting bot profit tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyse using the cached transactions (fetches them on first run)
  python -m mintprofit.main

  # Ignore the cache and reload every address
  python -m mintprofit.main --refresh

  # Regenerate the report every 12 hours
  python -m mintprofit.main --schedule --interval 12
        """
    )
    parser.add_argument(
        "--refresh",
        action="store_true",
        help="Ignore the transaction cache and reload all histories"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Report file path (default: REPORT_OUTPUT_DIR/profit_report.json)"
    )
    parser.add_argument(
        "--no-print",
        action="store_true",
        help="Do not print the console report"
    )
    parser.add_argument(
        "--schedule",
        action="store_true",
        help="Run in scheduled mode (refresh and regenerate the report at intervals)"
    )
    parser.add_argument(
        "--interval",
        type=int,
        default=None,
        help="Hours between scheduled runs (overrides SCAN_INTERVAL_HOURS config)"
    )

    args = parser.parse_args()

    setup_logging()

    is_valid, errors = Config.validate()
    if not is_valid:
        logger.error("Configuration validation failed:")
        for error in errors:
            logger.error(f"  - {error}")
        return 1

    Config.ensure_directories()

    if args.schedule:
        return _run_scheduled_mode(args.interval, args.output, not args.no_print)

    return _run_single_mode(args.refresh, args.output, not args.no_print)


def _run_single_mode(refresh: bool, output: Optional[Path], print_console: bool) -> int:
    """
    Run pipeline once and exit.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        run_pipeline_with_report(refresh=refresh, output=output, print_console=print_console)
        return 0

    except KeyboardInterrupt:
        logger.info("Pipeline interrupted by user")
        return 130

    except TrackerError as e:
        logger.error(f"Pipeline aborted, no report written: {e}")
        return 1

    except Exception as e:
        logger.error(f"Fatal error in pipeline: {e}", exc_info=True)
        return 1


def _run_scheduled_mode(
    interval_hours: Optional[int],
    output: Optional[Path],
    print_console: bool
) -> int:
    """
    Run in scheduled mode with continuous execution.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    logger.info("Starting in scheduled mode")

    def scheduled_run() -> None:
        run_pipeline_with_report(refresh=True, output=output, print_console=print_console)

    scheduler = ReportScheduler(scheduled_run)

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, shutting down gracefully...")
        scheduler.stop(wait=True)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    if not scheduler.start(interval_hours=interval_hours):
        logger.error("Failed to start scheduler")
        return 1

    status = scheduler.get_status()
    if status["next_run_time"]:
        logger.info(f"Next run: {status['next_run_time']}")

    logger.info("Running initial pipeline execution...")
    scheduler.run_once()

    logger.info("Scheduler is running. Press Ctrl+C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        scheduler.stop(wait=True)
        return 0


if __name__ == "__main__":
    sys.exit(main())
