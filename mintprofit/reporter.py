"""
Reporter module for the mint and resale profit reports.

Builds the structured report document (per-bot minting, per-address sales,
per-collection summary, final roll-up), writes it as JSON, and renders a
readable console summary. The JSON output contains no wall-clock data, so
identical inputs always produce byte-identical files.
"""

import json
import logging
from dataclasses import asdict
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional

from mintprofit.config import Config
from mintprofit.models import (
    BotMintReport,
    CollectionSummary,
    FinalReport,
    SaleReport,
)
from mintprofit.utils import format_ust

# Configure module logger
logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    """Convert Decimals (recursively) to plain decimal strings."""
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def build_report_document(
    bot_reports: Mapping[str, BotMintReport],
    sale_reports: Mapping[str, SaleReport],
    report_per_collection: Mapping[str, CollectionSummary],
    final_report: FinalReport
) -> dict:
    """
    Assemble every report into one JSON-ready document.

    Returns:
        Dictionary with bots_minting_report, marketplace_sales_report,
        report_per_collection and final_report sections
    """
    per_collection = {}
    for collection, summary in report_per_collection.items():
        entry = asdict(summary)
        entry["profit"] = summary.profit
        per_collection[collection] = entry

    document = {
        "bots_minting_report": {
            address: asdict(report) for address, report in bot_reports.items()
        },
        "marketplace_sales_report": {
            address: asdict(report) for address, report in sale_reports.items()
        },
        "report_per_collection": per_collection,
        "final_report": asdict(final_report),
    }
    return _jsonable(document)


def render_json(document: dict) -> str:
    """Serialize a report document deterministically."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def save_report(document: dict, file_path: Optional[Path] = None) -> Path:
    """
    Write the report document to disk.

    Args:
        document: Report document from build_report_document
        file_path: Destination. If None, uses REPORT_OUTPUT_DIR/profit_report.json

    Returns:
        Path the report was written to
    """
    if file_path is None:
        file_path = Config.REPORT_OUTPUT_DIR / "profit_report.json"

    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(render_json(document), encoding="utf-8")
    logger.info(f"Report saved to {file_path}")
    return file_path


def generate_report(
    report_per_collection: Mapping[str, CollectionSummary],
    final_report: FinalReport,
    bot_count: int,
    address_count: int
) -> str:
    """
    Generate a formatted console report.

    Args:
        report_per_collection: Per-collection summaries
        final_report: Fleet totals
        bot_count: Number of bot addresses analysed
        address_count: Number of addresses analysed in total

    Returns:
        Formatted report string
    """
    header = _generate_header(bot_count, address_count)
    summary = _generate_summary(final_report)
    collections_section = _generate_collections_section(report_per_collection)

    return f"{header}\n\n{summary}\n\n{collections_section}"


def print_report(
    report_per_collection: Mapping[str, CollectionSummary],
    final_report: FinalReport,
    bot_count: int,
    address_count: int
) -> None:
    """Print the console report."""
    print(generate_report(report_per_collection, final_report, bot_count, address_count))


def _generate_header(bot_count: int, address_count: int) -> str:
    now = datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S UTC")

    header = f"""
{'='*80}
  NFT MINTING BOTS - PROFIT REPORT
{'='*80}
Generated: {now}
Addresses Analysed: {address_count} ({bot_count} bots)
{'='*80}
"""
    return header.strip()


def _generate_summary(final_report: FinalReport) -> str:
    summary = f"""
SUMMARY
{'-'*80}
NFTs Minted: {final_report.total_nfts_minted}
NFTs Sold (bot-minted): {final_report.sold_nfts_count}

Total UST Spent: {format_ust(final_report.total_ust_spent)}
Total UST Earned: {format_ust(final_report.total_ust_earned)}
Profit: {format_ust(final_report.total_profit_in_ust)}
"""
    return summary.strip()


def _generate_collections_section(report_per_collection: Mapping[str, CollectionSummary]) -> str:
    """
    Generate the per-collection table, most profitable first.
    """
    if not report_per_collection:
        return "No mints or attributed sales found."

    lines = [
        "PER COLLECTION",
        "-" * 80,
        f"{'Collection':<30}{'Minted':>8}{'Spent':>14}{'Sold':>8}{'Earned':>14}",
    ]

    ranked = sorted(
        report_per_collection.items(), key=lambda item: item[1].profit, reverse=True
    )
    for collection, summary in ranked:
        lines.append(
            f"{collection[:29]:<30}{summary.minted_count:>8}"
            f"{format_ust(summary.ust_spent):>14}{summary.sold_count:>8}"
            f"{format_ust(summary.ust_earned):>14}"
        )
        lines.append(f"{'':<30}profit: {format_ust(summary.profit)}")

    return "\n".join(lines)
