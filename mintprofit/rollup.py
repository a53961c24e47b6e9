"""
Report roll-up: global totals and per-collection summaries.
"""

import logging
from decimal import Decimal
from typing import Mapping

from mintprofit.models import (
    BotMintReport,
    CollectionSummary,
    FinalReport,
    SaleReport,
)

# Configure module logger
logger = logging.getLogger(__name__)


def prepare_final_report(
    bot_reports: Mapping[str, BotMintReport],
    sale_reports: Mapping[str, SaleReport]
) -> FinalReport:
    """
    Sum per-address reports into fleet totals.

    Spend and minted counts come from bot reports; earnings and sold counts
    come from every address's sales report, including non-bot addresses.
    """
    total_spent = sum((report.total_ust_spent for report in bot_reports.values()), Decimal("0"))
    total_minted = sum(report.minted_nfts_count for report in bot_reports.values())
    total_earned = sum(
        (report.ust_earned_from_sales for report in sale_reports.values()), Decimal("0")
    )
    total_sold = sum(report.sold_nfts_count for report in sale_reports.values())

    final_report = FinalReport(
        total_ust_spent=total_spent,
        total_ust_earned=total_earned,
        total_nfts_minted=total_minted,
        sold_nfts_count=total_sold,
        total_profit_in_ust=total_earned - total_spent,
    )

    logger.info(
        f"Final report: spent {total_spent} UST, earned {total_earned} UST, "
        f"profit {final_report.total_profit_in_ust} UST"
    )
    return final_report


def prepare_report_per_collection(
    bot_reports: Mapping[str, BotMintReport],
    sale_reports: Mapping[str, SaleReport]
) -> dict[str, CollectionSummary]:
    """
    Combine minting and sales per collection across all addresses.

    Collections appear in the order they were first seen, mints before sales.
    """
    summaries: dict[str, CollectionSummary] = {}

    for report in bot_reports.values():
        for collection, inventory in report.minted_nfts.items():
            summary = summaries.setdefault(collection, CollectionSummary())
            summary.minted_count += inventory.minted_count
            summary.ust_spent += inventory.ust_spent

    for report in sale_reports.values():
        for collection, sales in report.sold_nfts.items():
            summary = summaries.setdefault(collection, CollectionSummary())
            summary.sold_count += sales.sold_nfts_count
            summary.ust_earned += sales.ust_earned

    return summaries
