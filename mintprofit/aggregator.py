"""
Mint aggregator.

Accumulates the mint records of one bot address into a per-collection
inventory with spend totals.
"""

import logging
from typing import Iterable

from mintprofit.models import BotMintReport, CollectionInventory, MintRecord

# Configure module logger
logger = logging.getLogger(__name__)


def aggregate_mints(records: Iterable[MintRecord]) -> BotMintReport:
    """
    Build the minting report for one bot address.

    Item identifiers are appended in transaction order. Duplicates are not
    filtered here; the extractor guarantees distinct items per transaction.

    Args:
        records: Mint records of a single address, in chronological order

    Returns:
        BotMintReport with per-collection inventory and totals
    """
    report = BotMintReport()

    for record in records:
        inventory = report.minted_nfts.get(record.collection)
        if inventory is None:
            inventory = CollectionInventory(contract_id=record.contract_id)
            report.minted_nfts[record.collection] = inventory

        inventory.token_ids.extend(record.item_ids)
        inventory.minted_count += record.minted_count
        inventory.ust_spent += record.spent

        report.minted_nfts_count += record.minted_count
        report.total_ust_spent += record.spent

    return report


def build_bot_reports(
    mint_records_by_bot: dict[str, list[MintRecord]]
) -> dict[str, BotMintReport]:
    """
    Build minting reports for every bot address.

    Args:
        mint_records_by_bot: Mint records keyed by bot address

    Returns:
        Dictionary mapping bot address to its BotMintReport, in input order
    """
    reports: dict[str, BotMintReport] = {}

    for address, records in mint_records_by_bot.items():
        report = aggregate_mints(records)
        reports[address] = report
        logger.info(
            f"Bot {address}: minted {report.minted_nfts_count} NFTs "
            f"in {len(report.minted_nfts)} collections for {report.total_ust_spent} UST"
        )

    return reports
