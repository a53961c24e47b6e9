"""
Sale correlator.

Converts marketplace sales to UST and attributes them to the bot fleet. A
sale counts only if the sold token appears in the inventory of any tracked
bot for the same collection name; a bot may mint from one address and sell
from another, so every bot's inventory is searched.
"""

import logging
from decimal import Decimal
from typing import Iterable, Mapping

from mintprofit.models import BotMintReport, CollectionSales, SaleRecord, SaleReport
from mintprofit.price_oracle import PriceOracle
from mintprofit.schema import STABLE_DENOM

# Configure module logger
logger = logging.getLogger(__name__)


class MintedInventoryIndex:
    """
    Lookup of every token minted by the bot fleet.

    Keyed by collection display name, which is the join key between mints
    and sales.
    """

    def __init__(self, bot_reports: Mapping[str, BotMintReport]):
        self._tokens: dict[str, set[str]] = {}
        for report in bot_reports.values():
            for collection, inventory in report.minted_nfts.items():
                self._tokens.setdefault(collection, set()).update(inventory.token_ids)

    def was_minted_by_bots(self, collection: str, token_id: str) -> bool:
        return token_id in self._tokens.get(collection, ())


def ust_value(record: SaleRecord, oracle: PriceOracle) -> Decimal:
    """
    Value of a sale in UST.

    Stable-coin sales pass through unchanged; other currencies are converted
    at the oracle's price for the sale time.
    """
    if record.currency == STABLE_DENOM:
        return record.earned_amount

    unit_price = oracle.unit_price(record.currency, record.timestamp_ms)
    return record.earned_amount * unit_price


def correlate_sales(
    records: Iterable[SaleRecord],
    inventory: MintedInventoryIndex,
    oracle: PriceOracle
) -> SaleReport:
    """
    Build the sales report for one address.

    Args:
        records: Sale records of a single address, in chronological order
        inventory: Index of tokens minted by all bots
        oracle: Price oracle for non-stable currencies

    Returns:
        SaleReport counting only sales of bot-minted tokens
    """
    report = SaleReport()

    for record in records:
        earned = ust_value(record, oracle)

        if not inventory.was_minted_by_bots(record.collection, record.item_id):
            logger.debug(
                f"Sale of {record.collection} #{record.item_id} ({record.tx_hash}) "
                f"not minted by tracked bots, skipping"
            )
            continue

        sales = report.sold_nfts.get(record.collection)
        if sales is None:
            sales = CollectionSales()
            report.sold_nfts[record.collection] = sales

        sales.sold_nfts_count += 1
        sales.ust_earned += earned
        sales.sold_token_ids.append(record.item_id)

        report.sold_nfts_count += 1
        report.ust_earned_from_sales += earned

    return report


def build_sale_reports(
    sale_records_by_address: dict[str, list[SaleRecord]],
    bot_reports: Mapping[str, BotMintReport],
    oracle: PriceOracle
) -> dict[str, SaleReport]:
    """
    Build sales reports for every tracked address.

    Args:
        sale_records_by_address: Sale records keyed by address (bots and other addresses)
        bot_reports: Minting reports of every bot
        oracle: Price oracle for non-stable currencies

    Returns:
        Dictionary mapping address to its SaleReport, in input order
    """
    inventory = MintedInventoryIndex(bot_reports)
    reports: dict[str, SaleReport] = {}

    for address, records in sale_records_by_address.items():
        report = correlate_sales(records, inventory, oracle)
        reports[address] = report
        logger.info(
            f"Address {address}: {report.sold_nfts_count} attributed sales "
            f"for {report.ust_earned_from_sales} UST"
        )

    return reports
