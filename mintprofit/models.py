"""
Data models for the mint and resale profit tracker.

This module defines the records extracted from individual transactions and
the reports accumulated from them. All monetary amounts are Decimal values
expressed in the stable unit (UST).
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Union


@dataclass(frozen=True)
class MintRecord:
    """
    Items minted by one successful mint transaction.

    Attributes:
        collection: Display name of the collection (join key for sales)
        contract_id: Collection contract identifier
        item_ids: Minted token identifiers, one per message log, in log order
        spent: Total amount spent on the transaction, in UST
        tx_hash: Hash of the originating transaction
    """
    collection: str
    contract_id: str
    item_ids: tuple[str, ...]
    spent: Decimal
    tx_hash: str = ""

    @property
    def minted_count(self) -> int:
        return len(self.item_ids)


@dataclass(frozen=True)
class SaleRecord:
    """
    A single item sold on the secondary marketplace.

    Attributes:
        collection: Display name of the collection
        contract_id: Collection contract identifier
        item_id: Sold token identifier
        earned_amount: Amount received, in whole units of `currency`
        currency: Ledger denomination of the payment (e.g. "uusd", "uluna")
        timestamp_ms: Transaction time in milliseconds since the epoch
        tx_hash: Hash of the originating transaction
    """
    collection: str
    contract_id: str
    item_id: str
    earned_amount: Decimal
    currency: str
    timestamp_ms: int
    tx_hash: str = ""


TransactionRecord = Union[MintRecord, SaleRecord]


@dataclass
class CollectionInventory:
    """Items a single bot minted from one collection."""
    contract_id: str
    token_ids: list[str] = field(default_factory=list)
    minted_count: int = 0
    ust_spent: Decimal = Decimal("0")


@dataclass
class BotMintReport:
    """
    Minting activity of one bot address.

    Attributes:
        minted_nfts: Inventory per collection display name
        minted_nfts_count: Number of items minted across all collections
        total_ust_spent: Amount spent on minting across all collections
    """
    minted_nfts: dict[str, CollectionInventory] = field(default_factory=dict)
    minted_nfts_count: int = 0
    total_ust_spent: Decimal = Decimal("0")


@dataclass
class CollectionSales:
    """Attributed sales of one address within one collection."""
    sold_nfts_count: int = 0
    ust_earned: Decimal = Decimal("0")
    sold_token_ids: list[str] = field(default_factory=list)


@dataclass
class SaleReport:
    """
    Attributed marketplace sales of one address.

    Only sales of items minted by a tracked bot are counted here.
    """
    sold_nfts: dict[str, CollectionSales] = field(default_factory=dict)
    sold_nfts_count: int = 0
    ust_earned_from_sales: Decimal = Decimal("0")


@dataclass
class CollectionSummary:
    """Mint and sale totals for one collection across every tracked address."""
    minted_count: int = 0
    ust_spent: Decimal = Decimal("0")
    sold_count: int = 0
    ust_earned: Decimal = Decimal("0")

    @property
    def profit(self) -> Decimal:
        return self.ust_earned - self.ust_spent


@dataclass(frozen=True)
class FinalReport:
    """
    Totals across every tracked address.

    Attributes:
        total_ust_spent: Sum of spend over all bot reports
        total_ust_earned: Sum of attributed earnings over all sale reports
        total_nfts_minted: Sum of minted items over all bot reports
        sold_nfts_count: Sum of attributed sold items over all sale reports
        total_profit_in_ust: total_ust_earned - total_ust_spent
    """
    total_ust_spent: Decimal
    total_ust_earned: Decimal
    total_nfts_minted: int
    sold_nfts_count: int
    total_profit_in_ust: Decimal
