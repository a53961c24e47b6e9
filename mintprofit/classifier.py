"""
Transaction classifier and extractor.

Decides whether a raw transaction is a successful mint, a successful
marketplace sale, or irrelevant, and extracts a fully populated record for
the first two. Extraction never yields a partial record: any field that
cannot be read raises SchemaError and the transaction is not aggregated.
"""

import logging
from decimal import Decimal
from typing import Any, Optional

from mintprofit.errors import SchemaError
from mintprofit.models import MintRecord, SaleRecord, TransactionRecord
from mintprofit.registry import Registry
from mintprofit.schema import (
    MESSAGE_EXECUTE_MSG,
    MINT_COLLECTION_CONTRACT,
    MINT_LOG_ITEM_ID,
    MINT_LOG_SPENT,
    SALE_AMOUNT,
    SALE_COLLECTION_CONTRACT,
    SALE_DENOM,
    SALE_ITEM_ID,
    SCHEMA_VERSION,
    TX_MESSAGES,
    TX_TIMESTAMP,
    format_steps,
    parse_micro_amount,
    parse_timestamp_ms,
    parse_ust_amount,
    resolve,
    resolve_str,
)

# Configure module logger
logger = logging.getLogger(__name__)

MINT_DIRECTIVE = "random_mint"
SALE_DIRECTIVE = "execute_order"


def is_successful(tx: dict) -> bool:
    """A transaction succeeded if it produced at least one message log."""
    logs = tx.get("logs")
    return isinstance(logs, list) and len(logs) > 0


def _messages(tx: dict) -> list:
    messages = resolve(tx, TX_MESSAGES)
    if not isinstance(messages, list):
        raise SchemaError(
            "Transaction messages must be a list",
            path=str(TX_MESSAGES),
            schema_version=SCHEMA_VERSION,
        )
    return messages


def _has_directive(message: Any, directive: str) -> bool:
    """Check whether a message executes a contract call with the given directive."""
    # Bank sends and other non-contract messages carry no execute_msg
    try:
        execute_msg = resolve(message, MESSAGE_EXECUTE_MSG)
    except SchemaError:
        return False
    return isinstance(execute_msg, dict) and directive in execute_msg


def is_mint_candidate(tx: dict) -> bool:
    """Successful transaction whose first message calls random_mint."""
    if not is_successful(tx):
        return False
    messages = _messages(tx)
    return len(messages) > 0 and _has_directive(messages[0], MINT_DIRECTIVE)


def is_sale_candidate(tx: dict) -> bool:
    """Successful two-message transaction whose second message calls execute_order."""
    if not is_successful(tx):
        return False
    messages = _messages(tx)
    return len(messages) == 2 and _has_directive(messages[1], SALE_DIRECTIVE)


def extract_mint(tx: dict, registry: Registry) -> MintRecord:
    """
    Extract the minted items and spend of a mint transaction.

    The collection contract is read once from the first log; every message
    log then contributes one minted item and its price.

    Args:
        tx: Raw transaction already identified as a mint candidate
        registry: Registry used to resolve the collection name

    Returns:
        MintRecord for the transaction

    Raises:
        SchemaError: If any field is missing or malformed
        CollectionLookupError: If the collection is not registered
    """
    contract_id = resolve_str(tx, MINT_COLLECTION_CONTRACT)
    collection = registry.collection_name(contract_id)

    item_ids: list[str] = []
    spent_total = Decimal("0")
    for index, log in enumerate(tx["logs"]):
        prefix = ("logs", index)
        item_id = resolve_str(log, MINT_LOG_ITEM_ID, prefix)
        if item_id in item_ids:
            raise SchemaError(
                f"Token {item_id} minted twice in one transaction",
                path=format_steps(prefix + MINT_LOG_ITEM_ID.steps),
                schema_version=SCHEMA_VERSION,
            )
        spent_raw = resolve_str(log, MINT_LOG_SPENT, prefix)
        spent_total += parse_ust_amount(spent_raw, path=format_steps(prefix + MINT_LOG_SPENT.steps))
        item_ids.append(item_id)

    return MintRecord(
        collection=collection,
        contract_id=contract_id,
        item_ids=tuple(item_ids),
        spent=spent_total,
        tx_hash=tx.get("txhash", ""),
    )


def extract_sale(tx: dict, registry: Registry) -> SaleRecord:
    """
    Extract the sold item and payment of a marketplace sale transaction.

    Args:
        tx: Raw transaction already identified as a sale candidate
        registry: Registry used to resolve the collection name

    Returns:
        SaleRecord for the transaction

    Raises:
        SchemaError: If any field is missing or malformed
        CollectionLookupError: If the collection is not registered
    """
    contract_id = resolve_str(tx, SALE_COLLECTION_CONTRACT)
    collection = registry.collection_name(contract_id)
    currency = resolve_str(tx, SALE_DENOM)
    earned_amount = parse_micro_amount(resolve(tx, SALE_AMOUNT), path=str(SALE_AMOUNT))
    item_id = resolve_str(tx, SALE_ITEM_ID)
    timestamp_ms = parse_timestamp_ms(resolve(tx, TX_TIMESTAMP), path=str(TX_TIMESTAMP))

    return SaleRecord(
        collection=collection,
        contract_id=contract_id,
        item_id=item_id,
        earned_amount=earned_amount,
        currency=currency,
        timestamp_ms=timestamp_ms,
        tx_hash=tx.get("txhash", ""),
    )


def classify(tx: dict, registry: Registry, mints: bool = True) -> Optional[TransactionRecord]:
    """
    Classify one raw transaction.

    Args:
        tx: Raw transaction payload
        registry: Registry used to resolve collection names
        mints: Extract mints. When False, mint transactions are ignored
            without being parsed

    Returns:
        MintRecord for a successful mint, SaleRecord for a successful sale,
        or None for any other transaction

    Raises:
        SchemaError: If the transaction envelope or a mint/sale field is malformed
        CollectionLookupError: If a mint or sale references an unregistered collection
    """
    if not isinstance(tx, dict):
        raise SchemaError("Transaction must be an object", schema_version=SCHEMA_VERSION)

    if is_mint_candidate(tx):
        return extract_mint(tx, registry) if mints else None

    if is_sale_candidate(tx):
        return extract_sale(tx, registry)

    return None


def classify_all(
    transactions: list[dict],
    registry: Registry,
    mints: bool = True
) -> list[TransactionRecord]:
    """
    Classify an address's transactions, dropping irrelevant ones.

    Order of the input sequence is preserved. The first malformed mint or
    sale aborts the whole pass. With `mints` False only sales are extracted.
    """
    records: list[TransactionRecord] = []
    for tx in transactions:
        record = classify(tx, registry, mints=mints)
        if record is not None:
            records.append(record)

    mint_count = sum(1 for record in records if isinstance(record, MintRecord))
    logger.debug(
        f"Classified {len(transactions)} transactions: "
        f"{mint_count} mints, {len(records) - mint_count} sales"
    )
    return records
