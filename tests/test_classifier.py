from decimal import Decimal

import pytest

from mintprofit.classifier import classify, classify_all
from mintprofit.errors import CollectionLookupError, SchemaError
from mintprofit.models import MintRecord, SaleRecord

from factories import (
    COLLECTION_X,
    COLLECTION_Y,
    UNKNOWN_COLLECTION,
    failed,
    mint_tx,
    sale_tx,
    transfer_tx,
)


def test_mint_transaction_is_extracted(registry):
    tx = mint_tx(COLLECTION_X, [("7", "50000000uusd"), ("8", "50000000uusd")], txhash="ABC")

    record = classify(tx, registry)

    assert isinstance(record, MintRecord)
    assert record.collection == "Collection X"
    assert record.contract_id == COLLECTION_X
    assert record.item_ids == ("7", "8")
    assert record.minted_count == 2
    assert record.spent == Decimal("100")
    assert record.tx_hash == "ABC"


def test_sale_transaction_is_extracted(registry):
    tx = sale_tx(COLLECTION_Y, "42", "2500000", denom="uluna", timestamp="1970-01-01T00:00:02Z")

    record = classify(tx, registry)

    assert isinstance(record, SaleRecord)
    assert record.collection == "Collection Y"
    assert record.item_id == "42"
    assert record.currency == "uluna"
    assert record.earned_amount == Decimal("2.5")
    assert record.timestamp_ms == 2000


def test_irrelevant_transactions_are_ignored(registry):
    assert classify(transfer_tx(), registry) is None
    assert classify(failed(mint_tx(COLLECTION_X, [("7", "50000000uusd")])), registry) is None
    assert classify(failed(sale_tx(COLLECTION_X, "7", "1")), registry) is None


def test_execute_order_needs_exactly_two_messages(registry):
    tx = sale_tx(COLLECTION_X, "7", "1000000")
    tx["tx"]["value"]["msg"].append(tx["tx"]["value"]["msg"][0])

    assert classify(tx, registry) is None


def test_mint_with_missing_event_raises_schema_error(registry):
    tx = mint_tx(COLLECTION_X, [("7", "50000000uusd"), ("8", "50000000uusd")])
    tx["logs"][1]["events"] = tx["logs"][1]["events"][:6]

    with pytest.raises(SchemaError) as excinfo:
        classify(tx, registry)

    assert excinfo.value.path == "logs[1].events[6]"


def test_mint_spent_in_non_stable_unit_raises(registry):
    tx = mint_tx(COLLECTION_X, [("7", "3000000uluna")])

    with pytest.raises(SchemaError) as excinfo:
        classify(tx, registry)

    assert excinfo.value.path == "logs[0].events[0].attributes[1].value"


def test_duplicate_item_in_one_mint_raises(registry):
    tx = mint_tx(COLLECTION_X, [("7", "50000000uusd"), ("7", "50000000uusd")])

    with pytest.raises(SchemaError):
        classify(tx, registry)


def test_unparseable_sale_amount_raises(registry):
    tx = sale_tx(COLLECTION_X, "7", "lots")

    with pytest.raises(SchemaError) as excinfo:
        classify(tx, registry)

    assert excinfo.value.path == "logs[1].events[6].attributes[9].value"


def test_unknown_collection_raises_lookup_error(registry):
    with pytest.raises(CollectionLookupError):
        classify(mint_tx(UNKNOWN_COLLECTION, [("1", "1000000uusd")]), registry)

    with pytest.raises(LookupError):
        classify(sale_tx(UNKNOWN_COLLECTION, "1", "1000000"), registry)


def test_mints_can_be_skipped_without_parsing(registry):
    unregistered = mint_tx(UNKNOWN_COLLECTION, [("1", "1000000uusd")])
    malformed = mint_tx(COLLECTION_X, [("7", "50000000uusd")])
    del malformed["logs"][0]["events"][6]

    assert classify(unregistered, registry, mints=False) is None
    assert classify(malformed, registry, mints=False) is None
    assert isinstance(classify(sale_tx(COLLECTION_X, "7", "1"), registry, mints=False), SaleRecord)


def test_successful_tx_without_messages_raises(registry):
    tx = transfer_tx()
    del tx["tx"]["value"]["msg"]

    with pytest.raises(SchemaError):
        classify(tx, registry)


def test_classify_all_keeps_order_and_drops_ignored(registry):
    txs = [
        sale_tx(COLLECTION_X, "7", "120000000", txhash="S1"),
        transfer_tx(),
        mint_tx(COLLECTION_X, [("7", "50000000uusd")], txhash="M1"),
    ]

    records = classify_all(txs, registry)

    assert [record.tx_hash for record in records] == ["S1", "M1"]
