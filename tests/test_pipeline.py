from decimal import Decimal
from unittest import mock

import pytest

from mintprofit.errors import CollectionLookupError
from mintprofit.main import run_pipeline, split_records
from mintprofit.reporter import generate_report, render_json, save_report
from mintprofit.storage import TransactionCache

from factories import (
    BOT_A,
    BOT_B,
    COLLECTION_X,
    COLLECTION_Y,
    OTHER,
    UNKNOWN_COLLECTION,
    mint_tx,
    sale_tx,
    transfer_tx,
)


@pytest.fixture
def cache(tmp_path):
    cache = TransactionCache(tmp_path / "all-transactions.json")
    cache.save({
        OTHER: [
            # resale of an item minted by BOT_B, sold from a non-bot address, paid in LUNA
            sale_tx(COLLECTION_Y, "31", "1500000", denom="uluna", txhash="S3"),
            # secondary-market purchase that was never minted by the bots
            sale_tx(COLLECTION_X, "999", "70000000", txhash="S4"),
        ],
        BOT_A: [
            sale_tx(COLLECTION_X, "7", "120000000", txhash="S1"),
            transfer_tx(),
            mint_tx(COLLECTION_X, [("7", "50000000uusd"), ("8", "50000000uusd")], txhash="M1"),
        ],
        BOT_B: [
            mint_tx(COLLECTION_Y, [("31", "10000000uusd")], txhash="M2"),
            # mints from a non-bot address would be ignored; this one is a bot
            mint_tx(COLLECTION_X, [("9", "25500000uusd")], txhash="M3"),
        ],
    })
    return cache


def test_worked_example(tmp_path, registry, oracle):
    cache = TransactionCache(tmp_path / "txs.json")
    cache.save({
        OTHER: [],
        BOT_A: [
            sale_tx(COLLECTION_X, "7", "120000000"),
            mint_tx(COLLECTION_X, [("7", "50000000uusd"), ("8", "50000000uusd")]),
        ],
        BOT_B: [],
    })

    result = run_pipeline(registry, cache, oracle, loader=mock.Mock())

    bot_report = result.bot_reports[BOT_A]
    assert bot_report.minted_nfts_count == 2
    assert bot_report.total_ust_spent == Decimal("100")
    assert bot_report.minted_nfts["Collection X"].token_ids == ["7", "8"]
    assert result.sale_reports[BOT_A].ust_earned_from_sales == Decimal("120")
    assert result.final_report.total_profit_in_ust == Decimal("20")


def test_full_pipeline_from_cache(registry, oracle, cache):
    loader = mock.Mock()

    result = run_pipeline(registry, cache, oracle, loader=loader)

    loader.load.assert_not_called()
    final_report = result.final_report
    assert final_report.total_nfts_minted == 4
    assert final_report.total_ust_spent == Decimal("135.5")
    # 120 UST + 1.5 LUNA at 80 UST
    assert final_report.total_ust_earned == Decimal("240")
    assert final_report.sold_nfts_count == 2
    assert final_report.total_profit_in_ust == Decimal("104.5")

    assert result.sale_reports[OTHER].sold_nfts["Collection Y"].sold_token_ids == ["31"]
    assert result.report_per_collection["Collection X"].ust_spent == Decimal("125.5")
    assert result.report_per_collection["Collection Y"].profit == Decimal("110")


def test_report_document_is_deterministic(tmp_path, registry, oracle, cache):
    first = save_report(run_pipeline(registry, cache, oracle).document, tmp_path / "r1.json")
    second = save_report(run_pipeline(registry, cache, oracle).document, tmp_path / "r2.json")

    assert first.read_bytes() == second.read_bytes()


def test_report_document_layout(registry, oracle, cache):
    document = run_pipeline(registry, cache, oracle).document

    assert list(document) == [
        "bots_minting_report",
        "marketplace_sales_report",
        "report_per_collection",
        "final_report",
    ]
    assert list(document["bots_minting_report"]) == [BOT_A, BOT_B]
    assert list(document["marketplace_sales_report"]) == [OTHER, BOT_A, BOT_B]
    assert document["final_report"]["total_ust_spent"] == "135.5"
    assert document["final_report"]["total_profit_in_ust"] == "104.5"
    assert document["bots_minting_report"][BOT_A]["minted_nfts"]["Collection X"]["ust_spent"] == "100"
    assert '"total_ust_earned": "240' in render_json(document)


def test_unknown_collection_aborts_run(tmp_path, registry, oracle):
    cache = TransactionCache(tmp_path / "txs.json")
    cache.save({
        OTHER: [],
        BOT_A: [mint_tx(UNKNOWN_COLLECTION, [("1", "1000000uusd")])],
        BOT_B: [],
    })

    with pytest.raises(CollectionLookupError):
        run_pipeline(registry, cache, oracle)


def test_split_records_ignores_mints_of_other_addresses(registry):
    histories = {
        OTHER: [mint_tx(COLLECTION_X, [("1", "1000000uusd")])],
        BOT_A: [],
        BOT_B: [sale_tx(COLLECTION_X, "1", "1000000")],
    }

    mints_by_bot, sales_by_address = split_records(histories, registry)

    assert list(mints_by_bot) == [BOT_A, BOT_B]
    assert mints_by_bot[BOT_A] == [] and mints_by_bot[BOT_B] == []
    assert len(sales_by_address[BOT_B]) == 1
    assert sales_by_address[OTHER] == []


def test_mints_of_other_addresses_are_not_parsed(tmp_path, registry, oracle):
    cache = TransactionCache(tmp_path / "txs.json")
    cache.save({
        OTHER: [mint_tx(UNKNOWN_COLLECTION, [("1", "1000000uusd")])],
        BOT_A: [
            sale_tx(COLLECTION_X, "7", "120000000"),
            mint_tx(COLLECTION_X, [("7", "50000000uusd")]),
        ],
        BOT_B: [],
    })

    result = run_pipeline(registry, cache, oracle)

    assert result.final_report.total_nfts_minted == 1
    assert result.final_report.total_profit_in_ust == Decimal("70")


def test_console_report(registry, oracle, cache):
    result = run_pipeline(registry, cache, oracle)

    text = generate_report(result.report_per_collection, result.final_report, 2, 3)

    assert "NFTs Minted: 4" in text
    assert "Profit: 104.50 UST" in text
    assert "Collection Y" in text
