from decimal import Decimal

from mintprofit.models import BotMintReport, CollectionInventory, CollectionSales, SaleReport
from mintprofit.rollup import prepare_final_report, prepare_report_per_collection


def _bot(spent, count, collection="X"):
    return BotMintReport(
        minted_nfts={
            collection: CollectionInventory(
                contract_id="c", token_ids=[str(i) for i in range(count)],
                minted_count=count, ust_spent=Decimal(spent),
            )
        },
        minted_nfts_count=count,
        total_ust_spent=Decimal(spent),
    )


def _sales(earned, count, collection="X"):
    return SaleReport(
        sold_nfts={
            collection: CollectionSales(
                sold_nfts_count=count, ust_earned=Decimal(earned),
                sold_token_ids=[str(i) for i in range(count)],
            )
        },
        sold_nfts_count=count,
        ust_earned_from_sales=Decimal(earned),
    )


def test_final_report_sums_every_address():
    bot_reports = {"a": _bot("100.1", 3), "b": _bot("0.2", 1, collection="Y")}
    sale_reports = {"a": _sales("50.05", 1), "other": _sales("75", 2, collection="Y")}

    final_report = prepare_final_report(bot_reports, sale_reports)

    assert final_report.total_ust_spent == Decimal("100.3")
    assert final_report.total_nfts_minted == 4
    assert final_report.total_ust_earned == Decimal("125.05")
    assert final_report.sold_nfts_count == 3
    assert final_report.total_profit_in_ust == Decimal("24.75")
    assert final_report.total_profit_in_ust == (
        final_report.total_ust_earned - final_report.total_ust_spent
    )


def test_empty_input_gives_zero_report():
    final_report = prepare_final_report({}, {})

    assert final_report.total_ust_spent == 0
    assert final_report.total_ust_earned == 0
    assert final_report.total_nfts_minted == 0
    assert final_report.sold_nfts_count == 0
    assert final_report.total_profit_in_ust == 0


def test_report_per_collection():
    bot_reports = {"a": _bot("100", 2), "b": _bot("30", 1, collection="Y")}
    sale_reports = {"a": _sales("150", 2), "other": _sales("10", 1, collection="Z")}

    summaries = prepare_report_per_collection(bot_reports, sale_reports)

    assert list(summaries) == ["X", "Y", "Z"]
    assert summaries["X"].minted_count == 2
    assert summaries["X"].sold_count == 2
    assert summaries["X"].profit == Decimal("50")
    assert summaries["Y"].profit == Decimal("-30")
    assert summaries["Z"].minted_count == 0
    assert summaries["Z"].ust_earned == Decimal("10")
