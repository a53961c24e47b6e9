from unittest import mock

import pytest

from mintprofit.storage import TransactionCache


def test_missing_cache_does_not_exist(tmp_path):
    assert not TransactionCache(tmp_path / "nope.json").exists()


def test_save_then_load_preserves_order(tmp_path):
    cache = TransactionCache(tmp_path / "nested" / "txs.json")
    histories = {"b": [{"txhash": "2"}, {"txhash": "1"}], "a": []}

    cache.save(histories)

    loaded = cache.load()
    assert list(loaded) == ["b", "a"]
    assert loaded["b"] == [{"txhash": "2"}, {"txhash": "1"}]


def test_interrupted_save_keeps_previous_cache(tmp_path):
    cache = TransactionCache(tmp_path / "txs.json")
    cache.save({"a": [{"txhash": "1"}]})

    with mock.patch("mintprofit.storage.json.dump", side_effect=RuntimeError("disk full")):
        with pytest.raises(RuntimeError):
            cache.save({"a": [], "b": []})

    assert cache.load() == {"a": [{"txhash": "1"}]}
    assert [p.name for p in tmp_path.iterdir()] == ["txs.json"]


def test_malformed_cache_raises(tmp_path):
    path = tmp_path / "txs.json"
    path.write_text('{"a": {"not": "a list"}}', encoding="utf-8")

    with pytest.raises(ValueError):
        TransactionCache(path).load()
