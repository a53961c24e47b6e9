"""
Builders for raw FCD transaction payloads used across the tests.

Only the attribute positions read by the field-schema carry meaningful
values; every other slot holds filler so positional lookups behave like
they do on real ledger data.
"""

COLLECTION_X = "terra1collectionxxxxxxxxxxxxxxxxxxxxxxxxxxxx"
COLLECTION_Y = "terra1collectionyyyyyyyyyyyyyyyyyyyyyyyyyyyy"
UNKNOWN_COLLECTION = "terra1unregisteredzzzzzzzzzzzzzzzzzzzzzzzzz"

BOT_A = "terra1botaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
BOT_B = "terra1botbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb"
OTHER = "terra1otherccccccccccccccccccccccccccccccccc"


def event(event_type, attribute_count, values=None):
    values = values or {}
    return {
        "type": event_type,
        "attributes": [
            {"key": f"key_{i}", "value": values.get(i, f"filler_{i}")}
            for i in range(attribute_count)
        ],
    }


def mint_log(msg_index, contract, item_id, spent):
    return {
        "msg_index": msg_index,
        "log": "",
        "events": [
            event("coin_received", 2, {1: spent}),
            event("coin_spent", 2),
            event("execute_contract", 2),
            event("from_contract", 4, {3: contract}),
            event("message", 3),
            event("transfer", 3),
            event("wasm", 8, {7: item_id}),
        ],
    }


def execute_message(execute_msg):
    return {
        "type": "wasm/MsgExecuteContract",
        "value": {"sender": BOT_A, "contract": "terra1minter", "execute_msg": execute_msg},
    }


def mint_tx(contract, mints, txhash="MINT", timestamp="2022-01-10T12:00:00Z"):
    """One random_mint message (and log) per (item_id, spent) pair."""
    return {
        "txhash": txhash,
        "timestamp": timestamp,
        "logs": [
            mint_log(index, contract, item_id, spent)
            for index, (item_id, spent) in enumerate(mints)
        ],
        "tx": {
            "type": "core/StdTx",
            "value": {"msg": [execute_message({"random_mint": {}}) for _ in mints]},
        },
    }


def sale_tx(contract, item_id, amount, denom="uusd", txhash="SALE",
            timestamp="2022-02-01T08:30:00Z"):
    return {
        "txhash": txhash,
        "timestamp": timestamp,
        "logs": [
            {"msg_index": 0, "events": [event("message", 2)]},
            {
                "msg_index": 1,
                "events": [
                    event("coin_received", 2),
                    event("coin_spent", 2),
                    event("execute_contract", 2),
                    event("from_contract", 2),
                    event("message", 2),
                    event("transfer", 2),
                    event("wasm", 12, {7: denom, 9: amount, 10: contract, 11: item_id}),
                ],
            },
        ],
        "tx": {
            "type": "core/StdTx",
            "value": {
                "msg": [
                    execute_message({"approve": {"token_id": item_id}}),
                    execute_message({"execute_order": {"order": {}}}),
                ]
            },
        },
    }


def transfer_tx(txhash="SEND"):
    return {
        "txhash": txhash,
        "timestamp": "2022-01-05T00:00:00Z",
        "logs": [{"msg_index": 0, "events": [event("transfer", 3)]}],
        "tx": {
            "type": "core/StdTx",
            "value": {
                "msg": [
                    {
                        "type": "bank/MsgSend",
                        "value": {"from_address": BOT_A, "to_address": OTHER, "amount": []},
                    }
                ]
            },
        },
    }


def failed(tx):
    """Same transaction without execution logs, as FCD reports failures."""
    failed_tx = dict(tx)
    failed_tx["logs"] = None
    failed_tx["code"] = 5
    return failed_tx
