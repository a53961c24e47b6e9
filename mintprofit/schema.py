"""
Field-schema for extracting values from raw ledger transactions.

Raw transactions come from the FCD history endpoint as loosely structured
JSON. Every value the pipeline reads is declared here as a named FieldPath,
and every read goes through resolve(), which raises a SchemaError naming the
offending path instead of failing with a bare KeyError or IndexError.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional, Union

from mintprofit.errors import SchemaError

SCHEMA_VERSION = "fcd-wasm-v1"

# Terra stable coin, 6 decimals
STABLE_DENOM = "uusd"
MICRO_UNIT_SCALE = Decimal(1_000_000)

# Recognized "<integer><denom>" suffixes and their decimal scale
DENOM_SCALES: dict[str, Decimal] = {
    STABLE_DENOM: MICRO_UNIT_SCALE,
}

_COIN_PATTERN = re.compile(r"^(\d+)([a-z][a-z0-9/]*)$")
_INTEGER_PATTERN = re.compile(r"^\d+$")

Step = Union[str, int]


@dataclass(frozen=True)
class FieldPath:
    """
    Named location of a value inside a raw transaction.

    Attributes:
        name: Human-readable field name
        steps: Dict keys (str) and list positions (int) leading to the value
    """
    name: str
    steps: tuple[Step, ...]

    def __str__(self) -> str:
        return format_steps(self.steps)


def format_steps(steps: tuple[Step, ...]) -> str:
    """Render steps as a path string, e.g. logs[0].events[3].attributes[3].value"""
    rendered = ""
    for step in steps:
        if isinstance(step, int):
            rendered += f"[{step}]"
        else:
            rendered += f".{step}" if rendered else step
    return rendered


# Transaction envelope
TX_HASH = FieldPath("tx_hash", ("txhash",))
TX_TIMESTAMP = FieldPath("timestamp", ("timestamp",))
TX_MESSAGES = FieldPath("messages", ("tx", "value", "msg"))
MESSAGE_EXECUTE_MSG = FieldPath("execute_msg", ("value", "execute_msg"))

# Mint transactions (random_mint). Per-log paths are relative to one message log.
MINT_COLLECTION_CONTRACT = FieldPath(
    "mint.collection_contract", ("logs", 0, "events", 3, "attributes", 3, "value")
)
MINT_LOG_ITEM_ID = FieldPath("mint.item_id", ("events", 6, "attributes", 7, "value"))
MINT_LOG_SPENT = FieldPath("mint.spent", ("events", 0, "attributes", 1, "value"))

# Sale transactions (execute_order); all values live in the second log's 7th event
_SALE_EVENT = ("logs", 1, "events", 6, "attributes")
SALE_DENOM = FieldPath("sale.denom", _SALE_EVENT + (7, "value"))
SALE_AMOUNT = FieldPath("sale.amount", _SALE_EVENT + (9, "value"))
SALE_COLLECTION_CONTRACT = FieldPath("sale.collection_contract", _SALE_EVENT + (10, "value"))
SALE_ITEM_ID = FieldPath("sale.item_id", _SALE_EVENT + (11, "value"))


def resolve(data: Any, path: FieldPath, prefix: tuple[Step, ...] = ()) -> Any:
    """
    Follow a FieldPath through nested dicts and lists.

    Args:
        data: Structure to read from (a transaction, or a log for per-log paths)
        path: Field to read
        prefix: Steps already taken to reach `data`, used in error messages

    Returns:
        The value at the path

    Raises:
        SchemaError: If any step is missing or of the wrong container type
    """
    current = data
    taken = prefix
    for step in path.steps:
        taken = taken + (step,)
        if isinstance(step, int):
            if not isinstance(current, list) or step >= len(current):
                raise SchemaError(
                    f"Missing {path.name}", path=format_steps(taken), schema_version=SCHEMA_VERSION
                )
        elif not isinstance(current, dict) or step not in current:
            raise SchemaError(
                f"Missing {path.name}", path=format_steps(taken), schema_version=SCHEMA_VERSION
            )
        current = current[step]
    return current


def resolve_str(data: Any, path: FieldPath, prefix: tuple[Step, ...] = ()) -> str:
    """Resolve a field that must hold a non-empty string."""
    value = resolve(data, path, prefix)
    if not isinstance(value, str) or not value:
        raise SchemaError(
            f"Expected non-empty string for {path.name}, got {value!r}",
            path=format_steps(prefix + path.steps),
            schema_version=SCHEMA_VERSION,
        )
    return value


def parse_ust_amount(text: str, path: Optional[str] = None) -> Decimal:
    """
    Parse a "<integer><denom>" coin string into whole stable units.

    E.g. for "99200000uusd" it returns Decimal("99.2").

    Raises:
        SchemaError: If the string is malformed or the denom is not the stable unit
    """
    match = _COIN_PATTERN.match(text.strip()) if isinstance(text, str) else None
    if not match:
        raise SchemaError(
            f"Not a valid coin amount string: {text!r}", path=path, schema_version=SCHEMA_VERSION
        )

    amount, denom = match.groups()
    if denom != STABLE_DENOM:
        raise SchemaError(
            f"Not a valid UST amount string: {text!r}", path=path, schema_version=SCHEMA_VERSION
        )

    return Decimal(amount) / DENOM_SCALES[denom]


def parse_micro_amount(text: str, path: Optional[str] = None) -> Decimal:
    """
    Parse a bare integer micro-unit amount into whole units.

    Every denomination handled here (uusd, uluna) has 6 decimals.

    Raises:
        SchemaError: If the string is not a non-negative integer
    """
    if isinstance(text, int) and not isinstance(text, bool):
        text = str(text)
    if not isinstance(text, str) or not _INTEGER_PATTERN.match(text.strip()):
        raise SchemaError(
            f"Not a valid integer amount: {text!r}", path=path, schema_version=SCHEMA_VERSION
        )
    return Decimal(text.strip()) / MICRO_UNIT_SCALE


def parse_timestamp_ms(text: str, path: Optional[str] = None) -> int:
    """
    Parse an ISO 8601 transaction timestamp into epoch milliseconds.

    Timestamps without an offset are taken as UTC.

    Raises:
        SchemaError: If the timestamp cannot be parsed
    """
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        raise SchemaError(
            f"Invalid timestamp: {text!r}", path=path, schema_version=SCHEMA_VERSION
        ) from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    return int(parsed.timestamp()) * 1000 + parsed.microsecond // 1000
