# eod_positions/engines/transaction_parser.py
from __future__ import annotations

from typing import BinaryIO, Iterator, Tuple, Any

import ijson

from eod_positions.engines.events import TransactionEvent
from eod_positions.utils.errors import TransactionFormatError

# ============================
# input schema
# ============================
# [
#   {"TransactionId": 1, "Instrument": "IBM", "TransactionType": "B", "TransactionQuantity": 1000},
#   ...
# ]
ITEM = "item"
FIELD_INSTRUMENT = "Instrument"
FIELD_TYPE = "TransactionType"
FIELD_QUANTITY = "TransactionQuantity"

_SCALARS = ("string", "number", "boolean", "null")

ParseEvent = Tuple[str, str, Any]


def iter_transactions(fp: BinaryIO) -> Iterator[TransactionEvent]:
    """
    Stream a JSON array of transaction objects, one TransactionEvent per element.

    - lazy, single pass, never loads the whole file
    - missing fields keep the TransactionEvent defaults
    - unknown fields (TransactionId, nested objects ...) are skipped

    Raises TransactionFormatError on any structural failure.
    """
    try:
        yield from _iter_items(ijson.parse(fp))
    except (ijson.JSONError, UnicodeDecodeError) as e:
        raise TransactionFormatError(f"Malformed transactions stream: {e}") from e


def _iter_items(events: Iterator[ParseEvent]) -> Iterator[TransactionEvent]:
    first = next(events, None)
    if first is None or first[1] != "start_array":
        raise TransactionFormatError(
            "Transactions file must contain a JSON array of transaction objects"
        )

    current: TransactionEvent | None = None
    index = 0

    for prefix, event, value in events:
        # ------------------------------------------------
        # array level
        # ------------------------------------------------
        if prefix == "":
            if event == "end_array":
                return
            continue

        # ------------------------------------------------
        # element level
        # ------------------------------------------------
        if prefix == ITEM:
            if event == "start_map":
                current = TransactionEvent()
            elif event == "end_map":
                yield current
                current = None
                index += 1
            elif event != "map_key":
                raise TransactionFormatError(
                    f"Transaction #{index} is not an object (got {event})"
                )
            continue

        # ------------------------------------------------
        # field level (item.<Field>)
        # ------------------------------------------------
        field = prefix[len(ITEM) + 1:]

        if field == FIELD_INSTRUMENT:
            current.instrument = _text(index, field, event, value)
        elif field == FIELD_TYPE:
            current.transaction_type = _text(index, field, event, value)
        elif field == FIELD_QUANTITY:
            current.quantity = _quantity(index, event, value)

    # ijson raises IncompleteJSONError before this point for a truncated array
    raise TransactionFormatError("Transactions array is not terminated")


def _text(index: int, field: str, event: str, value) -> str:
    if event not in _SCALARS:
        raise TransactionFormatError(f"Transaction #{index}: {field} must be a scalar")
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _quantity(index: int, event: str, value) -> int:
    if event != "number":
        raise TransactionFormatError(
            f"Transaction #{index}: {FIELD_QUANTITY} must be a number (got {event})"
        )
    # 12.9 → 12, the long value of the number
    return int(value)
