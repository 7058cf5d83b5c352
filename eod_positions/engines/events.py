#!filepath: eod_positions/engines/events.py
from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

OUTPUT_HEADER = "Instrument,Account,AccountType,Quantity,Delta"


class _TokenEnum(str, Enum):
    @classmethod
    def parse(cls, token: str | None):
        """
        Case-insensitive token match; None for anything unrecognized.
        """
        if not token:
            return None
        try:
            return cls(token.upper())
        except ValueError:
            return None


class TransactionType(_TokenEnum):
    BUY = "B"
    SELL = "S"


class AccountType(_TokenEnum):
    EXTERNAL = "E"
    INTERNAL = "I"


class UnknownTypePolicy(str, Enum):
    """
    How a transaction type other than B / S is aggregated.

    LEGACY : first appearance of the instrument stores the raw quantity as
             positive, later appearances contribute nothing.
    IGNORE : never contributes (the instrument is still registered with 0).
    """
    LEGACY = "legacy"
    IGNORE = "ignore"


@dataclass(slots=True)
class TransactionEvent:
    """
    One element of the transaction array. Missing fields keep their defaults.
    """
    instrument: str = ""
    transaction_type: str = ""   # raw token, expected B / S
    quantity: int = 0

    @property
    def direction(self) -> Optional[TransactionType]:
        return TransactionType.parse(self.transaction_type)


@dataclass(slots=True)
class PositionRecord:
    instrument: str
    account: int
    account_type: str            # raw token, expected E / I
    quantity: int
    delta: int = 0

    def to_line(self) -> str:
        return f"{self.instrument},{self.account},{self.account_type},{self.quantity},{self.delta}"


@dataclass(frozen=True)
class RunStatistics:
    """
    Largest / smallest absolute net delta seen during the join.

    Immutable: ``update`` returns a new value. Ties keep the first instrument.
    """
    max_abs_delta: int = 0
    max_instrument: Optional[str] = None
    min_abs_delta: Optional[int] = None
    min_instrument: Optional[str] = None

    def update(self, instrument: str, delta: int) -> "RunStatistics":
        magnitude = abs(delta)
        out = self

        if magnitude > out.max_abs_delta:
            out = replace(out, max_abs_delta=magnitude, max_instrument=instrument)

        if out.min_abs_delta is None or magnitude < out.min_abs_delta:
            out = replace(out, min_abs_delta=magnitude, min_instrument=instrument)

        return out

    @property
    def has_max(self) -> bool:
        return self.max_instrument is not None

    @property
    def has_min(self) -> bool:
        return self.min_abs_delta is not None
