# eod_positions/engines/position_join_engine.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping, Optional, Tuple

from eod_positions.engines.base import BaseEngine
from eod_positions.engines.events import AccountType, PositionRecord, RunStatistics
from eod_positions.utils.errors import PositionFormatError

FIELD_COUNT = 4
DELIMITER = ","

# optional sign + ASCII digits, nothing else (no blanks, no "1_000")
_INTEGER = re.compile(r"[+-]?[0-9]+")
# bytes the positions file encoding could not decode (surrogateescape)
_UNDECODABLE = re.compile("[\udc80-\udcff]")
# signed 64-bit account / quantity
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1


@dataclass(slots=True)
class JoinResult:
    """
    Outcome of one position line.

    ok    : record is set, line is the formatted output line
    error : record is None, line is the verbatim input line
    """
    line: str
    record: Optional[PositionRecord] = None
    matched_delta: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None


class PositionJoinEngine(BaseEngine[str, JoinResult]):
    """
    PositionJoinEngine

    Input:
      - position lines without the header (instrument,account,accountType,quantity)
      - InstrumentDelta mapping (complete, read-only)

    Output:
      - one JoinResult per line, input order preserved

    Account booking of a matched delta d:
      - E (external): quantity += d, delta = d
      - I (internal): quantity -= d, delta = -d
      - anything else: quantity unchanged, delta 0

    A malformed line never stops the stream; it becomes an error result.
    """

    def __init__(self, deltas: Mapping[str, int]):
        self.deltas = deltas

    # --------------------------------------------------
    # parse
    # --------------------------------------------------
    @staticmethod
    def parse_line(line: str) -> PositionRecord:
        if _UNDECODABLE.search(line):
            raise PositionFormatError(line, "line holds bytes that are not valid in the file encoding")

        fields = line.split(DELIMITER)
        if len(fields) != FIELD_COUNT:
            raise PositionFormatError(line, f"expected {FIELD_COUNT} fields, got {len(fields)}")

        instrument, account, account_type, quantity = fields

        return PositionRecord(
            instrument=instrument,
            account=_parse_int(line, "account", account),
            account_type=account_type,
            quantity=_parse_int(line, "quantity", quantity),
        )

    # --------------------------------------------------
    # join
    # --------------------------------------------------
    def apply(self, record: PositionRecord) -> Tuple[PositionRecord, Optional[int]]:
        """
        Book the instrument delta onto the record (in place).
        Returns the matched delta, None when the instrument had no transactions.
        """
        record.delta = 0
        delta = self.deltas.get(record.instrument)
        if delta is None:
            return record, None

        account_type = AccountType.parse(record.account_type)
        if account_type is AccountType.EXTERNAL:
            record.quantity += delta
            record.delta = delta
        elif account_type is AccountType.INTERNAL:
            record.quantity -= delta
            record.delta = -delta

        return record, delta

    def process(self, line: str) -> JoinResult:
        try:
            record = self.parse_line(line)
        except PositionFormatError as e:
            return JoinResult(line=line, error=e.reason)

        record, matched = self.apply(record)
        return JoinResult(line=record.to_line(), record=record, matched_delta=matched)

    def join(
        self,
        lines: Iterable[str],
        stats: RunStatistics,
    ) -> Iterator[Tuple[JoinResult, RunStatistics]]:
        """
        Lazily join every line, threading RunStatistics through the stream.

        Only matched records update the statistics.
        """
        for line in lines:
            result = self.process(line)
            if result.matched_delta is not None:
                stats = stats.update(result.record.instrument, result.matched_delta)
            yield result, stats


def _parse_int(line: str, name: str, value: str) -> int:
    if not _INTEGER.fullmatch(value):
        raise PositionFormatError(line, f"{name} is not an integer: {value!r}")
    number = int(value)
    if not INT64_MIN <= number <= INT64_MAX:
        raise PositionFormatError(line, f"{name} out of range: {value}")
    return number
