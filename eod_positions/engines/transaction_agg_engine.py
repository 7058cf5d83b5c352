# eod_positions/engines/transaction_agg_engine.py
from __future__ import annotations

from typing import Dict, Iterable

from eod_positions import logs
from eod_positions.engines.base import BaseEngine
from eod_positions.engines.events import (
    TransactionEvent,
    TransactionType,
    UnknownTypePolicy,
)


class TransactionAggEngine(BaseEngine[TransactionEvent, int]):
    """
    TransactionAggEngine

    Input:
      - stream of TransactionEvent (single pass)

    Output:
      - InstrumentDelta: instrument -> net signed quantity
        (Buy = +quantity, Sell = -quantity)

    Principles:
      - pure computation, no I/O
      - only the output mapping is kept in memory
      - one entry per distinct instrument seen

    Transaction types other than B / S follow ``policy``:
      - LEGACY: the first event of an instrument stores its raw quantity as
        positive; later events of that instrument contribute nothing.
      - IGNORE: never contribute; the instrument is still registered.
    """

    def __init__(self, policy: UnknownTypePolicy = UnknownTypePolicy.LEGACY):
        self.policy = policy
        self._deltas: Dict[str, int] = {}
        self.event_count = 0
        self.unknown_type_count = 0

    def reset(self) -> None:
        self._deltas = {}
        self.event_count = 0
        self.unknown_type_count = 0

    # --------------------------------------------------
    def process(self, event: TransactionEvent) -> int:
        """
        Fold one event; returns the running total of its instrument.
        """
        self.event_count += 1

        direction = event.direction
        if direction is None:
            self.unknown_type_count += 1
            logs.debug(
                f"[TransactionAgg] unknown transaction type "
                f"{event.transaction_type!r} for {event.instrument!r}"
            )

        signed = -event.quantity if direction is TransactionType.SELL else event.quantity
        previous = self._deltas.get(event.instrument)

        if previous is None:
            if direction is None and self.policy is UnknownTypePolicy.IGNORE:
                signed = 0
            total = signed
        elif direction is None:
            total = previous
        else:
            total = previous + signed

        self._deltas[event.instrument] = total
        return total

    def execute(self, events: Iterable[TransactionEvent]) -> Dict[str, int]:
        """
        Consume the whole stream and return the InstrumentDelta mapping.
        """
        self.reset()
        for event in events:
            self.process(event)
        return dict(self._deltas)

    @property
    def deltas(self) -> Dict[str, int]:
        return dict(self._deltas)
