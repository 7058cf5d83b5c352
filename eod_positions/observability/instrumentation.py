#!filepath: eod_positions/observability/instrumentation.py
from __future__ import annotations

from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, fields
from time import perf_counter
from typing import Dict

from eod_positions import logs


@dataclass
class RunCounters:
    """Volumes of one end-of-day run, published by the steps."""

    transactions: int = 0
    instruments: int = 0
    unknown_transaction_types: int = 0
    position_rows: int = 0
    error_rows: int = 0

    def as_line(self) -> str:
        return ", ".join(f"{f.name}={getattr(self, f.name)}" for f in fields(self))


_COUNTER_NAMES = frozenset(f.name for f in fields(RunCounters))


class Instrumentation:
    """
    Run instrumentation

    - wall time per phase ("aggregate", "join"), in run order
    - RunCounters
    - a progress line every ``progress_every`` position lines

    Never changes what a step computes.
    """

    enabled = True

    def __init__(self, progress_every: int = 100_000):
        self.progress_every = progress_every
        self.phases: Dict[str, float] = {}
        self.counters = RunCounters()

    @contextmanager
    def phase(self, name: str):
        start = perf_counter()
        try:
            yield
        finally:
            self.phases[name] = perf_counter() - start

    def count(self, **values: int) -> None:
        for name, value in values.items():
            if name not in _COUNTER_NAMES:
                raise KeyError(f"unknown run counter: {name}")
            setattr(self.counters, name, value)

    def lines_done(self, step: str, lines: int) -> None:
        if lines % self.progress_every == 0:
            logs.info(f"[Progress] {step}: {lines} lines")

    def report(self, label: str) -> None:
        total = sum(self.phases.values())

        logs.info(f"[Run] {label}: {self.counters.as_line()}")
        for name, elapsed in self.phases.items():
            share = elapsed / total * 100 if total else 0.0
            logs.info(f"[Run]   {name:<10} {elapsed:8.3f}s {share:5.1f}%")
        logs.info(f"[Run]   {'total':<10} {total:8.3f}s")


class NoOpInstrumentation(Instrumentation):
    """pipeline.instrumentation = false"""

    enabled = False

    def phase(self, name: str):
        return nullcontext()

    def count(self, **values: int) -> None:
        pass

    def lines_done(self, step: str, lines: int) -> None:
        pass

    def report(self, label: str) -> None:
        pass
