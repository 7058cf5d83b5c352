#!filepath: eod_positions/pipeline/step.py
from __future__ import annotations

from eod_positions.pipeline.context import PipelineContext
from eod_positions.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class PipelineStep:
    """
    Pipeline step base class

    Responsibilities:
      - orchestration of one phase (open files, feed the engine, publish results)
      - the phase timing and run counters of that phase

    Instrumentation is optional; behaviour never depends on it.
    """

    stage: str = ''  # phase name, e.g. "aggregate"

    def __init__(self, inst: Instrumentation | None = None):
        self.inst: Instrumentation = inst if inst is not None else NoOpInstrumentation()

    @property
    def step_name(self) -> str:
        return self.__class__.__name__

    def run(self, ctx: PipelineContext) -> PipelineContext:
        raise NotImplementedError
