#!filepath: eod_positions/pipeline/pipeline.py
from __future__ import annotations

from eod_positions import logs
from eod_positions.pipeline.context import PipelineContext
from eod_positions.pipeline.step import PipelineStep
from eod_positions.observability.instrumentation import Instrumentation, NoOpInstrumentation


class PositionPipeline:
    """
    PositionPipeline = scheduler

    Rules:
    - steps run strictly in order, each one to completion
      (the join needs the complete aggregation)
    - the pipeline never times steps; each step times its own phase
    - a fatal error stops the run; there is no retry
    """

    def __init__(
            self,
            steps: list[PipelineStep],
            inst: Instrumentation | None = None,
    ):
        self.steps = steps
        self.inst = inst if inst is not None else NoOpInstrumentation()

    @logs.catch("end of day position run failed")
    def run(self, ctx: PipelineContext) -> PipelineContext:
        label = ctx.positions_file.name
        logs.info(f"[Pipeline] ====== START {label} ======")

        for step in self.steps:
            ctx = step.run(ctx)

        self.inst.report(label)
        logs.info(f"[Pipeline] ====== DONE {label} ======")
        return ctx
