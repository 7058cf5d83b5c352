from unittest.mock import MagicMock

import pytest

from eod_positions.observability.instrumentation import Instrumentation
from eod_positions.pipeline.pipeline import PositionPipeline
from eod_positions.pipeline.step import PipelineStep


class _RecordingStep(PipelineStep):
    def __init__(self, name, calls, inst=None):
        super().__init__(inst)
        self.name = name
        self.calls = calls

    def run(self, ctx):
        with self.inst.phase(self.name):
            self.calls.append(self.name)
        return ctx


def test_steps_run_in_order(make_test_pipeline_context):
    calls = []
    pipeline = PositionPipeline(steps=[_RecordingStep("agg", calls), _RecordingStep("join", calls)])

    ctx = make_test_pipeline_context()
    assert pipeline.run(ctx) is ctx
    assert calls == ["agg", "join"]


def test_fatal_error_stops_pipeline(make_test_pipeline_context):
    failing = MagicMock()
    failing.run.side_effect = RuntimeError("fatal")
    after = MagicMock()

    with pytest.raises(RuntimeError):
        PositionPipeline(steps=[failing, after]).run(make_test_pipeline_context())

    after.run.assert_not_called()


def test_run_report_generated(make_test_pipeline_context):
    inst = MagicMock(spec=Instrumentation)
    ctx = make_test_pipeline_context()

    PositionPipeline(steps=[], inst=inst).run(ctx)

    inst.report.assert_called_once_with(ctx.positions_file.name)


def test_steps_share_instrumentation(make_test_pipeline_context):
    inst = Instrumentation()
    steps = [_RecordingStep("aggregate", [], inst=inst), _RecordingStep("join", [], inst=inst)]

    PositionPipeline(steps=steps, inst=inst).run(make_test_pipeline_context())

    assert steps[0].step_name == "_RecordingStep"
    assert list(inst.phases) == ["aggregate", "join"]


def test_base_step_run_not_implemented(make_test_pipeline_context):
    with pytest.raises(NotImplementedError):
        PipelineStep().run(make_test_pipeline_context())
