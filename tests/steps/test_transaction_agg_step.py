import pytest
from loguru import logger

from eod_positions.engines.transaction_agg_engine import TransactionAggEngine
from eod_positions.observability.instrumentation import Instrumentation
from eod_positions.steps.transaction_agg_step import TransactionAggStep
from eod_positions.utils.errors import (
    EmptyTransactionsError,
    InputFileError,
    TransactionFormatError,
)


def test_step_publishes_deltas(write_transactions, sample_transactions, make_test_pipeline_context):
    write_transactions(sample_transactions)
    ctx = make_test_pipeline_context()
    inst = Instrumentation()

    ctx = TransactionAggStep(engine=TransactionAggEngine(), inst=inst).run(ctx)

    assert ctx.deltas == {"X": 60, "Y": 10}
    assert ctx.transaction_count == 3
    assert inst.counters.transactions == 3
    assert inst.counters.instruments == 2
    assert inst.counters.unknown_transaction_types == 0
    assert list(inst.phases) == ["aggregate"]


def test_step_without_instrumentation(write_transactions, sample_transactions, make_test_pipeline_context):
    write_transactions(sample_transactions)

    ctx = TransactionAggStep(engine=TransactionAggEngine()).run(make_test_pipeline_context())

    assert ctx.deltas == {"X": 60, "Y": 10}


def test_empty_aggregation_is_fatal(write_transactions, make_test_pipeline_context):
    write_transactions([])
    ctx = make_test_pipeline_context()

    with pytest.raises(EmptyTransactionsError):
        TransactionAggStep(engine=TransactionAggEngine()).run(ctx)

    assert ctx.deltas is None


def test_malformed_stream_is_fatal(write_transactions, make_test_pipeline_context):
    write_transactions('[{"Instrument": "X", "TransactionType": "B", "TransactionQuantity": 1}, {')
    ctx = make_test_pipeline_context()

    with pytest.raises(TransactionFormatError):
        TransactionAggStep(engine=TransactionAggEngine()).run(ctx)

    assert ctx.deltas is None


def test_missing_file_is_fatal(make_test_pipeline_context):
    ctx = make_test_pipeline_context()

    with pytest.raises(InputFileError):
        TransactionAggStep(engine=TransactionAggEngine()).run(ctx)


def test_unknown_types_are_counted(write_transactions, make_test_pipeline_context):
    write_transactions([
        {"Instrument": "A", "TransactionType": "X", "TransactionQuantity": 5},
        {"Instrument": "A", "TransactionType": "Z", "TransactionQuantity": 9},
    ])
    inst = Instrumentation()

    ctx = TransactionAggStep(engine=TransactionAggEngine(), inst=inst).run(make_test_pipeline_context())

    assert ctx.deltas == {"A": 5}
    assert inst.counters.unknown_transaction_types == 2


def test_unknown_types_debug_per_event_one_warning(write_transactions, make_test_pipeline_context):
    write_transactions([
        {"Instrument": "A", "TransactionType": "X", "TransactionQuantity": 5},
        {"Instrument": "A", "TransactionType": "Z", "TransactionQuantity": 9},
        {"Instrument": "B", "TransactionType": "B", "TransactionQuantity": 1},
    ])
    records = []
    sink_id = logger.add(lambda msg: records.append(msg.record), level="DEBUG")

    TransactionAggStep(engine=TransactionAggEngine()).run(make_test_pipeline_context())

    logger.remove(sink_id)
    per_event = [r for r in records if "unknown transaction type" in r["message"]]
    warnings = [r for r in records if r["level"].name == "WARNING"]

    assert [r["level"].name for r in per_event] == ["DEBUG", "DEBUG"]
    assert len(warnings) == 1
    assert "2 transaction(s)" in warnings[0]["message"]
    assert "policy=legacy" in warnings[0]["message"]
