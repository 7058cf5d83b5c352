import itertools

from eod_positions.engines.events import TransactionEvent, UnknownTypePolicy
from eod_positions.engines.transaction_agg_engine import TransactionAggEngine


def test_concrete_scenario():
    engine = TransactionAggEngine()
    deltas = engine.execute([
        TransactionEvent("X", "B", 100),
        TransactionEvent("X", "S", 40),
        TransactionEvent("Y", "B", 10),
    ])

    assert deltas == {"X": 60, "Y": 10}
    assert engine.event_count == 3


def test_sell_negates_only_its_own_quantity():
    deltas = TransactionAggEngine().execute([
        TransactionEvent("A", "S", 10),
        TransactionEvent("A", "S", 5),
        TransactionEvent("A", "B", 1),
    ])

    assert deltas == {"A": -14}


def test_aggregation_is_order_independent():
    events = [
        TransactionEvent("A", "B", 7),
        TransactionEvent("A", "S", 3),
        TransactionEvent("A", "S", 11),
        TransactionEvent("A", "b", 2),
    ]
    expected = sum(e.quantity if e.transaction_type.upper() == "B" else -e.quantity for e in events)

    engine = TransactionAggEngine()
    for perm in itertools.permutations(events):
        assert engine.execute(perm) == {"A": expected}


def test_one_entry_per_instrument():
    deltas = TransactionAggEngine().execute(
        TransactionEvent(sym, "B", 1) for sym in ["A", "B", "A", "C", "B", "A"]
    )

    assert deltas == {"A": 3, "B": 2, "C": 1}


def test_lowercase_tokens():
    deltas = TransactionAggEngine().execute([
        TransactionEvent("A", "b", 10),
        TransactionEvent("A", "s", 4),
    ])

    assert deltas == {"A": 6}


def test_unknown_type_legacy_first_appearance_counts_as_positive():
    engine = TransactionAggEngine(policy=UnknownTypePolicy.LEGACY)
    deltas = engine.execute([
        TransactionEvent("A", "X", 50),
        TransactionEvent("A", "S", 20),
        TransactionEvent("A", "X", 1000),
    ])

    # first X stored as +50, later X contributes nothing
    assert deltas == {"A": 30}
    assert engine.unknown_type_count == 2


def test_unknown_type_alone_keeps_raw_quantity():
    deltas = TransactionAggEngine().execute([
        TransactionEvent("A", "", 5),
    ])

    assert deltas == {"A": 5}


def test_unknown_type_ignore_policy():
    engine = TransactionAggEngine(policy=UnknownTypePolicy.IGNORE)
    deltas = engine.execute([
        TransactionEvent("A", "X", 50),
        TransactionEvent("A", "S", 20),
        TransactionEvent("B", "?", 9),
    ])

    assert deltas == {"A": -20, "B": 0}


def test_process_returns_running_total():
    engine = TransactionAggEngine()

    assert engine.process(TransactionEvent("A", "B", 3)) == 3
    assert engine.process(TransactionEvent("A", "S", 5)) == -2
    assert engine.deltas == {"A": -2}


def test_execute_resets_between_runs():
    engine = TransactionAggEngine()
    engine.execute([TransactionEvent("A", "B", 3)])

    assert engine.execute([TransactionEvent("B", "B", 1)]) == {"B": 1}
    assert engine.event_count == 1


def test_missing_fields_aggregate_under_defaults():
    deltas = TransactionAggEngine().execute([
        TransactionEvent(),
        TransactionEvent(instrument="A", transaction_type="B"),
    ])

    assert deltas == {"": 0, "A": 0}
