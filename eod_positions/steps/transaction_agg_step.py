# eod_positions/steps/transaction_agg_step.py
from __future__ import annotations

from eod_positions import logs
from eod_positions.engines.transaction_agg_engine import TransactionAggEngine
from eod_positions.engines.transaction_parser import iter_transactions
from eod_positions.pipeline.context import PipelineContext
from eod_positions.pipeline.step import PipelineStep
from eod_positions.utils.errors import EmptyTransactionsError, InputFileError


class TransactionAggStep(PipelineStep):
    """
    TransactionAggStep

    Input:
      transactions file (JSON array, possibly large, streamed)

    Output:
      ctx.deltas            instrument -> net signed quantity
      ctx.transaction_count

    Fatal:
      - file cannot be opened / read
      - structural JSON failure (TransactionFormatError, raised by the parser)
      - no instrument aggregated
    """

    stage = "aggregate"

    def __init__(self, engine: TransactionAggEngine, inst=None) -> None:
        super().__init__(inst)
        self.engine = engine

    def run(self, ctx: PipelineContext) -> PipelineContext:
        path = ctx.transactions_file

        try:
            with open(path, "rb") as fp, self.inst.phase(self.stage):
                deltas = self.engine.execute(iter_transactions(fp))
        except OSError as e:
            raise InputFileError(f"Cannot read transactions file {path}: {e}") from e

        if not deltas:
            raise EmptyTransactionsError(
                f"No instrument could be aggregated from {path}. Validate transaction file."
            )

        if self.engine.unknown_type_count:
            logs.warning(
                f"[{self.step_name}] {self.engine.unknown_type_count} transaction(s) "
                f"with a type other than B/S (policy={self.engine.policy.value})"
            )

        ctx.deltas = deltas
        ctx.transaction_count = self.engine.event_count

        self.inst.count(
            transactions=self.engine.event_count,
            instruments=len(deltas),
            unknown_transaction_types=self.engine.unknown_type_count,
        )

        logs.info(
            f"[{self.step_name}] aggregated {self.engine.event_count} transactions "
            f"into {len(deltas)} instruments"
        )
        return ctx
