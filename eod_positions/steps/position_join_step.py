# eod_positions/steps/position_join_step.py
from __future__ import annotations

from contextlib import ExitStack
from typing import IO, Iterable, Iterator

from eod_positions import logs
from eod_positions.engines.events import OUTPUT_HEADER, RunStatistics
from eod_positions.engines.position_join_engine import PositionJoinEngine
from eod_positions.pipeline.context import PipelineContext
from eod_positions.pipeline.step import PipelineStep
from eod_positions.utils.errors import PipelineOrderError, PositionIOError


class PositionJoinStep(PipelineStep):
    """
    PositionJoinStep

    Input:
      positions file (header line + instrument,account,accountType,quantity)
      ctx.deltas (complete aggregation)

    Output:
      output file   header + one line per parsed record, input order
      errors file   header + verbatim malformed lines, input order
                    (undecodable bytes included, written back unchanged)
      ctx.stats / ctx.position_rows / ctx.error_rows

    Every write is flushed right away so partial output survives a later
    fatal error. All three handles are closed on every exit path.
    """

    stage = "join"

    def run(self, ctx: PipelineContext) -> PipelineContext:
        if ctx.deltas is None:
            raise PipelineOrderError(
                f"[{self.step_name}] transaction aggregation must complete before the join"
            )

        engine = PositionJoinEngine(ctx.deltas)
        stats = RunStatistics()
        ok_rows = 0
        error_rows = 0

        try:
            with ExitStack() as stack, self.inst.phase(self.stage):
                source = self._open(stack, ctx.positions_file, "r", ctx.encoding)
                output = self._open(stack, ctx.output_file, "w", ctx.encoding)
                errors = self._open(stack, ctx.errors_file, "w", ctx.encoding)

                # header first, unconditionally
                source.readline()
                for fh in (output, errors):
                    fh.write(OUTPUT_HEADER)
                    fh.flush()

                lines = _strip_newlines(source)
                for line_no, (result, stats) in enumerate(engine.join(lines, stats), start=2):
                    if result.ok:
                        output.write("\n" + result.line)
                        output.flush()
                        ok_rows += 1
                    else:
                        errors.write("\n" + result.line)
                        errors.flush()
                        error_rows += 1
                        logs.warning(
                            f"[{self.step_name}] line {line_no} -> error file: {result.error}"
                        )

                    self.inst.lines_done(self.step_name, ok_rows + error_rows)
        except OSError as e:
            raise PositionIOError(f"I/O failure while joining positions: {e}") from e

        ctx.stats = stats
        ctx.position_rows = ok_rows
        ctx.error_rows = error_rows

        self.inst.count(position_rows=ok_rows, error_rows=error_rows)

        logs.info(
            f"[{self.step_name}] written {ctx.output_file.name} rows={ok_rows}, "
            f"{ctx.errors_file.name} rows={error_rows}"
        )
        return ctx

    # ------------------------------------------------------------------
    @staticmethod
    def _open(stack: ExitStack, path, mode: str, encoding: str) -> IO[str]:
        # undecodable bytes survive as lone surrogates and are written back unchanged
        fh = open(path, mode, encoding=encoding, errors="surrogateescape")
        stack.callback(PositionJoinStep._close_quietly, fh)
        return fh

    @staticmethod
    def _close_quietly(fh: IO[str]) -> None:
        """
        Best-effort close: a failing close is reported, never raised.
        """
        try:
            fh.close()
        except OSError as e:
            logs.warning(f"[PositionJoinStep] failed to close {getattr(fh, 'name', fh)}: {e}")


def _strip_newlines(lines: Iterable[str]) -> Iterator[str]:
    # text mode already maps \r\n and \r to \n
    for line in lines:
        yield line[:-1] if line.endswith("\n") else line
