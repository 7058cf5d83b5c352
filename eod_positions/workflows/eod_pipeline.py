#!filepath: eod_positions/workflows/eod_pipeline.py
from __future__ import annotations

from pathlib import Path

from eod_positions import logs
from eod_positions.config.app_config import AppConfig
from eod_positions.engines.transaction_agg_engine import TransactionAggEngine
from eod_positions.observability.instrumentation import Instrumentation, NoOpInstrumentation
from eod_positions.pipeline.context import PipelineContext
from eod_positions.pipeline.pipeline import PositionPipeline
from eod_positions.steps.position_join_step import PositionJoinStep
from eod_positions.steps.transaction_agg_step import TransactionAggStep
from eod_positions.utils.errors import InputFileError
from eod_positions.utils.filesystem import FileSystem
from eod_positions.utils.path import PathManager


def build_eod_pipeline(cfg: AppConfig) -> PositionPipeline:
    """
    End-of-day position pipeline

    Semantic order (LAW):
        TransactionAgg   (transactions JSON → instrument delta map, fully consumed)
        → PositionJoin   (positions × delta map → EOD positions + error records)
    """
    inst = (
        Instrumentation(progress_every=cfg.pipeline.progress_every)
        if cfg.pipeline.instrumentation
        else NoOpInstrumentation()
    )

    agg_step = TransactionAggStep(
        engine=TransactionAggEngine(policy=cfg.pipeline.unknown_type_policy),
        inst=inst,
    )
    join_step = PositionJoinStep(inst=inst)

    return PositionPipeline(steps=[agg_step, join_step], inst=inst)


def build_context(
        cfg: AppConfig,
        positions: str | Path | None = None,
        transactions: str | Path | None = None,
        output: str | Path | None = None,
        errors: str | Path | None = None,
) -> PipelineContext:
    """
    Explicit paths win; missing ones fall back to the configured file names
    under data.data_dir.
    """
    data = cfg.data
    PathManager.set_root(data.data_dir)

    return PipelineContext(
        positions_file=PathManager.resolve(positions or data.positions_file),
        transactions_file=PathManager.resolve(transactions or data.transactions_file),
        output_file=PathManager.resolve(output or data.output_file),
        errors_file=PathManager.resolve(errors or data.errors_file),
        encoding=data.encoding,
    )


def validate_inputs(ctx: PipelineContext) -> None:
    for label, path in (
            ("Start of day positions", ctx.positions_file),
            ("Transactions", ctx.transactions_file),
    ):
        if not FileSystem.file_exists(path):
            raise InputFileError(f"{label} file not found: {path}")
        if FileSystem.get_file_size(path) == 0:
            raise InputFileError(f"{label} file does not have data: {path}")

    logs.info(
        f"[Workflow] transactions={ctx.transactions_file} "
        f"({FileSystem.format_size(FileSystem.get_file_size(ctx.transactions_file))})"
    )

    FileSystem.ensure_parent(ctx.output_file)
    FileSystem.ensure_parent(ctx.errors_file)


def run_eod(
        positions: str | Path | None = None,
        transactions: str | Path | None = None,
        output: str | Path | None = None,
        errors: str | Path | None = None,
        cfg: AppConfig | None = None,
) -> PipelineContext:
    cfg = cfg if cfg is not None else AppConfig()

    ctx = build_context(cfg, positions, transactions, output, errors)
    validate_inputs(ctx)

    return build_eod_pipeline(cfg).run(ctx)
