#!filepath: eod_positions/pipeline/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from eod_positions.engines.events import RunStatistics


@dataclass
class PipelineContext:
    """
    PipelineContext = the single runtime context of one batch run

    Principles:
    - the workflow builds it
    - steps publish their results on it, in order
    - no business logic
    """

    # -------------------------
    # resolved files
    # -------------------------
    positions_file: Path
    transactions_file: Path
    output_file: Path
    errors_file: Path

    encoding: str = "utf-8"

    # -------------------------
    # aggregation result (None until the aggregation step finished)
    # -------------------------
    deltas: Optional[Dict[str, int]] = None
    transaction_count: int = 0

    # -------------------------
    # join result
    # -------------------------
    stats: RunStatistics = field(default_factory=RunStatistics)
    position_rows: int = 0
    error_rows: int = 0
