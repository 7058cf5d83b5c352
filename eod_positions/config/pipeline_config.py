# eod_positions/config/pipeline_config.py
from pydantic import BaseModel, PositiveInt

from eod_positions.engines.events import UnknownTypePolicy


class PipelineConfig(BaseModel):
    # legacy = keep the first-appearance asymmetry for tokens other than B/S
    unknown_type_policy: UnknownTypePolicy = UnknownTypePolicy.LEGACY
    progress_every: PositiveInt = 100_000
    instrumentation: bool = True
