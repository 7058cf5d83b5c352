#!filepath: eod_positions/config/app_config.py
import os

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from .log_config import LogConfig
from .data_config import DataConfig
from .pipeline_config import PipelineConfig
from eod_positions import logs


def package_root() -> str:
    """
    eod_positions/config/app_config.py → eod_positions/config → eod_positions
    """
    return os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


class AppConfig(BaseModel):
    log: LogConfig = LogConfig()
    data: DataConfig = DataConfig()
    pipeline: PipelineConfig = PipelineConfig()

    @classmethod
    def load(cls, path: str | None = None) -> "AppConfig":
        """
        Load YAML config + .env
        - default: <package>/config/base.yml
        - .env is read from the working directory
        - EOD_DATA_DIR overrides data.data_dir
        """
        load_dotenv(os.path.join(os.getcwd(), ".env"))

        if path is None:
            path = os.path.join(package_root(), "config", "base.yml")

        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}

        data_dir = os.getenv("EOD_DATA_DIR")
        if data_dir:
            raw["data"] = {**(raw.get("data") or {}), "data_dir": data_dir}

        logs.debug(f"[AppConfig] loaded {path}")
        return cls(**raw)
