#!filepath: eod_positions/utils/path.py
import os
from pathlib import Path
from typing import Optional

from eod_positions import logs


class PathManager:
    """
    Batch data directory layout:

    <data_dir>
     ├── Input_StartOfDay_Positions.txt
     ├── Input_Transactions.txt
     ├── Expected_EndOfDay_Positions.txt
     └── Input_StartOfDay_Positions_Error_Records.txt

    data_dir = EOD_DATA_DIR (env) or cwd, unless set_root() was called.
    Absolute file names are used as-is; relative ones live under data_dir.
    """

    ENV_DATA_DIR = "EOD_DATA_DIR"

    _root: Optional[Path] = None

    # ---------------------------------------------------------
    # root detection
    # ---------------------------------------------------------
    @classmethod
    def detect_root(cls) -> Path:
        env_dir = os.getenv(cls.ENV_DATA_DIR)
        if env_dir:
            root = Path(env_dir).resolve()
            logs.debug(f"[PathManager] detect_root from {cls.ENV_DATA_DIR} = {root}")
            return root
        return Path.cwd()

    @classmethod
    def root(cls) -> Path:
        if cls._root is None:
            cls._root = cls.detect_root()
        return cls._root

    @classmethod
    def set_root(cls, new_root: Path | str | None):
        if new_root is None:
            cls._root = None
        else:
            cls._root = Path(new_root).resolve()
        logs.debug(f"[PathManager] set_root = {cls._root}")

    # ---------------------------------------------------------
    # files
    # ---------------------------------------------------------
    @classmethod
    def resolve(cls, name: Path | str) -> Path:
        p = Path(name)
        if p.is_absolute():
            return p
        return cls.root() / p
