#!filepath: eod_positions/utils/filesystem.py
from pathlib import Path

from eod_positions import logs


class FileSystem:
    """
    File system helpers
    - create directories on demand
    - existence / size checks for the batch inputs
    """

    @staticmethod
    def ensure_dir(path: str | Path) -> Path:
        """
        Create the directory (and parents) if it does not exist.
        """
        p = Path(path)
        if not p.exists():
            p.mkdir(parents=True, exist_ok=True)
            logs.debug(f"[FS] created dir: {p}")
        return p

    @staticmethod
    def ensure_parent(path: str | Path) -> Path:
        p = Path(path)
        FileSystem.ensure_dir(p.parent)
        return p

    @staticmethod
    def file_exists(path: str | Path) -> bool:
        return Path(path).is_file()

    @staticmethod
    def get_file_size(path: str | Path) -> int:
        """
        File size in bytes, 0 when the file does not exist.
        """
        p = Path(path)
        if not p.exists():
            return 0
        return p.stat().st_size

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """
        Human readable size (KB / MB / GB).
        """
        for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
            if size_bytes < 1024:
                return f"{size_bytes:.2f} {unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f} PB"
