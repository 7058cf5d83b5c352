#!filepath: eod_positions/utils/logger.py
import os
import sys
from functools import wraps
from time import perf_counter
from typing import Callable

from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
CONSOLE_FORMAT = "<level>{level}</level>: {message}"


class Logging:
    """
    Batch job logger
    ---------------------------------------
    - one file per day under ``log_dir`` (rotation / retention from LogConfig)
    - WARNING and above also go to stderr, so malformed position lines
      and unknown transaction types show up on the console
    - ``catch``: log + re-raise the failure of a whole run, with its wall time
    ---------------------------------------
    """

    def __init__(
        self,
        log_dir: str = "logs",
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level
        self._configure()

    def _configure(self) -> None:
        os.makedirs(self.log_dir, exist_ok=True)

        # loguru is process-global: drop every sink before adding ours
        logger.remove()

        logger.add(
            sink=os.path.join(self.log_dir, "{time:YYYY-MM-DD}.log"),
            rotation=self.rotation,
            retention=self.retention,
            level=self.level,
            format=FILE_FORMAT,
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )
        logger.add(sys.stderr, level="WARNING", format=CONSOLE_FORMAT)

        logger.debug(f"logger ready: dir={self.log_dir} level={self.level}")

    def setup(
        self,
        log_dir: str | None = None,
        rotation: str | None = None,
        retention: str | None = None,
        log_level: str | None = None,
    ) -> "Logging":
        """
        Apply LogConfig once the config is loaded.
        Modules hold a reference to ``logs``, so it is reconfigured in place.
        """
        self.log_dir = log_dir or self.log_dir
        self.rotation = rotation or self.rotation
        self.retention = retention or self.retention
        self.level = log_level or self.level
        self._configure()
        return self

    def debug(self, msg: str, *args, **kwargs):
        logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        logger.warning(msg, *args, **kwargs)

    def catch(self, msg: str = "run failed", log_time: bool = True) -> Callable:

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start = perf_counter()
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    logger.opt(exception=True).error(f"[ERROR] {func.__qualname__}: {msg}")
                    raise

                if log_time:
                    logger.info(f"[TIME] {func.__qualname__} took {perf_counter() - start:.4f}s")
                return result

            return wrapper

        return decorator


# global logs, reconfigured through Logging.setup
logs = Logging()
