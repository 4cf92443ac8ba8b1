import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Callable, Optional

from . import settings
from .schemas import SyncProgress


def resolve_level(level: int | str | None) -> int:
    """Accepts a logging constant or a name such as 'debug'; None means settings.LOG_LEVEL."""
    if level is None:
        level = settings.LOG_LEVEL
    if isinstance(level, int):
        return level
    value = getattr(logging, level.upper(), None)
    return value if isinstance(value, int) else logging.INFO


def setup_logger(
    name: Optional[str] = None,
    log_level: int | str | None = None,
    log_dir: Path | None = None,
) -> logging.Logger:
    """
    Sets up a logger with both console (StreamHandler) and file (RotatingFileHandler) output.
    Level, directory and file name default to the LOG_* settings.
    """
    logger = logging.getLogger(name)
    logger.setLevel(resolve_level(log_level))

    # Only this logger's own handlers count; handlers on ancestors are not ours.
    if logger.handlers:
        return logger

    # Formatters
    console_format = logging.Formatter("%(message)s")  # Keep console output clean/minimal
    file_format = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # 1. Console Handler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    # 2. File Handler
    log_dir = Path(log_dir) if log_dir is not None else settings.LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_dir / settings.LOG_FILENAME,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(file_format)
    logger.addHandler(file_handler)

    return logger


def make_progress_logger(
    logger: logging.Logger, step: Optional[float] = None
) -> Callable[[SyncProgress], None]:
    """
    Sync progress callback that logs at INFO without flooding the console:
    one line when a stage starts, then one per `step` percent within it.
    """
    step = step or settings.PROGRESS_LOG_STEP
    last = {"stage": None, "bucket": None}

    def log_progress(progress: SyncProgress):
        bucket = int(progress.percent // step)
        if progress.stage == last["stage"] and bucket == last["bucket"]:
            return
        last["stage"], last["bucket"] = progress.stage, bucket
        logger.info(f"  [{progress.percent:5.1f}%] {progress.message}")

    return log_progress
