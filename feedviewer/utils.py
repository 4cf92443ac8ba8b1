import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from .exceptions import FeedReadError

logger = logging.getLogger(__name__)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime("%Y-%m-%d")


def round_half_up(value: float, places: int = 2) -> float:
    """Rounds halves upwards (0.125 -> 0.13, -0.125 -> -0.12), unlike round()."""
    factor = 10**places
    return math.floor(value * factor + 0.5) / factor


def decode_text(raw: bytes, source: str = "feed") -> str:
    """
    Decodes feed bytes with a multi-stage encoding fallback.
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, a permissive fallback that can decode any byte sequence.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.info(f"UTF-8 decoding failed for {source}. Retrying with 'latin-1'.")
        return raw.decode("latin-1")


def read_text_file(file_path: Path) -> str:
    """Reads a local feed file. Raises FeedReadError when it cannot be read at all."""
    try:
        raw = file_path.read_bytes()

    except FileNotFoundError as e:
        # Handle the missing file separately for a clear message.
        raise FeedReadError(f"Feed file not found: {file_path}") from e

    except OSError as e_general:
        raise FeedReadError(
            f"Could not read {file_path.name}. Reason: {e_general}"
        ) from e_general

    return decode_text(raw, source=file_path.name)


def format_time_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human-readable age of the last sync, e.g. '5 min ago'."""
    if timestamp is None:
        return "Never"

    now = now or datetime.now()
    seconds = int((now - timestamp).total_seconds())
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    if seconds < 60:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    return f"{days} day{'s' if days > 1 else ''} ago"
