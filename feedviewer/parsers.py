import io
import logging
import math
import re
from pathlib import Path
from typing import Callable, Optional, TypeVar
from urllib.parse import urlparse

import pandas as pd

from . import data_handler, settings, utils
from .column_mappings import PRODUCT_COLUMN_MAPPINGS, STOCK_COLUMN_MAPPINGS
from .exceptions import FeedParseError
from .schemas import ParseProgress, ProductFeedItem, StockFeedItem, StockStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")
ProgressCallback = Callable[[ParseProgress], None]
FeedParser = Callable[[str, Optional[ProgressCallback]], list]

IMAGE_SEPARATORS = re.compile(r"[,|;\n]+")
PRICE_NOISE = re.compile(r"[£$€,\s]")
# Leading numeric prefix, so "12.50 GBP" still reads as 12.5
LEADING_FLOAT = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
LEADING_INT = re.compile(r"^-?\d+")

STOCK_TEXT_TOKENS = {
    "in stock": StockStatus.IN_STOCK,
    "out of stock": StockStatus.OUT_OF_STOCK,
    "out-of-stock": StockStatus.OUT_OF_STOCK,
    "low stock": StockStatus.LOW_STOCK,
    "low-stock": StockStatus.LOW_STOCK,
}


# --- Structure ---


def detect_delimiter(sample: str) -> str:
    """Picks tab when the sample holds strictly more tabs than commas."""
    sample = sample[: settings.DELIMITER_SAMPLE_SIZE]
    return "\t" if sample.count("\t") > sample.count(",") else ","


def map_columns(headers: list[str], mappings: dict[str, str]) -> dict[int, str]:
    """Maps header positions to canonical field names. Unknown headers are ignored."""
    column_map = {}
    for index, header in enumerate(headers):
        field = mappings.get(header.strip())
        if field:
            column_map[index] = field
    return column_map


def _read_delimited(content: str, delimiter: str, **kwargs) -> pd.DataFrame:
    return pd.read_csv(
        io.StringIO(content),
        sep=delimiter,
        header=None,
        dtype=str,
        keep_default_na=False,
        na_filter=False,
        skip_blank_lines=True,
        engine="c",
        **kwargs,
    )


def split_rows(content: str, delimiter: str) -> list[list[str]]:
    """
    Splits a delimited document into rows of strings.
    - Quoted fields may contain the delimiter or newlines.
    - A stray quote inside a cell is kept as text; the row is never dropped.
    - Blank lines are skipped.
    - Rows wider than the first row are truncated, narrower rows padded with "".
    """
    content = content.lstrip("\ufeff")
    if not content.strip():
        return []

    try:
        # The first row fixes the width; selecting columns makes the tokenizer
        # ignore surplus cells instead of rejecting the row.
        width = _read_delimited(content, delimiter, nrows=1, on_bad_lines="skip").shape[1]
        df = _read_delimited(content, delimiter, usecols=list(range(width)))
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as e:
        raise FeedParseError(f"Could not split feed into rows: {e}") from e

    return df.fillna("").astype(str).values.tolist()


# --- Cell Coercion ---


def _is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme and parsed.netloc)


def parse_images(value: str) -> list[str]:
    """Splits an image cell into a de-duplicated list of URLs."""
    if not value:
        return []

    urls = []
    for piece in IMAGE_SEPARATORS.split(value):
        url = piece.strip()
        if not url or url in urls:
            continue
        if _is_absolute_url(url) or url.startswith("http"):
            urls.append(url)
    return urls


def parse_price(value: str) -> float:
    """
    Reads a price cell such as "£1,234.50". Never raises.
    Anything that is not a finite, non-negative number becomes 0.0.
    """
    if not value:
        return 0.0

    cleaned = PRICE_NOISE.sub("", str(value))
    match = LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0

    price = float(match.group(0))
    if not math.isfinite(price) or price < 0:
        return 0.0
    return price


def parse_stock_value(value: str) -> tuple[int, Optional[StockStatus]]:
    """
    Reads a stock cell that holds either a quantity or a text status.
    Returns (quantity, status) where status is only set for text tokens.
    """
    if not value:
        return 0, None

    trimmed = value.strip()
    token_status = STOCK_TEXT_TOKENS.get(trimmed.lower())
    if token_status is not None:
        return 0, token_status

    match = LEADING_INT.match(re.sub(r"[^\d-]", "", trimmed))
    if match:
        return max(0, int(match.group(0))), None

    return 0, None


def derive_stock_status(quantity: int) -> StockStatus:
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= settings.LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def status_from_text(raw_status: str) -> StockStatus:
    """Interprets an explicit stock status column."""
    raw_status = raw_status.strip().lower()
    if "out" in raw_status or raw_status in ("0", "no"):
        return StockStatus.OUT_OF_STOCK
    if "low" in raw_status:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


# --- Row Builders ---


def _cell(row: list[str], index: int) -> str:
    return row[index] if index < len(row) else ""


def _build_product_item(row: list[str], fields: dict[str, int]) -> ProductFeedItem | None:
    values = {}
    for field, index in fields.items():
        value = _cell(row, index)
        values[field] = parse_images(value) if field == "images" else value.strip()

    if not values.get("sku"):
        return None
    return ProductFeedItem(**values)


def _build_stock_item(row: list[str], fields: dict[str, int]) -> StockFeedItem | None:
    raw = {field: _cell(row, index) for field, index in fields.items()}

    sku = raw.get("sku", "").strip()
    if not sku:
        return None

    quantity, token_status = parse_stock_value(raw.get("stock_quantity", ""))
    raw_status = raw.get("stock_status", "").strip()

    # Priority: explicit status column, then a text token in the stock column,
    # then the status implied by the quantity.
    if raw_status:
        status = status_from_text(raw_status)
    elif token_status is not None:
        status = token_status
    else:
        status = derive_stock_status(quantity)

    return StockFeedItem(
        sku=sku,
        stock_quantity=quantity,
        stock_status=status,
        price=parse_price(raw.get("price", "")),
        wholesale_price=parse_price(raw.get("wholesale_price", "")),
    )


def _parse_feed(
    content: str,
    mappings: dict[str, str],
    build_row: Callable[[list[str], dict[str, int]], Optional[T]],
    on_progress: Optional[ProgressCallback],
    label: str,
) -> list[T]:
    """
    A reusable helper shared by both feed parsers.
    - Detects the delimiter from a prefix sample.
    - Maps the header row to canonical fields.
    - Builds one record per SKU-bearing row, reporting progress in batches.
    """
    delimiter = detect_delimiter(content[: settings.DELIMITER_SAMPLE_SIZE])

    if on_progress:
        on_progress(ParseProgress(loaded=0, total=100, percent=0))

    rows = split_rows(content, delimiter)
    total_rows = max(len(rows) - 1, 0)

    records: list[T] = []
    if rows:
        column_map = map_columns(rows[0], mappings)
        # Invert to field -> position; the right-most duplicate column wins.
        fields = {field: index for index, field in sorted(column_map.items())}
        if "sku" not in fields:
            logger.warning(f"⚠️ {label}: no SKU column found in header {rows[0]!r}")

        for i in range(1, len(rows)):
            record = build_row(rows[i], fields)
            if record is not None:
                records.append(record)

            if on_progress and i % settings.PROGRESS_BATCH_ROWS == 0:
                on_progress(
                    ParseProgress(
                        loaded=i, total=total_rows, percent=(i / total_rows) * 100
                    )
                )

    if on_progress:
        on_progress(ParseProgress(loaded=total_rows, total=total_rows, percent=100))

    dropped = total_rows - len(records)
    logger.info(
        f"✅ Parsed {label}: {len(records):,} records from {total_rows:,} rows"
        + (f" ({dropped:,} without SKU skipped)" if dropped else "")
    )
    return records


# --- Public Parsers ---


def parse_product_feed(
    content: str, on_progress: Optional[ProgressCallback] = None
) -> list[ProductFeedItem]:
    """Parses the descriptive product feed (TSV or CSV)."""
    return _parse_feed(
        content, PRODUCT_COLUMN_MAPPINGS, _build_product_item, on_progress, "product feed"
    )


def parse_stock_feed(
    content: str, on_progress: Optional[ProgressCallback] = None
) -> list[StockFeedItem]:
    """Parses the stock/price feed (CSV or TSV)."""
    return _parse_feed(
        content, STOCK_COLUMN_MAPPINGS, _build_stock_item, on_progress, "stock feed"
    )


def read_feed_file(
    file_path: Path | str,
    parser: FeedParser,
    on_progress: Optional[ProgressCallback] = None,
) -> list:
    """Loads a local feed file and runs it through the given parser."""
    content = utils.read_text_file(Path(file_path))
    return parser(content, on_progress)


def fetch_and_parse_feed(
    url: str,
    parser: FeedParser,
    on_progress: Optional[ProgressCallback] = None,
    fetcher: Optional[Callable[[str], str]] = None,
) -> list:
    """Downloads a feed and parses it. Fetch failures propagate unchanged."""
    fetcher = fetcher or data_handler.fetch_feed_text
    content = fetcher(url)
    return parser(content, on_progress)
