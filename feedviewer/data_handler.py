import json
import logging
import re
import zipfile
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import urlparse

import pandas as pd
import requests
from bs4 import BeautifulSoup

from . import settings
from . import utils
from .exceptions import FeedFetchError
from .schemas import DownloadProgress, Product

logger = logging.getLogger(__name__)

DownloadCallback = Callable[[DownloadProgress], None]

IMAGE_EXTENSION = re.compile(r"\.(jpg|jpeg|png|gif|webp)", re.IGNORECASE)

# Column order of the product export; values come from product_to_export_row().
EXPORT_COLUMNS = [
    "SKU",
    "Title",
    "Category",
    "Category One",
    "Category Two",
    "Colour",
    "Stock Status",
    "Stock Quantity",
    "Retail Price",
    "Wholesale Price",
    "Has Variations",
    "Image Count",
    "Primary Image",
    "PSIN",
]


# --- Remote Fetching ---


def fetch_feed_text(
    url: str,
    session: Optional[requests.Session] = None,
    timeout: float = settings.REQUEST_TIMEOUT,
    label: str = "feed",
) -> str:
    """
    Downloads a feed document and returns its decoded text.
    Any non-success status or network failure raises FeedFetchError.
    """
    http = session or requests
    logger.info(f"🚀 Fetching {label}: {url}")

    try:
        response = http.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise FeedFetchError(url, reason=str(e), label=label) from e

    if not response.ok:
        raise FeedFetchError(
            url, status=response.status_code, reason=response.reason or "", label=label
        )

    return utils.decode_text(response.content, source=url)


def _fetch_image(
    url: str, session: Optional[requests.Session], timeout: float
) -> bytes | None:
    """Returns the image bytes, or None when the image cannot be retrieved."""
    http = session or requests
    try:
        response = http.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.warning(f"⚠️ Error fetching image: {url} ({e})")
        return None

    if not response.ok:
        logger.warning(f"⚠️ Failed to fetch image: {url} ({response.status_code})")
        return None
    return response.content


# --- Export ---


def product_to_export_row(product: Product) -> dict:
    return {
        "SKU": product.sku,
        "Title": product.title,
        "Category": product.category,
        "Category One": product.category_one,
        "Category Two": product.category_two,
        "Colour": product.colour,
        "Stock Status": product.stock_status.value.replace("_", " "),
        "Stock Quantity": product.stock_quantity,
        "Retail Price": f"{product.price:.2f}",
        "Wholesale Price": f"{product.wholesale_price:.2f}",
        "Has Variations": "Yes" if product.has_variations else "No",
        "Image Count": len(product.images),
        "Primary Image": product.images[0] if product.images else "",
        "PSIN": product.psin,
    }


def export_products_to_csv(
    products: list[Product],
    filename: Optional[str] = None,
    output_dir: Optional[Path] = None,
) -> Path:
    """Saves the product view to CSV and conditionally to JSON, with dated filenames."""
    output_dir = Path(output_dir) if output_dir is not None else settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = output_dir / (
        filename or f"{settings.EXPORT_FILENAME_BASE}_{date_suffix}.csv"
    )

    df = pd.DataFrame(
        [product_to_export_row(p) for p in products], columns=EXPORT_COLUMNS
    )
    df.to_csv(csv_path, index=False)
    logger.info(f"✅ Exported {len(df):,} products to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        json_path = csv_path.with_suffix(".json")
        with open(json_path, "w", encoding="utf-8") as f:
            json_data = [p.model_dump(mode="json", by_alias=True) for p in products]
            json.dump(json_data, f, indent=2, default=str)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.debug("Skipping JSON file save as per configuration.")

    return csv_path


def describe_product(product: Product, fmt: str = "plain") -> str:
    """
    Combines the short and long descriptions for pasting into a listing.
    'html' keeps markup and separates the parts with <br><br>;
    'plain' strips all tags.
    """
    parts = [
        part for part in (product.short_description, product.long_description) if part
    ]
    if fmt == "html":
        return "<br><br>".join(parts)
    return BeautifulSoup("\n\n".join(parts), "html.parser").get_text()


# --- Images ---


def get_image_filename(url: str, index: int) -> str:
    """File name for a downloaded image, falling back to image_<n>.<ext>."""
    try:
        name = urlparse(url).path.rsplit("/", 1)[-1]
    except ValueError:
        name = ""
    if name and "." in name:
        return name

    match = IMAGE_EXTENSION.search(url)
    extension = match.group(1) if match else "jpg"
    return f"image_{index + 1}.{extension}"


def download_product_images(
    product: Product,
    output_dir: Optional[Path] = None,
    on_progress: Optional[DownloadCallback] = None,
    session: Optional[requests.Session] = None,
    timeout: float = settings.REQUEST_TIMEOUT,
) -> Path:
    """
    Downloads every image of one product.
    A single image is saved as-is; several are packed into <sku>_images.zip.
    """
    images = product.images
    if not images:
        raise ValueError(f"No images to download for {product.sku}")

    output_dir = Path(output_dir) if output_dir is not None else settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    if len(images) == 1:
        content = _fetch_image(images[0], session, timeout)
        if content is None:
            raise FeedFetchError(images[0], reason="image unavailable", label="image")
        path = output_dir / f"{product.sku}_{get_image_filename(images[0], 0)}"
        path.write_bytes(content)
        logger.info(f"✅ Image saved to: {path}")
        return path

    total = len(images)
    zip_path = output_dir / f"{product.sku}_images.zip"
    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as archive:
        for index, url in enumerate(images):
            filename = get_image_filename(url, index)
            if on_progress:
                on_progress(
                    DownloadProgress(
                        current=index,
                        total=total,
                        percent=(index / total) * 100,
                        current_file=filename,
                    )
                )

            content = _fetch_image(url, session, timeout)
            if content is not None:
                archive.writestr(f"{product.sku}/{filename}", content)

    if on_progress:
        on_progress(DownloadProgress(current=total, total=total, percent=100))

    logger.info(f"✅ {total} images packed into: {zip_path}")
    return zip_path


def download_batch_images(
    products: list[Product],
    output_dir: Optional[Path] = None,
    on_progress: Optional[DownloadCallback] = None,
    session: Optional[requests.Session] = None,
    timeout: float = settings.REQUEST_TIMEOUT,
) -> Path:
    """Downloads the images of many products into one ZIP, one folder per SKU."""
    output_dir = Path(output_dir) if output_dir is not None else settings.OUTPUT_DIR
    output_dir.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()
    zip_path = output_dir / f"{settings.IMAGES_FILENAME_BASE}_{date_suffix}.zip"

    total = sum(len(p.images) for p in products)
    completed = 0

    with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as archive:
        for product in products:
            for index, url in enumerate(product.images):
                filename = get_image_filename(url, index)
                if on_progress:
                    on_progress(
                        DownloadProgress(
                            current=completed,
                            total=total,
                            percent=(completed / total) * 100,
                            current_file=f"{product.sku}/{filename}",
                        )
                    )

                content = _fetch_image(url, session, timeout)
                if content is not None:
                    archive.writestr(f"{product.sku}/{filename}", content)
                completed += 1

    if on_progress:
        on_progress(
            DownloadProgress(
                current=total, total=total, percent=100, current_file="Creating ZIP..."
            )
        )

    logger.info(f"✅ {total} images from {len(products)} products packed into: {zip_path}")
    return zip_path
