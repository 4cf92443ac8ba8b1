import logging
import re
from collections import defaultdict

from .schemas import Product, ProductFeedItem, StockFeedItem

logger = logging.getLogger(__name__)

# A trailing "-BLK", "_RED", "-001" style suffix marks a variant of a base SKU.
VARIATION_SUFFIX_PATTERN = re.compile(r"[-_]([A-Z]{2,4}|[0-9]+)$", re.IGNORECASE)


def base_sku(sku: str) -> str:
    """Strips one variation suffix, e.g. 'ABC-123-BLK' -> 'ABC-123'."""
    return VARIATION_SUFFIX_PATTERN.sub("", sku, count=1)


def detect_variation_groups(skus: list[str]) -> dict[str, str]:
    """
    Groups SKUs by base SKU.
    Returns a SKU -> base SKU map covering only groups with two or more members.
    """
    groups: dict[str, list[str]] = defaultdict(list)
    for sku in skus:
        groups[base_sku(sku)].append(sku)

    variation_groups = {}
    for base, members in groups.items():
        if len(members) > 1:
            for sku in members:
                variation_groups[sku] = base
    return variation_groups


def merge_feeds(
    products: list[ProductFeedItem], stock: list[StockFeedItem]
) -> list[Product]:
    """
    Joins the product feed with the stock feed on case-insensitive SKU.
    - One Product per product row, in product feed order.
    - Duplicate stock SKUs: the last row wins.
    - Products without a stock row get zero stock, 'out_of_stock' and zero prices.
    - Stock rows without a product are dropped.
    """
    stock_by_sku = {item.sku.lower(): item for item in stock}
    variation_groups = detect_variation_groups([p.sku for p in products])

    merged = []
    matched_skus = set()
    for item in products:
        key = item.sku.lower()
        stock_item = stock_by_sku.get(key)
        group = variation_groups.get(item.sku)

        stock_fields = {}
        if stock_item is not None:
            matched_skus.add(key)
            stock_fields = stock_item.model_dump(exclude={"sku"})

        merged.append(
            Product(
                **item.model_dump(),
                **stock_fields,
                has_variations=group is not None,
                variation_group=group,
            )
        )

    orphaned = len(stock_by_sku) - len(matched_skus)
    logger.debug(
        f"Merged {len(merged):,} products; {len(matched_skus):,} with stock, "
        f"{orphaned:,} stock-only SKUs dropped."
    )
    return merged
