import logging

from . import settings
from .schemas import DashboardStats, FilterSpec, Product
from .search import FuzzyMatcher, looks_like_sku
from .stats import calculate_stats

logger = logging.getLogger(__name__)

# SKU-like queries only fuzz over identifiers; free text also reaches descriptions.
SKU_SEARCH_KEYS = ("sku", "title")
TEXT_SEARCH_KEYS = ("sku", "title", "short_description", "long_description")


def _price_for(product: Product, price_type: str) -> float:
    return product.price if price_type == "retail" else product.wholesale_price


def apply_filters(products: list[Product], spec: FilterSpec) -> list[Product]:
    """Applies every non-search filter, in a fixed order, to a new list."""
    filtered = list(products)

    if spec.stock_status != "all":
        filtered = [p for p in filtered if p.stock_status == spec.stock_status]

    low, high = spec.price_range.min, spec.price_range.max
    filtered = [p for p in filtered if low <= _price_for(p, spec.price_type) <= high]

    if spec.categories:
        accepted = set(spec.categories)
        filtered = [p for p in filtered if p.category in accepted]

    if spec.category_ones:
        accepted = set(spec.category_ones)
        filtered = [p for p in filtered if p.category_one in accepted]

    if spec.category_twos:
        accepted = set(spec.category_twos)
        filtered = [p for p in filtered if p.category_two in accepted]

    if spec.colors:
        accepted = {color.strip().lower() for color in spec.colors}
        filtered = [p for p in filtered if p.colour.strip().lower() in accepted]

    if spec.variations == "with_variations":
        filtered = [p for p in filtered if p.has_variations]
    elif spec.variations == "without_variations":
        filtered = [p for p in filtered if not p.has_variations]

    return filtered


def apply_search(products: list[Product], search_query: str) -> list[Product]:
    """
    Narrows an already-filtered list by free text.
    - SKU-like queries: SKU substring hits win outright; fuzzy only if none.
    - Other queries: title/SKU substring hits are used when there are between
      1 and SEARCH_DIRECT_MATCH_LIMIT - 1 of them, otherwise fuzzy matching.
    """
    query = search_query.strip()
    if not query:
        return products
    query_lower = query.lower()

    if looks_like_sku(query):
        sku_matches = [p for p in products if query_lower in p.sku.lower()]
        if sku_matches:
            return sku_matches
        logger.debug(f"No SKU contains '{query}', falling back to fuzzy search.")
        return FuzzyMatcher(SKU_SEARCH_KEYS).search(products, query)

    direct_matches = [
        p
        for p in products
        if query_lower in p.title.lower() or query_lower in p.sku.lower()
    ]
    if 0 < len(direct_matches) < settings.SEARCH_DIRECT_MATCH_LIMIT:
        return direct_matches

    logger.debug(
        f"{len(direct_matches):,} direct matches for '{query}', using fuzzy search."
    )
    return FuzzyMatcher(TEXT_SEARCH_KEYS).search(products, query)


def sort_products(products: list[Product], spec: FilterSpec) -> list[Product]:
    """Stable sort by the requested field. Text keys compare case-insensitively first."""
    if spec.sort_by == "title":
        key = lambda p: (p.title.casefold(), p.title)
    elif spec.sort_by == "sku":
        key = lambda p: (p.sku.casefold(), p.sku)
    elif spec.sort_by == "price":
        key = lambda p: _price_for(p, spec.price_type)
    else:
        key = lambda p: p.stock_quantity

    return sorted(products, key=key, reverse=spec.sort_order == "desc")


def filter_products(products: list[Product], spec: FilterSpec | None = None) -> list[Product]:
    """
    Produces the filtered, searched and ordered view of a product set.
    The input list and its products are never modified.
    """
    spec = spec or FilterSpec()
    filtered = apply_filters(products, spec)
    filtered = apply_search(filtered, spec.search_query)
    return sort_products(filtered, spec)


def get_filtered_stats(products: list[Product], spec: FilterSpec | None = None) -> DashboardStats:
    """Dashboard metrics over the filtered view instead of the whole catalog."""
    return calculate_stats(filter_products(products, spec))
