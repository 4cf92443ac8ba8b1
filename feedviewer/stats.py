"""
Summary metrics and facet values over any product set.

Both are recomputed from scratch on every call: the input is usually a
freshly filtered view, so there is nothing to maintain incrementally.
"""

from .schemas import DashboardStats, Facets, Product, StockStatus
from .utils import round_half_up


def calculate_stats(products: list[Product]) -> DashboardStats:
    """
    Computes dashboard metrics in a single pass.
    - average_price: mean of retail prices above zero (0 if none)
    - total_inventory_value: sum of wholesale price x stock quantity
    """
    counts = {status: 0 for status in StockStatus}
    price_total = 0.0
    priced_count = 0
    inventory_value = 0.0

    for product in products:
        counts[product.stock_status] += 1
        if product.price > 0:
            price_total += product.price
            priced_count += 1
        inventory_value += product.wholesale_price * product.stock_quantity

    average_price = price_total / priced_count if priced_count else 0.0

    return DashboardStats(
        total_products=len(products),
        in_stock=counts[StockStatus.IN_STOCK],
        low_stock=counts[StockStatus.LOW_STOCK],
        out_of_stock=counts[StockStatus.OUT_OF_STOCK],
        average_price=round_half_up(average_price),
        total_inventory_value=round_half_up(inventory_value),
    )


def get_unique_categories(products: list[Product]) -> Facets:
    """Sorted, de-duplicated facet values. Colors are trimmed and lower-cased."""
    categories = set()
    category_ones = set()
    category_twos = set()
    colors = set()

    for product in products:
        if product.category:
            categories.add(product.category)
        if product.category_one:
            category_ones.add(product.category_one)
        if product.category_two:
            category_twos.add(product.category_two)
        color = product.colour.strip().lower()
        if color:
            colors.add(color)

    return Facets(
        categories=sorted(categories),
        category_ones=sorted(category_ones),
        category_twos=sorted(category_twos),
        colors=sorted(colors),
    )
