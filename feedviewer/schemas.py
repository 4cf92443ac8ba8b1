from enum import Enum
from typing import Literal, Optional
from pydantic import BaseModel, Field


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class ProductFeedItem(BaseModel):
    """
    One row of the descriptive product feed.
    Every text field falls back to an empty string when the column is absent.
    """

    sku: str = Field(..., alias="sku")
    title: str = Field(default="", alias="title")
    short_description: str = Field(default="", alias="shortDescription")
    long_description: str = Field(default="", alias="longDescription")
    images: list[str] = Field(default_factory=list, alias="images")
    category: str = Field(default="", alias="category")
    colour: str = Field(default="", alias="colour")
    category_one: str = Field(default="", alias="categoryOne")
    category_two: str = Field(default="", alias="categoryTwo")
    psin: str = Field(default="", alias="psin")

    class Config:
        # Build from snake_case dicts, export with the feed's camelCase names.
        populate_by_name = True
        frozen = True


class StockFeedItem(BaseModel):
    """One row of the numeric stock/price feed."""

    sku: str = Field(..., alias="sku")
    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    stock_status: StockStatus = Field(
        default=StockStatus.OUT_OF_STOCK, alias="stockStatus"
    )
    price: float = Field(default=0.0, ge=0, alias="price")
    wholesale_price: float = Field(default=0.0, ge=0, alias="wholesalePrice")

    class Config:
        populate_by_name = True
        frozen = True


class Product(ProductFeedItem):
    """
    The merged catalog entity: descriptive fields joined with stock fields.
    Stock fields keep their defaults when the stock feed has no row for the SKU.
    """

    stock_quantity: int = Field(default=0, ge=0, alias="stockQuantity")
    stock_status: StockStatus = Field(
        default=StockStatus.OUT_OF_STOCK, alias="stockStatus"
    )
    price: float = Field(default=0.0, ge=0, alias="price")
    wholesale_price: float = Field(default=0.0, ge=0, alias="wholesalePrice")
    has_variations: bool = Field(default=False, alias="hasVariations")
    variation_group: Optional[str] = Field(default=None, alias="variationGroup")


class DashboardStats(BaseModel):
    total_products: int = Field(default=0, ge=0, alias="totalProducts")
    in_stock: int = Field(default=0, ge=0, alias="inStock")
    low_stock: int = Field(default=0, ge=0, alias="lowStock")
    out_of_stock: int = Field(default=0, ge=0, alias="outOfStock")
    average_price: float = Field(default=0.0, alias="averagePrice")
    total_inventory_value: float = Field(default=0.0, alias="totalInventoryValue")

    class Config:
        populate_by_name = True
        frozen = True


class Facets(BaseModel):
    """Distinct values available for faceted filtering."""

    categories: list[str] = Field(default_factory=list)
    category_ones: list[str] = Field(default_factory=list, alias="categoryOnes")
    category_twos: list[str] = Field(default_factory=list, alias="categoryTwos")
    colors: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True
        frozen = True


class PriceRange(BaseModel):
    min: float = 0.0
    max: float = 10000.0

    class Config:
        frozen = True


class FilterSpec(BaseModel):
    """
    Everything the query engine needs to produce a filtered, ordered view.
    Empty category/color lists mean "no restriction".
    """

    stock_status: Literal["all", "in_stock", "low_stock", "out_of_stock"] = Field(
        default="all", alias="stockStatus"
    )
    price_range: PriceRange = Field(default_factory=PriceRange, alias="priceRange")
    price_type: Literal["retail", "wholesale"] = Field(
        default="retail", alias="priceType"
    )
    categories: list[str] = Field(default_factory=list)
    category_ones: list[str] = Field(default_factory=list, alias="categoryOnes")
    category_twos: list[str] = Field(default_factory=list, alias="categoryTwos")
    colors: list[str] = Field(default_factory=list)
    variations: Literal["all", "with_variations", "without_variations"] = "all"
    search_query: str = Field(default="", alias="searchQuery")
    sort_by: Literal["title", "price", "stock", "sku"] = Field(
        default="title", alias="sortBy"
    )
    sort_order: Literal["asc", "desc"] = Field(default="asc", alias="sortOrder")

    class Config:
        populate_by_name = True
        frozen = True


class ParseProgress(BaseModel):
    loaded: int
    total: int
    percent: float


class SyncStage(str, Enum):
    FETCHING_PRODUCTS = "fetching-products"
    PARSING_PRODUCTS = "parsing-products"
    FETCHING_STOCK = "fetching-stock"
    PARSING_STOCK = "parsing-stock"
    MERGING = "merging"
    COMPLETE = "complete"


class SyncProgress(BaseModel):
    stage: SyncStage
    percent: float = Field(..., ge=0, le=100)
    message: str


class SyncResult(BaseModel):
    products: list[Product]
    stats: DashboardStats
    product_count: int = Field(default=0, ge=0, alias="productCount")
    stock_count: int = Field(default=0, ge=0, alias="stockCount")

    class Config:
        populate_by_name = True


class DownloadProgress(BaseModel):
    current: int
    total: int
    percent: float
    current_file: Optional[str] = Field(default=None, alias="currentFile")

    class Config:
        populate_by_name = True


class PriceCalculation(BaseModel):
    markup_percent: float = Field(..., alias="markupPercent")
    ebay_fee_percent: float = Field(..., alias="ebayFeePercent")
    paypal_fee_percent: float = Field(..., alias="paypalFeePercent")
    paypal_fixed_fee: float = Field(..., alias="paypalFixedFee")
    selling_price: float = Field(..., alias="sellingPrice")
    profit: float
    roi: float

    class Config:
        populate_by_name = True
