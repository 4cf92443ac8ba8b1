"""
Header synonym tables for the two feed types.

Keys are the exact header spellings seen in merchant exports (matched
case-sensitively after trimming); values are the canonical field names on
the schema models. To support a new export, add its spelling here.
"""

PRODUCT_COLUMN_MAPPINGS: dict[str, str] = {
    "sku": "sku",
    "SKU": "sku",
    "product_sku": "sku",
    "title": "title",
    "Title": "title",
    "product_title": "title",
    "name": "title",
    "short_description": "short_description",
    "Short Description": "short_description",
    "shortDescription": "short_description",
    "long_description": "long_description",
    "Long Description": "long_description",
    "longDescription": "long_description",
    "description": "long_description",
    "Description": "long_description",
    "images": "images",
    "Images": "images",
    "image_urls": "images",
    "image": "images",
    "Image": "images",
    "Base image": "images",
    "base_image": "images",
    "category": "category",
    "Category": "category",
    "colour": "colour",
    "Colour": "colour",
    "color": "colour",
    "Color": "colour",
    "category_one": "category_one",
    "Category One": "category_one",
    "categoryOne": "category_one",
    "category_1": "category_one",
    "category_two": "category_two",
    "Category Two": "category_two",
    "categoryTwo": "category_two",
    "category_2": "category_two",
    "psin": "psin",
    "Psin": "psin",
    "PSIN": "psin",
}

STOCK_COLUMN_MAPPINGS: dict[str, str] = {
    "sku": "sku",
    "SKU": "sku",
    "product_sku": "sku",
    "stock": "stock_quantity",
    "Stock": "stock_quantity",
    "stock_quantity": "stock_quantity",
    "quantity": "stock_quantity",
    "Quantity": "stock_quantity",
    "qty": "stock_quantity",
    "stock_status": "stock_status",
    "status": "stock_status",
    "price": "price",
    "Price": "price",
    "retail_price": "price",
    "sell_price": "price",
    "wholesale_price": "wholesale_price",
    "Wholesale Price": "wholesale_price",
    "WholeSale Price": "wholesale_price",
    "wholesalePrice": "wholesale_price",
    "cost": "wholesale_price",
    "Cost": "wholesale_price",
}
