import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FILENAME = os.getenv("LOG_FILENAME", "feedviewer.log")
# Sync progress is logged once per stage and then every this many percent.
PROGRESS_LOG_STEP = 10

# --- Feed Sources ---
# Pre-configured Aosom feeds. Override per merchant in .env.
PRODUCT_FEED_URL = os.getenv(
    "PRODUCT_FEED_URL", "https://feed.aosomcdn.com/390/200_feed/0/0/51/056920.txt"
)
STOCK_FEED_URL = os.getenv(
    "STOCK_FEED_URL", "https://feed.aosomcdn.com/390/200_feed/0/0/4e/c4857d.csv"
)
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "60"))

# --- Export Configuration ---
EXPORT_FILENAME_BASE = os.getenv("EXPORT_FILENAME_BASE", "products_export")
IMAGES_FILENAME_BASE = os.getenv("IMAGES_FILENAME_BASE", "product_images")
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "false").lower() in ("1", "true", "yes")

# --- Parsing ---
# Only this many leading characters are inspected to pick the delimiter.
DELIMITER_SAMPLE_SIZE = 1000
PROGRESS_BATCH_ROWS = 1000

# --- Stock Business Logic ---
# Quantities from 1 up to this value (inclusive) count as low stock.
LOW_STOCK_THRESHOLD = 10

# --- Search ---
FUZZY_THRESHOLD = float(os.getenv("FUZZY_THRESHOLD", "0.3"))
# Direct title/SKU hits at or above this count are treated as too loose
# and the query falls back to fuzzy matching.
SEARCH_DIRECT_MATCH_LIMIT = 500

# --- Filter Defaults ---
DEFAULT_PRICE_MIN = 0.0
DEFAULT_PRICE_MAX = 10000.0

# --- Resale Price Calculator Defaults ---
DEFAULT_MARKUP_PERCENT = 30.0
DEFAULT_EBAY_FEE_PERCENT = 12.9
DEFAULT_PAYPAL_FEE_PERCENT = 2.9
DEFAULT_PAYPAL_FIXED_FEE = 0.30
