import logging
import threading
from datetime import datetime
from typing import Optional

from .exceptions import SyncInProgressError
from .pipelines.sync import FeedSyncPipeline
from .query import filter_products
from .schemas import DashboardStats, Facets, FilterSpec, Product, SyncResult
from .stats import get_unique_categories
from .utils import format_time_ago

logger = logging.getLogger(__name__)


class ProductStore:
    """
    Holds the current generation of merged products for one session.

    A generation (products, stats, facets, counts) is only ever replaced
    as a whole by commit(). While a sync is running, readers keep seeing
    the previous generation. At most one sync runs at a time.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._is_syncing = False
        self.reset()

    def reset(self):
        self.products: list[Product] = []
        self.stats = DashboardStats()
        self.facets = Facets()
        self.product_count = 0
        self.stock_count = 0
        self.error: Optional[str] = None
        self.last_synced_at: Optional[datetime] = None

    @property
    def last_synced_label(self) -> str:
        """Age of the current generation, e.g. '5 min ago' or 'Never'."""
        return format_time_ago(self.last_synced_at)

    @property
    def is_syncing(self) -> bool:
        return self._is_syncing

    def begin_sync(self):
        with self._lock:
            if self._is_syncing:
                raise SyncInProgressError("A feed sync is already running.")
            self._is_syncing = True
            self.error = None

    def end_sync(self):
        with self._lock:
            self._is_syncing = False

    def commit(self, result: SyncResult):
        """Swaps in a complete new generation."""
        facets = get_unique_categories(result.products)
        with self._lock:
            self.products = list(result.products)
            self.stats = result.stats
            self.facets = facets
            self.product_count = result.product_count
            self.stock_count = result.stock_count
            self.last_synced_at = datetime.now()
            self.error = None
        logger.info(f"✅ Product store updated: {len(result.products):,} products.")

    def fail(self, exc: Exception):
        """Records a failed sync. The previous generation stays in place."""
        self.error = str(exc) or exc.__class__.__name__
        logger.error(f"❌ Sync failed: {self.error}")

    def sync(self, product_url: str, stock_url: str, on_progress=None, fetcher=None) -> SyncResult:
        """Runs a full feed sync and commits the result on success."""
        self.begin_sync()
        try:
            return FeedSyncPipeline(
                product_url, stock_url, on_progress=on_progress, fetcher=fetcher, store=self
            ).run()
        except Exception as e:
            self.fail(e)
            raise
        finally:
            self.end_sync()

    def query(self, spec: Optional[FilterSpec] = None) -> list[Product]:
        """Filtered, ordered view over the current generation."""
        return filter_products(self.products, spec)
