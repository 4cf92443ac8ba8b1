import logging
from typing import TYPE_CHECKING, Callable, Optional

from feedviewer import data_handler, parsers
from feedviewer.merger import merge_feeds
from feedviewer.pipeline import DataPipeline
from feedviewer.schemas import (
    ParseProgress,
    ProductFeedItem,
    StockFeedItem,
    SyncProgress,
    SyncResult,
    SyncStage,
)
from feedviewer.stats import calculate_stats

if TYPE_CHECKING:
    from feedviewer.store import ProductStore

logger = logging.getLogger(__name__)

SyncCallback = Callable[[SyncProgress], None]
Fetcher = Callable[[str], str]


class FeedSyncPipeline(DataPipeline):
    """
    Fetches and parses both feeds, merges them and computes stats.

    Progress bands (overall percent):
        product fetch 0, product parse 20-40,
        stock fetch 40, stock parse 60-80,
        merge 80, complete 100.

    Nothing reaches the store unless every step succeeds.
    """

    def __init__(
        self,
        product_url: str,
        stock_url: str,
        on_progress: Optional[SyncCallback] = None,
        fetcher: Optional[Fetcher] = None,
        store: Optional["ProductStore"] = None,
    ):
        super().__init__("feed sync")
        self.on_progress = on_progress
        self.fetcher = fetcher
        self.store = store
        self._last_percent = 0.0

        # Feed registry, processed in order.
        self.FEED_REGISTRY = [
            {
                "name": "product feed",
                "short_name": "products",
                "url": product_url,
                "parser_func": parsers.parse_product_feed,
                "fetch_stage": SyncStage.FETCHING_PRODUCTS,
                "parse_stage": SyncStage.PARSING_PRODUCTS,
                "band": (0, 20, 40),
            },
            {
                "name": "stock feed",
                "short_name": "stock",
                "url": stock_url,
                "parser_func": parsers.parse_stock_feed,
                "fetch_stage": SyncStage.FETCHING_STOCK,
                "parse_stage": SyncStage.PARSING_STOCK,
                "band": (40, 60, 80),
            },
        ]

    def _report(self, stage: SyncStage, percent: float, message: str):
        # Overall percent never moves backwards.
        percent = max(self._last_percent, min(percent, 100.0))
        self._last_percent = percent
        if self.on_progress:
            self.on_progress(SyncProgress(stage=stage, percent=percent, message=message))

    def _fetch(self, feed: dict) -> str:
        if self.fetcher is not None:
            return self.fetcher(feed["url"])
        return data_handler.fetch_feed_text(feed["url"], label=feed["name"])

    def _parse(self, feed: dict, content: str) -> list:
        _, parse_start, parse_end = feed["band"]
        width = parse_end - parse_start

        def scaled(progress: ParseProgress):
            self._report(
                feed["parse_stage"],
                parse_start + progress.percent * width / 100,
                f"Parsing {feed['short_name']}: {round(progress.percent)}%",
            )

        return feed["parser_func"](content, scaled)

    def extract(self) -> tuple[list[ProductFeedItem], list[StockFeedItem]]:
        parsed = []
        for feed in self.FEED_REGISTRY:
            fetch_percent, parse_start, _ = feed["band"]
            logger.info(f"\n-- Processing Source: {feed['name']} --")

            self._report(feed["fetch_stage"], fetch_percent, f"Fetching {feed['name']}...")
            content = self._fetch(feed)

            self._report(feed["parse_stage"], parse_start, f"Parsing {feed['name']}...")
            records = self._parse(feed, content)
            logger.info(f"  > {len(records):,} records in {feed['name']}")
            parsed.append(records)

        product_feed, stock_feed = parsed
        return product_feed, stock_feed

    def transform(
        self, raw_data: tuple[list[ProductFeedItem], list[StockFeedItem]]
    ) -> SyncResult:
        product_feed, stock_feed = raw_data

        self._report(SyncStage.MERGING, 80, "Merging product and stock data...")
        products = merge_feeds(product_feed, stock_feed)
        stats = calculate_stats(products)

        self._report(SyncStage.COMPLETE, 100, "Sync complete!")
        logger.info(
            f"📊 {stats.total_products:,} products | in stock {stats.in_stock:,} | "
            f"low {stats.low_stock:,} | out {stats.out_of_stock:,}"
        )

        return SyncResult(
            products=products,
            stats=stats,
            product_count=len(product_feed),
            stock_count=len(stock_feed),
        )

    def load(self, result: SyncResult):
        if self.store is not None:
            self.store.commit(result)


def sync_feeds(
    product_url: str,
    stock_url: str,
    on_progress: Optional[SyncCallback] = None,
    fetcher: Optional[Fetcher] = None,
) -> SyncResult:
    """Runs a full sync and returns the result without committing it anywhere."""
    return FeedSyncPipeline(product_url, stock_url, on_progress, fetcher).run()
