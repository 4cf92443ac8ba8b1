from feedviewer import data_handler, settings
from feedviewer.exceptions import FeedError
from feedviewer.logger import make_progress_logger, setup_logger
from feedviewer.store import ProductStore

logger = setup_logger("feedviewer")


def run_process():
    """Syncs the configured feeds, prints a summary and exports the catalog."""
    logger.info("--- Starting Catalog Feed Sync ---")
    store = ProductStore()

    try:
        store.sync(
            settings.PRODUCT_FEED_URL,
            settings.STOCK_FEED_URL,
            on_progress=make_progress_logger(logger),
        )
    except FeedError:
        logger.error("\n❌ Sync aborted. No catalog was exported.")
        return

    stats = store.stats
    logger.info("\n--- Catalog Summary ---")
    logger.info(f"Last synced: {store.last_synced_label}")
    logger.info(f"Product rows: {store.product_count:,} | Stock rows: {store.stock_count:,}")
    logger.info(f"Products: {stats.total_products:,}")
    logger.info(f"In stock: {stats.in_stock:,}")
    logger.info(f"Low stock: {stats.low_stock:,}")
    logger.info(f"Out of stock: {stats.out_of_stock:,}")
    logger.info(f"Average price: {stats.average_price:,.2f}")
    logger.info(f"Inventory value: {stats.total_inventory_value:,.2f}")
    logger.info(
        f"Facets: {len(store.facets.categories)} categories, "
        f"{len(store.facets.colors)} colors"
    )

    data_handler.export_products_to_csv(store.query())

    logger.info("\n--- Process Finished Successfully ---")


if __name__ == "__main__":
    run_process()
