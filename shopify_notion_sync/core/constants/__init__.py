"""
Constants package — re-exports from domain-specific modules.

Usage:
    from shopify_notion_sync.core.constants.sync import COST_FLOOR_POINTS
    # or import the modules:
    from shopify_notion_sync.core.constants import notion, search, sync
Version: 1.0.0
"""

from shopify_notion_sync.core.constants import analytics, notion, search, sync
from shopify_notion_sync.core.constants.sync import (
    SHOPIFY_PAGE_SIZE,
    INVENTORY_BATCH_SIZE,
    COST_FLOOR_POINTS,
    MIN_THROTTLE_DELAY_MS,
    MAX_RATE_LIMIT_ATTEMPTS,
    DEFAULT_RETRY_AFTER_SECONDS,
    REQUEST_TIMEOUT,
)
from shopify_notion_sync.core.constants.notion import (
    MAX_RICH_TEXT_LENGTH,
    MAX_SELECT_LENGTH,
    MAX_MULTI_SELECT_OPTIONS,
)
from shopify_notion_sync.core.constants.search import (
    SHOPIFY_SEARCH_LIMIT,
    NOTION_SEARCH_PAGE_SIZE,
    COLLECTION_PRODUCTS_LIMIT,
    MATCH_PRIORITY,
)

__all__ = [
    "analytics",
    "notion",
    "search",
    "sync",
    "SHOPIFY_PAGE_SIZE",
    "INVENTORY_BATCH_SIZE",
    "COST_FLOOR_POINTS",
    "MIN_THROTTLE_DELAY_MS",
    "MAX_RATE_LIMIT_ATTEMPTS",
    "DEFAULT_RETRY_AFTER_SECONDS",
    "REQUEST_TIMEOUT",
    "MAX_RICH_TEXT_LENGTH",
    "MAX_SELECT_LENGTH",
    "MAX_MULTI_SELECT_OPTIONS",
    "SHOPIFY_SEARCH_LIMIT",
    "NOTION_SEARCH_PAGE_SIZE",
    "COLLECTION_PRODUCTS_LIMIT",
    "MATCH_PRIORITY",
]
