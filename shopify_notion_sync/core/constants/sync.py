"""
Sync constants — pagination sizes, throttle thresholds, retry limits.
Version: 1.0.0
"""

# Shopify pagination
SHOPIFY_PAGE_SIZE: int = 250       # REST limit per page
INVENTORY_BATCH_SIZE: int = 50  # inventory_item_ids per /inventory_levels.json call

# GraphQL page sizes. Nested connections multiply the requested cost, and
# Shopify rejects any single query requesting more than MAX_QUERY_COST.
MAX_QUERY_COST: int = 1000
GRAPHQL_PRODUCTS_PAGE_SIZE: int = 5
VARIANTS_PER_PRODUCT: int = 15
INVENTORY_LEVELS_PER_VARIANT: int = 2
COLLECTIONS_PER_PRODUCT: int = 5
GRAPHQL_ORDERS_PAGE_SIZE: int = 10
LINE_ITEMS_PER_ORDER: int = 20

# Cost-based throttling (GraphQL)
# Shopify bucket: 1000 points max, restore rate ~50 points/second
COST_FLOOR_POINTS: int = 500       # Pause when available points drop below this
MIN_THROTTLE_DELAY_MS: int = 100

# Status-based retry (HTTP 429)
MAX_RATE_LIMIT_ATTEMPTS: int = 3
DEFAULT_RETRY_AFTER_SECONDS: float = 2.0

# HTTP
REQUEST_TIMEOUT: float = 30.0

# Progress log cadence
DEFAULT_PROGRESS_EVERY: int = 10
