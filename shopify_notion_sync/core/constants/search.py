"""
Search constants — result caps and match-field priority.
Version: 1.0.0
"""
import re

SHOPIFY_SEARCH_LIMIT: int = 50
SHOPIFY_SEARCH_VARIANTS: int = 5
NOTION_SEARCH_PAGE_SIZE: int = 100
COLLECTION_PRODUCTS_LIMIT: int = 250
# Fetched in pages so each query stays under the GraphQL cost cap
COLLECTION_PAGE_SIZE: int = 125

# First match wins, in this order
MATCH_PRIORITY: tuple[str, ...] = ("title", "vendor", "type", "tags", "sku")
MATCH_UNKNOWN: str = "unknown"
MATCH_NOTION: str = "notion_search"

# Lowercase alphanumerics and hyphens only, e.g. "summer-sale"
COLLECTION_HANDLE_PATTERN = re.compile(r"^[a-z0-9-]+$")

SOURCE_SHOPIFY: str = "Shopify"
SOURCE_NOTION: str = "Notion"
SOURCE_COLLECTION: str = "Shopify Collection"
