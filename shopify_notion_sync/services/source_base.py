"""
Source base — capability interface shared by the GraphQL and REST fetchers.
Version: 1.0.0
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from shopify_notion_sync.schemas.shopify import Order, Product


class PaginatedSource(ABC):
    """Fetches complete product and order lists from the storefront."""

    name: str = "base"

    @abstractmethod
    async def fetch_all_products(self) -> List[Product]:
        """Every product, in source order."""

    @abstractmethod
    async def fetch_all_orders(self, since: datetime) -> List[Order]:
        """Every order (any status) created at or after `since`."""
