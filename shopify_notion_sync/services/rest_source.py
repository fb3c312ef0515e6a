"""
REST source — Link-header paginated product and order fetch.

Pages are requested with limit=250 and followed through the
`Link: <...>; rel="next"` header, with a fixed pause between pages.
Products are enriched with per-location inventory looked up in batches
of 50 inventory item ids.
Version: 1.0.0
"""
import asyncio
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from shopify_notion_sync.clients.shopify_client import ShopifyClient
from shopify_notion_sync.core.constants.sync import INVENTORY_BATCH_SIZE, SHOPIFY_PAGE_SIZE
from shopify_notion_sync.schemas.shopify import Order, Product
from shopify_notion_sync.services.source_base import PaginatedSource
from shopify_notion_sync.utils.pagination import Page, chunked, collect_pages
from shopify_notion_sync.utils.rate_limiter import SleepFn
from shopify_notion_sync.utils.shopify_normalize import order_from_rest, product_from_rest
from shopify_notion_sync.utils.type_converters import to_int

logger = logging.getLogger("rest_source")


class RestSource(PaginatedSource):
    """Admin REST fetcher."""

    name = "rest"

    def __init__(
        self,
        client: ShopifyClient,
        page_delay_s: float = 0.5,
        page_size: int = SHOPIFY_PAGE_SIZE,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._client = client
        self._page_delay_s = page_delay_s
        self._page_size = page_size
        self._sleep = sleep or asyncio.sleep

    async def _pause(self) -> None:
        if self._page_delay_s > 0:
            await self._sleep(self._page_delay_s)

    async def _fetch_resource(
        self,
        path: str,
        params: Dict[str, Any],
        key: str,
        parse: Callable[[Dict[str, Any]], Any],
    ) -> List[Any]:
        async def fetch_page(next_url: Optional[str]) -> Page:
            # page_info URLs already carry every query parameter
            if next_url:
                body, following = await self._client.get_page(next_url)
            else:
                body, following = await self._client.get_page(path, params=params)
            await self._pause()
            return Page(
                items=[parse(raw) for raw in body.get(key) or []],
                has_next=following is not None,
                next_token=following,
            )

        return await collect_pages(fetch_page, label=key)

    async def fetch_all_products(self) -> List[Product]:
        logger.info("Fetching products from Shopify...")
        products = await self._fetch_resource(
            "/products.json", {"limit": self._page_size}, "products", product_from_rest
        )
        logger.info(f"Fetched {len(products)} products in total")
        await self._attach_inventory(products)
        return products

    async def fetch_all_orders(self, since: datetime) -> List[Order]:
        logger.info("Fetching recent orders from Shopify...")
        params = {
            "limit": self._page_size,
            "status": "any",
            "created_at_min": since.isoformat(),
        }
        orders = await self._fetch_resource("/orders.json", params, "orders", order_from_rest)
        logger.info(f"Fetched {len(orders)} orders in total")
        return orders

    async def fetch_inventory_levels(self, inventory_item_ids: List[str]) -> Dict[str, List[int]]:
        """
        Available quantity per location for each inventory item.

        Returns:
            {inventory_item_id: [available at location 1, ...]}
        """
        levels: Dict[str, List[int]] = defaultdict(list)
        for batch in chunked(inventory_item_ids, INVENTORY_BATCH_SIZE):
            data = await self._client.call_shopify(
                "GET", "/inventory_levels.json", params={"inventory_item_ids": ",".join(batch)}
            )
            for level in data.get("inventory_levels") or []:
                item_id = str(level.get("inventory_item_id"))
                levels[item_id].append(to_int(level.get("available")) or 0)
            await self._pause()
        return dict(levels)

    async def _attach_inventory(self, products: List[Product]) -> None:
        item_ids = [
            v.inventory_item_id
            for p in products
            for v in p.variants
            if v.inventory_item_id
        ]
        if not item_ids:
            return
        levels = await self.fetch_inventory_levels(list(dict.fromkeys(item_ids)))
        for product in products:
            for variant in product.variants:
                if variant.inventory_item_id in levels:
                    variant.inventory_levels = levels[variant.inventory_item_id]
