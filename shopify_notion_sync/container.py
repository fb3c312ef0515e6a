"""
Lazy DI container — builds and caches clients, sources and services.

Everything is constructed on first access from one Settings object, so
entry points (CLI, Celery tasks) decide configuration and tests can pass
an httpx transport and a no-op sleep to run without network or delays.
Version: 1.0.0
"""

from functools import cached_property, lru_cache
from typing import Optional

import httpx

from shopify_notion_sync.clients.notion_client import NotionClient
from shopify_notion_sync.clients.shopify_client import ShopifyClient
from shopify_notion_sync.core.config import Settings, get_settings
from shopify_notion_sync.services.analytics_service import AnalyticsService
from shopify_notion_sync.services.graphql_source import GraphQLSource
from shopify_notion_sync.services.notion_upsert_service import NotionUpsertService
from shopify_notion_sync.services.rest_source import RestSource
from shopify_notion_sync.services.search_service import SearchService
from shopify_notion_sync.services.source_base import PaginatedSource
from shopify_notion_sync.services.sync_service import SyncService
from shopify_notion_sync.utils.rate_limiter import SleepFn, WriteThrottle


class Container:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.settings = settings
        self._transport = transport
        self._sleep = sleep

    # -- Clients -----------------------------------------------------------

    @cached_property
    def shopify_client(self) -> ShopifyClient:
        return ShopifyClient(self.settings, transport=self._transport, sleep=self._sleep)

    @cached_property
    def notion_client(self) -> NotionClient:
        return NotionClient(self.settings, transport=self._transport, sleep=self._sleep)

    # -- Sources -----------------------------------------------------------

    @cached_property
    def graphql_source(self) -> GraphQLSource:
        return GraphQLSource(self.shopify_client)

    @cached_property
    def rest_source(self) -> RestSource:
        return RestSource(
            self.shopify_client,
            page_delay_s=self.settings.shopify_page_delay_ms / 1000,
            sleep=self._sleep,
        )

    def source(self, mode: Optional[str] = None) -> PaginatedSource:
        """Source for `mode`, defaulting to SYNC_SOURCE_MODE."""
        mode = (mode or self.settings.sync_source_mode).lower()
        if mode == "rest":
            return self.rest_source
        if mode == "graphql":
            return self.graphql_source
        raise ValueError(f"Unknown source mode: {mode}")

    # -- Services ----------------------------------------------------------

    @cached_property
    def upsert_service(self) -> NotionUpsertService:
        throttle = WriteThrottle(self.settings.notion_write_delay_ms / 1000, sleep=self._sleep)
        return NotionUpsertService(self.notion_client, throttle)

    def sync_service(self, mode: Optional[str] = None) -> SyncService:
        return SyncService(self.settings, self.source(mode), self.upsert_service)

    @cached_property
    def search_service(self) -> SearchService:
        return SearchService(self.settings, self.shopify_client, self.notion_client)

    def analytics_service(self, mode: Optional[str] = None) -> AnalyticsService:
        return AnalyticsService(self.settings, self.source(mode), self.notion_client)


@lru_cache(maxsize=1)
def get_container() -> Container:
    """Process-wide container for Celery workers."""
    return Container(get_settings())
