"""
Sync service — fetch everything, then upsert record by record.

Run lifecycle:
    IDLE → FETCHING → UPSERTING → DONE | PARTIALLY_COMPLETED
    FETCHING → FAILED (fetch error re-raised to the caller)

A failing record is logged, recorded in SyncResult.failures and skipped;
the run keeps going. Records are processed strictly one at a time so
Notion writes stay under its request ceiling.
Version: 1.0.0
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.exceptions import ConfigurationError
from shopify_notion_sync.schemas.shopify import Order, Product
from shopify_notion_sync.schemas.sync import SyncFailure, SyncResult, SyncState, UpsertOutcome
from shopify_notion_sync.services.notion_upsert_service import NotionUpsertService, UpsertTarget
from shopify_notion_sync.services.source_base import PaginatedSource
from shopify_notion_sync.utils.notion_payload_builder import (
    build_order_properties,
    build_product_properties,
)

logger = logging.getLogger("sync_service")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncService:
    """Mirrors Shopify products and orders into Notion."""

    REQUIRED_SETTINGS = ("shopify_store_name", "shopify_access_token", "notion_api_key")

    def __init__(
        self,
        settings: Settings,
        source: PaginatedSource,
        upserter: NotionUpsertService,
        clock: Optional[Clock] = None,
    ) -> None:
        self._settings = settings
        self._source = source
        self._upserter = upserter
        self._clock = clock or utc_now
        self._progress_every = max(1, settings.sync_progress_every)

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    async def _run(
        self,
        entity: str,
        fetch: Callable[[], Awaitable[Sequence[Any]]],
        target: UpsertTarget,
        build: Callable[[Any, str], Dict[str, Any]],
        label: Callable[[Any], str],
    ) -> SyncResult:
        result = SyncResult(entity=entity, started_at=self._timestamp())

        result.state = SyncState.FETCHING
        try:
            self._settings.require(*self.REQUIRED_SETTINGS)
            records = await fetch()
        except Exception as exc:
            result.state = SyncState.FAILED
            result.finished_at = self._timestamp()
            logger.error(f"Sync failed while fetching {entity}: {exc}")
            raise

        result.total = len(records)
        result.state = SyncState.UPSERTING
        logger.info(f"Syncing {result.total} {entity} to Notion (source={self._source.name})...")

        for index, record in enumerate(records, start=1):
            try:
                properties = build(record, self._timestamp())
                outcome = await self._upserter.upsert(target, record.id, properties)
            except ConfigurationError:
                raise
            except Exception as exc:
                logger.error(f"✗ Error syncing {entity[:-1]} {label(record)}: {exc}")
                result.failures.append(
                    SyncFailure(external_id=record.id, label=label(record), error=str(exc))
                )
            else:
                if outcome is UpsertOutcome.CREATED:
                    result.created += 1
                    logger.debug(f"✓ Created: {label(record)}")
                else:
                    result.updated += 1
                    logger.debug(f"✓ Updated: {label(record)}")

            if index % self._progress_every == 0:
                logger.info(f"Progress: {index}/{result.total} {entity} processed")

        result.state = SyncState.PARTIALLY_COMPLETED if result.failures else SyncState.DONE
        result.finished_at = self._timestamp()
        logger.info(f"Sync completed: {result.summary_line()}")
        return result

    async def sync_products(self) -> SyncResult:
        store_domain = self._settings.shopify_store_domain or ""

        def build(product: Product, synced_at: str) -> Dict[str, Any]:
            return build_product_properties(product, store_domain, synced_at)

        return await self._run(
            "products",
            self._source.fetch_all_products,
            UpsertTarget.products(self._settings.products_database_id),
            build,
            lambda p: p.title or p.id,
        )

    async def sync_orders(self, since: Optional[datetime] = None) -> SyncResult:
        if since is None:
            since = self._clock() - timedelta(days=self._settings.orders_lookback_days)

        async def fetch() -> List[Order]:
            return await self._source.fetch_all_orders(since)

        return await self._run(
            "orders",
            fetch,
            UpsertTarget.orders(self._settings.orders_database_id),
            build_order_properties,
            lambda o: o.label,
        )

    async def sync_all(self) -> List[SyncResult]:
        """Products, then orders when SYNC_ORDERS is on."""
        results = [await self.sync_products()]
        if self._settings.sync_orders:
            results.append(await self.sync_orders())
        return results
