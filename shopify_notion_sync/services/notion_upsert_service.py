"""
Notion upsert service — idempotent create-or-update keyed by Shopify id.

Every record is looked up in the target database by its external id
property. A hit is updated in place (full property overwrite); a miss
creates one new page under the database. Running the same input twice
therefore never creates duplicates.
Version: 1.0.0
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from shopify_notion_sync.clients.notion_client import NotionClient
from shopify_notion_sync.core.constants.notion import ORDER_ID, PRODUCT_ID
from shopify_notion_sync.schemas.sync import UpsertOutcome
from shopify_notion_sync.utils.rate_limiter import WriteThrottle

logger = logging.getLogger("notion_upsert_service")

KeyType = Literal["rich_text", "title"]


@dataclass(frozen=True)
class UpsertTarget:
    """A Notion database and the property holding the external id."""
    database_id: str
    key_property: str
    key_type: KeyType

    @classmethod
    def products(cls, database_id: str) -> "UpsertTarget":
        return cls(database_id, PRODUCT_ID, "rich_text")

    @classmethod
    def orders(cls, database_id: str) -> "UpsertTarget":
        return cls(database_id, ORDER_ID, "title")

    def key_filter(self, external_id: str) -> Dict[str, Any]:
        return {"property": self.key_property, self.key_type: {"equals": external_id}}


class NotionUpsertService:
    """Resolves create vs update for each record."""

    def __init__(self, client: NotionClient, throttle: Optional[WriteThrottle] = None) -> None:
        self._client = client
        self._throttle = throttle or WriteThrottle()

    async def find_existing(self, target: UpsertTarget, external_id: str) -> Optional[Dict[str, Any]]:
        """First page whose key property equals external_id, or None."""
        data = await self._client.query_database(target.database_id, filter=target.key_filter(external_id))
        results = data.get("results") or []
        if len(results) > 1:
            logger.warning(
                "notion duplicate key property=%s value=%s matches=%s; updating first",
                target.key_property, external_id, len(results),
            )
        return results[0] if results else None

    async def upsert(self, target: UpsertTarget, external_id: str, properties: Dict[str, Any]) -> UpsertOutcome:
        """
        Create or update the page for external_id.

        Lookup and write errors propagate; the caller decides whether the
        run continues.
        """
        existing = await self.find_existing(target, external_id)
        if existing:
            await self._client.update_page(existing["id"], properties)
            outcome = UpsertOutcome.UPDATED
        else:
            await self._client.create_page(target.database_id, properties)
            outcome = UpsertOutcome.CREATED
        logger.debug("notion upsert key=%s outcome=%s", external_id, outcome.value)
        await self._throttle.wait()
        return outcome
