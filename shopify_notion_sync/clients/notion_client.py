import logging
from typing import Any, Dict, Optional

import httpx

from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.constants.notion import NOTION_API_BASE_URL
from shopify_notion_sync.core.constants.sync import REQUEST_TIMEOUT
from shopify_notion_sync.core.exceptions import ConfigurationError, ExternalAPIError
from shopify_notion_sync.utils.rate_limiter import SleepFn, StatusRetryPolicy

logger = logging.getLogger("notion_client")


class NotionClient:
    """Thin wrapper over the Notion REST API v1 (databases + pages)."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
        base_url: str = NOTION_API_BASE_URL,
    ) -> None:
        self._api_key = settings.notion_api_key
        self._version = settings.notion_version
        self._base = base_url.rstrip("/")
        self._transport = transport
        self._retry = StatusRetryPolicy("Notion", sleep=sleep)

    def _headers(self) -> Dict[str, str]:
        if not self._api_key:
            raise ConfigurationError("Notion env vars missing: NOTION_API_KEY")
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Notion-Version": self._version,
            "Content-Type": "application/json",
        }

    async def _call_notion(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base}{path}"
        headers = self._headers()
        logger.debug("notion request method=%s path=%s", method, path)

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
                resp = await self._retry.send(
                    lambda: client.request(method=method, url=url, headers=headers, json=json)
                )
        except httpx.RequestError as exc:
            logger.error("notion network error path=%s error=%s", path, exc)
            raise ExternalAPIError("Notion", str(exc)) from exc

        if resp.status_code >= 400:
            logger.error("notion response status=%s path=%s body=%s", resp.status_code, path, resp.text)
            raise ExternalAPIError("Notion", resp.text, status_code=resp.status_code)

        if resp.text:
            return resp.json()
        return {}

    async def query_database(
        self,
        database_id: str,
        filter: Optional[Dict[str, Any]] = None,
        page_size: Optional[int] = None,
        start_cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if filter:
            body["filter"] = filter
        if page_size:
            body["page_size"] = page_size
        if start_cursor:
            body["start_cursor"] = start_cursor
        return await self._call_notion("POST", f"/databases/{database_id}/query", json=body)

    async def create_page(self, database_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        payload = {"parent": {"database_id": database_id}, "properties": properties}
        return await self._call_notion("POST", "/pages", json=payload)

    async def update_page(self, page_id: str, properties: Dict[str, Any]) -> Dict[str, Any]:
        return await self._call_notion("PATCH", f"/pages/{page_id}", json={"properties": properties})
