import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.constants.sync import MAX_RATE_LIMIT_ATTEMPTS, REQUEST_TIMEOUT
from shopify_notion_sync.core.exceptions import (
    ConfigurationError,
    ExternalAPIError,
    GraphQLQueryError,
    RateLimitError,
    RetriesExhaustedError,
)
from shopify_notion_sync.utils.pagination import parse_next_link
from shopify_notion_sync.utils.rate_limiter import (
    CostThrottle,
    SleepFn,
    StatusRetryPolicy,
    throttled_wait_seconds,
)

logger = logging.getLogger("shopify_client")


class ShopifyClient:
    """Admin API transport: REST calls, GraphQL calls, rate limiting."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._store_domain = settings.shopify_store_domain
        self._token = settings.shopify_access_token
        self._api_version = settings.shopify_api_version
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._retry = StatusRetryPolicy("Shopify", sleep=sleep)
        self._cost_throttle = CostThrottle(sleep=sleep)
        logger.info(
            f"ShopifyClient initialized: domain={self._store_domain} "
            f"(raw: {settings.shopify_store_name}) api={self._api_version}"
        )

    @property
    def store_domain(self) -> Optional[str]:
        return self._store_domain

    def _base_url(self) -> str:
        if not self._store_domain or not self._token:
            raise ConfigurationError("Shopify env vars missing: SHOPIFY_STORE_NAME, SHOPIFY_ACCESS_TOKEN")
        return f"https://{self._store_domain}/admin/api/{self._api_version}"

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Shopify-Access-Token": self._token or "",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send one request with 429 retry. `url` may be a path under the
        versioned admin base or a full URL (Link-header pagination).
        """
        if not url.startswith("http"):
            url = f"{self._base_url()}{url}"
        else:
            self._base_url()
        logger.info("shopify request method=%s url=%s params=%s", method, url, params)

        try:
            async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT, transport=self._transport) as client:
                resp = await self._retry.send(
                    lambda: client.request(method=method, url=url, headers=self._headers(), json=json, params=params)
                )
        except httpx.RequestError as exc:
            logger.error("shopify network error url=%s error=%s", url, exc)
            raise ExternalAPIError("Shopify", str(exc)) from exc

        logger.info("shopify response status=%s url=%s", resp.status_code, url)
        if resp.status_code >= 400:
            raise ExternalAPIError("Shopify", resp.text, status_code=resp.status_code)
        return resp

    async def call_shopify(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        resp = await self.request(method, path, json=json, params=params)
        if resp.text:
            return resp.json()
        return {}

    async def get_page(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, Any], Optional[str]]:
        """GET one REST page. Returns (body, next page URL or None)."""
        resp = await self.request("GET", url, params=params)
        body = resp.json() if resp.text else {}
        return body, parse_next_link(resp.headers.get("Link"))

    async def call_shopify_graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Run a GraphQL query and apply cost-based throttling.

        A THROTTLED rejection is retried after the wait derived from the
        response's throttle status, up to MAX_RATE_LIMIT_ATTEMPTS attempts.

        Raises:
            GraphQLQueryError: response carried non-throttle errors
            RetriesExhaustedError: every attempt was throttled
        """
        payload = {"query": query, "variables": variables or {}}
        waited = 0.0
        for attempt in range(1, MAX_RATE_LIMIT_ATTEMPTS + 1):
            data = await self.call_shopify("POST", "/graphql.json", json=payload)
            try:
                _raise_for_graphql_errors(data)
            except RateLimitError as exc:
                if attempt >= MAX_RATE_LIMIT_ATTEMPTS:
                    break
                waited += exc.retry_after
                logger.warning(
                    f"Shopify GraphQL throttled (attempt {attempt}/{MAX_RATE_LIMIT_ATTEMPTS}). "
                    f"Waiting {exc.retry_after:.1f} seconds..."
                )
                await self._sleep(exc.retry_after)
                continue

            await self._cost_throttle.observe(data.get("extensions"))
            return data

        logger.error(
            f"Shopify GraphQL throttled on all {MAX_RATE_LIMIT_ATTEMPTS} attempts (waited {waited:.1f}s)"
        )
        raise RetriesExhaustedError("Shopify", MAX_RATE_LIMIT_ATTEMPTS, waited=waited)


def _raise_for_graphql_errors(data: Dict[str, Any]) -> None:
    """RateLimitError when every error is THROTTLED, GraphQLQueryError otherwise."""
    errors = data.get("errors")
    if not errors:
        return
    codes = {
        (e.get("extensions") or {}).get("code")
        for e in errors if isinstance(e, dict)
    }
    if codes == {"THROTTLED"}:
        raise RateLimitError("Shopify", retry_after=throttled_wait_seconds(data.get("extensions")))
    logger.error("shopify graphql errors=%s", errors)
    raise GraphQLQueryError(errors)
