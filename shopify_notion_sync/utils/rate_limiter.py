"""
Rate limiting for the Shopify and Notion APIs.

Two independent strategies, chosen by API style:

- Cost-based (Shopify GraphQL): every response reports the points still
  available in the bucket and the restore rate. When the bucket drops
  below COST_FLOOR_POINTS we sleep long enough for it to refill:

      wait_ms = max(MIN_THROTTLE_DELAY_MS, (floor - available) / restoreRate * 1000)

  A THROTTLED rejection is retried by ShopifyClient after
  throttled_wait_seconds(), at most MAX_RATE_LIMIT_ATTEMPTS times.

- Status-based (Shopify REST, Notion): on HTTP 429 honour Retry-After
  (seconds, default 2) and resend, at most MAX_RATE_LIMIT_ATTEMPTS times.

Notion writes additionally go through WriteThrottle, a fixed pause after
each create/update (Notion allows ~3 requests/second).

Usage:
    throttle = CostThrottle()
    await throttle.observe(response_json.get("extensions"))

    policy = StatusRetryPolicy("Shopify")
    resp = await policy.send(lambda: client.request("GET", url))
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from shopify_notion_sync.core.constants.sync import (
    COST_FLOOR_POINTS,
    DEFAULT_RETRY_AFTER_SECONDS,
    MAX_RATE_LIMIT_ATTEMPTS,
    MIN_THROTTLE_DELAY_MS,
)
from shopify_notion_sync.core.exceptions import RetriesExhaustedError

logger = logging.getLogger("rate_limiter")

SleepFn = Callable[[float], Awaitable[None]]


def compute_cost_wait_ms(
    available: float,
    restore_rate: float,
    floor: int = COST_FLOOR_POINTS,
    min_delay_ms: int = MIN_THROTTLE_DELAY_MS,
) -> float:
    """
    Milliseconds to wait before the next GraphQL call.

    Returns 0 while the bucket is at or above the floor. A missing or
    non-positive restore rate falls back to the minimum delay.
    """
    if available >= floor:
        return 0.0
    if not restore_rate or restore_rate <= 0:
        return float(min_delay_ms)
    return max(float(min_delay_ms), (floor - available) / restore_rate * 1000)


def parse_retry_after(value: Optional[str], default: float = DEFAULT_RETRY_AFTER_SECONDS) -> float:
    """Parse a Retry-After header given in seconds."""
    if value is None or value == "":
        return default
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return default
    return seconds if seconds >= 0 else default


def throttled_wait_seconds(
    extensions: Optional[Dict[str, Any]],
    default: float = DEFAULT_RETRY_AFTER_SECONDS,
    floor: int = COST_FLOOR_POINTS,
    min_delay_ms: int = MIN_THROTTLE_DELAY_MS,
) -> float:
    """
    Seconds to wait after a THROTTLED GraphQL response.

    Refills the bucket up to the floor, or up to the requested query cost
    when that is higher. Falls back to `default` when the response carries
    no throttle status.
    """
    cost = (extensions or {}).get("cost") or {}
    throttle_status = cost.get("throttleStatus") or {}
    available = throttle_status.get("currentlyAvailable")
    if available is None:
        return default

    target = max(floor, float(cost.get("requestedQueryCost") or 0))
    wait_ms = compute_cost_wait_ms(
        float(available), float(throttle_status.get("restoreRate") or 0), int(target), min_delay_ms
    )
    return wait_ms / 1000 if wait_ms > 0 else default


class CostThrottle:
    """Sleeps when the GraphQL cost bucket runs low."""

    def __init__(
        self,
        floor: int = COST_FLOOR_POINTS,
        min_delay_ms: int = MIN_THROTTLE_DELAY_MS,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self._floor = floor
        self._min_delay_ms = min_delay_ms
        self._sleep = sleep or asyncio.sleep

    async def observe(self, extensions: Optional[Dict[str, Any]]) -> float:
        """
        Inspect response extensions and pause if needed.

        Returns:
            The wait applied, in milliseconds (0 if none)
        """
        cost = (extensions or {}).get("cost")
        if not cost:
            return 0.0

        throttle_status = cost.get("throttleStatus") or {}
        available = throttle_status.get("currentlyAvailable")
        restore_rate = throttle_status.get("restoreRate")
        logger.info(
            "shopify query cost=%s available=%s restore_rate=%s",
            cost.get("actualQueryCost"), available, restore_rate,
        )
        if available is None:
            return 0.0

        wait_ms = compute_cost_wait_ms(
            float(available), float(restore_rate or 0), self._floor, self._min_delay_ms
        )
        if wait_ms > 0:
            logger.info(f"Rate limit approaching, waiting {wait_ms:.0f}ms...")
            await self._sleep(wait_ms / 1000)
        return wait_ms


class StatusRetryPolicy:
    """
    Bounded retry loop for HTTP 429 responses.

    The delay spent is tracked per send() call and reported on the log
    line and on RetriesExhaustedError; never recurses.
    """

    def __init__(
        self,
        service: str,
        max_attempts: int = MAX_RATE_LIMIT_ATTEMPTS,
        default_retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
        sleep: Optional[SleepFn] = None,
    ) -> None:
        self.service = service
        self.max_attempts = max_attempts
        self.default_retry_after = default_retry_after
        self._sleep = sleep or asyncio.sleep

    async def send(self, send_once: Callable[[], Awaitable[httpx.Response]]) -> httpx.Response:
        """
        Call send_once until it returns a non-429 response.

        Raises:
            RetriesExhaustedError: every attempt was rate limited
        """
        total_delay = 0.0
        for attempt in range(1, self.max_attempts + 1):
            resp = await send_once()
            if resp.status_code != 429:
                return resp

            retry_after = parse_retry_after(resp.headers.get("Retry-After"), self.default_retry_after)
            if attempt >= self.max_attempts:
                break
            total_delay += retry_after
            logger.warning(
                f"{self.service} rate limited (attempt {attempt}/{self.max_attempts}). "
                f"Waiting {retry_after} seconds..."
            )
            await self._sleep(retry_after)

        logger.error(
            f"{self.service} rate limit retries exhausted after {self.max_attempts} attempts "
            f"(waited {total_delay:.1f}s)"
        )
        raise RetriesExhaustedError(self.service, self.max_attempts, waited=total_delay)


class WriteThrottle:
    """Fixed pause after each write to the target workspace."""

    def __init__(self, delay_s: float = 0.35, sleep: Optional[SleepFn] = None) -> None:
        self.delay_s = delay_s
        self._sleep = sleep or asyncio.sleep

    async def wait(self) -> None:
        if self.delay_s > 0:
            await self._sleep(self.delay_s)
