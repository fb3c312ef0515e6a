"""
Base task class — lifecycle logging and the async bridge for sync tasks.

Provides:
- Success/failure/retry logging that says whether a failure is worth retrying
- Backoff defaults (each task declares its own autoretry_for)
- run_async() to drive the async services from a prefork worker
Version: 1.0.0
"""
import asyncio
import logging
from typing import Any, Awaitable, TypeVar

from celery import Task

from shopify_notion_sync.core.exceptions import ConfigurationError, NonRetryableError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseTask(Task):
    """Shared behaviour for the Shopify → Notion tasks."""

    abstract = True

    # No autoretry_for here: a ConfigurationError must fail the run at once.
    retry_backoff = True
    retry_backoff_max = 300  # seconds
    retry_jitter = True
    max_retries = 3

    track_started = True

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        if isinstance(exc, ConfigurationError):
            logger.error(f"Task {self.name}[{task_id}] misconfigured, not retrying: {exc}")
        elif isinstance(exc, NonRetryableError):
            logger.error(f"Task {self.name}[{task_id}] failed permanently: {exc}")
        else:
            logger.error(
                f"Task {self.name}[{task_id}] failed after {self.request.retries} retries: {exc}"
            )

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        logger.warning(
            f"Task {self.name}[{task_id}] retry {self.request.retries + 1}/{self.max_retries}: {exc}"
        )

    def on_success(self, retval: Any, task_id, args, kwargs):
        logger.info(f"Task {self.name}[{task_id}] finished")


def run_async(coro: Awaitable[T]) -> T:
    """Run a coroutine to completion on a fresh event loop (one per call)."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        asyncio.set_event_loop(None)
        loop.close()
