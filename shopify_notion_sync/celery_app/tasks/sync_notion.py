"""
Notion sync tasks — scheduled and on-demand Shopify → Notion runs.

Tasks:
- run_full_sync: products then orders (beat: daily)
- run_analytics: sales report for the trailing window
Version: 1.0.0
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from shopify_notion_sync.celery_app.celery_config import celery_app
from shopify_notion_sync.celery_app.tasks.base import BaseTask, run_async
from shopify_notion_sync.container import get_container
from shopify_notion_sync.core.constants.analytics import DEFAULT_PERIOD_DAYS
from shopify_notion_sync.core.exceptions import NonRetryableError, RetryableError

logger = logging.getLogger(__name__)


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="tasks.sync_notion.run_full_sync",
    autoretry_for=(RetryableError, ConnectionError, TimeoutError, httpx.ConnectError, httpx.ReadTimeout),
    dont_autoretry_for=(NonRetryableError,),
    retry_backoff=True,
    max_retries=3,
)
def run_full_sync(self, source: Optional[str] = None) -> List[Dict[str, Any]]:
    """
    Mirror products (and orders when SYNC_ORDERS is on) into Notion.

    Args:
        source: "graphql" or "rest"; defaults to SYNC_SOURCE_MODE
    """
    container = get_container()
    service = container.sync_service(source)
    logger.info(f"Starting Shopify → Notion sync (source={source or container.settings.sync_source_mode})")

    results = run_async(service.sync_all())
    for result in results:
        logger.info(result.summary_line())
    return [result.model_dump(mode="json") for result in results]


@celery_app.task(
    bind=True,
    base=BaseTask,
    name="tasks.sync_notion.run_analytics",
    autoretry_for=(RetryableError, ConnectionError, TimeoutError, httpx.ConnectError, httpx.ReadTimeout),
    dont_autoretry_for=(NonRetryableError,),
    retry_backoff=True,
    max_retries=3,
)
def run_analytics(self, days: int = DEFAULT_PERIOD_DAYS, source: Optional[str] = None) -> Dict[str, Any]:
    """Compute the sales report for the last `days` days and file it in Notion."""
    service = get_container().analytics_service(source)
    report = run_async(service.run(days=days))
    return report.model_dump(mode="json")
