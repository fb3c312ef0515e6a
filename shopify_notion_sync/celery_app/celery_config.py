"""
Celery configuration — broker, task routes, beat schedule.

Runs the Shopify → Notion mirror on a schedule (daily at 02:00 UTC by
default) and accepts on-demand sync/analytics tasks.

=============================================================================
RUNNING
=============================================================================
    Worker:
        celery -A shopify_notion_sync.celery_app worker -Q notion_sync -l info --concurrency=1 -n sync@%h

    Beat (scheduler):
        celery -A shopify_notion_sync.celery_app beat -l info

Use --pool=solo on Windows.

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================
    REDIS_URL: broker and result backend (default: redis://localhost:6379/0)
    SYNC_ENABLED: "true" or "false", master on/off for the scheduled sync (default: true)
    SYNC_CRON_HOUR: Hour (UTC) of the daily sync (default: 2)
    SYNC_CRON_MINUTE: Minute of the daily sync (default: 0)
Version: 1.0.0
"""
import logging
import platform

from celery import Celery
from celery.schedules import crontab
from kombu import Queue

from shopify_notion_sync.core.config import Settings, get_settings

logger = logging.getLogger(__name__)

IS_WINDOWS = platform.system() == "Windows"

SYNC_QUEUE = "notion_sync"


def build_beat_schedule(settings: Settings) -> dict:
    """Beat schedule for the daily sync; empty when SYNC_ENABLED is off."""
    if not settings.sync_enabled:
        logger.info("Sync scheduler disabled (SYNC_ENABLED=false)")
        return {}

    return {
        "daily-shopify-notion-sync": {
            "task": "tasks.sync_notion.run_full_sync",
            "schedule": crontab(minute=settings.sync_cron_minute, hour=settings.sync_cron_hour),
            "options": {"queue": SYNC_QUEUE},
        },
    }


def create_celery_app(settings: Settings) -> Celery:
    app = Celery(
        "shopify_notion_sync",
        broker=settings.redis_url,
        backend=settings.redis_url,
        include=["shopify_notion_sync.celery_app.tasks.sync_notion"],
    )

    app.conf.update(
        # Serialization
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,

        # One sync at a time; Notion writes are serialized anyway
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,

        task_queues=(Queue(SYNC_QUEUE),),
        task_routes={"tasks.sync_notion.*": {"queue": SYNC_QUEUE}},

        beat_schedule=build_beat_schedule(settings),

        result_expires=3600,  # 1 hour

        task_default_retry_delay=30,
        task_max_retries=3,

        worker_pool="solo" if IS_WINDOWS else "prefork",

        worker_log_format="[%(asctime)s: %(levelname)s/%(processName)s] %(message)s",
        worker_task_log_format="[%(asctime)s: %(levelname)s/%(processName)s] [%(task_name)s] %(message)s",
    )

    schedule = app.conf.beat_schedule.get("daily-shopify-notion-sync")
    if schedule:
        logger.info(
            "Sync scheduler enabled: daily at %02d:%02d UTC",
            settings.sync_cron_hour, settings.sync_cron_minute,
        )
    return app


celery_app = create_celery_app(get_settings())
