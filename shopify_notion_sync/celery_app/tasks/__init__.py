"""
Celery tasks package.
Exports all tasks for convenient imports.
Version: 1.0.0
"""
from shopify_notion_sync.celery_app.tasks.sync_notion import run_analytics, run_full_sync

__all__ = [
    "run_full_sync",
    "run_analytics",
]
