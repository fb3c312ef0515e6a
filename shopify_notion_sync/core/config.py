"""
Settings — environment-driven configuration for the Shopify → Notion mirror.

Built once at the entry point (CLI or Celery config) and passed into the
Container; nothing in the package reads the environment on its own.
Version: 1.0.0
"""
import os
from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from shopify_notion_sync.core.constants.sync import DEFAULT_PROGRESS_EVERY
from shopify_notion_sync.core.exceptions import ConfigurationError


DEFAULT_PRODUCTS_DATABASE_ID = "22ab2975e0b7804cbcdaf8b5e6b37d19"
DEFAULT_ORDERS_DATABASE_ID = "22ab2975e0b78062a20dcf23fedb342e"

SourceMode = Literal["graphql", "rest"]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    # Shopify
    shopify_store_name: Optional[str] = None
    shopify_access_token: Optional[str] = None
    shopify_api_version: str = "2024-10"

    # Notion
    notion_api_key: Optional[str] = None
    notion_version: str = "2022-06-28"
    products_database_id: str = DEFAULT_PRODUCTS_DATABASE_ID
    orders_database_id: str = DEFAULT_ORDERS_DATABASE_ID
    analytics_database_id: Optional[str] = None

    # Sync behaviour
    sync_source_mode: SourceMode = "graphql"
    sync_orders: bool = True
    orders_lookback_days: int = 30
    sync_progress_every: int = DEFAULT_PROGRESS_EVERY

    # Rate limits (milliseconds)
    notion_write_delay_ms: int = 350
    shopify_page_delay_ms: int = 500

    # Scheduler
    redis_url: str = "redis://localhost:6379/0"
    sync_enabled: bool = True
    sync_cron_hour: int = 2
    sync_cron_minute: int = 0

    log_level: str = "INFO"

    @property
    def shopify_store_domain(self) -> Optional[str]:
        """Store domain with the .myshopify.com suffix."""
        if not self.shopify_store_name:
            return None
        name = self.shopify_store_name.replace("https://", "").replace("http://", "").rstrip("/")
        if name.endswith(".myshopify.com"):
            return name
        return f"{name}.myshopify.com"

    def require(self, *fields: str) -> None:
        """Raise ConfigurationError listing every empty required field."""
        missing = [f for f in fields if not getattr(self, f, None)]
        if missing:
            env_names = ", ".join(f.upper() for f in missing)
            raise ConfigurationError(f"Missing required configuration: {env_names}")

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        Load settings from the process environment (and an optional .env file).

        Raises:
            ConfigurationError: a variable is set to an invalid value
        """
        load_dotenv(env_file)
        try:
            return cls(
                shopify_store_name=os.getenv("SHOPIFY_STORE_NAME"),
                shopify_access_token=os.getenv("SHOPIFY_ACCESS_TOKEN"),
                shopify_api_version=os.getenv("SHOPIFY_API_VERSION", "2024-10"),
                notion_api_key=os.getenv("NOTION_API_KEY"),
                notion_version=os.getenv("NOTION_VERSION", "2022-06-28"),
                products_database_id=os.getenv("PRODUCTS_DATABASE_ID") or DEFAULT_PRODUCTS_DATABASE_ID,
                orders_database_id=os.getenv("ORDERS_DATABASE_ID") or DEFAULT_ORDERS_DATABASE_ID,
                analytics_database_id=os.getenv("ANALYTICS_DATABASE_ID") or None,
                sync_source_mode=os.getenv("SYNC_SOURCE_MODE", "graphql").strip().lower(),
                sync_orders=_env_bool("SYNC_ORDERS", "true"),
                orders_lookback_days=int(os.getenv("ORDERS_LOOKBACK_DAYS", "30")),
                sync_progress_every=int(os.getenv("SYNC_PROGRESS_EVERY", "10")),
                notion_write_delay_ms=int(os.getenv("NOTION_WRITE_DELAY_MS", "350")),
                shopify_page_delay_ms=int(os.getenv("SHOPIFY_PAGE_DELAY_MS", "500")),
                redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
                sync_enabled=_env_bool("SYNC_ENABLED", "true"),
                sync_cron_hour=int(os.getenv("SYNC_CRON_HOUR", "2")),
                sync_cron_minute=int(os.getenv("SYNC_CRON_MINUTE", "0")),
                log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


@lru_cache()
def get_settings() -> Settings:
    """Settings for process entry points (CLI, Celery). Cached per process."""
    return Settings.from_env()
