"""
Sync schemas — run state and per-run outcome.
Version: 1.0.0
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class SyncState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    UPSERTING = "upserting"
    DONE = "done"
    PARTIALLY_COMPLETED = "partially_completed"
    FAILED = "failed"


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class SyncFailure(BaseModel):
    """A record skipped after a mapping or upsert error."""
    external_id: str
    label: str
    error: str


class SyncResult(BaseModel):
    entity: str  # "products" | "orders"
    state: SyncState = SyncState.IDLE
    total: int = 0
    created: int = 0
    updated: int = 0
    failures: List[SyncFailure] = Field(default_factory=list)
    started_at: Optional[str] = None
    finished_at: Optional[str] = None

    @property
    def succeeded(self) -> int:
        return self.created + self.updated

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def processed(self) -> int:
        return self.succeeded + self.failed

    def summary_line(self) -> str:
        return (
            f"{self.entity}: {self.succeeded}/{self.total} synced "
            f"(created={self.created}, updated={self.updated}, errors={self.failed}) "
            f"state={self.state.value}"
        )
