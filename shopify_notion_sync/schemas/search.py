"""
Search schemas — normalized hits and the unified result envelope.

Serialized with camelCase aliases so exported JSON keeps the field names
consumers of earlier exports already rely on (matchedOn, inBoth, ...).
Version: 1.0.0
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchOptions(_CamelModel):
    skip_shopify: bool = False
    skip_notion: bool = False
    skip_collections: bool = False


class SearchHit(_CamelModel):
    source: str
    id: str
    title: str
    type: Optional[str] = None
    vendor: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[int] = None
    image: Optional[str] = None
    url: Optional[str] = None
    notion_url: Optional[str] = None
    last_synced: Optional[str] = None
    collection: Optional[str] = None
    matched_on: Optional[str] = None


class SourceFlags(_CamelModel):
    shopify: bool = False
    notion: bool = False
    collection: bool = False


class SyncStatus(_CamelModel):
    in_both: int = 0
    shopify_only: int = 0
    notion_only: int = 0


class SearchSummary(_CamelModel):
    total_results: int = 0
    shopify_count: int = 0
    notion_count: int = 0
    collection_count: int = 0
    sources: SourceFlags = Field(default_factory=SourceFlags)
    sync_status: SyncStatus = Field(default_factory=SyncStatus)


class SearchResults(_CamelModel):
    keyword: str
    timestamp: str
    shopify: List[SearchHit] = Field(default_factory=list)
    notion: List[SearchHit] = Field(default_factory=list)
    collection: List[SearchHit] = Field(default_factory=list)
    summary: SearchSummary = Field(default_factory=SearchSummary)
    errors: Dict[str, str] = Field(default_factory=dict)
