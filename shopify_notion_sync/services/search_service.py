"""
Search service — keyword search across Shopify and the Notion mirror.

Handles:
- Shopify product search (GraphQL `products(query:)`) with match-field tagging
- Notion products database search (OR filter over the mirrored properties)
- Collection lookup when the keyword looks like a collection handle
- Overlap summary between the two systems, text report and JSON export
Version: 1.0.0
"""
import asyncio
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Dict, Iterable, List, Optional

from shopify_notion_sync.clients.notion_client import NotionClient
from shopify_notion_sync.clients.shopify_client import ShopifyClient
from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.constants import notion as props
from shopify_notion_sync.core.constants.search import (
    COLLECTION_HANDLE_PATTERN,
    COLLECTION_PAGE_SIZE,
    COLLECTION_PRODUCTS_LIMIT,
    MATCH_NOTION,
    MATCH_PRIORITY,
    MATCH_UNKNOWN,
    NOTION_SEARCH_PAGE_SIZE,
    SHOPIFY_SEARCH_LIMIT,
    SHOPIFY_SEARCH_VARIANTS,
    SOURCE_COLLECTION,
    SOURCE_NOTION,
    SOURCE_SHOPIFY,
)
from shopify_notion_sync.schemas.search import (
    SearchHit,
    SearchOptions,
    SearchResults,
    SearchSummary,
    SourceFlags,
    SyncStatus,
)
from shopify_notion_sync.utils.notion_payload_builder import product_url
from shopify_notion_sync.utils.shopify_normalize import edge_nodes
from shopify_notion_sync.utils.type_converters import numeric_id, to_float, to_int

logger = logging.getLogger("search_service")

SEARCH_QUERY = """
query SearchProducts($query: String!, $first: Int!, $variantsFirst: Int!) {
  products(first: $first, query: $query) {
    edges {
      node {
        id
        title
        handle
        vendor
        productType
        tags
        status
        featuredImage { url }
        variants(first: $variantsFirst) {
          edges { node { sku price inventoryQuantity } }
        }
      }
    }
  }
}
"""

COLLECTION_QUERY = """
query CollectionByHandle($handle: String!, $first: Int!, $cursor: String) {
  collectionByHandle(handle: $handle) {
    id
    title
    description
    productsCount { count }
    products(first: $first, after: $cursor) {
      edges {
        node {
          id
          title
          handle
          vendor
          productType
          featuredImage { url }
          variants(first: 1) {
            edges { node { price inventoryQuantity } }
          }
        }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""


# ── Pure helpers ──────────────────────────────────────────────────

def _match_candidates(node: Dict[str, Any]) -> Dict[str, List[Optional[str]]]:
    return {
        "title": [node.get("title")],
        "vendor": [node.get("vendor")],
        "type": [node.get("productType")],
        "tags": list(node.get("tags") or []),
        "sku": [v.get("sku") for v in edge_nodes(node.get("variants"))],
    }


def determine_match_field(node: Dict[str, Any], keyword: str) -> str:
    """First field containing keyword (case-insensitive), in MATCH_PRIORITY order."""
    needle = keyword.lower()
    candidates = _match_candidates(node)
    for field in MATCH_PRIORITY:
        if any(value and needle in value.lower() for value in candidates[field]):
            return field
    return MATCH_UNKNOWN


def is_collection_handle(keyword: str) -> bool:
    return bool(COLLECTION_HANDLE_PATTERN.match(keyword))


def notion_search_filter(keyword: str) -> Dict[str, Any]:
    """OR filter: text properties `contains`, select properties `equals`."""
    return {
        "or": [
            {"property": props.PRODUCT_NAME, "title": {"contains": keyword}},
            {"property": props.DESCRIPTION, "rich_text": {"contains": keyword}},
            {"property": props.TAGS, "multi_select": {"contains": keyword}},
            {"property": props.VENDOR, "select": {"equals": keyword}},
            {"property": props.PRODUCT_TYPE, "select": {"equals": keyword}},
            {"property": props.DEFAULT_VARIANT_SKU, "rich_text": {"contains": keyword}},
            {"property": props.PRODUCT_HANDLE, "rich_text": {"contains": keyword}},
        ]
    }


def _plain_text(prop: Optional[Dict[str, Any]], kind: str) -> Optional[str]:
    chunks = (prop or {}).get(kind) or []
    if not chunks:
        return None
    first = chunks[0]
    return (first.get("text") or {}).get("content") or first.get("plain_text")


def _select_name(prop: Optional[Dict[str, Any]]) -> Optional[str]:
    return ((prop or {}).get("select") or {}).get("name")


def hit_from_notion_page(page: Dict[str, Any]) -> SearchHit:
    properties = page.get("properties") or {}
    last_synced = (properties.get(props.LAST_SYNCED_AT) or {}).get("date") or {}
    return SearchHit(
        source=SOURCE_NOTION,
        id=_plain_text(properties.get(props.PRODUCT_ID), "rich_text") or page.get("id", ""),
        title=_plain_text(properties.get(props.PRODUCT_NAME), "title") or "Untitled",
        type=_select_name(properties.get(props.PRODUCT_TYPE)),
        vendor=_select_name(properties.get(props.VENDOR)),
        tags=[t.get("name") for t in (properties.get(props.TAGS) or {}).get("multi_select") or []],
        sku=_plain_text(properties.get(props.DEFAULT_VARIANT_SKU), "rich_text"),
        price=to_float((properties.get(props.DEFAULT_VARIANT_PRICE) or {}).get("number")),
        stock=to_int((properties.get(props.CURRENT_STOCK) or {}).get("number")),
        image=(properties.get(props.IMAGE_URL) or {}).get("url"),
        url=(properties.get(props.PRODUCT_URL) or {}).get("url"),
        notion_url=page.get("url"),
        last_synced=last_synced.get("start"),
        matched_on=MATCH_NOTION,
    )


def summarize(
    shopify: List[SearchHit],
    notion: List[SearchHit],
    collection: List[SearchHit],
) -> SearchSummary:
    """Counts per source plus set overlap of Shopify and Notion ids."""
    shopify_ids = {hit.id for hit in shopify}
    notion_ids = {hit.id for hit in notion}
    in_both = shopify_ids & notion_ids
    return SearchSummary(
        total_results=len(shopify) + len(notion) + len(collection),
        shopify_count=len(shopify),
        notion_count=len(notion),
        collection_count=len(collection),
        sources=SourceFlags(
            shopify=bool(shopify),
            notion=bool(notion),
            collection=bool(collection),
        ),
        sync_status=SyncStatus(
            in_both=len(in_both),
            shopify_only=len(shopify_ids - notion_ids),
            notion_only=len(notion_ids - shopify_ids),
        ),
    )


def _or_na(value: Any) -> str:
    return str(value) if value not in (None, "") else "N/A"


def _join(values: Iterable[str]) -> str:
    joined = ", ".join(v for v in values if v)
    return joined or "None"


def format_results(results: SearchResults) -> str:
    """Human-readable report of a search."""
    summary = results.summary
    bar = "=" * 60
    lines = [
        "",
        bar,
        f'SEARCH RESULTS FOR: "{results.keyword}"',
        bar,
        "",
        "SUMMARY:",
        f"Total Results: {summary.total_results}",
        f"├─ Shopify: {summary.shopify_count}",
        f"├─ Notion: {summary.notion_count}",
        f"└─ Collections: {summary.collection_count}",
        "",
        "SYNC STATUS:",
        f"├─ In Both Systems: {summary.sync_status.in_both}",
        f"├─ Shopify Only: {summary.sync_status.shopify_only}",
        f"└─ Notion Only: {summary.sync_status.notion_only}",
    ]

    if results.shopify:
        lines += ["", f"SHOPIFY PRODUCTS ({len(results.shopify)}):"]
        for i, hit in enumerate(results.shopify, start=1):
            lines += [
                "",
                f"{i}. {hit.title}",
                f"   ID: {hit.id} | Matched on: {hit.matched_on}",
                f"   Type: {_or_na(hit.type)} | Vendor: {_or_na(hit.vendor)}",
                f"   Tags: {_join(hit.tags)}",
                f"   URL: {hit.url}",
            ]

    if results.notion:
        lines += ["", f"NOTION PRODUCTS ({len(results.notion)}):"]
        for i, hit in enumerate(results.notion, start=1):
            lines += [
                "",
                f"{i}. {hit.title}",
                f"   ID: {hit.id} | SKU: {_or_na(hit.sku)}",
                f"   Price: ${hit.price or 0} | Stock: {hit.stock or 0}",
                f"   Last Synced: {hit.last_synced or 'Never'}",
            ]

    if results.collection:
        lines += [
            "",
            f"COLLECTION PRODUCTS ({len(results.collection)}):",
            f"Collection: {results.collection[0].collection}",
        ]
        for i, hit in enumerate(results.collection[:10], start=1):
            lines.append(f"{i}. {hit.title} - ${hit.price or 0}")
        if len(results.collection) > 10:
            lines.append(f"... and {len(results.collection) - 10} more")

    if results.errors:
        lines += ["", "ERRORS:"]
        lines += [f"- {source}: {message}" for source, message in results.errors.items()]

    lines += ["", bar]
    return "\n".join(lines)


def export_results(results: SearchResults, filename: Optional[str] = None) -> Path:
    """Write results as JSON (camelCase keys). Returns the written path."""
    path = Path(filename or f"search-results-{int(time.time() * 1000)}.json")
    path.write_text(results.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    logger.info(f"Results exported to: {path}")
    return path


# ── Service ───────────────────────────────────────────────────────

class SearchService:
    """Unified keyword search over Shopify and the Notion products database."""

    def __init__(
        self,
        settings: Settings,
        shopify_client: ShopifyClient,
        notion_client: NotionClient,
    ) -> None:
        self._settings = settings
        self._shopify = shopify_client
        self._notion = notion_client

    @property
    def _store_domain(self) -> str:
        return self._settings.shopify_store_domain or ""

    async def search_shopify(self, keyword: str) -> List[SearchHit]:
        logger.info(f'Searching Shopify for: "{keyword}"')
        variables = {
            "query": keyword,
            "first": SHOPIFY_SEARCH_LIMIT,
            "variantsFirst": SHOPIFY_SEARCH_VARIANTS,
        }
        data = await self._shopify.call_shopify_graphql(SEARCH_QUERY, variables)
        nodes = edge_nodes((data.get("data") or {}).get("products"))

        hits = []
        for node in nodes:
            variants = edge_nodes(node.get("variants"))
            first_variant = variants[0] if variants else {}
            stock = sum(to_int(v.get("inventoryQuantity")) or 0 for v in variants)
            hits.append(
                SearchHit(
                    source=SOURCE_SHOPIFY,
                    id=numeric_id(node.get("id")),
                    title=node.get("title") or "",
                    type=node.get("productType") or None,
                    vendor=node.get("vendor") or None,
                    tags=list(node.get("tags") or []),
                    status=node.get("status"),
                    sku=first_variant.get("sku") or None,
                    price=to_float(first_variant.get("price")),
                    stock=stock if variants else None,
                    image=(node.get("featuredImage") or {}).get("url"),
                    url=product_url(self._store_domain, node.get("handle")),
                    matched_on=determine_match_field(node, keyword),
                )
            )
        logger.info(f"Found {len(hits)} products in Shopify")
        return hits

    async def search_notion(self, keyword: str) -> List[SearchHit]:
        logger.info(f'Searching Notion for: "{keyword}"')
        data = await self._notion.query_database(
            self._settings.products_database_id,
            filter=notion_search_filter(keyword),
            page_size=NOTION_SEARCH_PAGE_SIZE,
        )
        hits = [hit_from_notion_page(page) for page in data.get("results") or []]
        logger.info(f"Found {len(hits)} products in Notion")
        return hits

    async def search_collection(self, handle: str) -> List[SearchHit]:
        logger.info(f'Searching for collection: "{handle}"')
        collection: Optional[Dict[str, Any]] = None
        nodes: List[Dict[str, Any]] = []
        cursor = None
        while len(nodes) < COLLECTION_PRODUCTS_LIMIT:
            first = min(COLLECTION_PAGE_SIZE, COLLECTION_PRODUCTS_LIMIT - len(nodes))
            data = await self._shopify.call_shopify_graphql(
                COLLECTION_QUERY, {"handle": handle, "first": first, "cursor": cursor}
            )
            page = (data.get("data") or {}).get("collectionByHandle")
            if not page:
                break
            collection = collection or page
            products = page.get("products") or {}
            nodes.extend(edge_nodes(products))
            page_info = products.get("pageInfo") or {}
            cursor = page_info.get("endCursor")
            if not page_info.get("hasNextPage") or not cursor:
                break

        if not collection:
            logger.info("Collection not found")
            return []

        count = (collection.get("productsCount") or {}).get("count")
        logger.info(f"Found collection: {collection.get('title')} ({count} products)")
        hits = []
        for node in nodes:
            variants = edge_nodes(node.get("variants"))
            first_variant = variants[0] if variants else {}
            hits.append(
                SearchHit(
                    source=SOURCE_COLLECTION,
                    collection=collection.get("title"),
                    id=numeric_id(node.get("id")),
                    title=node.get("title") or "",
                    vendor=node.get("vendor") or None,
                    type=node.get("productType") or None,
                    image=(node.get("featuredImage") or {}).get("url"),
                    url=product_url(self._store_domain, node.get("handle")),
                    price=to_float(first_variant.get("price")),
                    stock=to_int(first_variant.get("inventoryQuantity")),
                )
            )
        return hits

    @staticmethod
    async def _guarded(source: str, call: Awaitable[List[SearchHit]], errors: Dict[str, str]) -> List[SearchHit]:
        try:
            return await call
        except Exception as exc:
            logger.error(f"{source} search error: {exc}")
            errors[source] = str(exc)
            return []

    @staticmethod
    async def _skipped() -> List[SearchHit]:
        return []

    async def search(self, keyword: str, options: Optional[SearchOptions] = None) -> SearchResults:
        """
        Run every enabled source concurrently and assemble the results.

        A failing source contributes no hits and its error is recorded in
        results.errors; the other sources are unaffected.
        """
        options = options or SearchOptions()
        logger.info(f'Starting unified search for: "{keyword}" options={options.model_dump()}')
        errors: Dict[str, str] = {}

        shopify_call = self._skipped() if options.skip_shopify else self.search_shopify(keyword)
        notion_call = self._skipped() if options.skip_notion else self.search_notion(keyword)
        if is_collection_handle(keyword) and not options.skip_collections:
            collection_call = self.search_collection(keyword)
        else:
            collection_call = self._skipped()

        shopify_hits, notion_hits, collection_hits = await asyncio.gather(
            self._guarded("shopify", shopify_call, errors),
            self._guarded("notion", notion_call, errors),
            self._guarded("collection", collection_call, errors),
        )

        return SearchResults(
            keyword=keyword,
            timestamp=datetime.now(timezone.utc).isoformat(),
            shopify=shopify_hits,
            notion=notion_hits,
            collection=collection_hits,
            summary=summarize(shopify_hits, notion_hits, collection_hits),
            errors=errors,
        )
