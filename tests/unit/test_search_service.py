"""
Unit tests for SearchService and its pure helpers.

Version: 1.0.0
"""
import json

import pytest

from shopify_notion_sync.core.constants.sync import MAX_QUERY_COST
from shopify_notion_sync.core.exceptions import ExternalAPIError
from shopify_notion_sync.schemas.search import SearchHit, SearchOptions, SearchResults
from shopify_notion_sync.services.graphql_source import connection_cost
from shopify_notion_sync.services.search_service import (
    SearchService,
    determine_match_field,
    export_results,
    format_results,
    hit_from_notion_page,
    is_collection_handle,
    notion_search_filter,
    summarize,
)


pytestmark = pytest.mark.unit


def _hit(source, id_, title="T"):
    return SearchHit(source=source, id=id_, title=title)


def _shopify_node(**overrides):
    node = {
        "id": "gid://shopify/Product/1001",
        "title": "Blue Shirt",
        "handle": "blue-shirt",
        "vendor": "Acme",
        "productType": "Shirts",
        "tags": ["summer"],
        "status": "ACTIVE",
        "featuredImage": {"url": "https://cdn.shopify.com/blue.jpg"},
        "variants": {"edges": [
            {"node": {"sku": "BS-S", "price": "19.99", "inventoryQuantity": 4}},
            {"node": {"sku": "BS-M", "price": "19.99", "inventoryQuantity": 6}},
        ]},
    }
    node.update(overrides)
    return node


def _notion_page():
    return {
        "id": "page-1",
        "url": "https://www.notion.so/page-1",
        "properties": {
            "Product Name": {"title": [{"text": {"content": "Blue Shirt"}}]},
            "Shopify Product ID": {"rich_text": [{"text": {"content": "1001"}}]},
            "Vendor": {"select": {"name": "Acme"}},
            "Product Type": {"select": None},
            "Tags": {"multi_select": [{"name": "summer"}]},
            "Default Variant SKU": {"rich_text": [{"plain_text": "BS-S"}]},
            "Default Variant Price": {"number": 19.99},
            "Current Stock": {"number": 10},
            "Image URL": {"url": None},
            "Product URL": {"url": "https://test-store.myshopify.com/products/blue-shirt"},
            "Last Synced At": {"date": {"start": "2024-06-01T02:00:00+00:00"}},
        },
    }


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

class TestDetermineMatchField:

    def test_title_wins(self):
        node = _shopify_node(title="Summer Shirt", vendor="Summer Co")
        assert determine_match_field(node, "summer") == "title"

    def test_vendor_before_tags(self):
        assert determine_match_field(_shopify_node(), "acme") == "vendor"

    def test_type(self):
        assert determine_match_field(_shopify_node(), "SHIRTS") == "type"

    def test_tags(self):
        assert determine_match_field(_shopify_node(), "summ") == "tags"

    def test_sku(self):
        assert determine_match_field(_shopify_node(), "bs-m") == "sku"

    def test_unknown(self):
        assert determine_match_field(_shopify_node(), "zebra") == "unknown"


class TestIsCollectionHandle:

    @pytest.mark.parametrize("keyword", ["summer-sale", "shirts", "sale-2024"])
    def test_handle_like(self, keyword):
        assert is_collection_handle(keyword) is True

    @pytest.mark.parametrize("keyword", ["Summer Sale!", "Shirts", "summer sale", ""])
    def test_not_handle_like(self, keyword):
        assert is_collection_handle(keyword) is False


class TestNotionSearchFilter:

    def test_or_over_mirrored_properties(self):
        clauses = notion_search_filter("acme")["or"]

        assert len(clauses) == 7
        assert {"property": "Product Name", "title": {"contains": "acme"}} in clauses
        assert {"property": "Vendor", "select": {"equals": "acme"}} in clauses
        assert {"property": "Tags", "multi_select": {"contains": "acme"}} in clauses


class TestHitFromNotionPage:

    def test_maps_properties(self):
        hit = hit_from_notion_page(_notion_page())

        assert hit.source == "Notion"
        assert hit.id == "1001"
        assert hit.title == "Blue Shirt"
        assert hit.vendor == "Acme"
        assert hit.type is None
        assert hit.tags == ["summer"]
        assert hit.sku == "BS-S"
        assert hit.price == 19.99
        assert hit.stock == 10
        assert hit.notion_url == "https://www.notion.so/page-1"
        assert hit.last_synced == "2024-06-01T02:00:00+00:00"
        assert hit.matched_on == "notion_search"

    def test_empty_page_falls_back_to_page_id(self):
        hit = hit_from_notion_page({"id": "page-9", "properties": {}})
        assert hit.id == "page-9"
        assert hit.title == "Untitled"


class TestSummarize:

    def test_overlap_by_id(self):
        shopify = [_hit("Shopify", i) for i in ("A", "B", "C")]
        notion = [_hit("Notion", i) for i in ("B", "C", "D")]

        summary = summarize(shopify, notion, [])

        assert summary.total_results == 6
        assert summary.sync_status.in_both == 2
        assert summary.sync_status.shopify_only == 1
        assert summary.sync_status.notion_only == 1
        assert summary.sources.collection is False

    def test_camel_case_dump(self):
        summary = summarize([_hit("Shopify", "A")], [], [])
        dumped = summary.model_dump(by_alias=True)

        assert dumped["totalResults"] == 1
        assert dumped["syncStatus"] == {"inBoth": 0, "shopifyOnly": 1, "notionOnly": 0}


# ---------------------------------------------------------------------------
# SearchService
# ---------------------------------------------------------------------------

@pytest.fixture
def service(mock_settings, mock_shopify_client, mock_notion_client):
    return SearchService(mock_settings, mock_shopify_client, mock_notion_client)


class TestSearchShopify:

    @pytest.mark.asyncio
    async def test_normalizes_nodes(self, service, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = {
            "data": {"products": {"edges": [{"node": _shopify_node()}]}}
        }

        hits = await service.search_shopify("acme")

        variables = mock_shopify_client.call_shopify_graphql.await_args.args[1]
        assert variables["query"] == "acme"
        hit = hits[0]
        assert hit.id == "1001"
        assert hit.source == "Shopify"
        assert hit.sku == "BS-S"
        assert hit.price == 19.99
        assert hit.stock == 10
        assert hit.url == "https://test-store.myshopify.com/products/blue-shirt"
        assert hit.matched_on == "vendor"


class TestSearchCollection:

    @pytest.mark.asyncio
    async def test_collection_products(self, service, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = {"data": {"collectionByHandle": {
            "title": "Summer Sale",
            "productsCount": {"count": 1},
            "products": {"edges": [{"node": _shopify_node()}]},
        }}}

        hits = await service.search_collection("summer-sale")

        assert len(hits) == 1
        assert hits[0].collection == "Summer Sale"
        assert hits[0].source == "Shopify Collection"
        assert hits[0].stock == 4

    @pytest.mark.asyncio
    async def test_collection_paged_within_query_cost(self, service, mock_shopify_client):
        def page(ids, has_next, cursor=None):
            return {"data": {"collectionByHandle": {
                "title": "Summer Sale",
                "productsCount": {"count": 3},
                "products": {
                    "edges": [{"node": _shopify_node(id=f"gid://shopify/Product/{i}")} for i in ids],
                    "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
                },
            }}}

        mock_shopify_client.call_shopify_graphql.side_effect = [page([1, 2], True, "c1"), page([3], False)]

        hits = await service.search_collection("summer-sale")

        assert [h.id for h in hits] == ["1", "2", "3"]
        calls = mock_shopify_client.call_shopify_graphql.await_args_list
        assert calls[0].args[1]["cursor"] is None
        assert calls[1].args[1]["cursor"] == "c1"
        # product + featuredImage + variants(first: 1) per node
        assert all(connection_cost(c.args[1]["first"], 5) <= MAX_QUERY_COST for c in calls)

    @pytest.mark.asyncio
    async def test_unknown_handle(self, service, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = {"data": {"collectionByHandle": None}}
        assert await service.search_collection("nope") == []


class TestSearch:

    @pytest.mark.asyncio
    async def test_non_handle_keyword_skips_collection(self, service, mock_shopify_client, mock_notion_client):
        mock_shopify_client.call_shopify_graphql.return_value = {"data": {"products": {"edges": []}}}

        results = await service.search("Blue Shirt")

        assert mock_shopify_client.call_shopify_graphql.await_count == 1
        mock_notion_client.query_database.assert_awaited_once()
        assert results.collection == []
        assert results.errors == {}

    @pytest.mark.asyncio
    async def test_failing_source_recorded(self, service, mock_shopify_client, mock_notion_client):
        mock_notion_client.query_database.return_value = {"results": [_notion_page()]}
        mock_shopify_client.call_shopify_graphql.side_effect = ExternalAPIError("Shopify", "down", status_code=503)

        results = await service.search("Blue")

        assert results.shopify == []
        assert len(results.notion) == 1
        assert "down" in results.errors["shopify"]
        assert results.summary.notion_count == 1

    @pytest.mark.asyncio
    async def test_skip_options(self, service, mock_shopify_client, mock_notion_client):
        options = SearchOptions(skip_shopify=True, skip_collections=True)

        await service.search("summer-sale", options)

        mock_shopify_client.call_shopify_graphql.assert_not_awaited()
        mock_notion_client.query_database.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_handle_keyword_queries_collection(self, service, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = {"data": {}}

        await service.search("summer-sale", SearchOptions(skip_notion=True))

        assert mock_shopify_client.call_shopify_graphql.await_count == 2


# ---------------------------------------------------------------------------
# Report and export
# ---------------------------------------------------------------------------

def _results():
    shopify = [_hit("Shopify", "A", "Alpha"), _hit("Shopify", "B", "Beta")]
    notion = [_hit("Notion", "B", "Beta")]
    return SearchResults(
        keyword="alp",
        timestamp="2024-06-01T00:00:00+00:00",
        shopify=shopify,
        notion=notion,
        summary=summarize(shopify, notion, []),
        errors={"collection": "boom"},
    )


class TestFormatResults:

    def test_sections(self):
        report = format_results(_results())

        assert 'SEARCH RESULTS FOR: "alp"' in report
        assert "In Both Systems: 1" in report
        assert "Shopify Only: 1" in report
        assert "SHOPIFY PRODUCTS (2):" in report
        assert "NOTION PRODUCTS (1):" in report
        assert "COLLECTION PRODUCTS" not in report
        assert "- collection: boom" in report


class TestExportResults:

    def test_writes_camel_case_json(self, tmp_path):
        path = export_results(_results(), str(tmp_path / "out.json"))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["keyword"] == "alp"
        assert data["summary"]["syncStatus"]["inBoth"] == 1
        assert data["shopify"][0]["matchedOn"] is None

    def test_default_filename(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        path = export_results(_results())

        assert path.name.startswith("search-results-")
        assert path.suffix == ".json"
        assert (tmp_path / path.name).exists()
