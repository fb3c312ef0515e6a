"""
Unit tests for the GraphQL and REST fetch strategies.

Both are driven through a mocked ShopifyClient; the tests check cursor
handling, Link-header following, pauses and inventory enrichment.
Version: 1.0.0
"""
import re
from datetime import datetime, timezone

import httpx
import pytest
from unittest.mock import AsyncMock

from shopify_notion_sync.clients.shopify_client import ShopifyClient
from shopify_notion_sync.core.constants.sync import GRAPHQL_PRODUCTS_PAGE_SIZE, MAX_QUERY_COST
from shopify_notion_sync.core.exceptions import ExternalAPIError
from shopify_notion_sync.services.graphql_source import (
    ORDERS_QUERY,
    PRODUCTS_QUERY,
    GraphQLSource,
    orders_query_cost,
    orders_search_query,
    products_query_cost,
)
from shopify_notion_sync.services.rest_source import RestSource
from shopify_notion_sync.utils.notion_payload_builder import total_inventory


pytestmark = pytest.mark.unit

SINCE = datetime(2024, 5, 2, 2, 0, tzinfo=timezone.utc)


def _connection(key, nodes, has_next=False, cursor=None):
    return {"data": {key: {
        "edges": [{"node": n} for n in nodes],
        "pageInfo": {"hasNextPage": has_next, "endCursor": cursor},
    }}}


# ---------------------------------------------------------------------------
# GraphQLSource
# ---------------------------------------------------------------------------

class TestGraphQLSource:

    @pytest.mark.asyncio
    async def test_products_follow_cursor(self, mock_shopify_client, graphql_product_node):
        second = dict(graphql_product_node, id="gid://shopify/Product/1002")
        mock_shopify_client.call_shopify_graphql.side_effect = [
            _connection("products", [graphql_product_node], has_next=True, cursor="c1"),
            _connection("products", [second], has_next=False, cursor="c2"),
        ]

        products = await GraphQLSource(mock_shopify_client).fetch_all_products()

        assert [p.id for p in products] == ["1001", "1002"]
        calls = mock_shopify_client.call_shopify_graphql.await_args_list
        assert calls[0].args[0] == PRODUCTS_QUERY
        assert calls[0].args[1]["cursor"] is None
        assert calls[0].args[1]["first"] == GRAPHQL_PRODUCTS_PAGE_SIZE
        assert calls[1].args[1]["cursor"] == "c1"

    @pytest.mark.asyncio
    async def test_orders_filtered_by_creation_date(self, mock_shopify_client, graphql_order_node):
        mock_shopify_client.call_shopify_graphql.return_value = _connection("orders", [graphql_order_node])

        orders = await GraphQLSource(mock_shopify_client).fetch_all_orders(SINCE)

        assert [o.id for o in orders] == ["5001"]
        query, variables = mock_shopify_client.call_shopify_graphql.await_args.args
        assert query == ORDERS_QUERY
        assert variables["query"] == "created_at:>='2024-05-02'"

    @pytest.mark.asyncio
    async def test_empty_store(self, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = {"data": {"products": None}}
        assert await GraphQLSource(mock_shopify_client).fetch_all_products() == []

    @pytest.mark.asyncio
    async def test_page_error_propagates(self, mock_shopify_client, graphql_product_node):
        mock_shopify_client.call_shopify_graphql.side_effect = [
            _connection("products", [graphql_product_node], has_next=True, cursor="c1"),
            ExternalAPIError("Shopify", "boom", status_code=502),
        ]

        with pytest.raises(ExternalAPIError):
            await GraphQLSource(mock_shopify_client).fetch_all_products()

    @pytest.mark.asyncio
    async def test_products_page_within_query_cost(self, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = _connection("products", [])

        await GraphQLSource(mock_shopify_client).fetch_all_products()

        variables = mock_shopify_client.call_shopify_graphql.await_args.args[1]
        cost = products_query_cost(
            first=variables["first"],
            variants_first=variables["variantsFirst"],
            levels_first=variables["levelsFirst"],
            collections_first=variables["collectionsFirst"],
        )
        assert cost <= MAX_QUERY_COST

    @pytest.mark.asyncio
    async def test_orders_page_within_query_cost(self, mock_shopify_client):
        mock_shopify_client.call_shopify_graphql.return_value = _connection("orders", [])

        await GraphQLSource(mock_shopify_client).fetch_all_orders(SINCE)

        variables = mock_shopify_client.call_shopify_graphql.await_args.args[1]
        cost = orders_query_cost(first=variables["first"], line_items_first=variables["lineItemsFirst"])
        assert cost <= MAX_QUERY_COST

    @pytest.mark.parametrize("query", [PRODUCTS_QUERY, ORDERS_QUERY])
    def test_no_hard_coded_connection_sizes(self, query):
        assert re.findall(r"first: \d+", query) == []

    def test_query_cost_grows_with_nesting(self):
        assert products_query_cost(first=250, variants_first=100, levels_first=10) > MAX_QUERY_COST
        assert orders_query_cost(first=250, line_items_first=100) > MAX_QUERY_COST

    @pytest.mark.asyncio
    async def test_throttled_page_is_retried(self, mock_settings, no_sleep, graphql_product_node):
        responses = [
            {"errors": [{"message": "Throttled", "extensions": {"code": "THROTTLED"}}]},
            _connection("products", [graphql_product_node]),
        ]
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json=responses[len(calls) - 1])

        client = ShopifyClient(mock_settings, transport=httpx.MockTransport(handler), sleep=no_sleep)

        products = await GraphQLSource(client).fetch_all_products()

        assert [p.id for p in products] == ["1001"]
        assert len(calls) == 2
        no_sleep.assert_awaited_once_with(2.0)

    def test_orders_search_query(self):
        assert orders_search_query(SINCE) == "created_at:>='2024-05-02'"


# ---------------------------------------------------------------------------
# RestSource
# ---------------------------------------------------------------------------

NEXT_URL = "https://test-store.myshopify.com/admin/api/2024-10/products.json?limit=250&page_info=abc"


class TestRestSource:

    @pytest.mark.asyncio
    async def test_products_follow_link_header(self, mock_shopify_client, rest_product, no_sleep):
        second = dict(rest_product, id=1002, variants=[])
        mock_shopify_client.get_page.side_effect = [
            ({"products": [rest_product]}, NEXT_URL),
            ({"products": [second]}, None),
        ]
        mock_shopify_client.call_shopify.return_value = {"inventory_levels": []}
        source = RestSource(mock_shopify_client, page_delay_s=0.5, sleep=no_sleep)

        products = await source.fetch_all_products()

        assert [p.id for p in products] == ["1001", "1002"]
        first_call, second_call = mock_shopify_client.get_page.await_args_list
        assert first_call.args == ("/products.json",)
        assert first_call.kwargs == {"params": {"limit": 250}}
        assert second_call.args == (NEXT_URL,)
        # one pause per page plus one per inventory batch
        assert no_sleep.await_count == 3
        no_sleep.assert_awaited_with(0.5)

    @pytest.mark.asyncio
    async def test_inventory_levels_attached(self, mock_shopify_client, rest_product, no_sleep):
        mock_shopify_client.get_page.return_value = ({"products": [rest_product]}, None)
        mock_shopify_client.call_shopify.return_value = {"inventory_levels": [
            {"inventory_item_id": 3001, "location_id": 1, "available": 4},
            {"inventory_item_id": 3001, "location_id": 2, "available": 6},
        ]}
        source = RestSource(mock_shopify_client, page_delay_s=0, sleep=no_sleep)

        products = await source.fetch_all_products()

        mock_shopify_client.call_shopify.assert_awaited_once_with(
            "GET", "/inventory_levels.json", params={"inventory_item_ids": "3001"}
        )
        assert products[0].variants[0].inventory_levels == [4, 6]
        assert total_inventory(products[0]) == 10
        no_sleep.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_inventory_batches_of_fifty(self, mock_shopify_client, no_sleep):
        mock_shopify_client.call_shopify = AsyncMock(return_value={"inventory_levels": []})
        source = RestSource(mock_shopify_client, page_delay_s=0, sleep=no_sleep)

        await source.fetch_inventory_levels([str(i) for i in range(120)])

        batches = [c.kwargs["params"]["inventory_item_ids"] for c in mock_shopify_client.call_shopify.await_args_list]
        assert [len(b.split(",")) for b in batches] == [50, 50, 20]

    @pytest.mark.asyncio
    async def test_orders_request_all_statuses_since(self, mock_shopify_client, rest_order, no_sleep):
        mock_shopify_client.get_page.return_value = ({"orders": [rest_order]}, None)
        source = RestSource(mock_shopify_client, page_delay_s=0, sleep=no_sleep)

        orders = await source.fetch_all_orders(SINCE)

        assert [o.id for o in orders] == ["5001"]
        params = mock_shopify_client.get_page.await_args.kwargs["params"]
        assert params == {"limit": 250, "status": "any", "created_at_min": SINCE.isoformat()}

    @pytest.mark.asyncio
    async def test_no_inventory_items_skips_lookup(self, mock_shopify_client, rest_product, no_sleep):
        rest_product["variants"][0]["inventory_item_id"] = None
        mock_shopify_client.get_page.return_value = ({"products": [rest_product]}, None)
        source = RestSource(mock_shopify_client, page_delay_s=0, sleep=no_sleep)

        await source.fetch_all_products()

        mock_shopify_client.call_shopify.assert_not_awaited()
