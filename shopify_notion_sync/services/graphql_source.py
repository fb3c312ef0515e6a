"""
GraphQL source — cursor-paginated product and order fetch.

Each page is `first: N, after: $cursor` and reports
`pageInfo { hasNextPage endCursor }`. Page and nested connection sizes
are chosen so the requested cost of one query stays under Shopify's
MAX_QUERY_COST; see products_query_cost / orders_query_cost. Cost
throttling happens inside ShopifyClient.call_shopify_graphql after every
page.
Version: 1.0.0
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from shopify_notion_sync.clients.shopify_client import ShopifyClient
from shopify_notion_sync.core.constants.sync import (
    COLLECTIONS_PER_PRODUCT,
    GRAPHQL_ORDERS_PAGE_SIZE,
    GRAPHQL_PRODUCTS_PAGE_SIZE,
    INVENTORY_LEVELS_PER_VARIANT,
    LINE_ITEMS_PER_ORDER,
    VARIANTS_PER_PRODUCT,
)
from shopify_notion_sync.schemas.shopify import Order, Product
from shopify_notion_sync.services.source_base import PaginatedSource
from shopify_notion_sync.utils.pagination import Page, collect_pages
from shopify_notion_sync.utils.shopify_normalize import (
    edge_nodes,
    order_from_graphql,
    product_from_graphql,
)

logger = logging.getLogger("graphql_source")

PRODUCTS_QUERY = """
query Products(
  $first: Int!
  $cursor: String
  $variantsFirst: Int!
  $levelsFirst: Int!
  $collectionsFirst: Int!
) {
  products(first: $first, after: $cursor) {
    edges {
      node {
        id
        title
        handle
        descriptionHtml
        vendor
        productType
        tags
        status
        createdAt
        updatedAt
        featuredImage { url altText }
        variants(first: $variantsFirst) {
          edges {
            node {
              id
              title
              sku
              price
              compareAtPrice
              inventoryQuantity
              inventoryItem {
                id
                inventoryLevels(first: $levelsFirst) {
                  edges {
                    node {
                      quantities(names: ["available"]) { name quantity }
                      location { name }
                    }
                  }
                }
              }
            }
          }
        }
        collections(first: $collectionsFirst) {
          edges { node { title handle } }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""

ORDERS_QUERY = """
query Orders($first: Int!, $cursor: String, $query: String, $lineItemsFirst: Int!) {
  orders(first: $first, after: $cursor, query: $query, sortKey: CREATED_AT) {
    edges {
      node {
        id
        name
        createdAt
        cancelledAt
        email
        totalPriceSet { shopMoney { amount currencyCode } }
        currentTotalPriceSet { shopMoney { amount currencyCode } }
        refunds { id }
        customer { id email numberOfOrders }
        lineItems(first: $lineItemsFirst) {
          edges {
            node {
              title
              quantity
              sku
              originalUnitPriceSet { shopMoney { amount } }
            }
          }
        }
      }
    }
    pageInfo { hasNextPage endCursor }
  }
}
"""


def connection_cost(first: int, node_cost: int) -> int:
    """Shopify's requested cost for a connection: 2 plus `first` nodes."""
    return 2 + first * node_cost


def products_query_cost(
    first: int = GRAPHQL_PRODUCTS_PAGE_SIZE,
    variants_first: int = VARIANTS_PER_PRODUCT,
    levels_first: int = INVENTORY_LEVELS_PER_VARIANT,
    collections_first: int = COLLECTIONS_PER_PRODUCT,
) -> int:
    """Requested cost of one PRODUCTS_QUERY page."""
    # level + quantities + location
    level = 3
    # variant + inventoryItem
    variant = 2 + connection_cost(levels_first, level)
    # product + featuredImage
    product = 2 + connection_cost(variants_first, variant) + connection_cost(collections_first, 1)
    return connection_cost(first, product)


def orders_query_cost(
    first: int = GRAPHQL_ORDERS_PAGE_SIZE,
    line_items_first: int = LINE_ITEMS_PER_ORDER,
) -> int:
    """Requested cost of one ORDERS_QUERY page."""
    # line item + price set + shopMoney
    line_item = 3
    # order, two price sets with shopMoney, refunds, customer
    order = 7 + connection_cost(line_items_first, line_item)
    return connection_cost(first, order)


def orders_search_query(since: datetime) -> str:
    """Shopify search syntax for orders created on/after a date."""
    return f"created_at:>='{since.date().isoformat()}'"


def _connection_page(connection: Dict[str, Any], parse: Callable[[Dict[str, Any]], Any]) -> Page:
    page_info = connection.get("pageInfo") or {}
    return Page(
        items=[parse(node) for node in edge_nodes(connection)],
        has_next=bool(page_info.get("hasNextPage")),
        next_token=page_info.get("endCursor"),
    )


class GraphQLSource(PaginatedSource):
    """Admin GraphQL fetcher."""

    name = "graphql"

    def __init__(
        self,
        client: ShopifyClient,
        products_page_size: int = GRAPHQL_PRODUCTS_PAGE_SIZE,
        orders_page_size: int = GRAPHQL_ORDERS_PAGE_SIZE,
    ) -> None:
        self._client = client
        self._products_page_size = products_page_size
        self._orders_page_size = orders_page_size

    def products_variables(self, cursor: Optional[str]) -> Dict[str, Any]:
        return {
            "first": self._products_page_size,
            "cursor": cursor,
            "variantsFirst": VARIANTS_PER_PRODUCT,
            "levelsFirst": INVENTORY_LEVELS_PER_VARIANT,
            "collectionsFirst": COLLECTIONS_PER_PRODUCT,
        }

    def orders_variables(self, cursor: Optional[str], query: str) -> Dict[str, Any]:
        return {
            "first": self._orders_page_size,
            "cursor": cursor,
            "query": query,
            "lineItemsFirst": LINE_ITEMS_PER_ORDER,
        }

    async def fetch_all_products(self) -> List[Product]:
        logger.info("Fetching products from Shopify using GraphQL...")

        async def fetch_page(cursor: Optional[str]) -> Page:
            data = await self._client.call_shopify_graphql(PRODUCTS_QUERY, self.products_variables(cursor))
            return _connection_page((data.get("data") or {}).get("products") or {}, product_from_graphql)

        products = await collect_pages(fetch_page, label="products")
        logger.info(f"Fetched {len(products)} products in total")
        return products

    async def fetch_all_orders(self, since: datetime) -> List[Order]:
        query = orders_search_query(since)
        logger.info(f"Fetching orders from Shopify using GraphQL (query={query})...")

        async def fetch_page(cursor: Optional[str]) -> Page:
            data = await self._client.call_shopify_graphql(ORDERS_QUERY, self.orders_variables(cursor, query))
            return _connection_page((data.get("data") or {}).get("orders") or {}, order_from_graphql)

        orders = await collect_pages(fetch_page, label="orders")
        logger.info(f"Fetched {len(orders)} orders in total")
        return orders
