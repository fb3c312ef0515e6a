"""
Pytest configuration and shared fixtures for the Shopify → Notion mirror tests.

Provides settings, mocked clients, raw Shopify payloads and normalized models.
Version: 1.0.0
"""
import pytest
from unittest.mock import AsyncMock, MagicMock

from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.schemas.shopify import Customer, LineItem, Order, Product, Variant


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_settings():
    """Settings object with test defaults (no real credentials, no delays)."""
    return Settings(
        shopify_store_name="test-store",
        shopify_access_token="shpat_test_token",
        shopify_api_version="2024-10",
        notion_api_key="secret_test_notion",
        products_database_id="products-db",
        orders_database_id="orders-db",
        analytics_database_id="analytics-db",
        notion_write_delay_ms=0,
        shopify_page_delay_ms=0,
    )


@pytest.fixture
def no_sleep():
    """Stand-in for asyncio.sleep that records the requested delays."""
    return AsyncMock(return_value=None)


# ---------------------------------------------------------------------------
# Clients (mocked)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_shopify_client():
    """Mocked ShopifyClient (HTTP transport only)."""
    client = MagicMock()
    client.store_domain = "test-store.myshopify.com"
    client.call_shopify = AsyncMock(return_value={})
    client.call_shopify_graphql = AsyncMock(return_value={})
    client.get_page = AsyncMock(return_value=({}, None))
    return client


@pytest.fixture
def mock_notion_client():
    """Mocked NotionClient."""
    client = MagicMock()
    client.query_database = AsyncMock(return_value={"results": []})
    client.create_page = AsyncMock(return_value={"id": "new-page"})
    client.update_page = AsyncMock(return_value={"id": "existing-page"})
    return client


# ---------------------------------------------------------------------------
# Raw Shopify payloads
# ---------------------------------------------------------------------------

@pytest.fixture
def graphql_product_node():
    """Product node as returned by the Admin GraphQL products query."""
    return {
        "id": "gid://shopify/Product/1001",
        "title": "Blue Shirt",
        "handle": "blue-shirt",
        "descriptionHtml": "<p>Hello <b>world</b></p>",
        "vendor": "Acme",
        "productType": "Shirts",
        "tags": ["summer", " cotton ", "summer"],
        "status": "ACTIVE",
        "createdAt": "2024-05-01T10:00:00Z",
        "updatedAt": "2024-05-02T10:00:00Z",
        "featuredImage": {"url": "https://cdn.shopify.com/blue.jpg", "altText": None},
        "variants": {
            "edges": [
                {
                    "node": {
                        "id": "gid://shopify/ProductVariant/2001",
                        "title": "S",
                        "sku": "BS-S",
                        "price": "19.99",
                        "compareAtPrice": None,
                        "inventoryQuantity": 3,
                        "inventoryItem": {
                            "id": "gid://shopify/InventoryItem/3001",
                            "inventoryLevels": {
                                "edges": [
                                    {"node": {"quantities": [{"name": "available", "quantity": 4}]}},
                                    {"node": {"quantities": [{"name": "available", "quantity": 6}]}},
                                ]
                            },
                        },
                    }
                },
                {
                    "node": {
                        "id": "gid://shopify/ProductVariant/2002",
                        "title": "M",
                        "sku": "BS-M",
                        "price": "21.50",
                        "compareAtPrice": "25.00",
                        "inventoryQuantity": 5,
                        "inventoryItem": {"id": "gid://shopify/InventoryItem/3002"},
                    }
                },
            ]
        },
        "collections": {"edges": [{"node": {"title": "Summer", "handle": "summer"}}]},
    }


@pytest.fixture
def rest_product():
    """Product as returned by GET /products.json."""
    return {
        "id": 1001,
        "title": "Blue Shirt",
        "handle": "blue-shirt",
        "body_html": "<p>Soft</p>",
        "vendor": "Acme",
        "product_type": "Shirts",
        "tags": "summer, cotton,,",
        "status": "active",
        "image": {"src": "https://cdn.shopify.com/blue.jpg"},
        "variants": [
            {
                "id": 2001,
                "title": "S",
                "sku": "BS-S",
                "price": "19.99",
                "compare_at_price": None,
                "inventory_quantity": 3,
                "inventory_item_id": 3001,
            }
        ],
    }


@pytest.fixture
def graphql_order_node():
    """Order node as returned by the Admin GraphQL orders query."""
    return {
        "id": "gid://shopify/Order/5001",
        "name": "#1001",
        "createdAt": "2024-05-03T12:00:00Z",
        "cancelledAt": None,
        "email": "buyer@example.com",
        "totalPriceSet": {"shopMoney": {"amount": "50.00", "currencyCode": "USD"}},
        "currentTotalPriceSet": {"shopMoney": {"amount": "40.00", "currencyCode": "USD"}},
        "refunds": [{"id": "gid://shopify/Refund/1"}],
        "customer": {"id": "gid://shopify/Customer/7001", "email": "buyer@example.com", "numberOfOrders": "1"},
        "lineItems": {
            "edges": [
                {"node": {"title": "Shirt", "quantity": 2, "sku": "S1",
                          "originalUnitPriceSet": {"shopMoney": {"amount": "20.00"}}}},
                {"node": {"title": "Hat", "quantity": 1, "sku": None,
                          "originalUnitPriceSet": {"shopMoney": {"amount": "10.00"}}}},
            ]
        },
    }


@pytest.fixture
def rest_order():
    """Order as returned by GET /orders.json."""
    return {
        "id": 5001,
        "name": "#1001",
        "order_number": 1001,
        "created_at": "2024-05-03T12:00:00-04:00",
        "cancelled_at": None,
        "email": "buyer@example.com",
        "total_price": "50.00",
        "current_total_price": "50.00",
        "refunds": [],
        "customer": {"id": 7001, "email": "buyer@example.com", "orders_count": 3},
        "line_items": [
            {"name": "Shirt - S", "title": "Shirt", "quantity": 2, "sku": "S1", "price": "20.00"},
            {"name": "Hat", "title": "Hat", "quantity": 1, "sku": "", "price": "10.00"},
        ],
    }


# ---------------------------------------------------------------------------
# Normalized models
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_product():
    return Product(
        id="1001",
        title="Blue Shirt",
        handle="blue-shirt",
        description_html="<p>Hello <b>world</b></p>",
        vendor="Acme",
        product_type="Shirts",
        tags=["summer", "cotton"],
        status="active",
        featured_image_url="https://cdn.shopify.com/blue.jpg",
        variants=[
            Variant(id="2001", sku="BS-S", price="19.99", inventory_quantity=3,
                    inventory_item_id="3001", inventory_levels=[4, 6]),
            Variant(id="2002", sku="BS-M", price="21.50", compare_at_price="25.00",
                    inventory_quantity=5, inventory_item_id="3002"),
        ],
        collections=["Summer", "Shirts"],
    )


@pytest.fixture
def sample_order():
    return Order(
        id="5001",
        name="#1001",
        order_number=1001,
        created_at="2024-05-03T12:00:00Z",
        email="buyer@example.com",
        customer=Customer(id="7001", email="buyer@example.com", orders_count=1),
        total_price="50.00",
        current_total_price="40.00",
        has_refunds=True,
        line_items=[
            LineItem(quantity=2, title="Shirt", sku="S1", unit_price="20.00"),
            LineItem(quantity=1, title="Hat", unit_price="10.00"),
        ],
    )
