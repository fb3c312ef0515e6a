"""
Shopify normalize — GraphQL and REST payloads to the shared models.

GraphQL nodes use camelCase, connections (`edges[].node`) and GIDs; REST
payloads use snake_case, plain lists and integer ids. Everything leaves
here as schemas.shopify models keyed by the numeric id.
Version: 1.0.0
"""
import logging
import re
from typing import Any, Dict, List, Optional

from shopify_notion_sync.schemas.shopify import Customer, LineItem, Order, Product, Variant
from shopify_notion_sync.utils.type_converters import numeric_id, to_int

logger = logging.getLogger("shopify_normalize")


def edge_nodes(connection: Optional[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Unwrap a GraphQL connection into its node dicts."""
    if not connection:
        return []
    return [(edge or {}).get("node") or {} for edge in connection.get("edges") or []]


def _money(price_set: Optional[Dict[str, Any]]) -> Optional[str]:
    if not price_set:
        return None
    amount = (price_set.get("shopMoney") or {}).get("amount")
    return None if amount is None else str(amount)


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _level_available(level: Dict[str, Any]) -> int:
    """Available units at one location (legacy `available` or `quantities`)."""
    if "available" in level:
        return to_int(level.get("available")) or 0
    for quantity in level.get("quantities") or []:
        if quantity.get("name") == "available":
            return to_int(quantity.get("quantity")) or 0
    return 0


def _order_number_from_name(name: Optional[str]) -> Optional[int]:
    if not name:
        return None
    digits = re.sub(r"\D", "", name)
    return int(digits) if digits else None


# ── GraphQL ───────────────────────────────────────────────────────

def variant_from_graphql(node: Dict[str, Any]) -> Variant:
    inventory_item = node.get("inventoryItem") or {}
    levels_connection = inventory_item.get("inventoryLevels")
    levels = None
    if levels_connection is not None:
        levels = [_level_available(level) for level in edge_nodes(levels_connection)]
    return Variant(
        id=numeric_id(node.get("id")),
        title=node.get("title"),
        sku=node.get("sku") or None,
        price=_str_or_none(node.get("price")),
        compare_at_price=_str_or_none(node.get("compareAtPrice")),
        inventory_quantity=to_int(node.get("inventoryQuantity")),
        inventory_item_id=numeric_id(inventory_item.get("id")) or None,
        inventory_levels=levels,
    )


def product_from_graphql(node: Dict[str, Any]) -> Product:
    featured = node.get("featuredImage") or {}
    return Product(
        id=numeric_id(node.get("id")),
        title=node.get("title"),
        handle=node.get("handle"),
        description_html=node.get("descriptionHtml"),
        vendor=node.get("vendor") or None,
        product_type=node.get("productType") or None,
        tags=list(node.get("tags") or []),
        status=(node.get("status") or "").lower() or None,
        featured_image_url=featured.get("url"),
        variants=[variant_from_graphql(v) for v in edge_nodes(node.get("variants"))],
        collections=[c.get("title") for c in edge_nodes(node.get("collections")) if c.get("title")],
        created_at=node.get("createdAt"),
        updated_at=node.get("updatedAt"),
    )


def order_from_graphql(node: Dict[str, Any]) -> Order:
    customer_node = node.get("customer")
    customer = None
    if customer_node:
        orders_count = customer_node.get("numberOfOrders", customer_node.get("ordersCount"))
        customer = Customer(
            id=numeric_id(customer_node.get("id")),
            email=customer_node.get("email"),
            orders_count=to_int(orders_count),
        )

    line_items = []
    for item in edge_nodes(node.get("lineItems")):
        unit_price = _money(item.get("originalUnitPriceSet"))
        if unit_price is None:
            unit_price = _str_or_none((item.get("variant") or {}).get("price"))
        line_items.append(
            LineItem(
                quantity=to_int(item.get("quantity")) or 0,
                title=item.get("title") or item.get("name") or "",
                sku=item.get("sku") or None,
                unit_price=unit_price,
            )
        )

    name = node.get("name")
    return Order(
        id=numeric_id(node.get("id")),
        name=name,
        order_number=_order_number_from_name(name),
        created_at=node.get("createdAt"),
        cancelled_at=node.get("cancelledAt"),
        email=node.get("email") or (customer.email if customer else None),
        customer=customer,
        total_price=_money(node.get("totalPriceSet")),
        current_total_price=_money(node.get("currentTotalPriceSet")),
        has_refunds=bool(node.get("refunds")),
        line_items=line_items,
    )


# ── REST ──────────────────────────────────────────────────────────

def product_from_rest(data: Dict[str, Any]) -> Product:
    raw_tags = data.get("tags") or ""
    tags = raw_tags if isinstance(raw_tags, list) else raw_tags.split(",")
    variants = [
        Variant(
            id=numeric_id(v.get("id")),
            title=v.get("title"),
            sku=v.get("sku") or None,
            price=_str_or_none(v.get("price")),
            compare_at_price=_str_or_none(v.get("compare_at_price")),
            inventory_quantity=to_int(v.get("inventory_quantity")),
            inventory_item_id=_str_or_none(v.get("inventory_item_id")),
        )
        for v in data.get("variants") or []
    ]
    image = data.get("image") or {}
    return Product(
        id=numeric_id(data.get("id")),
        title=data.get("title"),
        handle=data.get("handle"),
        description_html=data.get("body_html"),
        vendor=data.get("vendor") or None,
        product_type=data.get("product_type") or None,
        tags=[t for t in tags if t is not None],
        status=data.get("status"),
        featured_image_url=image.get("src"),
        variants=variants,
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
    )


def order_from_rest(data: Dict[str, Any]) -> Order:
    customer_data = data.get("customer")
    customer = None
    if customer_data:
        customer = Customer(
            id=numeric_id(customer_data.get("id")),
            email=customer_data.get("email"),
            orders_count=to_int(customer_data.get("orders_count")),
        )
    line_items = [
        LineItem(
            quantity=to_int(item.get("quantity")) or 0,
            title=item.get("name") or item.get("title") or "",
            sku=item.get("sku") or None,
            unit_price=_str_or_none(item.get("price")),
        )
        for item in data.get("line_items") or []
    ]
    return Order(
        id=numeric_id(data.get("id")),
        name=data.get("name"),
        order_number=to_int(data.get("order_number")),
        created_at=data.get("created_at"),
        cancelled_at=data.get("cancelled_at"),
        email=data.get("email") or None,
        customer=customer,
        total_price=_str_or_none(data.get("total_price")),
        current_total_price=_str_or_none(data.get("current_total_price")),
        has_refunds=bool(data.get("refunds")),
        line_items=line_items,
    )
