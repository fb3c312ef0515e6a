"""
Notion payload builder — pure transformation from Shopify models to Notion properties.

Kept separate from the Notion client so the client contains only HTTP
transport and the mapping can be unit-tested without network calls.
Version: 1.0.0
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Union

from shopify_notion_sync.core.constants import notion as props
from shopify_notion_sync.core.constants.notion import (
    DEFAULT_PRODUCT_TITLE,
    MAX_MULTI_SELECT_OPTIONS,
    MAX_RICH_TEXT_LENGTH,
    MAX_SELECT_LENGTH,
)
from shopify_notion_sync.core.exceptions import MappingError
from shopify_notion_sync.schemas.shopify import Order, Product, Variant
from shopify_notion_sync.utils.type_converters import to_float

logger = logging.getLogger("notion_payload_builder")

_TAG_RE = re.compile(r"<[^>]*>")


# ── Value helpers ─────────────────────────────────────────────────

def strip_html(text: Optional[str]) -> str:
    """Remove every <...> tag. Entities are left as-is."""
    if not text:
        return ""
    return _TAG_RE.sub("", text)


def truncate(text: Optional[str], limit: int = MAX_RICH_TEXT_LENGTH) -> str:
    return (text or "")[:limit]


def normalize_tags(tags: Union[str, Iterable[str], None]) -> List[str]:
    """
    Clean a tag list for a multi-select property.

    Accepts a list or a comma-separated string. Entries are trimmed,
    empties dropped, each cut to 100 chars, duplicates removed keeping
    the first occurrence, and the result capped at 100 options.
    """
    if not tags:
        return []
    raw = tags.split(",") if isinstance(tags, str) else list(tags)
    cleaned: List[str] = []
    seen = set()
    for tag in raw:
        name = (tag or "").strip()[:MAX_SELECT_LENGTH]
        if not name or name in seen:
            continue
        seen.add(name)
        cleaned.append(name)
        if len(cleaned) >= MAX_MULTI_SELECT_OPTIONS:
            break
    return cleaned


def parse_price(value: Any) -> float:
    """Price as float; missing or unparseable becomes 0.0."""
    parsed = to_float(value)
    return parsed if parsed is not None else 0.0


def parse_optional_price(value: Any) -> Optional[float]:
    """Price as float, or None when absent (never coerced to 0)."""
    return to_float(value)


def variant_stock(variant: Variant) -> int:
    """Stock for one variant: sum over locations when known, else inventory_quantity."""
    if variant.inventory_levels:
        return sum(variant.inventory_levels)
    return variant.inventory_quantity or 0


def total_inventory(product: Product) -> int:
    return sum(variant_stock(v) for v in product.variants)


def select_option(value: Optional[str]) -> Optional[Dict[str, str]]:
    if not value:
        return None
    return {"name": value[:MAX_SELECT_LENGTH]}


def _rich_text(content: Optional[str]) -> Dict[str, Any]:
    return {"rich_text": [{"text": {"content": truncate(content)}}]}


def _title(content: str) -> Dict[str, Any]:
    return {"title": [{"text": {"content": truncate(content)}}]}


def _date(value: Optional[str]) -> Dict[str, Any]:
    return {"date": {"start": value} if value else None}


def product_url(store_domain: str, handle: Optional[str]) -> str:
    return f"https://{store_domain}/products/{handle or ''}"


# ── Builders ──────────────────────────────────────────────────────

def build_product_properties(product: Product, store_domain: str, synced_at: str) -> Dict[str, Any]:
    """
    Map a product to the Notion products database property bag.

    Args:
        product: Normalized Shopify product
        store_domain: e.g. "my-store.myshopify.com"
        synced_at: ISO timestamp of this write

    Returns:
        Properties dict for pages.create / pages.update

    Raises:
        MappingError: product has no id to key the page on
    """
    if not product.id:
        raise MappingError(f"Product \"{product.title}\" has no id")
    default_variant = product.default_variant or Variant(id="")
    collections = ", ".join(product.collections)

    properties: Dict[str, Any] = {
        props.PRODUCT_NAME: _title(product.title or DEFAULT_PRODUCT_TITLE),
        props.PRODUCT_ID: _rich_text(product.id),
        props.DESCRIPTION: _rich_text(strip_html(product.description_html)),
        props.VENDOR: {"select": select_option(product.vendor)},
        props.PRODUCT_TYPE: {"select": select_option(product.product_type)},
        props.TAGS: {"multi_select": [{"name": t} for t in normalize_tags(product.tags)]},
        props.IMAGE_URL: {"url": product.featured_image_url or None},
        props.PRODUCT_HANDLE: _rich_text(product.handle),
        props.DEFAULT_VARIANT_SKU: _rich_text(default_variant.sku),
        props.DEFAULT_VARIANT_PRICE: {"number": parse_price(default_variant.price)},
        props.COMPARE_AT_PRICE: {"number": parse_optional_price(default_variant.compare_at_price)},
        props.INVENTORY_ITEM_ID: _rich_text(default_variant.inventory_item_id),
        props.CURRENT_STOCK: {"number": total_inventory(product)},
        props.TOTAL_VARIANTS: {"number": len(product.variants)},
        props.COLLECTIONS: _rich_text(collections),
        props.PRODUCT_URL: {"url": product_url(store_domain, product.handle)},
        props.LAST_SYNCED_AT: {"date": {"start": synced_at}},
    }

    if product.status:
        properties[props.STATUS] = {"select": select_option(product.status)}

    return properties


def summarize_line_items(order: Order) -> str:
    """'2x Shirt (SKU: S1), 1x Hat' style summary."""
    parts = []
    for item in order.line_items:
        entry = f"{item.quantity}x {item.title}"
        if item.sku:
            entry += f" (SKU: {item.sku})"
        parts.append(entry)
    return ", ".join(parts)


def build_order_properties(order: Order, synced_at: str) -> Dict[str, Any]:
    """Map an order to the Notion orders database property bag."""
    if not order.id:
        raise MappingError(f"Order {order.label or '?'} has no id")
    total_items = sum(item.quantity for item in order.line_items)
    current_total = parse_optional_price(order.current_total_price)

    return {
        props.ORDER_ID: _title(order.id),
        props.ORDER_NUMBER: {"number": order.order_number or 0},
        props.CREATED_AT: _date(order.created_at),
        props.CANCELLED_AT: _date(order.cancelled_at),
        props.CUSTOMER_EMAIL: {"email": order.email or None},
        props.TOTAL_PRICE: {"number": parse_price(order.total_price)},
        props.CURRENT_TOTAL_PRICE: {"number": current_total},
        props.HAS_REFUNDS: {"checkbox": order.has_refunds},
        props.PRODUCTS_PURCHASED: _rich_text(summarize_line_items(order)),
        props.TOTAL_ITEMS: {"number": total_items},
        props.LAST_SYNCED_AT: {"date": {"start": synced_at}},
    }
