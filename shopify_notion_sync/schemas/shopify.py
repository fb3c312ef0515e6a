"""
Shopify schemas — normalized product and order models.

Both source strategies (GraphQL and REST) parse into these models so the
mapper and orchestrator never see API-specific shapes.
Version: 1.0.0
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class Variant(BaseModel):
    id: str
    title: Optional[str] = None
    sku: Optional[str] = None
    price: Optional[str] = None
    compare_at_price: Optional[str] = None
    inventory_quantity: Optional[int] = None
    inventory_item_id: Optional[str] = None
    # available per location; None when multi-location data wasn't fetched
    inventory_levels: Optional[List[int]] = None


class Product(BaseModel):
    id: str  # numeric external id, e.g. "123456"
    title: Optional[str] = None
    handle: Optional[str] = None
    description_html: Optional[str] = None
    vendor: Optional[str] = None
    product_type: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: Optional[str] = None  # active | draft | archived
    featured_image_url: Optional[str] = None
    variants: List[Variant] = Field(default_factory=list)
    collections: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def default_variant(self) -> Optional[Variant]:
        return self.variants[0] if self.variants else None


class Customer(BaseModel):
    """Order-time view of a customer; only used for aggregate classification."""
    id: str
    email: Optional[str] = None
    orders_count: Optional[int] = None


class LineItem(BaseModel):
    quantity: int
    title: str
    sku: Optional[str] = None
    unit_price: Optional[str] = None


class Order(BaseModel):
    id: str  # numeric external id
    name: Optional[str] = None  # "#1001"
    order_number: Optional[int] = None
    created_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    email: Optional[str] = None
    customer: Optional[Customer] = None
    total_price: Optional[str] = None
    current_total_price: Optional[str] = None
    has_refunds: bool = False
    line_items: List[LineItem] = Field(default_factory=list)

    @property
    def label(self) -> str:
        if self.name:
            return self.name
        if self.order_number is not None:
            return str(self.order_number)
        return self.id
