"""
Analytics schemas — sales report computed from a window of orders.
Version: 1.0.0
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class ProductSales(BaseModel):
    name: str
    sku: Optional[str] = None
    quantity: int = 0
    revenue: float = 0.0


class DailyMetrics(BaseModel):
    orders: int = 0
    revenue: float = 0.0
    items: int = 0


class AnalyticsReport(BaseModel):
    # Core performance
    total_sales: float = 0.0
    net_sales: float = 0.0
    total_refunds: float = 0.0
    total_orders: int = 0
    valid_orders: int = 0
    cancelled_orders: int = 0
    unique_customers: int = 0
    avg_order_value: float = 0.0
    total_items_sold: int = 0
    avg_items_per_order: float = 0.0
    unique_products: int = 0

    # Customer behaviour
    first_time_orders: int = 0
    first_time_orders_percent: float = 0.0
    returning_customers: int = 0
    returning_orders: int = 0
    returning_orders_percent: float = 0.0
    avg_orders_per_customer: float = 0.0
    avg_orders_per_returning_customer: float = 0.0
    customer_retention_rate: float = 0.0

    top_products_by_quantity: List[ProductSales] = Field(default_factory=list)
    top_products_by_revenue: List[ProductSales] = Field(default_factory=list)
    orders_by_date: Dict[str, DailyMetrics] = Field(default_factory=dict)
