"""
Analytics service — sales report for a trailing window of orders.

calculate_analytics() is pure; AnalyticsService.run() fetches the
window's orders through the configured source, computes the report and
files it as one new page in the analytics database.
Version: 1.0.0
"""
import logging
from datetime import datetime, time, timedelta
from typing import Any, Callable, Dict, List, Optional

from shopify_notion_sync.clients.notion_client import NotionClient
from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.constants.analytics import DEFAULT_PERIOD_DAYS, TOP_PRODUCTS_LIMIT
from shopify_notion_sync.schemas.analytics import AnalyticsReport, DailyMetrics, ProductSales
from shopify_notion_sync.schemas.shopify import Order
from shopify_notion_sync.services.source_base import PaginatedSource
from shopify_notion_sync.services.sync_service import utc_now
from shopify_notion_sync.utils.notion_payload_builder import parse_price, truncate

logger = logging.getLogger("analytics_service")


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0.0


def _ratio(part: float, whole: float) -> float:
    return part / whole if whole else 0.0


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def calculate_analytics(orders: List[Order], top_n: int = TOP_PRODUCTS_LIMIT) -> AnalyticsReport:
    """
    Compute sales and customer metrics.

    Cancelled orders are only counted (cancelled_orders); they contribute
    nothing else. Refunds are total - current for orders with refunds.
    A customer whose lifetime order count is 1 marks a first-time order;
    a count above 1 marks a returning customer.
    """
    report = AnalyticsReport(total_orders=len(orders))
    unique_products = set()
    customers: Dict[str, Dict[str, Any]] = {}
    product_sales: Dict[str, ProductSales] = {}
    by_date: Dict[str, DailyMetrics] = {}

    for order in orders:
        if order.cancelled_at:
            report.cancelled_orders += 1
            continue

        amount = parse_price(order.total_price)
        current = parse_price(order.current_total_price if order.current_total_price is not None else order.total_price)
        report.total_sales += amount
        report.net_sales += current
        if order.has_refunds:
            report.total_refunds += amount - current

        if order.customer:
            entry = customers.setdefault(
                order.customer.id,
                {"orders": 0, "orders_count": order.customer.orders_count or 1},
            )
            entry["orders"] += 1
            if order.customer.orders_count == 1:
                report.first_time_orders += 1

        order_items = 0
        for item in order.line_items:
            order_items += item.quantity
            unique_products.add(item.title)
            sales = product_sales.setdefault(item.title, ProductSales(name=item.title, sku=item.sku))
            sales.quantity += item.quantity
            sales.revenue += item.quantity * parse_price(item.unit_price)
        report.total_items_sold += order_items

        day = (order.created_at or "")[:10] or "unknown"
        daily = by_date.setdefault(day, DailyMetrics())
        daily.orders += 1
        daily.revenue += current
        daily.items += order_items

    returning = [c for c in customers.values() if c["orders_count"] > 1]
    valid = report.total_orders - report.cancelled_orders

    report.valid_orders = valid
    report.unique_customers = len(customers)
    report.unique_products = len(unique_products)
    report.avg_order_value = _ratio(report.net_sales, valid)
    report.avg_items_per_order = _ratio(report.total_items_sold, valid)
    report.avg_orders_per_customer = _ratio(valid, len(customers))
    report.first_time_orders_percent = _percent(report.first_time_orders, len(customers))
    report.returning_customers = len(returning)
    report.returning_orders = sum(c["orders"] for c in returning)
    report.returning_orders_percent = _percent(report.returning_orders, valid)
    report.avg_orders_per_returning_customer = _ratio(report.returning_orders, len(returning))
    report.customer_retention_rate = _percent(len(returning), len(customers))

    ranked = list(product_sales.values())
    report.top_products_by_quantity = sorted(ranked, key=lambda p: p.quantity, reverse=True)[:top_n]
    report.top_products_by_revenue = sorted(ranked, key=lambda p: p.revenue, reverse=True)[:top_n]
    report.orders_by_date = dict(sorted(by_date.items()))
    return report


def period_label(period_start: datetime, period_end: datetime) -> str:
    """'Sep 19 - Oct 19, 2026'"""
    return (
        f"{period_start:%b} {period_start.day} - "
        f"{period_end:%b} {period_end.day}, {period_end.year}"
    )


def build_analytics_properties(
    report: AnalyticsReport,
    period_start: datetime,
    period_end: datetime,
    now: datetime,
) -> Dict[str, Any]:
    top_qty = ", ".join(f"{p.name} ({p.quantity} units)" for p in report.top_products_by_quantity)
    top_revenue = ", ".join(f"{p.name} (${p.revenue:.2f})" for p in report.top_products_by_revenue)

    def number(value: float, digits: int) -> Dict[str, float]:
        return {"number": round(value, digits)}

    return {
        "Period": {"title": [{"text": {"content": period_label(period_start, period_end)}}]},
        "Total Sales": number(report.total_sales, 2),
        "Net Sales": number(report.net_sales, 2),
        "Total Orders": {"number": report.valid_orders},
        "Unique Customers": {"number": report.unique_customers},
        "Average Order Value": number(report.avg_order_value, 2),
        "Items Sold": {"number": report.total_items_sold},
        "Items per Order": number(report.avg_items_per_order, 1),
        "First-time Orders": {"number": report.first_time_orders},
        "First-time %": number(report.first_time_orders_percent, 1),
        "Returning Customers": {"number": report.returning_customers},
        "Returning Orders": {"number": report.returning_orders},
        "Returning %": number(report.returning_orders_percent, 1),
        "Avg Orders/Customer": number(report.avg_orders_per_customer, 2),
        "Avg Orders/Returning": number(report.avg_orders_per_returning_customer, 2),
        "Retention Rate %": number(report.customer_retention_rate, 1),
        "Top Products (Qty)": {"rich_text": [{"text": {"content": truncate(top_qty)}}]},
        "Top Products (Revenue)": {"rich_text": [{"text": {"content": truncate(top_revenue)}}]},
        "Report Date": {"date": {"start": now.isoformat()}},
    }


class AnalyticsService:
    """Computes the sales report and files it in Notion."""

    def __init__(
        self,
        settings: Settings,
        source: PaginatedSource,
        notion_client: NotionClient,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._settings = settings
        self._source = source
        self._notion = notion_client
        self._clock = clock or utc_now

    async def run(self, days: int = DEFAULT_PERIOD_DAYS) -> AnalyticsReport:
        self._settings.require(
            "shopify_store_name", "shopify_access_token", "notion_api_key", "analytics_database_id"
        )
        now = self._clock()
        period_end = datetime.combine(now.date(), time.max, tzinfo=now.tzinfo)
        period_start = datetime.combine((period_end - timedelta(days=days)).date(), time.min, tzinfo=now.tzinfo)
        logger.info(f"Analysis Period: {period_start:%Y-%m-%d} to {period_end:%Y-%m-%d}")

        orders = await self._source.fetch_all_orders(period_start)
        in_window = []
        for order in orders:
            created = _parse_timestamp(order.created_at)
            if created is not None and created > period_end:
                continue
            in_window.append(order)
        logger.info(f"Total orders fetched: {len(orders)} (in window: {len(in_window)})")

        report = calculate_analytics(in_window)
        logger.info(
            f"Analytics: sales=${report.total_sales:.2f} net=${report.net_sales:.2f} "
            f"orders={report.valid_orders} customers={report.unique_customers} "
            f"retention={report.customer_retention_rate:.1f}%"
        )

        properties = build_analytics_properties(report, period_start, period_end, now)
        await self._notion.create_page(self._settings.analytics_database_id, properties)
        logger.info("Analytics saved to Notion successfully!")
        return report
