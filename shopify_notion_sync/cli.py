"""
Command-line interface.

Usage:
    # Full sync (products, then orders when SYNC_ORDERS is on)
    shopify-notion-sync sync

    # REST source, products only
    shopify-notion-sync sync --source rest --products-only

    # Search both systems and export the results
    shopify-notion-sync search "blue shirt" --export
    shopify-notion-sync search summer-sale --export=results.json
    shopify-notion-sync search SKU123 --notion-only

    # Sales analytics for the last 30 days
    shopify-notion-sync analytics --days 30
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from shopify_notion_sync.container import Container
from shopify_notion_sync.core.config import Settings
from shopify_notion_sync.core.constants.analytics import DEFAULT_PERIOD_DAYS
from shopify_notion_sync.schemas.search import SearchOptions
from shopify_notion_sync.services.search_service import export_results, format_results

logger = logging.getLogger("cli")


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shopify-notion-sync",
        description="Mirror Shopify products and orders into Notion, and search both",
    )
    sub = parser.add_subparsers(dest="command")

    sync = sub.add_parser("sync", help="Sync Shopify products and orders to Notion")
    sync.add_argument(
        "--source",
        choices=["graphql", "rest"],
        default=None,
        help="Fetch strategy (default: SYNC_SOURCE_MODE)",
    )
    scope = sync.add_mutually_exclusive_group()
    scope.add_argument("--products-only", action="store_true", help="Skip orders")
    scope.add_argument("--orders-only", action="store_true", help="Skip products")

    search = sub.add_parser("search", help="Search products in Shopify and Notion")
    search.add_argument("keyword", help="Keyword, SKU or collection handle")
    only = search.add_mutually_exclusive_group()
    only.add_argument("--shopify-only", action="store_true", help="Search only in Shopify")
    only.add_argument("--notion-only", action="store_true", help="Search only in Notion")
    search.add_argument(
        "--export",
        nargs="?",
        const="",
        default=None,
        metavar="FILE",
        help="Export results to JSON (optionally to FILE)",
    )

    analytics = sub.add_parser("analytics", help="File a sales analytics report in Notion")
    analytics.add_argument("--days", type=int, default=DEFAULT_PERIOD_DAYS, help="Report window in days")
    analytics.add_argument("--source", choices=["graphql", "rest"], default=None)

    return parser


async def _sync(container: Container, args: argparse.Namespace) -> int:
    service = container.sync_service(args.source)
    if args.products_only:
        results = [await service.sync_products()]
    elif args.orders_only:
        results = [await service.sync_orders()]
    else:
        results = await service.sync_all()

    for result in results:
        logger.info(result.summary_line())
        for failure in result.failures:
            logger.info(f"  failed {failure.label} ({failure.external_id}): {failure.error}")
    return 0


async def _search(container: Container, args: argparse.Namespace) -> int:
    options = SearchOptions(skip_shopify=args.notion_only, skip_notion=args.shopify_only)
    results = await container.search_service.search(args.keyword, options)
    print(format_results(results))
    if args.export is not None:
        path = export_results(results, args.export or None)
        print(f"\nResults exported to: {path}")
    return 0


async def _analytics(container: Container, args: argparse.Namespace) -> int:
    report = await container.analytics_service(args.source).run(days=args.days)
    print(f"Total Sales: ${report.total_sales:.2f}")
    print(f"Net Sales: ${report.net_sales:.2f}")
    print(f"Total Orders: {report.valid_orders}")
    print(f"Unique Customers: {report.unique_customers}")
    print(f"Average Order Value: ${report.avg_order_value:.2f}")
    print(f"Customer Retention: {report.customer_retention_rate:.1f}%")
    return 0


COMMANDS = {
    "sync": _sync,
    "search": _search,
    "analytics": _analytics,
}


def main(argv: Optional[List[str]] = None, container: Optional[Container] = None) -> int:
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    try:
        if container is None:
            settings = Settings.from_env()
            setup_logging(settings.log_level)
            container = Container(settings)
        return asyncio.run(COMMANDS[args.command](container, args))
    except Exception as exc:
        logger.error(f"{args.command} failed: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
