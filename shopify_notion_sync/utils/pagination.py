"""
Pagination helpers — cursor/page-token loop and REST Link header parsing.
Version: 1.0.0
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, List, Optional, TypeVar

logger = logging.getLogger("pagination")

T = TypeVar("T")

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


@dataclass
class Page(Generic[T]):
    """One page of a remote collection."""
    items: List[T] = field(default_factory=list)
    has_next: bool = False
    next_token: Optional[str] = None


async def collect_pages(
    fetch_page: Callable[[Optional[str]], Awaitable[Page[T]]],
    start_token: Optional[str] = None,
    label: str = "records",
) -> List[T]:
    """
    Fetch every page and concatenate the items in source order.

    Stops when a page reports no further pages or carries no next token.
    Any exception raised by fetch_page propagates; partial results are
    discarded.
    """
    collected: List[T] = []
    token = start_token
    while True:
        page = await fetch_page(token)
        collected.extend(page.items)
        logger.info(f"Fetched {len(collected)} {label} so far...")
        if not page.has_next or not page.next_token:
            break
        token = page.next_token
    return collected


def parse_next_link(link_header: Optional[str]) -> Optional[str]:
    """
    Extract the rel="next" URL from a Shopify REST Link header.

    Format:
        <https://shop/admin/api/2024-10/products.json?page_info=abc>; rel="next"
    """
    if not link_header:
        return None
    for part in link_header.split(","):
        match = _NEXT_LINK_RE.search(part)
        if match:
            return match.group(1)
    return None


def chunked(items: List[Any], size: int) -> List[List[Any]]:
    """Split items into consecutive chunks of at most size elements."""
    return [items[i:i + size] for i in range(0, len(items), size)]
