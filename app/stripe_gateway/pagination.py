"""
Cursor-based pagination over Stripe listing endpoints.

Stripe listings take a page size (``limit``) and a cursor
(``starting_after``: the id of the last item already seen). The walker
fetches page after page until the listing is exhausted and returns every
item in one list.

Usage:
    from stripe_gateway.pagination import collect_all

    summaries = collect_all(
        adapter.list_customers_page,
        page_size=100,
        predicate=lambda c: c.category == "gold",
        transform=CustomerSummary.from_customer,
    )
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Protocol, TypeVar

from stripe_gateway.types import Page

logger = logging.getLogger(__name__)

# Stripe rejects list requests with a limit above 100
MAX_PAGE_SIZE = 100

T = TypeVar("T")
R = TypeVar("R")


class PageFetcher(Protocol[T]):
    """Callable returning one listing page for a limit and a cursor."""

    def __call__(self, limit: int, starting_after: str | None = None) -> Page[T]: ...


def collect_all(
    fetch_page: PageFetcher[T],
    page_size: int = MAX_PAGE_SIZE,
    transform: Callable[[T], R] | None = None,
    predicate: Callable[[T], bool] | None = None,
) -> list[Any]:
    """
    Walk a listing endpoint to completion.

    Each page is filtered and transformed as soon as it arrives, so items
    rejected by ``predicate`` are never accumulated.

    The walk continues while the gateway reports ``has_more``. When a page
    carries no such flag, a full page (``len == page_size``) is taken to
    mean there may be more. An empty page always ends the walk.

    Args:
        fetch_page: Called as ``fetch_page(limit, starting_after)``
        page_size: Items per request (1-100)
        transform: Optional projection applied to kept items
        predicate: Optional filter applied before ``transform``

    Returns:
        All kept items, in gateway order

    Raises:
        ValueError: page_size outside 1-100
        StripeGatewayError: Propagated from ``fetch_page``
    """
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

    collected: list[Any] = []
    cursor: str | None = None
    pages = 0

    while True:
        page = fetch_page(page_size, cursor)
        pages += 1
        items = page.items

        for item in items:
            if predicate is not None and not predicate(item):
                continue
            collected.append(transform(item) if transform is not None else item)

        if not items:
            break
        has_more = page.has_more
        if has_more is None:
            has_more = len(items) == page_size
        if not has_more:
            break
        cursor = items[-1].id

    logger.debug(
        "Pagination complete",
        extra={"pages": pages, "count": len(collected), "page_size": page_size},
    )
    return collected
