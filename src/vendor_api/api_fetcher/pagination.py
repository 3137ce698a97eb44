"""
Pagination loops, one per strategy.

Every loop fetches pages strictly one after the other and appends the
extracted items in fetch order. Fetch errors propagate unchanged, so a
failing page discards everything gathered before it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from .errors import UnsupportedPaginationError
from .normalizer import extract_items
from .request_builder import RequestDescriptor
from .schema import (
    CursorPagination,
    NonePagination,
    OffsetPagination,
    PageBeanPagination,
    PaginationStrategy,
    UnsupportedPagination,
)


logger = logging.getLogger(__name__)

Fetcher = Callable[[RequestDescriptor], Any]

PAGEBEAN_FIELDS = ("isLast", "nextPage", "startAt", "maxResults", "total")


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def paginate(
    strategy: PaginationStrategy,
    request: RequestDescriptor,
    fetch: Fetcher,
    items_path: Optional[str] = None,
    endpoint_name: str = "",
) -> List[Any]:
    """Run the loop matching ``strategy`` and return the accumulated items."""
    if isinstance(strategy, NonePagination):
        return _paginate_none(request, fetch, items_path)
    if isinstance(strategy, PageBeanPagination):
        return _paginate_pagebean(strategy, request, fetch, items_path, endpoint_name)
    if isinstance(strategy, CursorPagination):
        return _paginate_cursor(strategy, request, fetch, items_path, endpoint_name)
    if isinstance(strategy, OffsetPagination):
        raise UnsupportedPaginationError(
            f"Offset pagination is not supported (endpoint '{endpoint_name}')"
        )
    if isinstance(strategy, UnsupportedPagination):
        raise UnsupportedPaginationError(
            f"Unrecognized pagination config {strategy.raw!r} (endpoint '{endpoint_name}')"
        )
    raise UnsupportedPaginationError(
        f"Unsupported pagination strategy {type(strategy).__name__} (endpoint '{endpoint_name}')"
    )


def _paginate_none(
    request: RequestDescriptor, fetch: Fetcher, items_path: Optional[str]
) -> List[Any]:
    payload = fetch(request)
    return extract_items(payload, items_path)


def _paginate_pagebean(
    strategy: PageBeanPagination,
    request: RequestDescriptor,
    fetch: Fetcher,
    items_path: Optional[str],
    endpoint_name: str,
) -> List[Any]:
    start_param = strategy.start_at_param
    max_param = strategy.max_results_param

    page_size = _as_int(request.get_param(max_param))
    if page_size is None and strategy.max_results is not None:
        page_size = strategy.max_results
        request = request.with_param(max_param, page_size)
    if request.get_param(start_param) is None and strategy.start_at:
        request = request.with_param(start_param, strategy.start_at)

    results: List[Any] = []
    page = 0

    while True:
        page += 1
        payload = fetch(request)
        items = extract_items(payload, items_path)
        results.extend(items)
        logger.debug(f"{endpoint_name}: page {page} returned {len(items)} item(s)")

        if not isinstance(payload, dict):
            break
        if not any(field in payload for field in PAGEBEAN_FIELDS):
            break
        if payload.get("isLast") is True:
            break

        next_page = payload.get("nextPage")
        if isinstance(next_page, str) and next_page:
            next_request = request.with_url(next_page)
            # Compare decoded parts: encoding and parameter order may differ.
            if next_request.url == request.url and sorted(next_request.query) == sorted(request.query):
                logger.warning(f"{endpoint_name}: nextPage points at the current page, stopping")
                break
            request = next_request
            continue

        page_start = _as_int(payload.get("startAt"))
        if page_start is None:
            page_start = _as_int(request.get_param(start_param)) or strategy.start_at

        reported_size = _as_int(payload.get("maxResults"))
        if reported_size:
            page_size = reported_size

        increment = page_size or len(items)
        if increment <= 0:
            break
        if page_size and len(items) < page_size:
            break

        next_start = page_start + increment
        total = payload.get("total")
        if isinstance(total, (int, float)) and not isinstance(total, bool) and next_start >= total:
            break

        request = request.with_param(start_param, next_start)

    return results


def _paginate_cursor(
    strategy: CursorPagination,
    request: RequestDescriptor,
    fetch: Fetcher,
    items_path: Optional[str],
    endpoint_name: str,
) -> List[Any]:
    results: List[Any] = []
    token = strategy.initial_token
    page = 0

    while True:
        page += 1
        page_request = request.with_param(strategy.page_size_field, strategy.default_page_size)
        if token:
            page_request = page_request.with_param(strategy.next_token_field, token)

        payload = fetch(page_request)
        items = extract_items(payload, items_path)
        results.extend(items)
        logger.debug(f"{endpoint_name}: page {page} returned {len(items)} item(s)")

        # Only an explicit false keeps the loop going.
        if not isinstance(payload, dict) or payload.get(strategy.last_field) is not False:
            break

        token = payload.get(strategy.next_token_field)

    return results
