"""
Pagination utilities
"""

from typing import Any, Dict, List, Optional
from urllib.parse import urlencode
import math

from storefront.core.config import settings

DEFAULT_LIMIT = settings.DEFAULT_PAGE_SIZE
PRODUCTS_BASE_URL = "/api/products"

def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for `total` items"""
    return math.ceil(total / limit) if total > 0 else 0

def page_link(
    base_url: str,
    page: int,
    limit: int,
    query: Optional[str] = None,
    sort: Optional[str] = None,
) -> str:
    """Navigation link keeping the active filter, sort and non-default limit"""
    params = {}
    if limit != DEFAULT_LIMIT:
        params["limit"] = limit
    if query:
        params["query"] = query
    if sort:
        params["sort"] = sort
    params["page"] = page
    return f"{base_url}?{urlencode(params)}"

def paginate(
    items: List[Any],
    total: int,
    page: int,
    limit: int,
    query: Optional[str] = None,
    sort: Optional[str] = None,
    base_url: str = PRODUCTS_BASE_URL,
) -> Dict[str, Any]:
    """
    Build the page envelope for a listing

    Args:
        items: Records on the requested page
        total: Number of records matching the filter
        page: Requested page (1-indexed)
        limit: Page size
        query: Active filter, echoed into links
        sort: Active sort, echoed into links
        base_url: Path the links point at

    Returns:
        Dictionary with payload and pagination metadata
    """
    pages = total_pages(total, limit)
    has_prev = page > 1
    has_next = page < pages

    return {
        "payload": items,
        "total_docs": total,
        "limit": limit,
        "total_pages": pages,
        "page": page,
        "prev_page": page - 1 if has_prev else None,
        "next_page": page + 1 if has_next else None,
        "has_prev_page": has_prev,
        "has_next_page": has_next,
        "prev_link": page_link(base_url, page - 1, limit, query, sort) if has_prev else None,
        "next_link": page_link(base_url, page + 1, limit, query, sort) if has_next else None,
    }
