"""
Envelope builders.

Every response body has the shape
    {success, message?, data?, errors?, pagination?}
"""

import math
from typing import Any, Dict, List, Optional


def success_response(data: Any = None, message: str = "Success") -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "message": message}
    if data is not None:
        body["data"] = data
    return body


def created_response(data: Any, message: str = "Resource created successfully") -> Dict[str, Any]:
    return success_response(data, message)


def error_response(
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    error: Optional[str] = None,
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error:
        body["error"] = error
    if errors:
        body["errors"] = errors
    return body


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    """Pagination metadata for a 1-indexed page of `limit` items out of `total`."""
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return {
        "currentPage": page,
        "itemsPerPage": limit,
        "totalItems": total,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }


def paginated_response(
    data: List[Any],
    page: int,
    limit: int,
    total: int,
    message: str = "Data retrieved successfully",
) -> Dict[str, Any]:
    body = success_response(data, message)
    body["pagination"] = build_pagination(page, limit, total)
    return body
