# domaincms/normalizers/pagination.py
from typing import Callable, Any, List, Dict


def normalize_pagination(
    items: List[Any],
    normalize_fn: Callable[[Any], Dict[str, Any]],
    *,
    page: int,
    per_page: int,
    total: int,
    items_key: str = "items",
    size_key: str = "pageSize",
) -> Dict[str, Any]:
    """
    Normalize offset-paginated API responses.

    ``items_key`` names the resource list (``tables``, ``users``) and
    ``size_key`` mirrors the query arg the caller used for the page size.
    """
    return {
        items_key: [normalize_fn(item) for item in items],
        "pagination": {
            "page": page,
            size_key: per_page,
            "total": total,
            "totalPages": (total + per_page - 1) // per_page if per_page else 0,
        },
    }
