import math
from typing import Dict, Any

MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = 20

# Company directory listing
COMPANIES_MAX_PAGE_SIZE = 20
COMPANIES_DEFAULT_PAGE_SIZE = 12


def clamp_limit(limit: int, maximum: int = MAX_PAGE_SIZE) -> int:
    return max(1, min(limit, maximum))


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Any]:
    """Pagination metadata for a page of a result set of ``total`` rows"""
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "has_next": page * limit < total,
        "has_prev": page > 1,
    }
