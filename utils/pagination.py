"""
Pagination contract shared by every list endpoint.

Input: ?page (1-based, default 1) and ?limit (default DEFAULT_PAGE_LIMIT,
clamped to MAX_PAGE_LIMIT). Output envelope:
    {"data": [...], "total": n, "page": p, "limit": l, "totalPages": ceil(n / l)}
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Tuple

from flask import request, abort, current_app
from sqlalchemy import func, select

# OFFSET is bound as a signed 64-bit integer
MAX_OFFSET = 2 ** 63 - 1


def parse_pagination() -> Tuple[int, int]:
    default_limit = current_app.config.get("DEFAULT_PAGE_LIMIT", 10)
    max_limit = current_app.config.get("MAX_PAGE_LIMIT", 100)
    try:
        page = int(request.args.get("page", "1"))
        limit = int(request.args.get("limit", str(default_limit)))
    except ValueError:
        abort(400, description="page and limit must be integers")
    if page < 1:
        page = 1
    if limit < 1:
        limit = 1
    if limit > max_limit:
        limit = max_limit
    if (page - 1) * limit > MAX_OFFSET:
        abort(400, description="page is out of range")
    return page, limit


def envelope(data: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "data": data,
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": math.ceil(total / limit) if limit else 0,
    }


def paginate(session, stmt, page: int, limit: int, *, scalars: bool = True) -> Tuple[list, int]:
    """
    Run the count and the page query for one select().

    The count wraps the very same statement (ordering stripped) in a
    subquery, so both queries always share one WHERE clause.
    """
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    total = session.execute(count_stmt).scalar_one()

    page_stmt = stmt.limit(limit).offset((page - 1) * limit)
    result = session.execute(page_stmt)
    rows = result.scalars().all() if scalars else result.all()
    return rows, total


