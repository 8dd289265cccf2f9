from typing import Optional

from fastapi import Query

from models.common import ListQuery


def list_query(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(10, ge=1, le=100, description="Page size (1-100)"),
    search: Optional[str] = Query(None, description="Case-insensitive substring filter"),
) -> ListQuery:
    return ListQuery(page=page, limit=limit, search=search)
