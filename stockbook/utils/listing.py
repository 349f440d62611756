import math
from typing import Dict, List, Tuple

from fastapi import HTTPException
from sqlalchemy.orm import Query

from stockbook.schemas.common import Pagination

MAX_PAGE_SIZE = 100


def apply_sort(query: Query, sort: str, columns: Dict[str, object], tiebreaker) -> Query:
    """
    Ordena según la convención del frontend: "campo" ascendente, "-campo" descendente.
    Siempre agrega el id como desempate para que la paginación sea estable.
    """
    descending = sort.startswith("-")
    field = sort.lstrip("-+")
    column = columns.get(field)
    if column is None:
        raise HTTPException(status_code=400, detail=f"Invalid sort field '{field}'")
    if descending:
        return query.order_by(column.desc(), tiebreaker.desc())
    return query.order_by(column.asc(), tiebreaker.asc())


def paginate(query: Query, page: int, limit: int) -> Tuple[List, Pagination]:
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    pagination = Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit) if limit else 0,
    )
    return items, pagination


def list_payload(items: List, pagination: Pagination) -> dict:
    return {
        "success": True,
        "count": len(items),
        "total": pagination.total,
        "pagination": pagination,
        "data": items,
    }
