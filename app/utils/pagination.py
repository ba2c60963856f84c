from typing import Optional, Any, Callable, List, TypeVar, Generic
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from pydantic import BaseModel
from app.core.logging import logger

T = TypeVar('T')


class PaginatedResponse(BaseModel, Generic[T]):
    """Response wrapper for paginated results."""

    items: List[T]
    total: int
    page: int
    size: int
    pages: int
    has_next: bool
    has_prev: bool


class PaginationParams:
    """Parameters for pagination."""

    def __init__(
        self,
        page: int = 1,
        size: int = 20,
        search: Optional[str] = None,
        sort_by: str = "id",
        sort_order: str = "asc"
    ):
        self.page = page
        self.size = size
        self.search = search
        self.sort_by = sort_by
        self.sort_order = sort_order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


async def paginate_query(
    db: AsyncSession,
    query: Any,
    pagination: PaginationParams,
    model: Any = None,
    transform: Optional[Callable[[Any], Any]] = None,
) -> PaginatedResponse[Any]:
    """
    Paginate a select with optional sorting on a model column.

    Args:
        db: Database session
        query: SQLAlchemy select; may select several entities
        pagination: Pagination parameters
        model: Model whose column ``pagination.sort_by`` names
        transform: Applied to each result row to build the response items

    Returns:
        One page of items with paging metadata
    """
    total = (await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )).scalar() or 0

    if model is not None and hasattr(model, pagination.sort_by):
        sort_col = getattr(model, pagination.sort_by)
        query = query.order_by(sort_col.desc() if pagination.sort_order == "desc" else sort_col.asc())
    else:
        logger.debug(f"Skipping sort: invalid field '{pagination.sort_by}' for model {model}")

    result = await db.execute(query.offset(pagination.offset).limit(pagination.size))
    rows = result.all()
    items = [transform(row) for row in rows] if transform else [row[0] for row in rows]

    pages = (total + pagination.size - 1) // pagination.size if total else 0
    return PaginatedResponse(
        items=items,
        total=total,
        page=pagination.page,
        size=pagination.size,
        pages=pages,
        has_next=pagination.page < pages,
        has_prev=pagination.page > 1,
    )
