"""Page-based listing shared by every collection endpoint.

Routers take ``PaginationParams`` as a dependency, services hand the
filtered ``Select`` to ``paginate`` and routers serialise the result with
``PaginatedResponse.envelope``.
"""


import math
from typing import Any, Generic, Optional, Sequence, TypeVar

from fastapi import Query
from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from optitalent.common.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from optitalent.common.filters import apply_sorting

T = TypeVar("T")


class PaginationParams:
    """``?page=&page_size=&sort=`` query parameters."""

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="1-indexed page"),
        page_size: int = Query(
            default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE,
            description=f"Rows per page (max {MAX_PAGE_SIZE})",
        ),
        sort: Optional[str] = Query(
            default=None,
            description='Column to order by; "-" prefix for descending, e.g. "-created_at"',
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size
        self.sort = sort

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, page_size: int) -> "PaginationMeta":
        pages = math.ceil(total / page_size) if total else 0
        return cls(
            page=page,
            page_size=page_size,
            total=total,
            total_pages=pages,
            has_next=page < pages,
            has_prev=page > 1,
        )


class PaginatedResponse(BaseModel, Generic[T]):
    """ORM rows for one page plus the meta block."""

    data: Sequence[T]
    meta: PaginationMeta

    def envelope(self, schema: type[BaseModel]) -> dict[str, Any]:
        """JSON-ready ``{"data": [...], "meta": {...}}`` with rows rendered through *schema*."""
        return {
            "data": [schema.model_validate(row).model_dump(mode="json") for row in self.data],
            "meta": self.meta.model_dump(),
        }


async def paginate(
    session: AsyncSession,
    query: Select,
    params: PaginationParams,
    *,
    model: Any = None,
) -> PaginatedResponse:
    """Run *query* for the requested page.

    ``params.sort`` is only honoured when *model* is given; names that are
    not mapped columns of *model* leave the order untouched.
    """
    if params.sort and model is not None:
        query = apply_sorting(query, model, params.sort)

    total: int = await session.scalar(
        select(func.count()).select_from(query.order_by(None).subquery())
    ) or 0
    rows = (
        await session.scalars(query.offset(params.offset).limit(params.page_size))
    ).all()

    return PaginatedResponse(
        data=rows,
        meta=PaginationMeta.build(total, params.page, params.page_size),
    )
