"""
Sales listing & detail endpoints (read-only; sales are written by the till).
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.deps import get_current_user, get_db
from backoffice.models.user import User
from backoffice.schemas.sale import SaleDetailResponse, SaleListResponse
from backoffice.services import sales_service
from backoffice.services.ranges import resolve_range

router = APIRouter(prefix="/sales", tags=["sales"])


@router.get("", response_model=SaleListResponse)
async def list_sales(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    q: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> SaleListResponse:
    """Search sales in a date range; ``limit``/``offset`` are clamped, not rejected."""
    rng = resolve_range(from_, to)
    return await sales_service.list_sales(db, rng, q=q, limit=limit, offset=offset)


@router.get("/{sale_id}", response_model=SaleDetailResponse)
async def get_sale(
    sale_id: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> SaleDetailResponse:
    """One sale with its line items."""
    return await sales_service.get_sale(
        db, sales_service.parse_id(sale_id, "Invalid sale id")
    )
