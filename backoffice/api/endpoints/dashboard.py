"""
Financial dashboard endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.deps import get_current_user, get_db
from backoffice.models.user import User
from backoffice.schemas.dashboard import DashboardSummary
from backoffice.services.aggregation import AggregationEngine
from backoffice.services.ranges import resolve_range

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/summary", response_model=DashboardSummary)
async def dashboard_summary(
    from_: str | None = Query(default=None, alias="from"),
    to: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> DashboardSummary:
    """KPIs, daily revenue and top products/offers for ``from``..``to`` (inclusive)."""
    rng = resolve_range(from_, to)
    return await AggregationEngine(db).summary(rng)
