"""
Sales listing & detail queries.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.exceptions import BadRequest, NotFound
from backoffice.models.catalog import Product
from backoffice.models.sale import Sale, SaleDetail
from backoffice.models.user import User
from backoffice.schemas.sale import (SaleDetailRead, SaleDetailResponse,
                                     SaleListItem, SaleListResponse, SaleRead)
from backoffice.services.ranges import DateRange

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
MAX_OFFSET = 1_000_000
# Ids are 32-bit INTEGER columns in the till schema
MAX_ID = 2**31 - 1


def clamp_int(value: Any, lo: int, hi: int, default: int) -> int:
    """Coerce *value* to an int inside ``[lo, hi]``; unparseable → *default*."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(lo, min(hi, number))


def _as_id(text: str) -> int | None:
    """*text* as a row id, or ``None`` when it is not one the column can hold."""
    if not text.isdigit() or not text.isascii() or len(text) > len(str(MAX_ID)):
        return None
    number = int(text)
    return number if 0 < number <= MAX_ID else None


def parse_id(raw: Any, message: str = "Invalid id") -> int:
    """Path ids must be a positive run of digits."""
    number = _as_id(str(raw))
    if number is None:
        raise BadRequest(message)
    return number


def like_pattern(q: str) -> str:
    return f"%{q}%"


def _search_clause(q: str) -> Any:
    """OR-filter for the free text box; ``None`` when the box is empty."""
    if not q:
        return None
    like = like_pattern(q)
    clauses = [Sale.notes.like(like), User.username.like(like)]
    sale_id = _as_id(q)
    if sale_id is not None:
        clauses.append(Sale.id_sale == sale_id)
    return or_(*clauses)


def _sale_read(row: Any) -> dict[str, Any]:
    return {
        "id_sale": row.id_sale,
        "total_amount": float(row.total_amount or 0),
        "notes": row.notes or "",
        "user_id": row.user_id,
        "username": row.username or "",
        "last_updated": row.last_updated,
    }


async def list_sales(
    db: AsyncSession,
    rng: DateRange,
    q: str | None = None,
    limit: Any = None,
    offset: Any = None,
) -> SaleListResponse:
    """Page of sales in *rng*, newest first, plus the total row count.

    The count and the page share exactly the same predicate.
    """
    q = (q or "").strip()
    limit = clamp_int(limit, 1, MAX_LIMIT, DEFAULT_LIMIT)
    offset = clamp_int(offset, 0, MAX_OFFSET, 0)

    conditions = [Sale.last_updated >= rng.start, Sale.last_updated < rng.end]
    search = _search_clause(q)
    if search is not None:
        conditions.append(search)

    total_result = await db.execute(
        select(func.count(Sale.id_sale))
        .select_from(Sale)
        .outerjoin(User, User.id_user == Sale.user_id)
        .where(*conditions)
    )
    total = int(total_result.scalar_one() or 0)

    items_count = (
        select(func.coalesce(func.sum(SaleDetail.quantity), 0))
        .where(SaleDetail.sale_id == Sale.id_sale)
        .correlate(Sale)
        .scalar_subquery()
    )
    result = await db.execute(
        select(
            Sale.id_sale,
            Sale.total_amount,
            Sale.notes,
            Sale.user_id,
            User.username,
            Sale.last_updated,
            items_count.label("items_count"),
        )
        .select_from(Sale)
        .outerjoin(User, User.id_user == Sale.user_id)
        .where(*conditions)
        .order_by(Sale.last_updated.desc(), Sale.id_sale.desc())
        .limit(limit)
        .offset(offset)
    )

    items = [
        SaleListItem(**_sale_read(row), items_count=float(row.items_count or 0))
        for row in result.all()
    ]
    return SaleListResponse(total=total, items=items)


async def get_sale(db: AsyncSession, sale_id: int) -> SaleDetailResponse:
    result = await db.execute(
        select(
            Sale.id_sale,
            Sale.total_amount,
            Sale.notes,
            Sale.user_id,
            User.username,
            Sale.last_updated,
        )
        .select_from(Sale)
        .outerjoin(User, User.id_user == Sale.user_id)
        .where(Sale.id_sale == sale_id)
        .limit(1)
    )
    row = result.first()
    if row is None:
        raise NotFound()

    detail_result = await db.execute(
        select(SaleDetail, Product.name)
        .outerjoin(Product, Product.id_product == SaleDetail.product_id)
        .where(SaleDetail.sale_id == sale_id)
        .order_by(SaleDetail.id_sale_detail.asc())
    )
    details = [
        SaleDetailRead(
            id_sale_detail=d.id_sale_detail,
            sale_id=d.sale_id,
            product_id=d.product_id,
            product_name=name or "",
            quantity=float(d.quantity or 0),
            price=float(d.price or 0),
            total_price=None if d.total_price is None else float(d.total_price),
        )
        for d, name in detail_result.all()
    ]
    return SaleDetailResponse(sale=SaleRead(**_sale_read(row)), details=details)
