"""
Financial aggregation over a resolved date range.

Every figure is one aggregate SQL query; Python only shapes the rows.
A sale belongs to the range when ``range.start <= last_updated < range.end``.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from sqlalchemy import String, cast, func, literal, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.catalog import Offer, OfferProduct, Product
from backoffice.models.sale import Sale, SaleDetail
from backoffice.schemas.dashboard import (DashboardSummary, Kpis, RankedItem,
                                          SeriesPoint)
from backoffice.services.ranges import DateRange

logger = logging.getLogger(__name__)

TOP_LIMIT = 10
DELETED_PRODUCT_NAME = "Product #"

# Stored line total when the till wrote one, else price × quantity
line_total = func.coalesce(SaleDetail.total_price, SaleDetail.price * SaleDetail.quantity)


def _in_range(rng: DateRange) -> tuple[Any, Any]:
    return Sale.last_updated >= rng.start, Sale.last_updated < rng.end


def _iso_day(value: Any) -> str:
    """``DATE()`` comes back as a ``date`` on PostgreSQL, a string on SQLite."""
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _ranked(rows: Any) -> list[RankedItem]:
    return [
        RankedItem(id=r.id, name=r.name, qty=float(r.qty or 0), revenue=float(r.revenue or 0))
        for r in rows
    ]


class AggregationEngine:
    """KPIs, daily revenue series and top-N rankings for one date range."""

    def __init__(self, db: AsyncSession, top_limit: int = TOP_LIMIT) -> None:
        self.db = db
        self.top_limit = top_limit

    async def kpis(self, rng: DateRange) -> Kpis:
        result = await self.db.execute(
            select(
                func.coalesce(func.sum(Sale.total_amount), 0).label("revenue"),
                func.count(Sale.id_sale).label("sales_count"),
            ).where(*_in_range(rng))
        )
        row = result.one()
        revenue = float(row.revenue or 0)
        sales_count = int(row.sales_count or 0)

        profit_result = await self.db.execute(
            select(
                func.coalesce(
                    func.sum(
                        line_total
                        - func.coalesce(Product.purchase_price, 0) * SaleDetail.quantity
                    ),
                    0,
                )
            )
            .select_from(SaleDetail)
            .join(Sale, Sale.id_sale == SaleDetail.sale_id)
            .outerjoin(Product, Product.id_product == SaleDetail.product_id)
            .where(*_in_range(rng))
        )
        profit = float(profit_result.scalar_one() or 0)

        return Kpis(
            revenue=revenue,
            profit=profit,
            salesCount=sales_count,
            avgTicket=revenue / sales_count if sales_count > 0 else 0.0,
        )

    async def daily_series(self, rng: DateRange) -> list[SeriesPoint]:
        """Revenue per calendar day, ascending; days without sales are absent."""
        day = func.date(Sale.last_updated)
        result = await self.db.execute(
            select(
                day.label("day"),
                func.coalesce(func.sum(Sale.total_amount), 0).label("revenue"),
            )
            .where(*_in_range(rng))
            .group_by(day)
            .order_by(day.asc())
        )
        return [
            SeriesPoint(date=_iso_day(r.day), revenue=float(r.revenue or 0))
            for r in result.all()
        ]

    async def top_products(self, rng: DateRange) -> list[RankedItem]:
        """Best sellers by revenue.

        Lines whose product was deleted still count, grouped by their raw
        ``product_id`` under a placeholder name, with ``id`` set to ``None``.
        Equal revenue falls back to ascending ``product_id``; callers should
        not rely on that order.
        """
        name = func.coalesce(
            Product.name,
            literal(DELETED_PRODUCT_NAME, String) + cast(SaleDetail.product_id, String),
        )
        revenue = func.coalesce(func.sum(line_total), 0).label("revenue")
        result = await self.db.execute(
            select(
                Product.id_product.label("id"),
                name.label("name"),
                func.coalesce(func.sum(SaleDetail.quantity), 0).label("qty"),
                revenue,
            )
            .select_from(SaleDetail)
            .join(Sale, Sale.id_sale == SaleDetail.sale_id)
            .outerjoin(Product, Product.id_product == SaleDetail.product_id)
            .where(*_in_range(rng))
            .group_by(Product.id_product, Product.name, SaleDetail.product_id)
            .order_by(revenue.desc(), SaleDetail.product_id.asc())
            .limit(self.top_limit)
        )
        return _ranked(result.all())

    async def top_offers(self, rng: DateRange) -> list[RankedItem]:
        """Best-effort offer ranking.

        A sold line counts toward every offer that contains its product, so
        a product in two offers is counted twice.  This is an attribution
        heuristic, not a record of what was sold as an offer.
        """
        revenue = func.coalesce(func.sum(line_total), 0).label("revenue")
        result = await self.db.execute(
            select(
                Offer.id_offer.label("id"),
                Offer.name.label("name"),
                func.coalesce(func.sum(SaleDetail.quantity), 0).label("qty"),
                revenue,
            )
            .select_from(SaleDetail)
            .join(Sale, Sale.id_sale == SaleDetail.sale_id)
            .join(OfferProduct, OfferProduct.product_id == SaleDetail.product_id)
            .join(Offer, Offer.id_offer == OfferProduct.offer_id)
            .where(*_in_range(rng))
            .group_by(Offer.id_offer, Offer.name)
            .order_by(revenue.desc(), Offer.id_offer.asc())
            .limit(self.top_limit)
        )
        return _ranked(result.all())

    async def summary(self, rng: DateRange) -> DashboardSummary:
        summary = DashboardSummary(
            kpis=await self.kpis(rng),
            series=await self.daily_series(rng),
            topProducts=await self.top_products(rng),
            topOffers=await self.top_offers(rng),
        )
        logger.debug(
            "Dashboard %s → %s: %d sales", rng.start, rng.end, summary.kpis.salesCount
        )
        return summary
