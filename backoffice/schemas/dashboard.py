"""Pydantic schemas for the financial dashboard."""

from __future__ import annotations

from pydantic import BaseModel


class Kpis(BaseModel):
    revenue: float
    profit: float
    salesCount: int
    avgTicket: float


class SeriesPoint(BaseModel):
    date: str  # YYYY-MM-DD
    revenue: float


class RankedItem(BaseModel):
    id: int | None
    name: str | None
    qty: float
    revenue: float


class DashboardSummary(BaseModel):
    kpis: Kpis
    series: list[SeriesPoint]
    topProducts: list[RankedItem]
    topOffers: list[RankedItem]
