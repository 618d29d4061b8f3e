"""Pydantic schemas for sales listing and detail."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SaleRead(BaseModel):
    id_sale: int
    total_amount: float
    notes: str
    user_id: int | None
    username: str
    last_updated: datetime | None


class SaleListItem(SaleRead):
    items_count: float


class SaleListResponse(BaseModel):
    total: int
    items: list[SaleListItem]


class SaleDetailRead(BaseModel):
    id_sale_detail: int
    sale_id: int
    product_id: int
    product_name: str
    quantity: float
    price: float
    total_price: float | None


class SaleDetailResponse(BaseModel):
    sale: SaleRead
    details: list[SaleDetailRead]
