"""
Sale & sale line models — written by the till, read here for reporting.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import (Column, DateTime, ForeignKey, Index, Integer, Numeric,
                        String)

from backoffice.db.base import Base
from backoffice.models.catalog import utcnow


class Sale(Base):
    __tablename__ = "sales"

    id_sale: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    total_amount: float = Column(  # type: ignore[assignment]
        Numeric(12, 2, asdecimal=False), nullable=False, default=0
    )
    notes: str | None = Column(String(500), nullable=True)  # type: ignore[assignment]
    user_id: int | None = Column(  # type: ignore[assignment]
        Integer, ForeignKey("users.id_user"), nullable=True
    )
    last_updated: datetime = Column(DateTime, default=utcnow, index=True)  # type: ignore[assignment]


class SaleDetail(Base):
    __tablename__ = "sales_details"
    __table_args__ = (Index("ix_sales_details_sale_product", "sale_id", "product_id"),)

    id_sale_detail: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    sale_id: int = Column(Integer, ForeignKey("sales.id_sale"), nullable=False)  # type: ignore[assignment]
    # No FK: lines keep pointing at products deleted since the sale
    product_id: int = Column(Integer, nullable=False)  # type: ignore[assignment]
    quantity: int = Column(Integer, nullable=False, default=1)  # type: ignore[assignment]
    price: float = Column(Numeric(12, 2, asdecimal=False), nullable=False, default=0)  # type: ignore[assignment]
    total_price: float | None = Column(  # type: ignore[assignment]
        Numeric(12, 2, asdecimal=False), nullable=True
    )
