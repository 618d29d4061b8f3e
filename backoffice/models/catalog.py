"""
Product & offer models.

An offer bundles products through the ``product_offers_products`` join
table.  ``is_synced`` is reset on every back-office write so the till
picks the change up on its next sync.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (Boolean, Column, DateTime, ForeignKey, Integer,
                        Numeric, String, Text)

from backoffice.db.base import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the till writes ``last_updated``."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Product(Base):
    __tablename__ = "products"

    id_product: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    barcode: str | None = Column(String(64), nullable=True, index=True)  # type: ignore[assignment]
    reference: str | None = Column(String(100), nullable=True)  # type: ignore[assignment]
    name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    description: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    quantity: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    purchase_price: float | None = Column(  # type: ignore[assignment]
        "purchasePrice", Numeric(12, 2, asdecimal=False), nullable=True
    )
    price: float | None = Column(Numeric(12, 2, asdecimal=False), nullable=True)  # type: ignore[assignment]
    product_type: str | None = Column("productType", String(100), nullable=True)  # type: ignore[assignment]
    last_updated: datetime = Column(DateTime, default=utcnow, index=True)  # type: ignore[assignment]
    is_synced: bool = Column(Boolean, default=False, server_default="0")  # type: ignore[assignment]


class Offer(Base):
    __tablename__ = "product_offers"

    id_offer: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    name: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    quantity: int | None = Column(Integer, nullable=True)  # type: ignore[assignment]
    price: float | None = Column(Numeric(12, 2, asdecimal=False), nullable=True)  # type: ignore[assignment]
    last_updated: datetime = Column(DateTime, default=utcnow, index=True)  # type: ignore[assignment]
    is_synced: bool = Column(Boolean, default=False, server_default="0")  # type: ignore[assignment]


class OfferProduct(Base):
    __tablename__ = "product_offers_products"

    offer_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("product_offers.id_offer"), primary_key=True
    )
    product_id: int = Column(  # type: ignore[assignment]
        Integer, ForeignKey("products.id_product"), primary_key=True, index=True
    )
    is_synced: bool = Column(Boolean, default=False, server_default="0")  # type: ignore[assignment]
