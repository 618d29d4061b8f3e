"""Pydantic schemas for product & offer CRUD."""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

# ── Products ────────────────────────────────────────────────────────
# Clients send camelCase; ORM rows expose snake_case attributes.
_PURCHASE_PRICE = AliasChoices("purchase_price", "purchasePrice")
_PRODUCT_TYPE = AliasChoices("product_type", "productType")


class ProductWrite(BaseModel):
    """Body for POST and PATCH; PATCH only applies the fields that were sent."""

    name: str | None = None
    barcode: str | None = None
    reference: str | None = None
    description: str | None = None
    product_type: str | None = Field(default=None, validation_alias=_PRODUCT_TYPE)
    quantity: int | None = None
    purchase_price: float | None = Field(default=None, validation_alias=_PURCHASE_PRICE)
    price: float | None = None


class ProductRead(BaseModel):
    id_product: int
    barcode: str | None
    reference: str | None
    name: str
    description: str | None
    quantity: int | None
    purchase_price: float | None = Field(
        validation_alias=_PURCHASE_PRICE, serialization_alias="purchasePrice"
    )
    price: float | None
    product_type: str | None = Field(
        validation_alias=_PRODUCT_TYPE, serialization_alias="productType"
    )
    last_updated: datetime | None

    model_config = {"from_attributes": True}


class ProductListResponse(BaseModel):
    total: int
    items: list[ProductRead]


class ProductCreated(BaseModel):
    id_product: int


# ── Offers ──────────────────────────────────────────────────────────
_PRODUCT_IDS = AliasChoices("product_ids", "productIds")


class OfferWrite(BaseModel):
    name: str | None = None
    quantity: int | None = None
    price: float | None = None
    product_ids: list[int] | None = Field(default=None, validation_alias=_PRODUCT_IDS)


class OfferRead(BaseModel):
    id_offer: int
    name: str
    quantity: int | None
    price: float | None
    last_updated: datetime | None
    product_ids: list[int] = Field(
        validation_alias=_PRODUCT_IDS, serialization_alias="productIds"
    )


class OfferListResponse(BaseModel):
    total: int
    items: list[OfferRead]


class OfferCreated(BaseModel):
    id_offer: int


class OkResponse(BaseModel):
    ok: bool = True
