"""
Product & offer CRUD.

Offer writes touch two tables (the offer row and its membership rows),
so each one runs in a dedicated session inside ``session.begin()``: the
transaction is committed on success and rolled back on any exception,
and the session is closed on every exit path.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backoffice.core.exceptions import BadRequest, Conflict, NotFound
from backoffice.models.catalog import Offer, OfferProduct, Product, utcnow
from backoffice.schemas.catalog import (OfferListResponse, OfferRead,
                                        OfferWrite, ProductListResponse,
                                        ProductRead, ProductWrite)
from backoffice.services.sales_service import (DEFAULT_LIMIT, MAX_LIMIT,
                                               MAX_OFFSET, clamp_int,
                                               like_pattern)

logger = logging.getLogger(__name__)

_TRIMMED_FIELDS = ("name", "barcode", "reference", "product_type")
_NUMERIC_FIELDS = ("quantity", "purchase_price", "price")


# ── Products ────────────────────────────────────────────────────────
def _product_changes(body: ProductWrite) -> dict[str, Any]:
    """Columns to write for the fields the client actually sent.

    Text fields are ignored when sent as ``null``; numeric fields may be
    cleared with ``null``.
    """
    sent = body.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}
    for field in _TRIMMED_FIELDS:
        if isinstance(sent.get(field), str):
            changes[field] = sent[field].strip()
    if isinstance(sent.get("description"), str):
        changes["description"] = sent["description"]
    for field in _NUMERIC_FIELDS:
        if field in sent:
            changes[field] = sent[field]
    return changes


async def list_products(
    db: AsyncSession, q: str | None = None, limit: Any = None, offset: Any = None
) -> ProductListResponse:
    q = (q or "").strip()
    limit = clamp_int(limit, 1, MAX_LIMIT, DEFAULT_LIMIT)
    offset = clamp_int(offset, 0, MAX_OFFSET, 0)

    conditions = []
    if q:
        like = like_pattern(q)
        conditions.append(
            or_(
                Product.name.like(like),
                Product.barcode.like(like),
                Product.reference.like(like),
                Product.product_type.like(like),
            )
        )

    total = (
        await db.execute(select(func.count(Product.id_product)).where(*conditions))
    ).scalar_one()
    result = await db.execute(
        select(Product)
        .where(*conditions)
        .order_by(Product.last_updated.desc(), Product.id_product.desc())
        .limit(limit)
        .offset(offset)
    )
    items = [ProductRead.model_validate(p) for p in result.scalars().all()]
    return ProductListResponse(total=int(total or 0), items=items)


async def get_product(db: AsyncSession, product_id: int) -> Product:
    product = await db.get(Product, product_id)
    if product is None:
        raise NotFound()
    return product


async def create_product(db: AsyncSession, body: ProductWrite) -> int:
    changes = _product_changes(body)
    if not changes.get("name"):
        raise BadRequest("Missing name")

    values: dict[str, Any] = {"barcode": "", "reference": "", "description": "", "product_type": ""}
    values.update(changes)
    product = Product(**values, last_updated=utcnow(), is_synced=False)
    db.add(product)
    await db.commit()
    await db.refresh(product)
    logger.info("Product %s created", product.id_product)
    return product.id_product


async def update_product(db: AsyncSession, product_id: int, body: ProductWrite) -> None:
    changes = _product_changes(body)
    if not changes:
        raise BadRequest("No fields to update")

    result = await db.execute(
        update(Product)
        .where(Product.id_product == product_id)
        .values(**changes, last_updated=utcnow(), is_synced=False)
    )
    if not result.rowcount:
        await db.rollback()
        raise NotFound()
    await db.commit()
    logger.info("Product %s updated: %s", product_id, sorted(changes))


async def delete_product(db: AsyncSession, product_id: int) -> None:
    try:
        result = await db.execute(delete(Product).where(Product.id_product == product_id))
        if not result.rowcount:
            await db.rollback()
            raise NotFound()
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        logger.info("Product %s delete blocked: %s", product_id, exc.orig)
        raise Conflict(
            "Cannot delete product (in use)",
            hint="Prefer deactivate/archiving instead of deleting if you need history.",
        ) from exc
    logger.info("Product %s deleted", product_id)


# ── Offers ──────────────────────────────────────────────────────────
def _unique(ids: list[int]) -> list[int]:
    return list(dict.fromkeys(ids))


async def _product_ids_by_offer(
    db: AsyncSession, offer_ids: list[int]
) -> dict[int, list[int]]:
    if not offer_ids:
        return {}
    result = await db.execute(
        select(OfferProduct.offer_id, OfferProduct.product_id)
        .where(OfferProduct.offer_id.in_(offer_ids))
        .order_by(OfferProduct.offer_id, OfferProduct.product_id)
    )
    members: dict[int, list[int]] = defaultdict(list)
    for offer_id, product_id in result.all():
        members[offer_id].append(product_id)
    return members


def _offer_read(offer: Offer, product_ids: list[int]) -> OfferRead:
    return OfferRead(
        id_offer=offer.id_offer,
        name=offer.name,
        quantity=offer.quantity,
        price=offer.price,
        last_updated=offer.last_updated,
        product_ids=product_ids,
    )


async def list_offers(
    db: AsyncSession, q: str | None = None, limit: Any = None, offset: Any = None
) -> OfferListResponse:
    q = (q or "").strip()
    limit = clamp_int(limit, 1, MAX_LIMIT, DEFAULT_LIMIT)
    offset = clamp_int(offset, 0, MAX_OFFSET, 0)
    conditions = [Offer.name.like(like_pattern(q))] if q else []

    total = (
        await db.execute(select(func.count(Offer.id_offer)).where(*conditions))
    ).scalar_one()
    result = await db.execute(
        select(Offer)
        .where(*conditions)
        .order_by(Offer.last_updated.desc(), Offer.id_offer.desc())
        .limit(limit)
        .offset(offset)
    )
    offers = result.scalars().all()
    members = await _product_ids_by_offer(db, [o.id_offer for o in offers])
    return OfferListResponse(
        total=int(total or 0),
        items=[_offer_read(o, members.get(o.id_offer, [])) for o in offers],
    )


async def get_offer(db: AsyncSession, offer_id: int) -> OfferRead:
    offer = await db.get(Offer, offer_id)
    if offer is None:
        raise NotFound()
    members = await _product_ids_by_offer(db, [offer_id])
    return _offer_read(offer, members.get(offer_id, []))


async def create_offer(
    session_factory: async_sessionmaker[AsyncSession], body: OfferWrite
) -> int:
    name = body.name.strip() if isinstance(body.name, str) else ""
    if not name:
        raise BadRequest("Missing name")

    async with session_factory() as session:
        async with session.begin():
            offer = Offer(
                name=name,
                quantity=body.quantity,
                price=body.price,
                last_updated=utcnow(),
                is_synced=False,
            )
            session.add(offer)
            await session.flush()
            for product_id in _unique(body.product_ids or []):
                session.add(OfferProduct(offer_id=offer.id_offer, product_id=product_id))
            await session.flush()
            offer_id = offer.id_offer

    logger.info("Offer %s created", offer_id)
    return offer_id


async def update_offer(
    session_factory: async_sessionmaker[AsyncSession], offer_id: int, body: OfferWrite
) -> None:
    sent = body.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}
    if isinstance(sent.get("name"), str):
        changes["name"] = sent["name"].strip()
    for field in ("quantity", "price"):
        if field in sent:
            changes[field] = sent[field]

    async with session_factory() as session:
        async with session.begin():
            exists = await session.scalar(
                select(Offer.id_offer).where(Offer.id_offer == offer_id)
            )
            if exists is None:
                raise NotFound()

            if changes:
                await session.execute(
                    update(Offer)
                    .where(Offer.id_offer == offer_id)
                    .values(**changes, last_updated=utcnow(), is_synced=False)
                )

            if body.product_ids is not None:
                await session.execute(
                    delete(OfferProduct).where(OfferProduct.offer_id == offer_id)
                )
                for product_id in _unique(body.product_ids):
                    session.add(OfferProduct(offer_id=offer_id, product_id=product_id))
                await session.flush()

    logger.info("Offer %s updated", offer_id)


async def delete_offer(
    session_factory: async_sessionmaker[AsyncSession], offer_id: int
) -> None:
    async with session_factory() as session:
        async with session.begin():
            await session.execute(
                delete(OfferProduct).where(OfferProduct.offer_id == offer_id)
            )
            result = await session.execute(delete(Offer).where(Offer.id_offer == offer_id))
            if not result.rowcount:
                raise NotFound()

    logger.info("Offer %s deleted", offer_id)
