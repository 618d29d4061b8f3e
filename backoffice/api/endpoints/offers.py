"""
Offer CRUD endpoints.

Writes run in their own transaction (see ``catalog_service``), so they
take the session factory rather than the request session.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backoffice.api.deps import (get_current_user, get_db,
                                 get_session_factory, require_write_role)
from backoffice.models.user import User
from backoffice.schemas.catalog import (OfferCreated, OfferListResponse,
                                        OfferRead, OfferWrite, OkResponse)
from backoffice.services import catalog_service
from backoffice.services.sales_service import parse_id

router = APIRouter(prefix="/offers", tags=["offers"])


@router.get("", response_model=OfferListResponse)
async def list_offers(
    q: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> OfferListResponse:
    return await catalog_service.list_offers(db, q=q, limit=limit, offset=offset)


@router.get("/{offer_id}", response_model=OfferRead)
async def get_offer(
    offer_id: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> OfferRead:
    return await catalog_service.get_offer(db, parse_id(offer_id))


@router.post("", response_model=OfferCreated, status_code=201)
async def create_offer(
    body: OfferWrite,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    _writer: User = Depends(require_write_role),
) -> OfferCreated:
    return OfferCreated(id_offer=await catalog_service.create_offer(session_factory, body))


@router.patch("/{offer_id}", response_model=OkResponse)
async def update_offer(
    offer_id: str,
    body: OfferWrite,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    _writer: User = Depends(require_write_role),
) -> OkResponse:
    """Update offer fields; a ``productIds`` list replaces the membership set."""
    await catalog_service.update_offer(session_factory, parse_id(offer_id), body)
    return OkResponse()


@router.delete("/{offer_id}", response_model=OkResponse)
async def delete_offer(
    offer_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    _writer: User = Depends(require_write_role),
) -> OkResponse:
    await catalog_service.delete_offer(session_factory, parse_id(offer_id))
    return OkResponse()
