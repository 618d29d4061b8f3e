"""
Product CRUD endpoints.

- GET operations require any authenticated user.
- POST / PATCH / DELETE require a write role.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.deps import get_current_user, get_db, require_write_role
from backoffice.models.user import User
from backoffice.schemas.catalog import (OkResponse, ProductCreated,
                                        ProductListResponse, ProductRead,
                                        ProductWrite)
from backoffice.services import catalog_service
from backoffice.services.sales_service import parse_id

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    q: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    offset: str | None = Query(default=None),
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> ProductListResponse:
    return await catalog_service.list_products(db, q=q, limit=limit, offset=offset)


@router.get("/{product_id}", response_model=ProductRead)
async def get_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    _user: User = Depends(get_current_user),
) -> ProductRead:
    product = await catalog_service.get_product(db, parse_id(product_id))
    return ProductRead.model_validate(product)


@router.post("", response_model=ProductCreated, status_code=201)
async def create_product(
    body: ProductWrite,
    db: AsyncSession = Depends(get_db),
    _writer: User = Depends(require_write_role),
) -> ProductCreated:
    return ProductCreated(id_product=await catalog_service.create_product(db, body))


@router.patch("/{product_id}", response_model=OkResponse)
async def update_product(
    product_id: str,
    body: ProductWrite,
    db: AsyncSession = Depends(get_db),
    _writer: User = Depends(require_write_role),
) -> OkResponse:
    """Partial update: only the fields present in the body are written."""
    await catalog_service.update_product(db, parse_id(product_id), body)
    return OkResponse()


@router.delete("/{product_id}", response_model=OkResponse)
async def delete_product(
    product_id: str,
    db: AsyncSession = Depends(get_db),
    _writer: User = Depends(require_write_role),
) -> OkResponse:
    await catalog_service.delete_product(db, parse_id(product_id))
    return OkResponse()
