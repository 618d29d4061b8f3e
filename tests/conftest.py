"""
Shared test fixtures for the POS back-office test suite.

Every test gets a fresh app on an in-memory SQLite database
(aiosqlite + StaticPool) built from explicit test settings.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import datetime
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.core.config import Settings
from backoffice.db.base import Base
from backoffice.main import create_app
from backoffice.models.catalog import Offer, OfferProduct, Product
from backoffice.models.sale import Sale, SaleDetail
from backoffice.models.user import User

TEST_SECRET = "test-secret-key"

fast_bcrypt = CryptContext(schemes=["bcrypt"], bcrypt__rounds=4)


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "JWT_SECRET": TEST_SECRET,
        "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
        "BCRYPT_ROUNDS": 4,
        "RATE_LIMIT_ENABLED": False,
        "PASSWORD_HASH_COLUMN": "true",
        "MIGRATE_PLAINTEXT_PASSWORDS": True,
        "CORS_ORIGINS": ["http://test"],
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(request) -> Settings:
    """Test settings; parametrize indirectly with a dict of overrides."""
    return make_settings(**getattr(request, "param", {}))


@pytest.fixture
async def app(settings: Settings):
    application = create_app(settings)
    async with application.state.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield application
    await application.state.engine.dispose()


@pytest.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def db_session(app) -> AsyncGenerator[AsyncSession, None]:
    """Return a raw database session for seeding and direct queries."""
    async with app.state.session_factory() as session:
        yield session


# ── Seed helpers ────────────────────────────────────────────────────
@pytest.fixture
def add_user(db_session: AsyncSession):
    async def _add(
        username: str = "alice",
        password: str = "secret",
        password_hash: str | None = None,
        roles: Any = '["admin"]',
        is_active: bool = True,
    ) -> User:
        user = User(
            username=username,
            password=password,
            password_hash=password_hash,
            roles=roles,
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _add


@pytest.fixture
def headers_for(app):
    def _headers(user: User) -> dict[str, str]:
        token = app.state.tokens.issue(user.id_user, user.username)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
async def admin_headers(add_user, headers_for) -> dict[str, str]:
    admin = await add_user("admin", roles='["admin"]')
    return headers_for(admin)


@pytest.fixture
async def cashier_headers(add_user, headers_for) -> dict[str, str]:
    cashier = await add_user("cashier", roles="cashier")
    return headers_for(cashier)


@pytest.fixture
def add_product(db_session: AsyncSession):
    async def _add(name: str, purchase_price: float | None = None, price: float = 0) -> Product:
        product = Product(name=name, purchase_price=purchase_price, price=price)
        db_session.add(product)
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _add


@pytest.fixture
def add_offer(db_session: AsyncSession):
    async def _add(name: str, product_ids: list[int]) -> Offer:
        offer = Offer(name=name)
        db_session.add(offer)
        await db_session.flush()
        for pid in product_ids:
            db_session.add(OfferProduct(offer_id=offer.id_offer, product_id=pid))
        await db_session.commit()
        await db_session.refresh(offer)
        return offer

    return _add


@pytest.fixture
def add_sale(db_session: AsyncSession):
    async def _add(
        when: datetime,
        total: float,
        lines: list[tuple[int, int, float, float | None]] = (),
        notes: str | None = None,
        user_id: int | None = None,
    ) -> Sale:
        """*lines* are ``(product_id, quantity, price, total_price)`` tuples."""
        sale = Sale(last_updated=when, total_amount=total, notes=notes, user_id=user_id)
        db_session.add(sale)
        await db_session.flush()
        for product_id, quantity, price, total_price in lines:
            db_session.add(
                SaleDetail(
                    sale_id=sale.id_sale,
                    product_id=product_id,
                    quantity=quantity,
                    price=price,
                    total_price=total_price,
                )
            )
        await db_session.commit()
        await db_session.refresh(sale)
        return sale

    return _add
