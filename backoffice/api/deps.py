"""
FastAPI dependencies — database session and auth guards.

Everything is read from ``request.app.state``; nothing here touches the
process environment.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backoffice.core.exceptions import Forbidden
from backoffice.core.roles import RoleGate, parse_roles
from backoffice.models.user import User
from backoffice.services.auth_service import AuthGate

# auto_error=False: a missing or non-Bearer header is our 401, not FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.session_factory


# ── Database session ────────────────────────────────────────────────
async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    async with request.app.state.session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


# ── Auth dependencies ───────────────────────────────────────────────
def get_auth_gate(request: Request) -> AuthGate:
    state = request.app.state
    return AuthGate(
        tokens=state.tokens,
        verifier=state.verifier,
        migration=state.migration,
        has_hash_column=state.has_password_hash_column,
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    gate: AuthGate = Depends(get_auth_gate),
) -> User:
    """Bearer token → active user, else 401."""
    token = credentials.credentials.strip() if credentials else None
    return await gate.authenticate(db, token)


async def require_write_role(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> User:
    """Only users holding one of the configured write roles may mutate data."""
    role_gate: RoleGate = request.app.state.role_gate
    if not role_gate.can_write(parse_roles(current_user.roles)):
        raise Forbidden()
    return current_user
