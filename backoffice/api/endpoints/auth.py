"""
Auth endpoints — JSON login & current user.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.api.deps import get_auth_gate, get_current_user, get_db
from backoffice.models.user import User
from backoffice.schemas.auth import (LoginRequest, LoginResponse, MeResponse,
                                     UserPublic)
from backoffice.services.auth_service import AuthGate

LOGIN_RATE_LIMIT = "10/minute"

router = APIRouter(prefix="/auth", tags=["auth"])


async def count_login_attempt(request: Request) -> None:
    """Rate-limited no-op: each call counts one attempt for the client IP."""


def build_limiter(enabled: bool) -> tuple[Limiter, Callable[..., Awaitable[None]]]:
    """Return a per-app limiter (keyed by client IP) and its login guard."""
    limiter = Limiter(key_func=get_remote_address, enabled=enabled)
    return limiter, limiter.limit(LOGIN_RATE_LIMIT)(count_login_attempt)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    gate: AuthGate = Depends(get_auth_gate),
) -> LoginResponse:
    """Check username/password and return a bearer token with the user profile."""
    await request.app.state.login_guard(request=request)
    token, user = await gate.login(db, body.username, body.password)
    return LoginResponse(token=token, user=UserPublic.model_validate(user))


@router.get("/me", response_model=MeResponse)
async def read_current_user(
    current_user: User = Depends(get_current_user),
) -> MeResponse:
    """Return the profile of the currently authenticated user."""
    return MeResponse(user=UserPublic.model_validate(current_user))
