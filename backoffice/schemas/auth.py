"""Pydantic schemas for login and the public user view."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, field_validator

from backoffice.core.roles import parse_roles


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class UserPublic(BaseModel):
    """User as exposed to clients — never carries credential fields."""

    id_user: int
    username: str
    roles: list[str]
    last_login: datetime | None = None
    is_active: bool

    model_config = {"from_attributes": True}

    @field_validator("roles", mode="before")
    @classmethod
    def _normalise_roles(cls, v: object) -> list[str]:
        return sorted(parse_roles(v))


class LoginResponse(BaseModel):
    token: str
    user: UserPublic


class MeResponse(BaseModel):
    user: UserPublic
