"""
User model — staff accounts shared with the POS till software.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import deferred

from backoffice.db.base import Base


class User(Base):
    __tablename__ = "users"

    id_user: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    username: str = Column(String(150), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    # Legacy column: plaintext on old installs, bcrypt/argon2 once migrated
    password: str = Column(String(255), nullable=False, default="")  # type: ignore[assignment]
    # Optional column, not present on every install; only loaded on login
    password_hash: str | None = deferred(Column(String(255), nullable=True))  # type: ignore[assignment]
    roles: str | None = Column(Text, nullable=True)  # type: ignore[assignment]
    is_active: bool = Column(Boolean, default=True, server_default="1")  # type: ignore[assignment]
    last_login: datetime | None = Column(DateTime, nullable=True)  # type: ignore[assignment]
