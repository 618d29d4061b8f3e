"""
JWT session token issuance / verification.

Tokens are stateless: validity depends only on the signature and the
``exp`` claim.  There is no revocation list, so a leaked token stays
valid until it expires; keep ``JWT_EXPIRES`` short.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from backoffice.core.config import Settings


class InvalidToken(Exception):
    """Raised for a bad signature, a malformed token or an expired token."""


class TokenService:
    def __init__(self, secret: str, algorithm: str, lifetime: timedelta) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, settings: Settings) -> TokenService:
        return cls(settings.JWT_SECRET, settings.JWT_ALGORITHM, settings.token_lifetime)

    def issue(self, subject_id: int | str, username: str) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": str(subject_id),
                "username": username,
                "iat": now,
                "exp": now + self.lifetime,
            },
            self._secret,
            algorithm=self._algorithm,
        )

    def verify(self, token: str) -> dict[str, Any]:
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError as exc:
            raise InvalidToken(str(exc)) from exc
        if "exp" not in payload:
            raise InvalidToken("Token has no expiry")
        return payload


def subject_id(payload: dict[str, Any]) -> int | None:
    """Extract the user id from a verified payload (``sub`` first)."""
    raw = payload.get("sub") or payload.get("id_user") or payload.get("idUser")
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None
