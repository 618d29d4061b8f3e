"""
Stored credential handling: scheme detection, password verification and
the plaintext → bcrypt upgrade policy.

Hashing is delegated to passlib.  The legacy ``users.password`` column
can hold plaintext (written by old POS installs) or a bcrypt/argon2
hash; the optional ``users.password_hash`` column only ever holds hashes.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from passlib.context import CryptContext

logger = logging.getLogger(__name__)

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
_ARGON2_PREFIXES = ("$argon2id$", "$argon2i$")


class CredentialScheme(enum.Enum):
    PLAINTEXT = "plaintext"
    BCRYPT = "bcrypt"
    ARGON2 = "argon2"

    @property
    def is_hashed(self) -> bool:
        return self is not CredentialScheme.PLAINTEXT


def classify(value: str | None) -> CredentialScheme:
    """Tag a stored credential by its prefix; nothing is decoded."""
    if not value:
        return CredentialScheme.PLAINTEXT
    if value.startswith(_BCRYPT_PREFIXES):
        return CredentialScheme.BCRYPT
    if value.startswith(_ARGON2_PREFIXES):
        return CredentialScheme.ARGON2
    return CredentialScheme.PLAINTEXT


@dataclass(frozen=True)
class CredentialRecord:
    """The credential fields of one user row.

    ``password_hash`` is ``None`` when the column does not exist in the
    schema, and ``""`` when it exists but is still empty.
    """

    password: str
    password_hash: str | None = None

    @property
    def has_hash_field(self) -> bool:
        return self.password_hash is not None

    @property
    def password_scheme(self) -> CredentialScheme:
        return classify(self.password)

    @property
    def password_hash_scheme(self) -> CredentialScheme:
        return classify(self.password_hash)


@dataclass(frozen=True)
class MigrationPlan:
    column: str  # "password_hash" | "password"
    new_hash: str


def build_crypt_context(bcrypt_rounds: int = 12) -> CryptContext:
    return CryptContext(
        schemes=["bcrypt", "argon2"],
        default="bcrypt",
        bcrypt__rounds=bcrypt_rounds,
    )


class CredentialVerifier:
    """Checks a candidate password against a ``CredentialRecord``."""

    def __init__(self, context: CryptContext) -> None:
        self._context = context

    def _verify_hash(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError) as exc:
            # Malformed hash counts as a mismatch.
            logger.debug("Hash verification failed: %s", exc)
            return False

    def verify(self, password: str, record: CredentialRecord) -> bool:
        if record.has_hash_field and record.password_hash_scheme.is_hashed:
            return self._verify_hash(password, record.password_hash or "")
        if record.password_scheme.is_hashed:
            return self._verify_hash(password, record.password)
        return (record.password or "").encode("utf-8") == password.encode("utf-8")


class MigrationPolicy:
    """Decides whether a verified login should upgrade the stored credential."""

    def __init__(
        self,
        context: CryptContext,
        enabled: bool,
        overwrite_legacy: bool,
    ) -> None:
        self._context = context
        self.enabled = enabled
        self.overwrite_legacy = overwrite_legacy

    @classmethod
    def from_settings(cls, settings) -> MigrationPolicy:
        return cls(
            build_crypt_context(settings.BCRYPT_ROUNDS),
            enabled=settings.MIGRATE_PLAINTEXT_PASSWORDS,
            overwrite_legacy=settings.MIGRATE_PLAINTEXT_PASSWORDS_OVERWRITE,
        )

    def target_column(self, record: CredentialRecord) -> str | None:
        """Column to upgrade, or ``None`` when no write is due."""
        if not self.enabled:
            return None
        if record.has_hash_field:
            if record.password_hash_scheme.is_hashed:
                return None
            return "password_hash"
        if self.overwrite_legacy and not record.password_scheme.is_hashed:
            return "password"
        return None

    def hash_password(self, password: str) -> str:
        return self._context.hash(password)

    def plan(self, password: str, record: CredentialRecord) -> MigrationPlan | None:
        """Must only be called after ``CredentialVerifier.verify`` succeeded."""
        column = self.target_column(record)
        if column is None:
            return None
        return MigrationPlan(column=column, new_hash=self.hash_password(password))
