"""
Authentication service — login flow and per-request token → user gate.

Login:
  1. look the user up by username (inactive == unknown)
  2. verify the password against the stored credential
  3. best-effort upgrade of a plaintext credential (own transaction;
     a failure is logged and retried on the next login)
  4. stamp ``last_login`` and issue a JWT

The upgrade is not serialised against concurrent logins of the same
user: both may write a fresh hash and the last one wins, which is fine
because either hash verifies the same password.
"""

from __future__ import annotations

import logging

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from backoffice.core.credentials import (CredentialRecord, CredentialVerifier,
                                         MigrationPlan, MigrationPolicy)
from backoffice.core.exceptions import BadRequest, Unauthorized
from backoffice.core.security import InvalidToken, TokenService, subject_id
from backoffice.models.catalog import utcnow
from backoffice.models.user import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthGate:
    def __init__(
        self,
        tokens: TokenService,
        verifier: CredentialVerifier,
        migration: MigrationPolicy,
        has_hash_column: bool,
    ) -> None:
        self.tokens = tokens
        self.verifier = verifier
        self.migration = migration
        self.has_hash_column = has_hash_column

    # ── Per-request authentication ──────────────────────────────────
    async def authenticate(self, db: AsyncSession, token: str | None) -> User:
        """Resolve a bearer token to an active user or raise ``Unauthorized``."""
        if not token:
            raise Unauthorized()
        try:
            payload = self.tokens.verify(token)
        except InvalidToken:
            raise Unauthorized() from None

        user_id = subject_id(payload)
        if user_id is None:
            raise Unauthorized()

        user = await db.get(User, user_id)
        if user is None or not user.is_active:
            raise Unauthorized()
        return user

    # ── Login ───────────────────────────────────────────────────────
    def _credential_record(self, user: User) -> CredentialRecord:
        return CredentialRecord(
            password=user.password or "",
            password_hash=(user.password_hash or "") if self.has_hash_column else None,
        )

    async def _find_user(self, db: AsyncSession, username: str) -> User | None:
        query = select(User).where(User.username == username).limit(1)
        if self.has_hash_column:
            query = query.options(undefer(User.password_hash))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def _upgrade_credential(
        self, db: AsyncSession, user_id: int, plan: MigrationPlan
    ) -> None:
        try:
            await db.execute(
                update(User)
                .where(User.id_user == user_id)
                .values({plan.column: plan.new_hash})
            )
            await db.commit()
        except SQLAlchemyError as exc:
            await db.rollback()
            logger.warning("Password upgrade failed for user %s: %s", user_id, exc)
        else:
            logger.info("Upgraded stored password of user %s (%s)", user_id, plan.column)

    async def login(self, db: AsyncSession, username: str, password: str) -> tuple[str, User]:
        username = (username or "").strip()
        if not username or not password:
            raise BadRequest("Missing username/password")

        user = await self._find_user(db, username)
        # Do not reveal whether the user exists.
        if user is None or not user.is_active:
            raise Unauthorized(INVALID_CREDENTIALS)

        record = self._credential_record(user)
        ok = await run_in_threadpool(self.verifier.verify, password, record)
        if not ok:
            raise Unauthorized(INVALID_CREDENTIALS)

        user_id, user_name = user.id_user, user.username
        # Close the read transaction; the writes below get their own.
        await db.commit()

        if self.migration.target_column(record) is not None:
            plan = await run_in_threadpool(self.migration.plan, password, record)
            if plan is not None:
                await self._upgrade_credential(db, user_id, plan)

        await db.execute(
            update(User).where(User.id_user == user_id).values(last_login=utcnow())
        )
        await db.commit()
        await db.refresh(user)

        logger.info("User %s logged in", user_id)
        return self.tokens.issue(user_id, user_name), user
