"""Identity issuance: anonymous sign-in and pre-issued bearer tokens.

Tokens are opaque random strings. Only their SHA-256 digest is persisted.
"""

import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timezone

from sqlalchemy import select

from app.models.identity import IdentityRow
from app.services.journal.records import Identity

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class InvalidTokenError(Exception):
    """Raised when a bearer token does not belong to any identity."""


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class IdentityService:
    """Issues and resolves session identities."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    async def _issue(self, is_anonymous: bool) -> Identity:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        row = IdentityRow(
            uid=str(uuid.uuid4()),
            token_hash=_hash_token(token),
            is_anonymous=is_anonymous,
            created_at=datetime.now(timezone.utc),
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return Identity(uid=row.uid, token=token, is_anonymous=is_anonymous)

    async def sign_in_anonymously(self) -> Identity:
        """Create a brand-new anonymous identity."""
        identity = await self._issue(is_anonymous=True)
        logger.info("Anonymous identity %s issued", identity.uid)
        return identity

    async def issue_token(self) -> Identity:
        """Mint a pre-authenticated identity for the hosting environment to hand out."""
        identity = await self._issue(is_anonymous=False)
        logger.info("Pre-issued identity %s created", identity.uid)
        return identity

    async def resolve(self, token: str) -> str | None:
        """Return the uid owning ``token``, or None."""
        if not token:
            return None
        async with self._session_factory() as session:
            result = await session.execute(
                select(IdentityRow.uid).where(IdentityRow.token_hash == _hash_token(token))
            )
            return result.scalar_one_or_none()

    async def sign_in_with_token(self, token: str) -> Identity:
        """Resume the identity that owns a pre-issued or earlier session token."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(IdentityRow).where(IdentityRow.token_hash == _hash_token(token))
            )
            row = result.scalar_one_or_none()
        if row is None:
            raise InvalidTokenError("Unknown or revoked token")
        return Identity(uid=row.uid, token=token, is_anonymous=row.is_anonymous)
