"""Session provider: resolves the client identity once at startup.

A pre-issued token from the hosting environment wins; otherwise an anonymous
identity is requested. Failure is terminal: it is logged and the session
stays unauthenticated. Nothing retries.
"""

import logging

from app.client.backend import JournalBackend
from app.services.journal.records import Identity

logger = logging.getLogger(__name__)


class SessionProvider:
    """Holds the current identity, or None."""

    def __init__(self, backend: JournalBackend, initial_auth_token: str | None = None) -> None:
        self._backend = backend
        self._initial_auth_token = initial_auth_token or None
        self.identity: Identity | None = None
        self.resolving: bool = True

    async def start(self) -> Identity | None:
        """Establish the startup identity. Never raises."""
        try:
            if self._initial_auth_token:
                self.identity = await self._backend.sign_in_with_token(self._initial_auth_token)
            else:
                self.identity = await self._backend.sign_in_anonymously()
            logger.info("Signed in as %s", self.identity.uid)
        except Exception as e:
            logger.error("Identity sign-in failed: %s", e)
            self.identity = None
        finally:
            self.resolving = False
        return self.identity

    async def sign_in_with_token(self, token: str) -> Identity | None:
        """Switch to the identity owning ``token``. On failure the session is signed out."""
        self.resolving = True
        try:
            self.identity = await self._backend.sign_in_with_token(token)
        except Exception as e:
            logger.error("Token sign-in failed: %s", e)
            self.identity = None
        finally:
            self.resolving = False
        return self.identity

    def sign_out(self) -> None:
        self.identity = None
