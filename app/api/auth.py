"""Authentication: identity sign-in endpoints and request dependencies.

Journal endpoints take a bearer token issued by ``/api/auth/anonymous`` or
``/api/auth/token``. Issuing pre-authenticated tokens is an admin action
guarded by the X-API-Key header; in development mode with no API key
configured, that check is bypassed.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from app.services.identity import IdentityService, InvalidTokenError
from app.services.journal.records import Identity

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])

_api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
_bearer = HTTPBearer(auto_error=False)


class TokenSignInRequest(BaseModel):
    """Request body for signing in with a pre-issued token."""

    token: str = Field(..., min_length=1)


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identities


async def require_api_key(
    request: Request, api_key: str | None = Security(_api_key_header)
) -> str:
    """Dependency that enforces admin API key authentication.

    Bypassed in development mode when no API key is configured.
    """
    settings = request.app.state.settings

    # If no API key is configured and we're in dev mode, allow access
    if not settings.api_key and settings.app_env == "development":
        return "dev-bypass"

    if not settings.api_key:
        logger.warning("API key not configured but app_env=%s: blocking request", settings.app_env)
        raise HTTPException(status_code=403, detail="API key not configured on server")

    if not api_key or api_key != settings.api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing API key")

    return api_key


async def require_identity(
    credentials: HTTPAuthorizationCredentials | None = Security(_bearer),
    identities: IdentityService = Depends(get_identity_service),
) -> str:
    """Dependency that resolves the bearer token to a uid."""
    if credentials is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    uid = await identities.resolve(credentials.credentials)
    if uid is None:
        raise HTTPException(status_code=401, detail="Invalid bearer token")
    return uid


@router.post("/anonymous", response_model=Identity)
async def sign_in_anonymously(identities: IdentityService = Depends(get_identity_service)):
    """Issue a new anonymous identity."""
    return await identities.sign_in_anonymously()


@router.post("/token", response_model=Identity)
async def sign_in_with_token(
    req: TokenSignInRequest, identities: IdentityService = Depends(get_identity_service)
):
    """Resume an identity from a pre-issued token."""
    try:
        return await identities.sign_in_with_token(req.token)
    except InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=str(e))


@router.post("/issue", response_model=Identity, dependencies=[Depends(require_api_key)])
async def issue_token(identities: IdentityService = Depends(get_identity_service)):
    """Mint a pre-authenticated identity token (admin only)."""
    return await identities.issue_token()
