"""FastAPI dependencies for the Keyissuer API.

Provides dependency injection for:
- Database sessions
- Hash provider
- CredentialIssuer
- Authentication
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from keyissuer.config import get_settings
from keyissuer.db.session import get_session_dependency
from keyissuer.errors import UnauthorizedError
from keyissuer.hashing import BcryptHashProvider, HashProvider
from keyissuer.services import CredentialIssuer
from keyissuer.stores import SqlRecordStore

logger = structlog.get_logger()


@lru_cache
def get_hash_provider() -> HashProvider:
    """Get cached hash provider instance."""
    settings = get_settings()
    return BcryptHashProvider(rounds=settings.security.bcrypt_rounds)


async def get_credential_issuer(
    session: Annotated[AsyncSession, Depends(get_session_dependency)],
) -> CredentialIssuer:
    """Get CredentialIssuer with injected dependencies."""
    settings = get_settings()
    return CredentialIssuer(
        store=SqlRecordStore(session),
        hash_provider=get_hash_provider(),
        key_ttl=settings.security.key_ttl,
        serialize_issuance=settings.security.serialize_issuance,
    )


CredentialIssuerDep = Annotated[CredentialIssuer, Depends(get_credential_issuer)]


def extract_api_key(request: Request) -> str | None:
    """Read the presented key from ``Authorization: Bearer`` or ``X-API-Key``.

    An empty bearer token falls through to the ``X-API-Key`` header.
    """
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    return request.headers.get("X-API-Key") or None


async def authenticate(request: Request, issuer: CredentialIssuerDep) -> str:
    """Require a live API key on the request.

    Returns:
        The presented key

    Raises:
        UnauthorizedError: No key presented, or the key is unknown or expired
    """
    api_key = extract_api_key(request)
    if api_key is None:
        raise UnauthorizedError("Authentication required")

    if not await issuer.validate(api_key):
        logger.debug("auth.rejected", key_prefix=api_key[:8])
        raise UnauthorizedError("Invalid or expired API key")

    return api_key


AuthDep = Annotated[str, Depends(authenticate)]
