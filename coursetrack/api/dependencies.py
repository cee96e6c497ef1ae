from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from coursetrack.models.principal import Principal
from coursetrack.models.user import Role
from coursetrack.repos.registry import Repositories
from coursetrack.services import token_service
from coursetrack.services.event_recorder import EventRecorder
from coursetrack.services.progress_ledger import ProgressLedger
from coursetrack.services.token_blacklist import TokenBlacklist

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


async def get_repos(request: Request) -> AsyncIterator[Repositories]:
    """Repositories for this request.

    With PostgreSQL configured, everything the request does runs in one
    transaction that commits when the handler returns and rolls back if it
    raises.  Without it, the process-wide in-memory repositories are used.
    """
    database = request.app.state.database
    if database is None:
        yield request.app.state.repos
        return
    async with database.transaction() as session:
        yield Repositories.postgres(session)


def get_ledger(
    repos: Annotated[Repositories, Depends(get_repos)],
) -> ProgressLedger:
    return ProgressLedger(repos.catalog, repos.progress)


def get_recorder(
    repos: Annotated[Repositories, Depends(get_repos)],
) -> EventRecorder:
    return EventRecorder(repos.analytics)


def get_token_blacklist(request: Request) -> TokenBlacklist:
    return request.app.state.token_blacklist


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _principal_from_claims(claims: dict) -> Principal:
    return Principal(
        user_id=UUID(claims["sub"]),
        email=claims.get("email", ""),
        role=Role(claims.get("role", Role.LEARNER.value)),
        jti=claims["jti"],
        expires_at=float(claims["exp"]),
    )


async def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
    blacklist: Annotated[TokenBlacklist, Depends(get_token_blacklist)],
) -> Principal:
    """Validate the bearer token and return the caller.

    Rejects expired, malformed, and revoked (logged-out) tokens with 401.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
        principal = _principal_from_claims(claims)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    if await blacklist.is_revoked(principal.jti):
        logger.warning("Revoked token rejected for user=%s", principal.user_id)
        raise _unauthorized("Token revoked")

    logger.debug("Token validated for user=%s", principal.user_id)
    return principal


async def optional_user(
    raw_token: Annotated[str | None, Depends(optional_oauth2_scheme)],
    blacklist: Annotated[TokenBlacklist, Depends(get_token_blacklist)],
) -> Principal | None:
    """The caller if a valid token was sent; anonymous (None) otherwise."""
    if not raw_token:
        return None
    try:
        principal = _principal_from_claims(token_service.decode_access_token(raw_token))
    except (jwt.InvalidTokenError, KeyError, ValueError):
        return None
    if await blacklist.is_revoked(principal.jti):
        return None
    return principal


def require_any_role(roles: set[Role]):
    """Dependency factory: demand at least one of the given roles.

    Usage: Depends(require_any_role({Role.ADMIN, Role.INSTRUCTOR}))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(roles):
            logger.warning(
                "Access denied: user=%s role=%s required_any=%s",
                principal.user_id,
                principal.role.value,
                sorted(r.value for r in roles),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={"message": "Insufficient permissions"},
            )
        return principal

    return _guard
