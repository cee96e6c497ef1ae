"""JWT access token creation and validation (ES256).

Shared by the auth router (issuance) and dependencies.py (validation) so both
sides agree on the key and the claims schema.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives.asymmetric import ec

from coursetrack.core.config import SETTINGS
from coursetrack.models.user import User

# Dev/test: ephemeral EC key pair generated on import.
# Production: load from env var, file, or KMS (not implemented yet).
_private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = "coursetrack"
AUDIENCE = "coursetrack-api"


def create_access_token(user: User, *, ttl_min: int | None = None) -> str:
    """Sign an access token for *user*.

    Claims: sub, email, role, iss, aud, exp, iat, jti.
    """
    now = datetime.now(UTC)
    minutes = SETTINGS.access_token_ttl_min if ttl_min is None else ttl_min
    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + timedelta(minutes=minutes),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins algorithm to ES256 to prevent alg:none and alg-switching attacks.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )
