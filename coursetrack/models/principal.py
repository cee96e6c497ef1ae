from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from coursetrack.models.user import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller, built from a verified access token.

    jti and expires_at are carried so logout can revoke exactly the token
    that authenticated the request.
    """

    user_id: UUID
    email: str
    role: Role
    jti: str
    expires_at: float

    def has_role(self, role: Role) -> bool:
        return self.role is role

    def has_any_role(self, roles: set[Role]) -> bool:
        return self.role in roles
