from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Role(StrEnum):
    LEARNER = "learner"
    INSTRUCTOR = "instructor"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    first_name: str
    last_name: str
    created_at: datetime
    role: Role = Role.LEARNER
    is_active: bool = True
    last_login: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        created_at: datetime,
        role: Role = Role.LEARNER,
    ) -> User:
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            created_at=created_at,
            role=role,
        )
