"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import UserRow
from coursetrack.models.user import Role, User
from coursetrack.repos.pg_errors import is_unique_violation
from coursetrack.services.errors import UserAlreadyExistsError


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserRow).where(UserRow.email == email.strip().lower())
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_user(row) if row is not None else None

    async def add(self, user: User) -> None:
        row = UserRow(
            id=user.id,
            email=user.email,
            password_hash=user.password_hash,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            is_active=user.is_active,
            created_at=user.created_at,
        )
        self._session.add(row)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise UserAlreadyExistsError(user.email) from exc
            raise

    async def set_active(self, user_id: UUID, is_active: bool) -> None:
        stmt = update(UserRow).where(UserRow.id == user_id).values(is_active=is_active)
        await self._session.execute(stmt)

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> None:
        stmt = (
            update(UserRow)
            .where(UserRow.id == user_id)
            .values(password_hash=password_hash)
        )
        await self._session.execute(stmt)

    async def touch_last_login(self, user_id: UUID, at: datetime) -> None:
        stmt = update(UserRow).where(UserRow.id == user_id).values(last_login=at)
        await self._session.execute(stmt)


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        email=row.email,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        created_at=row.created_at,
        role=Role(row.role),
        is_active=row.is_active,
        last_login=row.last_login,
    )
