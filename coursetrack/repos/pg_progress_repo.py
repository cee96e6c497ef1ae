"""PostgreSQL implementation of ProgressRepo.

Progress writes are a single INSERT ... ON CONFLICT (user_id, module_id)
DO UPDATE, so two concurrent first-time updates for the same module end up
as one row with both deltas applied.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import RowMapping, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import EnrollmentRow, ProgressRow
from coursetrack.models.progress import (
    Enrollment,
    ProgressRecord,
    ProgressStatus,
    ProgressUpdate,
)
from coursetrack.repos.pg_errors import is_unique_violation
from coursetrack.services.errors import AlreadyEnrolledError, ProgressConflictError

_progress = ProgressRow.__table__


class PgProgressRepo:
    """Satisfies the ProgressRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    # --- Enrollments ---

    async def get_enrollment(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.user_id == user_id,
            EnrollmentRow.course_id == course_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_enrollment(row) if row is not None else None

    async def add_enrollment(self, enrollment: Enrollment) -> None:
        self._session.add(
            EnrollmentRow(
                id=enrollment.id,
                user_id=enrollment.user_id,
                course_id=enrollment.course_id,
                enrolled_at=enrollment.enrolled_at,
                progress_percentage=enrollment.progress_percentage,
                current_module_id=enrollment.current_module_id,
                completed_at=enrollment.completed_at,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as exc:
            if is_unique_violation(exc, "uq_enrollment_user_course"):
                raise AlreadyEnrolledError(
                    enrollment.user_id, enrollment.course_id
                ) from exc
            raise

    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.user_id == user_id)
            .order_by(EnrollmentRow.enrolled_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def set_enrollment_progress(
        self,
        user_id: UUID,
        course_id: UUID,
        percentage: Decimal,
        current_module_id: UUID | None,
    ) -> None:
        stmt = (
            update(EnrollmentRow)
            .where(
                EnrollmentRow.user_id == user_id,
                EnrollmentRow.course_id == course_id,
            )
            .values(
                progress_percentage=percentage,
                current_module_id=current_module_id,
            )
        )
        await self._session.execute(stmt)

    # --- Progress records ---

    async def upsert_progress(self, change: ProgressUpdate) -> ProgressRecord:
        stmt = pg_insert(_progress).values(
            id=uuid4(),
            user_id=change.user_id,
            module_id=change.module_id,
            status=change.status.value,
            started_at=change.at,
            updated_at=change.at,
            time_spent=change.time_spent_delta,
            score=change.score,
            attempts=1,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_progress_user_module",
            set_={
                "status": stmt.excluded.status,
                "time_spent": _progress.c.time_spent + stmt.excluded.time_spent,
                "score": stmt.excluded.score,
                "updated_at": stmt.excluded.updated_at,
                "attempts": _progress.c.attempts + (1 if change.new_attempt else 0),
            },
        ).returning(*_progress.c)

        try:
            row = (await self._session.execute(stmt)).mappings().one()
        except IntegrityError as exc:
            if is_unique_violation(exc):
                raise ProgressConflictError(change.user_id, change.module_id) from exc
            raise
        return _mapping_to_record(row)

    async def count_completed(self, user_id: UUID, module_ids: Iterable[UUID]) -> int:
        ids = list(module_ids)
        if not ids:
            return 0
        stmt = select(func.count()).where(
            ProgressRow.user_id == user_id,
            ProgressRow.module_id.in_(ids),
            ProgressRow.status == ProgressStatus.COMPLETED.value,
        )
        return int((await self._session.execute(stmt)).scalar_one())

    async def list_progress(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> list[ProgressRecord]:
        ids = list(module_ids)
        if not ids:
            return []
        stmt = select(*_progress.c).where(
            _progress.c.user_id == user_id,
            _progress.c.module_id.in_(ids),
        )
        rows = (await self._session.execute(stmt)).mappings().all()
        return [_mapping_to_record(r) for r in rows]


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        user_id=row.user_id,
        course_id=row.course_id,
        enrolled_at=row.enrolled_at,
        progress_percentage=Decimal(row.progress_percentage),
        current_module_id=row.current_module_id,
        completed_at=row.completed_at,
    )


def _mapping_to_record(m: RowMapping) -> ProgressRecord:
    return ProgressRecord(
        id=m["id"],
        user_id=m["user_id"],
        module_id=m["module_id"],
        status=ProgressStatus(m["status"]),
        started_at=m["started_at"],
        updated_at=m["updated_at"],
        time_spent=m["time_spent"],
        score=Decimal(m["score"]) if m["score"] is not None else None,
        attempts=m["attempts"],
    )
