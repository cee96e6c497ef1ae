from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace
from decimal import Decimal
from typing import Protocol
from uuid import UUID, uuid4

from coursetrack.models.progress import (
    Enrollment,
    ProgressRecord,
    ProgressStatus,
    ProgressUpdate,
)
from coursetrack.services.errors import AlreadyEnrolledError


class ProgressRepo(Protocol):
    async def get_enrollment(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None: ...
    async def add_enrollment(self, enrollment: Enrollment) -> None: ...
    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]: ...
    async def set_enrollment_progress(
        self,
        user_id: UUID,
        course_id: UUID,
        percentage: Decimal,
        current_module_id: UUID | None,
    ) -> None: ...
    async def upsert_progress(self, change: ProgressUpdate) -> ProgressRecord: ...
    async def count_completed(self, user_id: UUID, module_ids: Iterable[UUID]) -> int: ...
    async def list_progress(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> list[ProgressRecord]: ...


class InMemoryProgressRepo:
    """Dict-backed ledger storage for dev and tests.

    No method awaits anything internally, so each call runs to completion
    on the event loop without interleaving; that is what makes
    upsert_progress atomic here.
    """

    def __init__(self) -> None:
        self._enrollments: dict[tuple[UUID, UUID], Enrollment] = {}
        self._progress: dict[tuple[UUID, UUID], ProgressRecord] = {}

    async def get_enrollment(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment | None:
        return self._enrollments.get((user_id, course_id))

    async def add_enrollment(self, enrollment: Enrollment) -> None:
        key = (enrollment.user_id, enrollment.course_id)
        if key in self._enrollments:
            raise AlreadyEnrolledError(enrollment.user_id, enrollment.course_id)
        self._enrollments[key] = enrollment

    async def list_enrollments(self, user_id: UUID) -> list[Enrollment]:
        mine = [e for (uid, _), e in self._enrollments.items() if uid == user_id]
        return sorted(mine, key=lambda e: e.enrolled_at, reverse=True)

    async def set_enrollment_progress(
        self,
        user_id: UUID,
        course_id: UUID,
        percentage: Decimal,
        current_module_id: UUID | None,
    ) -> None:
        key = (user_id, course_id)
        current = self._enrollments.get(key)
        if current is None:
            raise KeyError("enrollment not found")
        self._enrollments[key] = replace(
            current,
            progress_percentage=percentage,
            current_module_id=current_module_id,
        )

    async def upsert_progress(self, change: ProgressUpdate) -> ProgressRecord:
        key = (change.user_id, change.module_id)
        existing = self._progress.get(key)
        if existing is None:
            record = ProgressRecord(
                id=uuid4(),
                user_id=change.user_id,
                module_id=change.module_id,
                status=change.status,
                started_at=change.at,
                updated_at=change.at,
                time_spent=change.time_spent_delta,
                score=change.score,
                attempts=1,
            )
        else:
            record = replace(
                existing,
                status=change.status,
                updated_at=change.at,
                time_spent=existing.time_spent + change.time_spent_delta,
                score=change.score,
                attempts=existing.attempts + (1 if change.new_attempt else 0),
            )
        self._progress[key] = record
        return record

    async def count_completed(self, user_id: UUID, module_ids: Iterable[UUID]) -> int:
        return sum(
            1
            for r in await self.list_progress(user_id, module_ids)
            if r.status is ProgressStatus.COMPLETED
        )

    async def list_progress(
        self, user_id: UUID, module_ids: Iterable[UUID]
    ) -> list[ProgressRecord]:
        return [
            record
            for mid in module_ids
            if (record := self._progress.get((user_id, mid))) is not None
        ]
