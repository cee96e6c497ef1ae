"""Enrollment and per-module progress bookkeeping.

The ledger owns Enrollment and ProgressRecord; course and module definitions
are read from the catalog on every call and never cached, so catalog edits
change the next recompute for every enrolled learner.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from coursetrack.core.metrics import ENROLLMENTS, PROGRESS_UPDATES, RECOMPUTE_DURATION
from coursetrack.models.progress import (
    ZERO_PERCENT,
    CourseProgress,
    EnrolledCourse,
    Enrollment,
    ModuleProgress,
    ProgressSnapshot,
    ProgressStatus,
    ProgressUpdate,
)
from coursetrack.repos.catalog_repo import CatalogRepo
from coursetrack.repos.progress_repo import ProgressRepo
from coursetrack.services.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    InvalidProgressError,
    NotEnrolledError,
)

logger = logging.getLogger(__name__)

_HUNDRED = Decimal(100)
_CENTS = Decimal("0.01")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def completion_percentage(completed: int, total: int) -> Decimal:
    """100 * completed / total, two decimals, half-up; 0.00 for an empty course."""
    if total <= 0:
        return ZERO_PERCENT
    raw = _HUNDRED * Decimal(completed) / Decimal(total)
    return raw.quantize(_CENTS, rounding=ROUND_HALF_UP)


class ProgressLedger:
    def __init__(
        self,
        catalog: CatalogRepo,
        progress: ProgressRepo,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._catalog = catalog
        self._progress = progress
        self._clock = clock

    async def enroll(self, user_id: UUID, course_id: UUID) -> Enrollment:
        if not await self._catalog.course_exists(course_id, require_published=True):
            raise CourseNotFoundError(course_id)
        if await self._progress.get_enrollment(user_id, course_id) is not None:
            raise AlreadyEnrolledError(user_id, course_id)

        enrollment = Enrollment.new(
            user_id=user_id, course_id=course_id, enrolled_at=self._clock()
        )
        # add_enrollment raises AlreadyEnrolledError itself if a concurrent
        # request inserted the pair after the check above.
        await self._progress.add_enrollment(enrollment)
        ENROLLMENTS.inc()
        logger.info(
            "Enrolled user=%s course=%s",
            user_id,
            course_id,
            extra={"user_id": str(user_id), "course_id": str(course_id)},
        )
        return enrollment

    async def get_enrollment(
        self, user_id: UUID, course_id: UUID, *, for_update: bool = False
    ) -> Enrollment:
        enrollment = await self._progress.get_enrollment(
            user_id, course_id, for_update=for_update
        )
        if enrollment is None:
            raise NotEnrolledError(user_id, course_id)
        return enrollment

    async def list_enrollments(self, user_id: UUID) -> list[EnrolledCourse]:
        result: list[EnrolledCourse] = []
        for enrollment in await self._progress.list_enrollments(user_id):
            # Enrolled learners keep access after a course is unpublished.
            course = await self._catalog.get_course(
                enrollment.course_id, published_only=False
            )
            if course is None:
                logger.warning(
                    "Enrollment %s points at missing course=%s",
                    enrollment.id,
                    enrollment.course_id,
                )
                continue
            result.append(EnrolledCourse(course=course, enrollment=enrollment))
        return result

    async def record_progress(
        self,
        user_id: UUID,
        course_id: UUID,
        module_id: UUID,
        status: ProgressStatus,
        time_spent_delta: int = 0,
        score: Decimal | None = None,
        *,
        new_attempt: bool = False,
    ) -> ProgressSnapshot:
        if time_spent_delta < 0:
            raise InvalidProgressError("time_spent must be non-negative")
        if score is not None and not ZERO_PERCENT <= score <= _HUNDRED:
            raise InvalidProgressError("score must be between 0 and 100")

        # Row lock serializes concurrent recomputes for the same enrollment.
        await self.get_enrollment(user_id, course_id, for_update=True)

        record = await self._progress.upsert_progress(
            ProgressUpdate(
                user_id=user_id,
                module_id=module_id,
                status=status,
                time_spent_delta=time_spent_delta,
                score=score,
                new_attempt=new_attempt,
                at=self._clock(),
            )
        )
        PROGRESS_UPDATES.labels(status=status.value).inc()

        percentage = await self.recompute(user_id, course_id, module_id)
        logger.info(
            "Progress user=%s course=%s module=%s status=%s percentage=%s",
            user_id,
            course_id,
            module_id,
            status.value,
            percentage,
            extra={
                "user_id": str(user_id),
                "course_id": str(course_id),
                "module_id": str(module_id),
            },
        )
        return ProgressSnapshot(
            progress_percentage=percentage,
            current_module_id=module_id,
            record=record,
        )

    async def recompute(
        self, user_id: UUID, course_id: UUID, current_module_id: UUID | None
    ) -> Decimal:
        """Rescan the course's modules and store the fresh percentage.

        Idempotent. completed_at is left untouched even at 100%.
        """
        with RECOMPUTE_DURATION.time():
            modules = await self._catalog.list_modules(course_id)
            module_ids = [m.id for m in modules]
            completed = await self._progress.count_completed(user_id, module_ids)
            percentage = completion_percentage(completed, len(module_ids))
            await self._progress.set_enrollment_progress(
                user_id, course_id, percentage, current_module_id
            )
        logger.debug(
            "Recomputed user=%s course=%s completed=%d total=%d",
            user_id,
            course_id,
            completed,
            len(module_ids),
        )
        return percentage

    async def get_course_progress(
        self, user_id: UUID, course_id: UUID
    ) -> CourseProgress:
        enrollment = await self.get_enrollment(user_id, course_id)
        modules = await self._catalog.list_modules(course_id)
        records = {
            r.module_id: r
            for r in await self._progress.list_progress(
                user_id, [m.id for m in modules]
            )
        }

        rows: list[ModuleProgress] = []
        for module in modules:
            record = records.get(module.id)
            if record is None:
                rows.append(
                    ModuleProgress(
                        module_id=module.id,
                        title=module.title,
                        module_type=module.module_type,
                        order_index=module.order_index,
                    )
                )
                continue
            rows.append(
                ModuleProgress(
                    module_id=module.id,
                    title=module.title,
                    module_type=module.module_type,
                    order_index=module.order_index,
                    status=record.status,
                    time_spent=record.time_spent,
                    score=record.score,
                    attempts=record.attempts,
                    started_at=record.started_at,
                    updated_at=record.updated_at,
                )
            )

        return CourseProgress(
            course_id=course_id,
            overall_percentage=enrollment.progress_percentage,
            current_module_id=enrollment.current_module_id,
            modules=tuple(rows),
        )
