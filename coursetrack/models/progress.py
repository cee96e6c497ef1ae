from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from uuid import UUID, uuid4

from coursetrack.models.course import Course, ModuleType

ZERO_PERCENT = Decimal("0.00")


class ProgressStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One learner in one course.  Unique per (user_id, course_id)."""

    id: UUID
    user_id: UUID
    course_id: UUID
    enrolled_at: datetime
    progress_percentage: Decimal = ZERO_PERCENT
    current_module_id: UUID | None = None
    completed_at: datetime | None = None

    @staticmethod
    def new(*, user_id: UUID, course_id: UUID, enrolled_at: datetime) -> Enrollment:
        return Enrollment(
            id=uuid4(),
            user_id=user_id,
            course_id=course_id,
            enrolled_at=enrolled_at,
        )


@dataclass(frozen=True, slots=True)
class ProgressRecord:
    """One learner's state on one module.  Unique per (user_id, module_id)."""

    id: UUID
    user_id: UUID
    module_id: UUID
    status: ProgressStatus
    started_at: datetime
    updated_at: datetime
    time_spent: int = 0  # seconds, accumulated
    score: Decimal | None = None
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class ProgressUpdate:
    """Values submitted for one record_progress call."""

    user_id: UUID
    module_id: UUID
    status: ProgressStatus
    time_spent_delta: int
    score: Decimal | None
    new_attempt: bool
    at: datetime


@dataclass(frozen=True, slots=True)
class ProgressSnapshot:
    """What record_progress hands back: the stored percentage and the record."""

    progress_percentage: Decimal
    current_module_id: UUID
    record: ProgressRecord


@dataclass(frozen=True, slots=True)
class ModuleProgress:
    module_id: UUID
    title: str
    module_type: ModuleType
    order_index: int
    status: ProgressStatus = ProgressStatus.NOT_STARTED
    time_spent: int = 0
    score: Decimal | None = None
    attempts: int = 0
    started_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class CourseProgress:
    course_id: UUID
    overall_percentage: Decimal
    current_module_id: UUID | None
    modules: tuple[ModuleProgress, ...]


@dataclass(frozen=True, slots=True)
class EnrolledCourse:
    course: Course
    enrollment: Enrollment
