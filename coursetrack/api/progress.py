"""Per-module progress for an enrolled learner.

POST records one module's status and recomputes the course percentage in the
same transaction; GET returns the course's module list overlaid with the
learner's records.  Both answer 403 when the caller is not enrolled.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from coursetrack.api.dependencies import get_ledger, require_user
from coursetrack.api.errors import http_error
from coursetrack.models.course import ModuleType
from coursetrack.models.principal import Principal
from coursetrack.models.progress import ProgressRecord, ProgressStatus
from coursetrack.services.errors import (
    InvalidProgressError,
    NotEnrolledError,
    ProgressConflictError,
)
from coursetrack.services.progress_ledger import ProgressLedger

router = APIRouter(prefix="/v1/courses", tags=["progress"])

MAX_REPORTED_SECONDS = 24 * 60 * 60


class ProgressIn(BaseModel):
    module_id: UUID
    status: ProgressStatus
    # Seconds since the last report; one report covers at most a day.
    time_spent: int = Field(0, ge=0, le=MAX_REPORTED_SECONDS)
    score: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    new_attempt: bool = False


class ModuleRecordOut(BaseModel):
    module_id: UUID
    status: ProgressStatus
    time_spent: int
    score: float | None
    attempts: int
    started_at: datetime
    updated_at: datetime


class ProgressUpdateOut(BaseModel):
    progress_percentage: float
    current_module_id: UUID
    module: ModuleRecordOut


class ModuleProgressOut(BaseModel):
    module_id: UUID
    title: str
    module_type: ModuleType
    order_index: int
    status: ProgressStatus
    time_spent: int
    score: float | None
    attempts: int
    started_at: datetime | None
    updated_at: datetime | None


class CourseProgressOut(BaseModel):
    course_id: UUID
    overall_percentage: float
    current_module_id: UUID | None
    modules: list[ModuleProgressOut]


def _score(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


def _record_out(record: ProgressRecord) -> ModuleRecordOut:
    return ModuleRecordOut(
        module_id=record.module_id,
        status=record.status,
        time_spent=record.time_spent,
        score=_score(record.score),
        attempts=record.attempts,
        started_at=record.started_at,
        updated_at=record.updated_at,
    )


@router.post("/{course_id}/progress", response_model=ProgressUpdateOut)
async def record_progress(
    course_id: UUID,
    body: ProgressIn,
    principal: Annotated[Principal, Depends(require_user)],
    ledger: Annotated[ProgressLedger, Depends(get_ledger)],
) -> ProgressUpdateOut:
    try:
        snapshot = await ledger.record_progress(
            principal.user_id,
            course_id,
            body.module_id,
            body.status,
            body.time_spent,
            body.score,
            new_attempt=body.new_attempt,
        )
    except (InvalidProgressError, NotEnrolledError, ProgressConflictError) as exc:
        raise http_error(exc) from None

    return ProgressUpdateOut(
        progress_percentage=float(snapshot.progress_percentage),
        current_module_id=snapshot.current_module_id,
        module=_record_out(snapshot.record),
    )


@router.get("/{course_id}/progress", response_model=CourseProgressOut)
async def get_course_progress(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    ledger: Annotated[ProgressLedger, Depends(get_ledger)],
) -> CourseProgressOut:
    try:
        progress = await ledger.get_course_progress(principal.user_id, course_id)
    except NotEnrolledError as exc:
        raise http_error(exc) from None

    return CourseProgressOut(
        course_id=progress.course_id,
        overall_percentage=float(progress.overall_percentage),
        current_module_id=progress.current_module_id,
        modules=[
            ModuleProgressOut(
                module_id=m.module_id,
                title=m.title,
                module_type=m.module_type,
                order_index=m.order_index,
                status=m.status,
                time_spent=m.time_spent,
                score=_score(m.score),
                attempts=m.attempts,
                started_at=m.started_at,
                updated_at=m.updated_at,
            )
            for m in progress.modules
        ],
    )
