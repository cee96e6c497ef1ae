"""Course catalog and enrollment endpoints.

Reads are public; authoring needs the instructor or admin role; enrollment
needs any signed-in user.  Quiz questions are served without their answers.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID, uuid4

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from coursetrack.api.dependencies import (
    get_ledger,
    get_repos,
    require_any_role,
    require_user,
)
from coursetrack.api.errors import http_error
from coursetrack.models.course import (
    Course,
    Difficulty,
    Module,
    ModuleType,
    QuestionType,
    QuizQuestion,
)
from coursetrack.models.principal import Principal
from coursetrack.models.progress import Enrollment
from coursetrack.models.user import Role
from coursetrack.repos.registry import Repositories
from coursetrack.services.errors import AlreadyEnrolledError, CourseNotFoundError
from coursetrack.services.progress_ledger import ProgressLedger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/courses", tags=["courses"])

_require_author = require_any_role({Role.INSTRUCTOR, Role.ADMIN})


# --- Schemas ----------------------------------------------------------------


class CourseIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = ""
    category: str | None = None
    difficulty_level: Difficulty = Difficulty.BEGINNER
    estimated_duration: int | None = Field(None, ge=0)
    thumbnail_url: str | None = None
    is_published: bool = False


class QuestionIn(BaseModel):
    question_text: str = Field(min_length=1)
    question_type: QuestionType = QuestionType.MULTIPLE_CHOICE
    options: list[str] = []
    correct_answer: str | None = None
    points: int = Field(1, ge=0)


class ModuleIn(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    order_index: int = Field(ge=0)
    module_type: ModuleType
    description: str = ""
    content: str | None = None
    video_url: str | None = None
    duration: int | None = Field(None, ge=0)
    questions: list[QuestionIn] = []


class CourseOut(BaseModel):
    id: UUID
    title: str
    description: str
    category: str | None
    difficulty_level: Difficulty
    estimated_duration: int | None
    thumbnail_url: str | None
    is_published: bool
    created_at: datetime


class QuestionOut(BaseModel):
    id: UUID
    question_text: str
    question_type: QuestionType
    options: list[str]
    points: int
    order_index: int


class ModuleOut(BaseModel):
    id: UUID
    title: str
    description: str
    order_index: int
    module_type: ModuleType
    content: str | None
    video_url: str | None
    duration: int | None
    questions: list[QuestionOut] | None = None


class CourseDetailOut(CourseOut):
    modules: list[ModuleOut]


class EnrollmentOut(BaseModel):
    id: UUID
    course_id: UUID
    enrolled_at: datetime
    progress_percentage: float
    current_module_id: UUID | None
    completed_at: datetime | None


class EnrolledCourseOut(CourseOut):
    enrollment: EnrollmentOut


def _course_out(course: Course) -> CourseOut:
    return CourseOut(
        id=course.id,
        title=course.title,
        description=course.description,
        category=course.category,
        difficulty_level=course.difficulty_level,
        estimated_duration=course.estimated_duration,
        thumbnail_url=course.thumbnail_url,
        is_published=course.is_published,
        created_at=course.created_at,
    )


def _module_out(module: Module, questions: list[QuizQuestion] | None) -> ModuleOut:
    return ModuleOut(
        id=module.id,
        title=module.title,
        description=module.description,
        order_index=module.order_index,
        module_type=module.module_type,
        content=module.content,
        video_url=module.video_url,
        duration=module.duration,
        questions=(
            [
                QuestionOut(
                    id=q.id,
                    question_text=q.question_text,
                    question_type=q.question_type,
                    options=list(q.options),
                    points=q.points,
                    order_index=q.order_index,
                )
                for q in questions
            ]
            if questions is not None
            else None
        ),
    )


def _enrollment_out(enrollment: Enrollment) -> EnrollmentOut:
    return EnrollmentOut(
        id=enrollment.id,
        course_id=enrollment.course_id,
        enrolled_at=enrollment.enrolled_at,
        progress_percentage=float(enrollment.progress_percentage),
        current_module_id=enrollment.current_module_id,
        completed_at=enrollment.completed_at,
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"message": "Course not found"},
    )


# --- Catalog reads ------------------------------------------------------------


@router.get("", response_model=list[CourseOut])
async def list_courses(
    repos: Annotated[Repositories, Depends(get_repos)],
) -> list[CourseOut]:
    return [_course_out(c) for c in await repos.catalog.list_published()]


# Declared before /{course_id} so "enrolled" is never parsed as an id.
@router.get("/enrolled/list", response_model=list[EnrolledCourseOut])
async def list_enrolled_courses(
    principal: Annotated[Principal, Depends(require_user)],
    ledger: Annotated[ProgressLedger, Depends(get_ledger)],
) -> list[EnrolledCourseOut]:
    return [
        EnrolledCourseOut(
            **_course_out(item.course).model_dump(),
            enrollment=_enrollment_out(item.enrollment),
        )
        for item in await ledger.list_enrollments(principal.user_id)
    ]


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(
    course_id: UUID,
    repos: Annotated[Repositories, Depends(get_repos)],
) -> CourseDetailOut:
    course = await repos.catalog.get_course(course_id)
    if course is None:
        raise _not_found()

    modules = await repos.catalog.list_modules(course_id)
    quiz_ids = [m.id for m in modules if m.module_type is ModuleType.QUIZ]
    by_module: dict[UUID, list[QuizQuestion]] = {mid: [] for mid in quiz_ids}
    for q in await repos.catalog.list_questions(quiz_ids):
        by_module[q.module_id].append(q)

    return CourseDetailOut(
        **_course_out(course).model_dump(),
        modules=[_module_out(m, by_module.get(m.id)) for m in modules],
    )


# --- Authoring ----------------------------------------------------------------


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseIn,
    principal: Annotated[Principal, Depends(_require_author)],
    repos: Annotated[Repositories, Depends(get_repos)],
) -> CourseOut:
    course = Course.new(
        title=body.title.strip(),
        created_at=datetime.now(UTC),
        description=body.description,
        category=body.category,
        difficulty_level=body.difficulty_level,
        estimated_duration=body.estimated_duration,
        thumbnail_url=body.thumbnail_url,
        is_published=body.is_published,
    )
    await repos.catalog.add_course(course)
    logger.info("Course created id=%s by user=%s", course.id, principal.user_id)
    return _course_out(course)


@router.post(
    "/{course_id}/modules",
    response_model=ModuleOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_module(
    course_id: UUID,
    body: ModuleIn,
    principal: Annotated[Principal, Depends(_require_author)],
    repos: Annotated[Repositories, Depends(get_repos)],
) -> ModuleOut:
    if not await repos.catalog.course_exists(course_id, require_published=False):
        raise _not_found()

    module = Module.new(
        course_id=course_id,
        title=body.title.strip(),
        order_index=body.order_index,
        module_type=body.module_type,
        description=body.description,
        content=body.content,
        video_url=body.video_url,
        duration=body.duration,
    )
    await repos.catalog.add_module(module)

    questions: list[QuizQuestion] = []
    quiz_body = body.questions if module.module_type is ModuleType.QUIZ else []
    for index, q in enumerate(quiz_body, start=1):
        question = QuizQuestion(
            id=uuid4(),
            module_id=module.id,
            question_text=q.question_text,
            question_type=q.question_type,
            order_index=index,
            options=tuple(q.options),
            correct_answer=q.correct_answer,
            points=q.points,
        )
        await repos.catalog.add_question(question)
        questions.append(question)

    logger.info(
        "Module added id=%s course=%s by user=%s",
        module.id,
        course_id,
        principal.user_id,
    )
    return _module_out(
        module, questions if module.module_type is ModuleType.QUIZ else None
    )


# --- Enrollment ---------------------------------------------------------------


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(
    course_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    ledger: Annotated[ProgressLedger, Depends(get_ledger)],
) -> EnrollmentOut:
    try:
        enrollment = await ledger.enroll(principal.user_id, course_id)
    except (CourseNotFoundError, AlreadyEnrolledError) as exc:
        raise http_error(exc) from None
    return _enrollment_out(enrollment)
