"""PostgreSQL implementation of CatalogRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import CourseModuleRow, CourseRow, QuizQuestionRow
from coursetrack.models.course import (
    Course,
    Difficulty,
    Module,
    ModuleType,
    QuestionType,
    QuizQuestion,
)


class PgCatalogRepo:
    """Satisfies the CatalogRepo Protocol.  Reads are never cached."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_published(self) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.is_published.is_(True))
            .order_by(CourseRow.created_at.desc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def get_course(
        self, course_id: UUID, *, published_only: bool = True
    ) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.id == course_id)
        if published_only:
            stmt = stmt.where(CourseRow.is_published.is_(True))
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        return _row_to_course(row) if row is not None else None

    async def course_exists(
        self, course_id: UUID, *, require_published: bool = True
    ) -> bool:
        stmt = select(CourseRow.id).where(CourseRow.id == course_id)
        if require_published:
            stmt = stmt.where(CourseRow.is_published.is_(True))
        return (await self._session.execute(stmt)).first() is not None

    async def list_modules(self, course_id: UUID) -> list[Module]:
        stmt = (
            select(CourseModuleRow)
            .where(CourseModuleRow.course_id == course_id)
            .order_by(CourseModuleRow.order_index)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    async def list_questions(self, module_ids: Iterable[UUID]) -> list[QuizQuestion]:
        ids = list(module_ids)
        if not ids:
            return []
        stmt = (
            select(QuizQuestionRow)
            .where(QuizQuestionRow.module_id.in_(ids))
            .order_by(QuizQuestionRow.module_id, QuizQuestionRow.order_index)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(r) for r in rows]

    async def add_course(self, course: Course) -> None:
        self._session.add(
            CourseRow(
                id=course.id,
                title=course.title,
                description=course.description,
                category=course.category,
                difficulty_level=course.difficulty_level.value,
                estimated_duration=course.estimated_duration,
                thumbnail_url=course.thumbnail_url,
                is_published=course.is_published,
                created_at=course.created_at,
            )
        )
        await self._session.flush()

    async def add_module(self, module: Module) -> None:
        self._session.add(
            CourseModuleRow(
                id=module.id,
                course_id=module.course_id,
                title=module.title,
                description=module.description,
                order_index=module.order_index,
                module_type=module.module_type.value,
                content=module.content,
                video_url=module.video_url,
                duration=module.duration,
            )
        )
        await self._session.flush()

    async def add_question(self, question: QuizQuestion) -> None:
        self._session.add(
            QuizQuestionRow(
                id=question.id,
                module_id=question.module_id,
                question_text=question.question_text,
                question_type=question.question_type.value,
                options=list(question.options),
                correct_answer=question.correct_answer,
                points=question.points,
                order_index=question.order_index,
            )
        )
        await self._session.flush()


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        created_at=row.created_at,
        description=row.description or "",
        category=row.category,
        difficulty_level=Difficulty(row.difficulty_level),
        estimated_duration=row.estimated_duration,
        thumbnail_url=row.thumbnail_url,
        is_published=row.is_published,
    )


def _row_to_module(row: CourseModuleRow) -> Module:
    return Module(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        order_index=row.order_index,
        module_type=ModuleType(row.module_type),
        description=row.description or "",
        content=row.content,
        video_url=row.video_url,
        duration=row.duration,
    )


def _row_to_question(row: QuizQuestionRow) -> QuizQuestion:
    return QuizQuestion(
        id=row.id,
        module_id=row.module_id,
        question_text=row.question_text,
        question_type=QuestionType(row.question_type),
        order_index=row.order_index,
        options=tuple(row.options or ()),
        correct_answer=row.correct_answer,
        points=row.points,
    )
