from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from coursetrack.models.course import Course, Module, QuizQuestion


class CatalogRepo(Protocol):
    async def list_published(self) -> list[Course]: ...
    async def get_course(
        self, course_id: UUID, *, published_only: bool = True
    ) -> Course | None: ...
    async def course_exists(
        self, course_id: UUID, *, require_published: bool = True
    ) -> bool: ...
    async def list_modules(self, course_id: UUID) -> list[Module]: ...
    async def list_questions(self, module_ids: Iterable[UUID]) -> list[QuizQuestion]: ...
    async def add_course(self, course: Course) -> None: ...
    async def add_module(self, module: Module) -> None: ...
    async def add_question(self, question: QuizQuestion) -> None: ...


class InMemoryCatalogRepo:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._modules: dict[UUID, Module] = {}
        self._questions: dict[UUID, QuizQuestion] = {}

    async def list_published(self) -> list[Course]:
        published = [c for c in self._courses.values() if c.is_published]
        return sorted(published, key=lambda c: c.created_at, reverse=True)

    async def get_course(
        self, course_id: UUID, *, published_only: bool = True
    ) -> Course | None:
        course = self._courses.get(course_id)
        if course is None or (published_only and not course.is_published):
            return None
        return course

    async def course_exists(
        self, course_id: UUID, *, require_published: bool = True
    ) -> bool:
        return (
            await self.get_course(course_id, published_only=require_published)
            is not None
        )

    async def list_modules(self, course_id: UUID) -> list[Module]:
        modules = [m for m in self._modules.values() if m.course_id == course_id]
        return sorted(modules, key=lambda m: m.order_index)

    async def list_questions(self, module_ids: Iterable[UUID]) -> list[QuizQuestion]:
        wanted = set(module_ids)
        questions = [q for q in self._questions.values() if q.module_id in wanted]
        return sorted(questions, key=lambda q: (str(q.module_id), q.order_index))

    async def add_course(self, course: Course) -> None:
        if course.id in self._courses:
            raise ValueError("course already exists")
        self._courses[course.id] = course

    async def add_module(self, module: Module) -> None:
        if module.course_id not in self._courses:
            raise KeyError("course not found")
        self._modules[module.id] = module

    async def add_question(self, question: QuizQuestion) -> None:
        if question.module_id not in self._modules:
            raise KeyError("module not found")
        self._questions[question.id] = question

    async def remove_module(self, module_id: UUID) -> None:
        """Drop a module and its questions (catalog edits in dev/test)."""
        self._modules.pop(module_id, None)
        for qid in [q.id for q in self._questions.values() if q.module_id == module_id]:
            del self._questions[qid]
