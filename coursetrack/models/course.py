from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class Difficulty(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ModuleType(StrEnum):
    TEXT = "text"
    VIDEO = "video"
    QUIZ = "quiz"


class QuestionType(StrEnum):
    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    SHORT_ANSWER = "short_answer"


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    created_at: datetime
    description: str = ""
    category: str | None = None
    difficulty_level: Difficulty = Difficulty.BEGINNER
    estimated_duration: int | None = None  # minutes
    thumbnail_url: str | None = None
    is_published: bool = False

    @staticmethod
    def new(
        *,
        title: str,
        created_at: datetime,
        description: str = "",
        category: str | None = None,
        difficulty_level: Difficulty = Difficulty.BEGINNER,
        estimated_duration: int | None = None,
        thumbnail_url: str | None = None,
        is_published: bool = False,
    ) -> Course:
        return Course(
            id=uuid4(),
            title=title,
            created_at=created_at,
            description=description,
            category=category,
            difficulty_level=difficulty_level,
            estimated_duration=estimated_duration,
            thumbnail_url=thumbnail_url,
            is_published=is_published,
        )


@dataclass(frozen=True, slots=True)
class Module:
    id: UUID
    course_id: UUID
    title: str
    order_index: int
    module_type: ModuleType
    description: str = ""
    content: str | None = None
    video_url: str | None = None
    duration: int | None = None  # seconds

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        order_index: int,
        module_type: ModuleType,
        description: str = "",
        content: str | None = None,
        video_url: str | None = None,
        duration: int | None = None,
    ) -> Module:
        return Module(
            id=uuid4(),
            course_id=course_id,
            title=title,
            order_index=order_index,
            module_type=module_type,
            description=description,
            content=content,
            video_url=video_url,
            duration=duration,
        )


@dataclass(frozen=True, slots=True)
class QuizQuestion:
    id: UUID
    module_id: UUID
    question_text: str
    question_type: QuestionType
    order_index: int
    options: tuple[str, ...] = ()
    correct_answer: str | None = None
    points: int = 1
