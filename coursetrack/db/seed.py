"""Sample catalog and demo learner.

IDs are fixed so dev tooling and tests can refer to them directly.  Seeding
is a no-op for any course or user that already exists.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from coursetrack.models.course import (
    Course,
    Difficulty,
    Module,
    ModuleType,
    QuestionType,
    QuizQuestion,
)
from coursetrack.models.user import Role
from coursetrack.repos.registry import Repositories
from coursetrack.services.auth_service import register_user

logger = logging.getLogger(__name__)

WEB_DEV_COURSE_ID = UUID("6f1c2a3e-0d3b-4c55-9a51-2d0c7e1b9a01")
DATA_SCIENCE_COURSE_ID = UUID("6f1c2a3e-0d3b-4c55-9a51-2d0c7e1b9a02")

HTML_MODULE_ID = UUID("a3d5f0b2-7c41-4e0e-8f2a-5b6c9d1e0f11")
CSS_MODULE_ID = UUID("a3d5f0b2-7c41-4e0e-8f2a-5b6c9d1e0f12")
JS_QUIZ_MODULE_ID = UUID("a3d5f0b2-7c41-4e0e-8f2a-5b6c9d1e0f13")

DEMO_LEARNER_EMAIL = "learner@example.com"
DEMO_LEARNER_PASSWORD = "learner-password"

_SEEDED_AT = datetime(2024, 1, 1, tzinfo=UTC)

SAMPLE_COURSES = (
    Course(
        id=WEB_DEV_COURSE_ID,
        title="Introduction to Web Development",
        description="Learn the basics of HTML, CSS, and JavaScript",
        category="Programming",
        difficulty_level=Difficulty.BEGINNER,
        estimated_duration=120,
        is_published=True,
        created_at=_SEEDED_AT,
    ),
    Course(
        id=DATA_SCIENCE_COURSE_ID,
        title="Data Science Fundamentals",
        description="Introduction to Python, statistics, and machine learning",
        category="Data Science",
        difficulty_level=Difficulty.INTERMEDIATE,
        estimated_duration=180,
        is_published=True,
        created_at=_SEEDED_AT.replace(minute=1),
    ),
)

SAMPLE_MODULES = (
    Module(
        id=HTML_MODULE_ID,
        course_id=WEB_DEV_COURSE_ID,
        title="HTML Basics",
        description="Learn HTML structure and elements",
        order_index=1,
        module_type=ModuleType.TEXT,
        content="HTML is the standard markup language for creating web pages...",
    ),
    Module(
        id=CSS_MODULE_ID,
        course_id=WEB_DEV_COURSE_ID,
        title="CSS Styling",
        description="Learn CSS for styling web pages",
        order_index=2,
        module_type=ModuleType.VIDEO,
        video_url="https://example.com/css-video.mp4",
        duration=1800,
    ),
    Module(
        id=JS_QUIZ_MODULE_ID,
        course_id=WEB_DEV_COURSE_ID,
        title="JavaScript Quiz",
        description="Test your JavaScript knowledge",
        order_index=3,
        module_type=ModuleType.QUIZ,
    ),
)

SAMPLE_QUESTIONS = (
    QuizQuestion(
        id=UUID("c7e9a1b3-2f4d-4a6b-8c0d-1e2f3a4b5c21"),
        module_id=JS_QUIZ_MODULE_ID,
        question_text="What is JavaScript?",
        question_type=QuestionType.MULTIPLE_CHOICE,
        order_index=1,
        options=(
            "A programming language",
            "A markup language",
            "A styling language",
            "A database",
        ),
        correct_answer="A programming language",
    ),
    QuizQuestion(
        id=UUID("c7e9a1b3-2f4d-4a6b-8c0d-1e2f3a4b5c22"),
        module_id=JS_QUIZ_MODULE_ID,
        question_text="JavaScript is primarily used for:",
        question_type=QuestionType.MULTIPLE_CHOICE,
        order_index=2,
        options=(
            "Server-side programming only",
            "Client-side programming only",
            "Both client and server-side",
            "Database management",
        ),
        correct_answer="Both client and server-side",
    ),
)


async def seed_sample_data(repos: Repositories) -> None:
    created = 0
    for course in SAMPLE_COURSES:
        if await repos.catalog.course_exists(course.id, require_published=False):
            continue
        await repos.catalog.add_course(course)
        for module in (m for m in SAMPLE_MODULES if m.course_id == course.id):
            await repos.catalog.add_module(module)
            for question in SAMPLE_QUESTIONS:
                if question.module_id == module.id:
                    await repos.catalog.add_question(question)
        created += 1

    if await repos.users.get_by_email(DEMO_LEARNER_EMAIL) is None:
        await register_user(
            repos.users,
            email=DEMO_LEARNER_EMAIL,
            password=DEMO_LEARNER_PASSWORD,
            first_name="Demo",
            last_name="Learner",
            role=Role.LEARNER,
        )

    logger.info("Sample data seeded: %d new course(s)", created)
