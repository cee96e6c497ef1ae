from __future__ import annotations

import asyncio

from coursetrack.db.seed import (
    DATA_SCIENCE_COURSE_ID,
    DEMO_LEARNER_EMAIL,
    DEMO_LEARNER_PASSWORD,
    JS_QUIZ_MODULE_ID,
    WEB_DEV_COURSE_ID,
    seed_sample_data,
)
from coursetrack.repos.registry import Repositories
from coursetrack.services.auth_service import verify_password


def test_seed_loads_catalog_and_demo_learner() -> None:
    repos = Repositories.in_memory()
    asyncio.run(seed_sample_data(repos))

    courses = asyncio.run(repos.catalog.list_published())
    assert [c.id for c in courses] == [DATA_SCIENCE_COURSE_ID, WEB_DEV_COURSE_ID]
    questions = asyncio.run(repos.catalog.list_questions([JS_QUIZ_MODULE_ID]))
    assert len(questions) == 2

    learner = asyncio.run(repos.users.get_by_email(DEMO_LEARNER_EMAIL))
    assert learner is not None
    assert verify_password(DEMO_LEARNER_PASSWORD, learner.password_hash)


def test_seed_twice_changes_nothing() -> None:
    repos = Repositories.in_memory()
    asyncio.run(seed_sample_data(repos))
    learner = asyncio.run(repos.users.get_by_email(DEMO_LEARNER_EMAIL))

    asyncio.run(seed_sample_data(repos))

    assert len(asyncio.run(repos.catalog.list_modules(WEB_DEV_COURSE_ID))) == 3
    assert asyncio.run(repos.users.get_by_email(DEMO_LEARNER_EMAIL)) == learner
