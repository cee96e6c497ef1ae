from __future__ import annotations

import asyncio
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from coursetrack.models.course import Course, Module, ModuleType
from coursetrack.models.progress import ProgressStatus
from coursetrack.repos.catalog_repo import InMemoryCatalogRepo
from coursetrack.repos.progress_repo import InMemoryProgressRepo
from coursetrack.services.errors import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    InvalidProgressError,
    NotEnrolledError,
)
from coursetrack.services.progress_ledger import ProgressLedger, completion_percentage

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=UTC)


class _Clock:
    """Advances one minute per call so timestamps are distinguishable."""

    def __init__(self) -> None:
        self.now = T0

    def __call__(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


def _setup(
    module_count: int = 3, *, published: bool = True
) -> tuple[ProgressLedger, InMemoryCatalogRepo, InMemoryProgressRepo, Course, list[Module]]:
    catalog = InMemoryCatalogRepo()
    progress = InMemoryProgressRepo()
    course = Course.new(title="C1", created_at=T0, is_published=published)
    modules = [
        Module.new(
            course_id=course.id,
            title=f"m{i + 1}",
            order_index=i + 1,
            module_type=ModuleType.TEXT,
        )
        for i in range(module_count)
    ]

    async def _load() -> None:
        await catalog.add_course(course)
        for m in modules:
            await catalog.add_module(m)

    asyncio.run(_load())
    ledger = ProgressLedger(catalog, progress, clock=_Clock())
    return ledger, catalog, progress, course, modules


# ---- completion_percentage ----


@pytest.mark.parametrize(
    ("completed", "total", "expected"),
    [
        (0, 3, "0.00"),
        (1, 3, "33.33"),
        (2, 3, "66.67"),
        (3, 3, "100.00"),
        (1, 8, "12.50"),
        (1, 200, "0.50"),
        (0, 0, "0.00"),
    ],
)
def test_completion_percentage(completed: int, total: int, expected: str) -> None:
    assert completion_percentage(completed, total) == Decimal(expected)


def test_completion_percentage_rounds_half_up() -> None:
    assert completion_percentage(1, 400) == Decimal("0.25")
    # 100 * 1 / 800 = 0.125 rounds up, not to even
    assert completion_percentage(1, 800) == Decimal("0.13")


# ---- enroll ----


def test_enroll_creates_zero_percent_enrollment() -> None:
    ledger, _, _, course, _ = _setup()
    user_id = uuid4()

    enrollment = asyncio.run(ledger.enroll(user_id, course.id))

    assert enrollment.user_id == user_id
    assert enrollment.course_id == course.id
    assert enrollment.progress_percentage == Decimal("0.00")
    assert enrollment.current_module_id is None
    assert enrollment.completed_at is None


def test_enroll_twice_conflicts() -> None:
    ledger, _, _, course, _ = _setup()
    user_id = uuid4()
    asyncio.run(ledger.enroll(user_id, course.id))

    with pytest.raises(AlreadyEnrolledError):
        asyncio.run(ledger.enroll(user_id, course.id))


def test_enroll_unknown_course_not_found() -> None:
    ledger, *_ = _setup()
    with pytest.raises(CourseNotFoundError):
        asyncio.run(ledger.enroll(uuid4(), uuid4()))


def test_enroll_unpublished_course_not_found() -> None:
    ledger, _, _, course, _ = _setup(published=False)
    with pytest.raises(CourseNotFoundError):
        asyncio.run(ledger.enroll(uuid4(), course.id))


def test_list_enrollments_is_per_user() -> None:
    ledger, _, _, course, _ = _setup()
    alice, bob = uuid4(), uuid4()
    asyncio.run(ledger.enroll(alice, course.id))

    assert [e.course.id for e in asyncio.run(ledger.list_enrollments(alice))] == [
        course.id
    ]
    assert asyncio.run(ledger.list_enrollments(bob)) == []


# ---- record_progress ----


def test_record_progress_requires_enrollment() -> None:
    ledger, _, progress, course, modules = _setup()

    with pytest.raises(NotEnrolledError):
        asyncio.run(
            ledger.record_progress(
                uuid4(), course.id, modules[0].id, ProgressStatus.COMPLETED
            )
        )
    # Nothing was written.
    assert progress._progress == {}


def test_record_progress_rejects_negative_time() -> None:
    ledger, _, _, course, modules = _setup()
    user_id = uuid4()
    asyncio.run(ledger.enroll(user_id, course.id))

    with pytest.raises(InvalidProgressError) as excinfo:
        asyncio.run(
            ledger.record_progress(
                user_id,
                course.id,
                modules[0].id,
                ProgressStatus.IN_PROGRESS,
                time_spent_delta=-5,
            )
        )
    assert excinfo.value.status_code == 400


@pytest.mark.parametrize("score", [Decimal("-1"), Decimal("100.01")])
def test_record_progress_rejects_score_out_of_range(score: Decimal) -> None:
    ledger, _, progress, course, modules = _setup()
    user_id = uuid4()
    asyncio.run(ledger.enroll(user_id, course.id))

    with pytest.raises(InvalidProgressError):
        asyncio.run(
            ledger.record_progress(
                user_id, course.id, modules[0].id, ProgressStatus.COMPLETED, 0, score
            )
        )
    assert progress._progress == {}


def test_walkthrough_percentages() -> None:
    ledger, _, _, course, (m1, m2, m3) = _setup()
    user_id = uuid4()

    async def run() -> list[Decimal]:
        seen = [(await ledger.enroll(user_id, course.id)).progress_percentage]
        snap = await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.COMPLETED, 300
        )
        seen.append(snap.progress_percentage)
        snap = await ledger.record_progress(
            user_id, course.id, m2.id, ProgressStatus.COMPLETED, 600, Decimal("90")
        )
        seen.append(snap.progress_percentage)
        snap = await ledger.record_progress(
            user_id, course.id, m3.id, ProgressStatus.IN_PROGRESS, 120
        )
        seen.append(snap.progress_percentage)
        return seen

    assert asyncio.run(run()) == [
        Decimal("0.00"),
        Decimal("33.33"),
        Decimal("66.67"),
        Decimal("66.67"),
    ]

    enrollment = asyncio.run(ledger.get_enrollment(user_id, course.id))
    assert enrollment.progress_percentage == Decimal("66.67")
    assert enrollment.current_module_id == m3.id

    view = asyncio.run(ledger.get_course_progress(user_id, course.id))
    assert [row.status for row in view.modules] == [
        ProgressStatus.COMPLETED,
        ProgressStatus.COMPLETED,
        ProgressStatus.IN_PROGRESS,
    ]
    assert view.modules[1].score == Decimal("90")
    assert view.modules[2].time_spent == 120


def test_time_spent_accumulates_and_score_overwrites() -> None:
    ledger, _, _, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS, 40, Decimal("50")
        )
        await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS, 0
        )
        return await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.COMPLETED, 25, Decimal("90")
        )

    snap = asyncio.run(run())
    assert snap.record.time_spent == 65
    assert snap.record.score == Decimal("90")
    assert snap.record.attempts == 1


def test_status_can_move_backwards() -> None:
    ledger, _, _, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(user_id, course.id, m1.id, ProgressStatus.COMPLETED)
        return await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS
        )

    snap = asyncio.run(run())
    assert snap.record.status is ProgressStatus.IN_PROGRESS
    assert snap.progress_percentage == Decimal("0.00")


def test_attempts_only_increase_on_new_attempt() -> None:
    ledger, _, _, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS)
        await ledger.record_progress(user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS)
        return await ledger.record_progress(
            user_id,
            course.id,
            m1.id,
            ProgressStatus.COMPLETED,
            score=Decimal("80"),
            new_attempt=True,
        )

    assert asyncio.run(run()).record.attempts == 2


def test_record_keeps_started_at_and_moves_updated_at() -> None:
    ledger, _, _, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        first = await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.IN_PROGRESS
        )
        second = await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.COMPLETED
        )
        return first.record, second.record

    first, second = asyncio.run(run())
    assert first.id == second.id
    assert second.started_at == first.started_at
    assert second.updated_at > first.updated_at


def test_full_completion_leaves_completed_at_unset() -> None:
    ledger, _, _, course, modules = _setup(module_count=2)
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        for m in modules:
            await ledger.record_progress(user_id, course.id, m.id, ProgressStatus.COMPLETED)
        return await ledger.get_enrollment(user_id, course.id)

    enrollment = asyncio.run(run())
    assert enrollment.progress_percentage == Decimal("100.00")
    assert enrollment.completed_at is None


# ---- recompute ----


def test_recompute_follows_catalog_edits() -> None:
    ledger, catalog, _, course, (m1, m2, m3) = _setup()
    user_id = uuid4()

    async def run() -> tuple[Decimal, Decimal]:
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(user_id, course.id, m1.id, ProgressStatus.COMPLETED)
        await catalog.remove_module(m3.id)
        shrunk = await ledger.recompute(user_id, course.id, m1.id)
        await catalog.add_module(
            Module.new(
                course_id=course.id,
                title="m4",
                order_index=4,
                module_type=ModuleType.VIDEO,
            )
        )
        await catalog.add_module(
            Module.new(
                course_id=course.id,
                title="m5",
                order_index=5,
                module_type=ModuleType.QUIZ,
            )
        )
        grown = await ledger.recompute(user_id, course.id, m1.id)
        return shrunk, grown

    shrunk, grown = asyncio.run(run())
    assert shrunk == Decimal("50.00")
    assert grown == Decimal("25.00")


def test_recompute_is_idempotent() -> None:
    ledger, _, _, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run() -> list[Decimal]:
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(user_id, course.id, m1.id, ProgressStatus.COMPLETED)
        return [await ledger.recompute(user_id, course.id, m1.id) for _ in range(3)]

    assert asyncio.run(run()) == [Decimal("33.33")] * 3


def test_identical_reports_leave_one_record_and_same_percentage() -> None:
    ledger, _, progress, course, (m1, _, _) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        first = await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.COMPLETED, 0, Decimal("80")
        )
        second = await ledger.record_progress(
            user_id, course.id, m1.id, ProgressStatus.COMPLETED, 0, Decimal("80")
        )
        stored = await ledger.get_enrollment(user_id, course.id)
        return first, second, stored

    first, second, stored = asyncio.run(run())
    assert first.progress_percentage == second.progress_percentage == Decimal("33.33")
    assert stored.progress_percentage == Decimal("33.33")
    assert list(progress._progress) == [(user_id, m1.id)]
    assert second.record.id == first.record.id
    assert second.record.time_spent == 0
    assert second.record.score == Decimal("80")
    assert second.record.attempts == 1


def test_course_without_modules_stays_at_zero() -> None:
    ledger, _, _, course, _ = _setup(module_count=0)
    user_id = uuid4()

    async def run() -> Decimal:
        await ledger.enroll(user_id, course.id)
        return await ledger.recompute(user_id, course.id, None)

    assert asyncio.run(run()) == Decimal("0.00")


def test_progress_outside_course_does_not_count() -> None:
    ledger, _, _, course, _ = _setup()
    user_id = uuid4()
    stray: UUID = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        return await ledger.record_progress(
            user_id, course.id, stray, ProgressStatus.COMPLETED
        )

    snap = asyncio.run(run())
    assert snap.progress_percentage == Decimal("0.00")
    assert snap.current_module_id == stray


# ---- get_course_progress ----


def test_course_progress_overlays_records_on_modules() -> None:
    ledger, _, _, course, (m1, m2, m3) = _setup()
    user_id = uuid4()

    async def run():
        await ledger.enroll(user_id, course.id)
        await ledger.record_progress(
            user_id, course.id, m2.id, ProgressStatus.IN_PROGRESS, 90
        )
        return await ledger.get_course_progress(user_id, course.id)

    view = asyncio.run(run())
    assert [row.module_id for row in view.modules] == [m1.id, m2.id, m3.id]
    assert view.modules[0].status is ProgressStatus.NOT_STARTED
    assert view.modules[0].attempts == 0
    assert view.modules[0].started_at is None
    assert view.modules[1].status is ProgressStatus.IN_PROGRESS
    assert view.modules[1].time_spent == 90
    assert view.overall_percentage == Decimal("0.00")
    assert view.current_module_id == m2.id


def test_course_progress_requires_enrollment() -> None:
    ledger, _, _, course, _ = _setup()
    with pytest.raises(NotEnrolledError):
        asyncio.run(ledger.get_course_progress(uuid4(), course.id))
