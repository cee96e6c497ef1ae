"""PostgreSQL implementation of AnalyticsRepo (append-only telemetry tables)."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Numeric, func, literal, null, select, union_all
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import (
    PageViewRow,
    QuizAttemptRow,
    UserClickRow,
    VideoInteractionRow,
)
from coursetrack.models.analytics import (
    ActivityItem,
    EventCounts,
    PageView,
    QuizAttempt,
    UserClick,
    VideoInteraction,
)


class PgAnalyticsRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_page_view(self, event: PageView) -> None:
        self._session.add(
            PageViewRow(
                id=event.id,
                user_id=event.user_id,
                session_id=event.session_id,
                page_url=event.page_url,
                page_title=event.page_title,
                referrer_url=event.referrer_url,
                user_agent=event.user_agent,
                ip_address=event.ip_address,
                time_on_page=event.time_on_page,
                recorded_at=event.recorded_at,
            )
        )
        await self._session.flush()

    async def add_click(self, event: UserClick) -> None:
        self._session.add(
            UserClickRow(
                id=event.id,
                user_id=event.user_id,
                session_id=event.session_id,
                page_url=event.page_url,
                element_id=event.element_id,
                element_class=event.element_class,
                element_text=event.element_text,
                click_coordinates=event.click_coordinates,
                ip_address=event.ip_address,
                recorded_at=event.recorded_at,
            )
        )
        await self._session.flush()

    async def add_video_interaction(self, event: VideoInteraction) -> None:
        self._session.add(
            VideoInteractionRow(
                id=event.id,
                user_id=event.user_id,
                session_id=event.session_id,
                module_id=event.module_id,
                video_url=event.video_url,
                action_type=event.action_type.value,
                video_time=event.video_time,
                duration=event.duration,
                ip_address=event.ip_address,
                recorded_at=event.recorded_at,
            )
        )
        await self._session.flush()

    async def add_quiz_attempt(self, event: QuizAttempt) -> None:
        self._session.add(
            QuizAttemptRow(
                id=event.id,
                user_id=event.user_id,
                module_id=event.module_id,
                session_id=event.session_id,
                started_at=event.started_at,
                completed_at=event.completed_at,
                time_spent=event.time_spent,
                score=event.score,
                total_questions=event.total_questions,
                correct_answers=event.correct_answers,
                answers=event.answers,
                ip_address=event.ip_address,
                recorded_at=event.recorded_at,
            )
        )
        await self._session.flush()

    async def count_events(self, user_id: UUID) -> EventCounts:
        def count(row_cls):
            return (
                select(func.count())
                .select_from(row_cls)
                .where(row_cls.user_id == user_id)
                .scalar_subquery()
            )

        stmt = select(
            count(PageViewRow).label("page_views"),
            count(UserClickRow).label("clicks"),
            count(VideoInteractionRow).label("video_interactions"),
            count(QuizAttemptRow).label("quiz_attempts"),
        )
        row = (await self._session.execute(stmt)).mappings().one()
        return EventCounts(**{k: int(v) for k, v in row.items()})

    async def recent_activity(self, user_id: UUID, limit: int) -> list[ActivityItem]:
        views = select(
            literal("page_view").label("type"),
            PageViewRow.page_url.label("url"),
            PageViewRow.recorded_at.label("timestamp"),
            null().cast(Numeric(5, 2)).label("score"),
        ).where(PageViewRow.user_id == user_id)
        quizzes = select(
            literal("quiz_attempt").label("type"),
            func.concat("Quiz on module ", QuizAttemptRow.module_id).label("url"),
            QuizAttemptRow.completed_at.label("timestamp"),
            QuizAttemptRow.score.label("score"),
        ).where(
            QuizAttemptRow.user_id == user_id,
            QuizAttemptRow.completed_at.is_not(None),
        )
        combined = union_all(views, quizzes).subquery()
        stmt = select(combined).order_by(combined.c.timestamp.desc()).limit(limit)
        rows = (await self._session.execute(stmt)).mappings().all()
        return [
            ActivityItem(
                type=r["type"],
                url=r["url"],
                timestamp=r["timestamp"],
                score=Decimal(r["score"]) if r["score"] is not None else None,
            )
            for r in rows
        ]
