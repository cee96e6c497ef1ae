from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID, uuid4

from coursetrack.core.metrics import ANALYTICS_EVENTS
from coursetrack.models.analytics import (
    AnalyticsSummary,
    PageView,
    QuizAttempt,
    UserClick,
    VideoAction,
    VideoInteraction,
)
from coursetrack.repos.analytics_repo import AnalyticsRepo

logger = logging.getLogger(__name__)

RECENT_ACTIVITY_LIMIT = 10


@dataclass(frozen=True, slots=True)
class EventSource:
    """Who sent an event: browser session, client address, optional user."""

    session_id: str
    ip_address: str
    user_id: UUID | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime | None) -> datetime | None:
    """Client timestamps without an offset are taken as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class EventRecorder:
    def __init__(
        self, repo: AnalyticsRepo, *, clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self._repo = repo
        self._clock = clock

    def _tracked(self, kind: str, source: EventSource, what: str) -> None:
        ANALYTICS_EVENTS.labels(kind=kind).inc()
        logger.debug(
            "Tracked %s: %s",
            kind,
            what,
            extra={
                "session_id": source.session_id,
                "user_id": str(source.user_id) if source.user_id else None,
            },
        )

    async def record_page_view(
        self,
        source: EventSource,
        *,
        page_url: str,
        page_title: str | None = None,
        referrer_url: str | None = None,
        user_agent: str | None = None,
        time_on_page: int | None = None,
    ) -> PageView:
        event = PageView(
            id=uuid4(),
            session_id=source.session_id,
            page_url=page_url,
            recorded_at=self._clock(),
            ip_address=source.ip_address,
            user_id=source.user_id,
            page_title=page_title,
            referrer_url=referrer_url,
            user_agent=user_agent,
            time_on_page=time_on_page,
        )
        await self._repo.add_page_view(event)
        self._tracked("page_view", source, page_url)
        return event

    async def record_click(
        self,
        source: EventSource,
        *,
        page_url: str,
        element_id: str | None = None,
        element_class: str | None = None,
        element_text: str | None = None,
        click_coordinates: dict[str, Any] | None = None,
    ) -> UserClick:
        event = UserClick(
            id=uuid4(),
            session_id=source.session_id,
            page_url=page_url,
            recorded_at=self._clock(),
            ip_address=source.ip_address,
            user_id=source.user_id,
            element_id=element_id,
            element_class=element_class,
            element_text=element_text,
            click_coordinates=click_coordinates,
        )
        await self._repo.add_click(event)
        self._tracked("click", source, f"{element_id or 'unknown'} on {page_url}")
        return event

    async def record_video(
        self,
        source: EventSource,
        *,
        module_id: UUID,
        video_url: str,
        action_type: VideoAction,
        video_time: float | None = None,
        duration: float | None = None,
    ) -> VideoInteraction:
        event = VideoInteraction(
            id=uuid4(),
            session_id=source.session_id,
            module_id=module_id,
            video_url=video_url,
            action_type=action_type,
            recorded_at=self._clock(),
            ip_address=source.ip_address,
            user_id=source.user_id,
            video_time=video_time,
            duration=duration,
        )
        await self._repo.add_video_interaction(event)
        self._tracked("video", source, f"{action_type.value} on {video_url}")
        return event

    async def record_quiz_attempt(
        self,
        source: EventSource,
        *,
        module_id: UUID,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        time_spent: int | None = None,
        score: Decimal | None = None,
        total_questions: int | None = None,
        correct_answers: int | None = None,
        answers: dict[str, Any] | None = None,
    ) -> QuizAttempt:
        event = QuizAttempt(
            id=uuid4(),
            session_id=source.session_id,
            module_id=module_id,
            recorded_at=self._clock(),
            ip_address=source.ip_address,
            user_id=source.user_id,
            started_at=_as_utc(started_at),
            completed_at=_as_utc(completed_at),
            time_spent=time_spent,
            score=score,
            total_questions=total_questions,
            correct_answers=correct_answers,
            answers=answers,
        )
        await self._repo.add_quiz_attempt(event)
        self._tracked("quiz_attempt", source, f"module {module_id}")
        return event

    async def summary(self, user_id: UUID) -> AnalyticsSummary:
        counts = await self._repo.count_events(user_id)
        recent = await self._repo.recent_activity(user_id, RECENT_ACTIVITY_LIMIT)
        return AnalyticsSummary(counts=counts, recent_activity=tuple(recent))
