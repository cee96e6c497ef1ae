from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursetrack.models.analytics import (
    ActivityItem,
    EventCounts,
    PageView,
    QuizAttempt,
    UserClick,
    VideoInteraction,
)


class AnalyticsRepo(Protocol):
    async def add_page_view(self, event: PageView) -> None: ...
    async def add_click(self, event: UserClick) -> None: ...
    async def add_video_interaction(self, event: VideoInteraction) -> None: ...
    async def add_quiz_attempt(self, event: QuizAttempt) -> None: ...
    async def count_events(self, user_id: UUID) -> EventCounts: ...
    async def recent_activity(self, user_id: UUID, limit: int) -> list[ActivityItem]: ...


def quiz_activity_url(module_id: UUID) -> str:
    return f"Quiz on module {module_id}"


class InMemoryAnalyticsRepo:
    def __init__(self) -> None:
        self.page_views: list[PageView] = []
        self.clicks: list[UserClick] = []
        self.video_interactions: list[VideoInteraction] = []
        self.quiz_attempts: list[QuizAttempt] = []

    async def add_page_view(self, event: PageView) -> None:
        self.page_views.append(event)

    async def add_click(self, event: UserClick) -> None:
        self.clicks.append(event)

    async def add_video_interaction(self, event: VideoInteraction) -> None:
        self.video_interactions.append(event)

    async def add_quiz_attempt(self, event: QuizAttempt) -> None:
        self.quiz_attempts.append(event)

    async def count_events(self, user_id: UUID) -> EventCounts:
        def mine(events) -> int:
            return sum(1 for e in events if e.user_id == user_id)

        return EventCounts(
            page_views=mine(self.page_views),
            clicks=mine(self.clicks),
            video_interactions=mine(self.video_interactions),
            quiz_attempts=mine(self.quiz_attempts),
        )

    async def recent_activity(self, user_id: UUID, limit: int) -> list[ActivityItem]:
        items = [
            ActivityItem(type="page_view", url=e.page_url, timestamp=e.recorded_at)
            for e in self.page_views
            if e.user_id == user_id
        ]
        items.extend(
            ActivityItem(
                type="quiz_attempt",
                url=quiz_activity_url(e.module_id),
                timestamp=e.completed_at,
                score=e.score,
            )
            for e in self.quiz_attempts
            if e.user_id == user_id and e.completed_at is not None
        )
        items.sort(key=lambda i: i.timestamp, reverse=True)
        return items[:limit]
