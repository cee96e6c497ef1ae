"""Telemetry events.  Append-only; user_id is None for anonymous visitors."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID


class VideoAction(StrEnum):
    PLAY = "play"
    PAUSE = "pause"
    SEEK = "seek"
    COMPLETE = "complete"
    STOP = "stop"


@dataclass(frozen=True, slots=True)
class PageView:
    id: UUID
    session_id: str
    page_url: str
    recorded_at: datetime
    ip_address: str
    user_id: UUID | None = None
    page_title: str | None = None
    referrer_url: str | None = None
    user_agent: str | None = None
    time_on_page: int | None = None


@dataclass(frozen=True, slots=True)
class UserClick:
    id: UUID
    session_id: str
    page_url: str
    recorded_at: datetime
    ip_address: str
    user_id: UUID | None = None
    element_id: str | None = None
    element_class: str | None = None
    element_text: str | None = None
    click_coordinates: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class VideoInteraction:
    id: UUID
    session_id: str
    module_id: UUID
    video_url: str
    action_type: VideoAction
    recorded_at: datetime
    ip_address: str
    user_id: UUID | None = None
    video_time: float | None = None
    duration: float | None = None


@dataclass(frozen=True, slots=True)
class QuizAttempt:
    id: UUID
    session_id: str
    module_id: UUID
    recorded_at: datetime
    ip_address: str
    user_id: UUID | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    time_spent: int | None = None
    score: Decimal | None = None
    total_questions: int | None = None
    correct_answers: int | None = None
    answers: dict[str, Any] | None = None


@dataclass(frozen=True, slots=True)
class ActivityItem:
    type: str  # page_view | quiz_attempt
    url: str
    timestamp: datetime
    score: Decimal | None = None


@dataclass(frozen=True, slots=True)
class EventCounts:
    page_views: int = 0
    clicks: int = 0
    video_interactions: int = 0
    quiz_attempts: int = 0


@dataclass(frozen=True, slots=True)
class AnalyticsSummary:
    counts: EventCounts
    recent_activity: tuple[ActivityItem, ...]
