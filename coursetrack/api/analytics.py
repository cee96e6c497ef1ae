"""Telemetry ingestion for the web client.

Ingestion accepts anonymous callers; a valid bearer token, when present,
attributes the event to that user.  The browser session comes from the
X-Session-ID header, or a fresh one is issued and echoed back so the client
can reuse it.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Request, status
from pydantic import AnyHttpUrl, BaseModel, Field

from coursetrack.api.dependencies import get_recorder, optional_user, require_user
from coursetrack.models.analytics import VideoAction
from coursetrack.models.principal import Principal
from coursetrack.services.event_recorder import EventRecorder, EventSource

router = APIRouter(prefix="/v1/analytics", tags=["analytics"])


# --- Schemas ----------------------------------------------------------------


class PageViewIn(BaseModel):
    pageUrl: AnyHttpUrl
    pageTitle: str | None = None
    referrerUrl: AnyHttpUrl | None = None
    userAgent: str | None = None
    timeOnPage: int | None = Field(None, ge=0)


class ClickIn(BaseModel):
    pageUrl: AnyHttpUrl
    elementId: str | None = None
    elementClass: str | None = None
    elementText: str | None = None
    clickCoordinates: dict[str, Any] | None = None


class VideoIn(BaseModel):
    moduleId: UUID
    videoUrl: AnyHttpUrl
    actionType: VideoAction
    videoTime: float | None = Field(None, ge=0)
    duration: float | None = Field(None, ge=0)


class QuizAttemptIn(BaseModel):
    moduleId: UUID
    startedAt: datetime | None = None
    completedAt: datetime | None = None
    timeSpent: int | None = Field(None, ge=0, le=24 * 60 * 60)
    score: Decimal | None = Field(None, ge=0, le=100, decimal_places=2)
    totalQuestions: int | None = Field(None, ge=1)
    correctAnswers: int | None = Field(None, ge=0)
    answers: dict[str, Any] | None = None


class TrackedOut(BaseModel):
    message: str
    sessionId: str


class EventCountsOut(BaseModel):
    totalPageViews: int
    totalClicks: int
    totalVideoInteractions: int
    totalQuizAttempts: int


class ActivityOut(BaseModel):
    type: str
    url: str
    timestamp: datetime
    score: float | None


class SummaryOut(BaseModel):
    summary: EventCountsOut
    recentActivity: list[ActivityOut]


# --- Helpers ----------------------------------------------------------------


def event_source(
    request: Request,
    principal: Annotated[Principal | None, Depends(optional_user)],
    x_session_id: Annotated[str | None, Header()] = None,
) -> EventSource:
    return EventSource(
        session_id=x_session_id or str(uuid.uuid4()),
        ip_address=request.client.host if request.client else "unknown",
        user_id=principal.user_id if principal else None,
    )


Source = Annotated[EventSource, Depends(event_source)]
Recorder = Annotated[EventRecorder, Depends(get_recorder)]


# --- Ingestion --------------------------------------------------------------


@router.post("/pageview", response_model=TrackedOut, status_code=status.HTTP_201_CREATED)
async def track_page_view(
    body: PageViewIn, source: Source, recorder: Recorder
) -> TrackedOut:
    await recorder.record_page_view(
        source,
        page_url=str(body.pageUrl),
        page_title=body.pageTitle,
        referrer_url=str(body.referrerUrl) if body.referrerUrl else None,
        user_agent=body.userAgent,
        time_on_page=body.timeOnPage,
    )
    return TrackedOut(message="Page view tracked", sessionId=source.session_id)


@router.post("/click", response_model=TrackedOut, status_code=status.HTTP_201_CREATED)
async def track_click(body: ClickIn, source: Source, recorder: Recorder) -> TrackedOut:
    await recorder.record_click(
        source,
        page_url=str(body.pageUrl),
        element_id=body.elementId,
        element_class=body.elementClass,
        element_text=body.elementText,
        click_coordinates=body.clickCoordinates,
    )
    return TrackedOut(message="Click tracked", sessionId=source.session_id)


@router.post("/video", response_model=TrackedOut, status_code=status.HTTP_201_CREATED)
async def track_video(body: VideoIn, source: Source, recorder: Recorder) -> TrackedOut:
    await recorder.record_video(
        source,
        module_id=body.moduleId,
        video_url=str(body.videoUrl),
        action_type=body.actionType,
        video_time=body.videoTime,
        duration=body.duration,
    )
    return TrackedOut(message="Video interaction tracked", sessionId=source.session_id)


@router.post("/quiz", response_model=TrackedOut, status_code=status.HTTP_201_CREATED)
async def track_quiz_attempt(
    body: QuizAttemptIn, source: Source, recorder: Recorder
) -> TrackedOut:
    await recorder.record_quiz_attempt(
        source,
        module_id=body.moduleId,
        started_at=body.startedAt,
        completed_at=body.completedAt,
        time_spent=body.timeSpent,
        score=body.score,
        total_questions=body.totalQuestions,
        correct_answers=body.correctAnswers,
        answers=body.answers,
    )
    return TrackedOut(message="Quiz attempt tracked", sessionId=source.session_id)


# --- Summary ----------------------------------------------------------------


@router.get("/summary", response_model=SummaryOut)
async def analytics_summary(
    principal: Annotated[Principal, Depends(require_user)],
    recorder: Recorder,
) -> SummaryOut:
    result = await recorder.summary(principal.user_id)
    counts = result.counts
    return SummaryOut(
        summary=EventCountsOut(
            totalPageViews=counts.page_views,
            totalClicks=counts.clicks,
            totalVideoInteractions=counts.video_interactions,
            totalQuizAttempts=counts.quiz_attempts,
        ),
        recentActivity=[
            ActivityOut(
                type=a.type,
                url=a.url,
                timestamp=a.timestamp,
                score=float(a.score) if a.score is not None else None,
            )
            for a in result.recent_activity
        ],
    )
