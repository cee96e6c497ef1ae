"""Tests for course catalog, authoring and enrollment endpoints."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from coursetrack.db.seed import (
    CSS_MODULE_ID,
    DATA_SCIENCE_COURSE_ID,
    HTML_MODULE_ID,
    JS_QUIZ_MODULE_ID,
    WEB_DEV_COURSE_ID,
)
from coursetrack.models.user import Role
from tests.conftest import auth, mint_token

# ---- catalog reads (public) ----


def test_list_courses_is_public_and_newest_first(client: TestClient) -> None:
    resp = client.get("/v1/courses")
    assert resp.status_code == 200
    ids = [c["id"] for c in resp.json()]
    assert ids == [str(DATA_SCIENCE_COURSE_ID), str(WEB_DEV_COURSE_ID)]


def test_get_course_lists_modules_in_order(client: TestClient) -> None:
    resp = client.get(f"/v1/courses/{WEB_DEV_COURSE_ID}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Introduction to Web Development"
    assert [m["id"] for m in data["modules"]] == [
        str(HTML_MODULE_ID),
        str(CSS_MODULE_ID),
        str(JS_QUIZ_MODULE_ID),
    ]


def test_quiz_questions_are_served_without_answers(client: TestClient) -> None:
    modules = client.get(f"/v1/courses/{WEB_DEV_COURSE_ID}").json()["modules"]
    text, video, quiz = modules

    assert text["questions"] is None
    assert video["questions"] is None
    assert [q["question_text"] for q in quiz["questions"]] == [
        "What is JavaScript?",
        "JavaScript is primarily used for:",
    ]
    assert all("correct_answer" not in q for q in quiz["questions"])
    assert len(quiz["questions"][0]["options"]) == 4


def test_get_unknown_course_is_404(client: TestClient) -> None:
    resp = client.get(f"/v1/courses/{uuid4()}")
    assert resp.status_code == 404
    assert resp.json()["detail"]["message"] == "Course not found"


def test_get_course_with_malformed_id_is_400(client: TestClient) -> None:
    assert client.get("/v1/courses/not-a-uuid").status_code == 400


# ---- authoring ----


def test_learner_cannot_create_course(client: TestClient, token: str) -> None:
    resp = client.post("/v1/courses", json={"title": "Nope"}, headers=auth(token))
    assert resp.status_code == 403
    assert resp.json()["detail"]["message"] == "Insufficient permissions"


def test_create_course_requires_token(client: TestClient) -> None:
    assert client.post("/v1/courses", json={"title": "Nope"}).status_code == 401


def test_unpublished_course_is_hidden(
    client: TestClient, instructor_token: str, token: str
) -> None:
    created = client.post(
        "/v1/courses",
        json={"title": "Draft", "difficulty_level": "advanced"},
        headers=auth(instructor_token),
    )
    assert created.status_code == 201
    course_id = created.json()["id"]
    assert created.json()["is_published"] is False

    assert course_id not in [c["id"] for c in client.get("/v1/courses").json()]
    assert client.get(f"/v1/courses/{course_id}").status_code == 404
    resp = client.post(f"/v1/courses/{course_id}/enroll", headers=auth(token))
    assert resp.status_code == 404


def test_admin_can_author_published_course_with_quiz(client: TestClient) -> None:
    admin = auth(mint_token(role=Role.ADMIN, email="admin@example.com"))
    course_id = client.post(
        "/v1/courses",
        json={"title": "Published", "is_published": True},
        headers=admin,
    ).json()["id"]

    resp = client.post(
        f"/v1/courses/{course_id}/modules",
        json={
            "title": "Check",
            "order_index": 1,
            "module_type": "quiz",
            "questions": [
                {
                    "question_text": "2 + 2?",
                    "options": ["3", "4"],
                    "correct_answer": "4",
                }
            ],
        },
        headers=admin,
    )
    assert resp.status_code == 201
    assert resp.json()["questions"][0]["order_index"] == 1

    detail = client.get(f"/v1/courses/{course_id}").json()
    assert [m["title"] for m in detail["modules"]] == ["Check"]
    assert "correct_answer" not in detail["modules"][0]["questions"][0]


def test_add_module_to_unknown_course_is_404(
    client: TestClient, instructor_token: str
) -> None:
    resp = client.post(
        f"/v1/courses/{uuid4()}/modules",
        json={"title": "Lost", "order_index": 1, "module_type": "text"},
        headers=auth(instructor_token),
    )
    assert resp.status_code == 404


def test_add_module_rejects_unknown_type(
    client: TestClient, instructor_token: str
) -> None:
    resp = client.post(
        f"/v1/courses/{WEB_DEV_COURSE_ID}/modules",
        json={"title": "Odd", "order_index": 9, "module_type": "podcast"},
        headers=auth(instructor_token),
    )
    assert resp.status_code == 400


# ---- enrollment ----


def test_enroll_rejects_missing_token(client: TestClient) -> None:
    assert client.post(f"/v1/courses/{WEB_DEV_COURSE_ID}/enroll").status_code == 401


def test_enroll_starts_at_zero(client: TestClient, token: str) -> None:
    resp = client.post(f"/v1/courses/{WEB_DEV_COURSE_ID}/enroll", headers=auth(token))
    assert resp.status_code == 201
    data = resp.json()
    assert data["course_id"] == str(WEB_DEV_COURSE_ID)
    assert data["progress_percentage"] == 0.0
    assert data["current_module_id"] is None
    assert data["completed_at"] is None


def test_enroll_twice_is_conflict(client: TestClient, token: str) -> None:
    url = f"/v1/courses/{WEB_DEV_COURSE_ID}/enroll"
    assert client.post(url, headers=auth(token)).status_code == 201
    resp = client.post(url, headers=auth(token))
    assert resp.status_code == 409
    assert resp.json()["detail"]["message"] == "Already enrolled in this course"


def test_enroll_unknown_course_is_404(client: TestClient, token: str) -> None:
    resp = client.post(f"/v1/courses/{uuid4()}/enroll", headers=auth(token))
    assert resp.status_code == 404


def test_enrolled_list_shows_only_callers_courses(client: TestClient) -> None:
    alice = auth(mint_token(email="alice@example.com"))
    bob = auth(mint_token(email="bob@example.com"))
    client.post(f"/v1/courses/{WEB_DEV_COURSE_ID}/enroll", headers=alice)

    mine = client.get("/v1/courses/enrolled/list", headers=alice)
    assert mine.status_code == 200
    (item,) = mine.json()
    assert item["id"] == str(WEB_DEV_COURSE_ID)
    assert item["title"] == "Introduction to Web Development"
    assert item["enrollment"]["progress_percentage"] == 0.0

    assert client.get("/v1/courses/enrolled/list", headers=bob).json() == []


def test_enrolled_list_requires_token(client: TestClient) -> None:
    assert client.get("/v1/courses/enrolled/list").status_code == 401
