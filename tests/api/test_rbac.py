"""Table-driven access-control tests.

Each row describes: endpoint, method, role, expected HTTP status.
Catalog reads are public, authoring is instructor/admin only, and
everything about a learner's own enrollments needs a signed-in caller.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from coursetrack.db.seed import WEB_DEV_COURSE_ID
from coursetrack.models.user import Role
from tests.conftest import mint_token

_COURSE = f"/v1/courses/{WEB_DEV_COURSE_ID}"

_MODULE_BODY = {"title": "Extra", "order_index": 10, "module_type": "text"}

_RBAC_CASES = [
    # (endpoint, method, role, expected_status)
    # catalog reads - anyone
    ("/v1/courses", "GET", None, 200),
    ("/v1/courses", "GET", Role.LEARNER, 200),
    (_COURSE, "GET", None, 200),
    # course authoring - instructor or admin
    ("/v1/courses", "POST", Role.INSTRUCTOR, 201),
    ("/v1/courses", "POST", Role.ADMIN, 201),
    ("/v1/courses", "POST", Role.LEARNER, 403),
    ("/v1/courses", "POST", None, 401),
    (f"{_COURSE}/modules", "POST", Role.INSTRUCTOR, 201),
    (f"{_COURSE}/modules", "POST", Role.LEARNER, 403),
    (f"{_COURSE}/modules", "POST", None, 401),
    # enrollment - any signed-in user
    (f"{_COURSE}/enroll", "POST", Role.LEARNER, 201),
    (f"{_COURSE}/enroll", "POST", Role.INSTRUCTOR, 201),
    (f"{_COURSE}/enroll", "POST", None, 401),
    ("/v1/courses/enrolled/list", "GET", Role.LEARNER, 200),
    ("/v1/courses/enrolled/list", "GET", None, 401),
    # progress - signed in, then enrollment-gated
    (f"{_COURSE}/progress", "GET", Role.LEARNER, 403),
    (f"{_COURSE}/progress", "GET", None, 401),
    # analytics - ingestion open, summary signed-in
    ("/v1/analytics/pageview", "POST", None, 201),
    ("/v1/analytics/pageview", "POST", Role.LEARNER, 201),
    ("/v1/analytics/summary", "GET", Role.LEARNER, 200),
    ("/v1/analytics/summary", "GET", None, 401),
]


def _case_id(case: tuple) -> str:
    endpoint, method, role, expected = case
    role_label = role.value if role else "anon"
    return f"{method} {endpoint} [{role_label}] -> {expected}"


def _body_for(endpoint: str) -> dict:
    if endpoint.endswith("/modules"):
        return _MODULE_BODY
    if endpoint == "/v1/courses":
        return {"title": "RBAC course"}
    if endpoint.endswith("/pageview"):
        return {"pageUrl": "https://example.com/"}
    return {}


@pytest.mark.parametrize(
    "endpoint,method,role,expected",
    _RBAC_CASES,
    ids=[_case_id(c) for c in _RBAC_CASES],
)
def test_rbac(
    client: TestClient,
    endpoint: str,
    method: str,
    role: Role | None,
    expected: int,
) -> None:
    headers = {"Authorization": f"Bearer {mint_token(role=role)}"} if role else {}

    if method == "GET":
        resp = client.get(endpoint, headers=headers)
    elif method == "POST":
        resp = client.post(endpoint, json=_body_for(endpoint), headers=headers)
    else:
        pytest.fail(f"Unsupported method: {method}")

    assert resp.status_code == expected, (
        f"{method} {endpoint} role={role}: expected {expected}, got {resp.status_code}"
    )
