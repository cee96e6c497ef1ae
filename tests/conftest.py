from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path
from uuid import UUID, uuid4

# Tests always run against the in-memory backend with the sample catalog.
os.environ["APP_ENV"] = "test"
os.environ["SEED_SAMPLE_DATA"] = "true"
os.environ.pop("DATABASE_URL", None)
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

# Ensure repo root is on sys.path so `import coursetrack` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from coursetrack.main import app  # noqa: E402
from coursetrack.models.user import Role, User  # noqa: E402
from coursetrack.services import token_service  # noqa: E402


@pytest.fixture
def client() -> Iterator[TestClient]:
    """Entering the client runs the lifespan, so each test gets a fresh store."""
    with TestClient(app) as c:
        yield c


def mint_token(
    user_id: UUID | None = None,
    role: Role = Role.LEARNER,
    email: str = "test-user@example.com",
) -> str:
    """Create a valid ES256 access token without registering a user."""
    user = User(
        id=user_id or uuid4(),
        email=email,
        password_hash="unused",
        first_name="Test",
        last_name="User",
        created_at=datetime.now(UTC),
        role=role,
    )
    return token_service.create_access_token(user)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def token() -> str:
    """Learner token."""
    return mint_token()


@pytest.fixture
def instructor_token() -> str:
    return mint_token(role=Role.INSTRUCTOR, email="instructor@example.com")
