"""Helpers for classifying PostgreSQL driver errors."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError, constraint: str | None = None) -> bool:
    """True when *exc* is a duplicate-key error (optionally on *constraint*).

    The asyncpg adapter exposes SQLSTATE as ``sqlstate`` (on the adapted
    error or on the asyncpg exception it wraps); psycopg exposes ``pgcode``.
    """
    orig = exc.orig
    code = _sqlstate(orig) or _sqlstate(getattr(orig, "__cause__", None))
    if code != UNIQUE_VIOLATION:
        return False
    if constraint is None:
        return True
    return constraint in str(orig)


def _sqlstate(err: object) -> str | None:
    if err is None:
        return None
    return getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
