"""Bundles the four repositories a request works with.

The in-memory bundle lives on app.state for the process lifetime; the
PostgreSQL bundle is built per request around one transaction's session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.repos.analytics_repo import AnalyticsRepo, InMemoryAnalyticsRepo
from coursetrack.repos.catalog_repo import CatalogRepo, InMemoryCatalogRepo
from coursetrack.repos.pg_analytics_repo import PgAnalyticsRepo
from coursetrack.repos.pg_catalog_repo import PgCatalogRepo
from coursetrack.repos.pg_progress_repo import PgProgressRepo
from coursetrack.repos.pg_user_repo import PgUserRepo
from coursetrack.repos.progress_repo import InMemoryProgressRepo, ProgressRepo
from coursetrack.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True, slots=True)
class Repositories:
    users: UserRepo
    catalog: CatalogRepo
    progress: ProgressRepo
    analytics: AnalyticsRepo

    @staticmethod
    def in_memory() -> Repositories:
        return Repositories(
            users=InMemoryUserRepo(),
            catalog=InMemoryCatalogRepo(),
            progress=InMemoryProgressRepo(),
            analytics=InMemoryAnalyticsRepo(),
        )

    @staticmethod
    def postgres(session: AsyncSession) -> Repositories:
        return Repositories(
            users=PgUserRepo(session),
            catalog=PgCatalogRepo(session),
            progress=PgProgressRepo(session),
            analytics=PgAnalyticsRepo(session),
        )
