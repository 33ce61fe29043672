"""Read and delete operations over stored applications."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import ApplicationNotFound
from app.models import Answer, Application, Job
from services.writer import load_application


@dataclass
class ApplicationStats:
    total_applications: int
    applications_by_job: list[dict[str, Any]]
    recent_applications: list[Application]


async def list_applications(
    session: AsyncSession,
    *,
    limit: int = 10,
    offset: int = 0,
    job_id: str | None = None,
) -> tuple[list[Application], int]:
    """Return a page of applications, newest first, and the total count."""

    stmt = (
        select(Application)
        .options(
            selectinload(Application.job).selectinload(Job.position),
            selectinload(Application.answers).selectinload(Answer.question),
            selectinload(Application.answers).selectinload(Answer.question_option),
        )
        .order_by(Application.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    count_stmt = select(func.count(Application.id))
    if job_id is not None:
        stmt = stmt.where(Application.job_id == job_id)
        count_stmt = count_stmt.where(Application.job_id == job_id)

    result = await session.execute(stmt)
    total = await session.scalar(count_stmt)
    return list(result.scalars().all()), total or 0


async def get_application(session: AsyncSession, application_id: str) -> Application:
    application = await load_application(session, application_id)
    if application is None:
        raise ApplicationNotFound()
    return application


async def delete_application(session: AsyncSession, application_id: str) -> None:
    existing = await session.get(Application, application_id)
    if existing is None:
        raise ApplicationNotFound()
    await session.delete(existing)
    await session.commit()


async def application_stats(session: AsyncSession) -> ApplicationStats:
    total = await session.scalar(select(func.count(Application.id)))

    counts = func.count(Application.id).label("applications")
    by_job_stmt = (
        select(Job.id, Job.title, Job.slug, counts)
        .outerjoin(Application, Application.job_id == Job.id)
        .group_by(Job.id, Job.title, Job.slug)
        .order_by(counts.desc(), Job.title)
        .limit(10)
    )
    by_job = await session.execute(by_job_stmt)

    recent_stmt = (
        select(Application)
        .options(selectinload(Application.job))
        .order_by(Application.created_at.desc())
        .limit(5)
    )
    recent = await session.execute(recent_stmt)

    return ApplicationStats(
        total_applications=total or 0,
        applications_by_job=[
            {"id": row.id, "title": row.title, "slug": row.slug, "applications": row.applications}
            for row in by_job
        ],
        recent_applications=list(recent.scalars().all()),
    )
