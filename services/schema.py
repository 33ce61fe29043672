"""Job question-schema lookup."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import JobNotFoundOrInactive
from app.models import Job, Question, QuestionOption


class JobSchemaProvider:
    """Load active jobs together with their question sets."""

    async def get_active_job(self, session: AsyncSession, slug_or_id: str) -> Job:
        # A slug match wins over an id match; missing and inactive jobs are reported identically.
        for column in (Job.slug, Job.id):
            stmt = (
                select(Job)
                .where(column == slug_or_id, Job.is_active.is_(True))
                .options(
                    selectinload(Job.position),
                    selectinload(Job.questions).selectinload(Question.options),
                )
            )
            result = await session.execute(stmt)
            job = result.scalar_one_or_none()
            if job is not None:
                return job
        raise JobNotFoundOrInactive()


def active_questions(job: Job) -> list[Question]:
    return sorted((question for question in job.questions if question.is_active), key=lambda q: q.order)


def active_options(question: Question) -> list[QuestionOption]:
    return sorted((option for option in question.options if option.is_active), key=lambda o: o.order_index)
