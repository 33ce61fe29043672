"""Transactional persistence of applications and their answers."""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.errors import PersistenceError
from app.models import Answer, Application, Job
from services.normalizer import CanonicalAnswer
from services.schema import active_options, active_questions

logger = logging.getLogger(__name__)


class ApplicationWriter:
    """Insert an application header and its answer rows as one unit."""

    async def write(
        self,
        session: AsyncSession,
        *,
        job: Job,
        answers: Sequence[CanonicalAnswer],
        resume_url: str | None,
    ) -> Application:
        self._check_references(job, answers)

        application = Application(job_id=job.id, resume_url=resume_url)
        try:
            session.add(application)
            await session.flush()
            session.add_all(
                [
                    Answer(
                        application_id=application.id,
                        question_id=answer.question_id,
                        text_value=answer.text_value,
                        question_option_id=answer.question_option_id,
                    )
                    for answer in answers
                ]
            )
            await session.flush()
            await session.commit()
        except SQLAlchemyError as exc:
            await session.rollback()
            logger.exception("Failed to persist application for job %s", job.id)
            raise PersistenceError() from exc

        return await load_application(session, application.id)

    @staticmethod
    def _check_references(job: Job, answers: Sequence[CanonicalAnswer]) -> None:
        options_by_question = {
            question.id: {option.id for option in active_options(question)} for question in active_questions(job)
        }
        for answer in answers:
            if answer.question_id not in options_by_question:
                logger.warning("Answer references unknown question %s on job %s", answer.question_id, job.id)
                raise PersistenceError()
            option_id = answer.question_option_id
            if option_id is not None and option_id not in options_by_question[answer.question_id]:
                logger.warning("Answer references unknown option %s on question %s", option_id, answer.question_id)
                raise PersistenceError()


async def load_application(session: AsyncSession, application_id: str) -> Application | None:
    """Fetch an application with its job, position, answers, questions and options."""

    stmt = (
        select(Application)
        .where(Application.id == application_id)
        .options(
            selectinload(Application.job).selectinload(Job.position),
            selectinload(Application.answers).selectinload(Answer.question),
            selectinload(Application.answers).selectinload(Answer.question_option),
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
