"""Application submission orchestration."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.errors import AppError, PersistenceError
from app.i18n import Translator
from app.models import Application, Job
from services.normalizer import (
    AnswerInput,
    AnswerNormalizer,
    ArrayForm,
    CanonicalAnswer,
    MapForm,
    parse_answer_input,
)
from services.resume import ResumeFile, ResumeHandler
from services.schema import JobSchemaProvider, active_questions
from services.storage import LocalFileStorage
from services.validator import AnswerValidator
from services.writer import ApplicationWriter

logger = logging.getLogger(__name__)


class ApplicationSubmissionEngine:
    """Run one submission through lookup, validation, résumé storage and persistence.

    Every step runs in order and the first failure ends the attempt. The
    résumé is written only after all validation has passed and is removed
    again if the final write fails.
    """

    def __init__(
        self,
        *,
        translator: Translator,
        resume_handler: ResumeHandler,
        schema_provider: JobSchemaProvider | None = None,
        normalizer: AnswerNormalizer | None = None,
        validator: AnswerValidator | None = None,
        writer: ApplicationWriter | None = None,
    ) -> None:
        self.translator = translator
        self.resume_handler = resume_handler
        self.schema_provider = schema_provider or JobSchemaProvider()
        self.normalizer = normalizer or AnswerNormalizer()
        self.validator = validator or AnswerValidator()
        self.writer = writer or ApplicationWriter()

    @classmethod
    def from_settings(cls, settings: Settings, translator: Translator) -> ApplicationSubmissionEngine:
        resume_handler = ResumeHandler(
            LocalFileStorage(),
            upload_directory=settings.upload_directory,
            allowed_extensions=settings.allowed_resume_extensions,
            max_size_bytes=settings.max_resume_size_bytes,
        )
        return cls(
            translator=translator,
            resume_handler=resume_handler,
            normalizer=AnswerNormalizer(settings.option_id_prefix),
        )

    async def resolve_job(self, session: AsyncSession, slug_or_id: str) -> Job:
        """Look up the active job a submission targets, before its body is read."""

        try:
            return await self.schema_provider.get_active_job(session, slug_or_id)
        except AppError as exc:
            self._reject(exc, slug_or_id)
            raise

    async def submit(
        self,
        session: AsyncSession,
        job_or_slug: Job | str,
        answers: AnswerInput | Any,
        resume: ResumeFile | None = None,
    ) -> Application:
        try:
            application = await self._run(session, job_or_slug, answers, resume)
        except AppError as exc:
            self._reject(exc, job_or_slug.id if isinstance(job_or_slug, Job) else job_or_slug)
            raise

        logger.info(
            "Accepted application %s for job %s (%d answers, resume=%s)",
            application.id,
            application.job_id,
            len(application.answers),
            application.resume_url is not None,
        )
        return application

    def _reject(self, exc: AppError, job_ref: str) -> None:
        if exc.message is None:
            exc.message = self.translator.translate(exc.message_key, exc.params)
        logger.warning("Rejected submission for job %s: %s", job_ref, exc.code)

    async def _run(
        self,
        session: AsyncSession,
        job_or_slug: Job | str,
        answers: AnswerInput | Any,
        resume: ResumeFile | None,
    ) -> Application:
        if isinstance(job_or_slug, Job):
            job = job_or_slug
        else:
            job = await self.schema_provider.get_active_job(session, job_or_slug)

        if not isinstance(answers, (ArrayForm, MapForm)):
            answers = parse_answer_input(answers)
        canonical = self._without_retired(job, self.normalizer.normalize(answers))
        self.validator.validate(canonical, active_questions(job))

        resume_url = await self.resume_handler.handle(job.requires_resume, resume)
        try:
            return await self.writer.write(session, job=job, answers=canonical, resume_url=resume_url)
        except PersistenceError:
            if resume_url is not None:
                await self.resume_handler.discard(resume_url)
            raise

    @staticmethod
    def _without_retired(job: Job, answers: list[CanonicalAnswer]) -> list[CanonicalAnswer]:
        """Drop answers to questions or options deactivated after the form was served."""

        retired_questions = {question.id for question in job.questions if not question.is_active}
        retired_options = {
            option.id for question in job.questions for option in question.options if not option.is_active
        }
        kept = [
            answer
            for answer in answers
            if answer.question_id not in retired_questions and answer.question_option_id not in retired_options
        ]
        if len(kept) < len(answers):
            logger.info(
                "Dropped %d answers to retired questions or options on job %s", len(answers) - len(kept), job.id
            )
        return kept
