"""FastAPI entrypoint wiring services together."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Depends, FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from app.config import Settings, get_settings
from app.database import init_models
from app.dependencies import (
    db_session,
    load_translator,
    require_admin,
    settings_provider,
    submission_engine_provider,
    translator_provider,
)
from app.errors import AppError, InvalidAnswerFormat
from app.i18n import Translator
from app.logging_config import configure_logging
from app.models import Answer, Application, Job, Position
from app.schemas import (
    AnswerDetail,
    AnswerOut,
    ApplicationDetail,
    ApplicationPage,
    ApplicationResponse,
    ApplicationStatsOut,
    ApplicationStatsResponse,
    ErrorResponse,
    JobApplicationCount,
    JobForm,
    JobFormResponse,
    JobSummary,
    MessageResponse,
    OptionOut,
    Pagination,
    PositionOut,
    QuestionOut,
    RecentApplication,
    SubmissionData,
    SubmissionResponse,
)
from services import applications as application_queries
from services.resume import ResumeFile
from services.schema import JobSchemaProvider, active_options, active_questions
from services.submission import ApplicationSubmissionEngine

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


async def read_submission(request: Request, max_resume_bytes: int) -> tuple[Any, ResumeFile | None]:
    """Extract the raw answers payload and optional résumé from JSON or multipart bodies.

    At most ``max_resume_bytes + 1`` bytes of an upload are read into memory;
    the declared size is kept so oversized files are still rejected.
    """

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        raw_answers = form.get("answers")
        upload = form.get("resume")
        resume = None
        if isinstance(upload, UploadFile) and upload.filename:
            buffer = await upload.read(max_resume_bytes + 1)
            size = upload.size if upload.size is not None else len(buffer)
            resume = ResumeFile(buffer=buffer, filename=upload.filename, size=size)
        if raw_answers is None:
            return None, resume
        try:
            return json.loads(raw_answers), resume
        except (TypeError, json.JSONDecodeError) as exc:
            raise InvalidAnswerFormat() from exc

    try:
        body = await request.json()
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidAnswerFormat() from exc
    if not isinstance(body, dict):
        raise InvalidAnswerFormat()
    return body.get("answers"), None


def _position_out(position: Position | None) -> PositionOut | None:
    if position is None:
        return None
    return PositionOut(
        id=position.id,
        title=position.title,
        level=position.level,
        salary_range=position.salary_range,
    )


def _answer_detail(answer: Answer) -> AnswerDetail:
    return AnswerDetail(
        question_id=answer.question_id,
        text_value=answer.text_value,
        question_option_id=answer.question_option_id,
        question_label=answer.question.label if answer.question else None,
        question_type=answer.question.type if answer.question else None,
        option_label=answer.question_option.label if answer.question_option else None,
    )


def _application_detail(application: Application) -> ApplicationDetail:
    job = application.job
    summary = None
    if job is not None:
        summary = JobSummary(id=job.id, slug=job.slug, title=job.title, position=_position_out(job.position))
    return ApplicationDetail(
        id=application.id,
        job_id=application.job_id,
        resume_url=application.resume_url,
        created_at=application.created_at,
        updated_at=application.updated_at,
        job=summary,
        answers=[_answer_detail(answer) for answer in application.answers],
    )


def _job_form(job: Job) -> JobForm:
    return JobForm(
        id=job.id,
        slug=job.slug,
        title=job.title,
        description=job.description,
        requires_resume=job.requires_resume,
        position=_position_out(job.position),
        questions=[
            QuestionOut(
                id=question.id,
                label=question.label,
                type=question.type,
                is_required=question.is_required,
                order=question.order,
                options=[
                    OptionOut(id=option.id, label=option.label, order_index=option.order_index)
                    for option in active_options(question)
                ],
            )
            for question in active_questions(job)
        ],
    )


def _error_body(code: str, message: str, details: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    payload = ErrorResponse(
        error=code,
        message=message,
        timestamp=datetime.now(timezone.utc),
        details=details,
    )
    return jsonable_encoder(payload, by_alias=True, exclude_none=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Job Intake Service", version="0.1.0")
    app.state.translator = load_translator(settings.default_locale, settings.fallback_locale)

    @app.on_event("startup")
    async def _startup() -> None:  # pragma: no cover - framework hook
        configure_logging(settings.log_level, settings.log_json)
        await init_models()

    @app.exception_handler(AppError)
    async def _app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        translator: Translator = request.app.state.translator
        message = exc.message or translator.translate(exc.message_key, exc.params)
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.code, message))

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        translator: Translator = request.app.state.translator
        return JSONResponse(
            status_code=422,
            content=_error_body(
                "VALIDATION_ERROR",
                translator.translate("errors.general.validation"),
                jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        translator: Translator = request.app.state.translator
        return JSONResponse(
            status_code=500,
            content=_error_body("INTERNAL_SERVER_ERROR", translator.translate("errors.general.internal")),
        )

    @app.get("/health", response_model=dict)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/jobs/{slug}", response_model=JobFormResponse)
    async def get_job_form(slug: str, session: AsyncSession = Depends(db_session)) -> JobFormResponse:
        job = await JobSchemaProvider().get_active_job(session, slug)
        return JobFormResponse(data=_job_form(job))

    @app.post(
        "/applications/submit/{slug}",
        status_code=201,
        response_model=SubmissionResponse,
        responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    )
    async def submit_application(
        slug: str,
        request: Request,
        session: AsyncSession = Depends(db_session),
        engine: ApplicationSubmissionEngine = Depends(submission_engine_provider),
        translator: Translator = Depends(translator_provider),
        settings: Settings = Depends(settings_provider),
    ) -> SubmissionResponse:
        job = await engine.resolve_job(session, slug)
        raw_answers, resume = await read_submission(request, settings.max_resume_size_bytes)
        application = await engine.submit(session, job, raw_answers, resume)
        return SubmissionResponse(
            data=SubmissionData(
                id=application.id,
                job_id=application.job_id,
                submitted_at=application.created_at,
                answers=[
                    AnswerOut(
                        question_id=answer.question_id,
                        text_value=answer.text_value,
                        question_option_id=answer.question_option_id,
                    )
                    for answer in application.answers
                ],
            ),
            message=translator.translate("success.application.submitted"),
        )

    @app.get("/admin/applications", response_model=ApplicationPage, dependencies=[Depends(require_admin)])
    async def list_applications(
        limit: int = Query(10, ge=1, le=100),
        offset: int = Query(0, ge=0),
        session: AsyncSession = Depends(db_session),
    ) -> ApplicationPage:
        items, total = await application_queries.list_applications(session, limit=limit, offset=offset)
        return ApplicationPage(
            data=[_application_detail(item) for item in items],
            pagination=Pagination(limit=limit, offset=offset, total=total),
        )

    @app.get(
        "/admin/applications/stats/overview",
        response_model=ApplicationStatsResponse,
        dependencies=[Depends(require_admin)],
    )
    async def application_stats(session: AsyncSession = Depends(db_session)) -> ApplicationStatsResponse:
        stats = await application_queries.application_stats(session)
        return ApplicationStatsResponse(
            data=ApplicationStatsOut(
                total_applications=stats.total_applications,
                applications_by_job=[JobApplicationCount(**row) for row in stats.applications_by_job],
                recent_applications=[
                    RecentApplication(
                        id=item.id,
                        job_id=item.job_id,
                        job_title=item.job.title if item.job else None,
                        job_slug=item.job.slug if item.job else None,
                        created_at=item.created_at,
                    )
                    for item in stats.recent_applications
                ],
            )
        )

    @app.get(
        "/admin/applications/job/{job_id}",
        response_model=ApplicationPage,
        dependencies=[Depends(require_admin)],
    )
    async def list_job_applications(
        job_id: str,
        limit: int = Query(10, ge=1, le=100),
        offset: int = Query(0, ge=0),
        session: AsyncSession = Depends(db_session),
    ) -> ApplicationPage:
        items, total = await application_queries.list_applications(
            session, limit=limit, offset=offset, job_id=job_id
        )
        return ApplicationPage(
            data=[_application_detail(item) for item in items],
            pagination=Pagination(limit=limit, offset=offset, total=total),
        )

    @app.get(
        "/admin/applications/{application_id}",
        response_model=ApplicationResponse,
        dependencies=[Depends(require_admin)],
    )
    async def get_application(
        application_id: str,
        session: AsyncSession = Depends(db_session),
    ) -> ApplicationResponse:
        application = await application_queries.get_application(session, application_id)
        return ApplicationResponse(data=_application_detail(application))

    @app.delete(
        "/admin/applications/{application_id}",
        response_model=MessageResponse,
        dependencies=[Depends(require_admin)],
    )
    async def delete_application(
        application_id: str,
        session: AsyncSession = Depends(db_session),
        translator: Translator = Depends(translator_provider),
    ) -> MessageResponse:
        await application_queries.delete_application(session, application_id)
        return MessageResponse(message=translator.translate("success.application.deleted"))

    return app


app = create_app()
