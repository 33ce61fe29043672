"""Typed application errors carrying a message key for localisation."""
from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_SERVER_ERROR"
    message_key: str = "errors.general.internal"

    def __init__(
        self,
        message: str | None = None,
        *,
        message_key: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> None:
        if message_key is not None:
            self.message_key = message_key
        self.params = params or {}
        self.message = message
        super().__init__(message or self.message_key)


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    message_key = "errors.error_classes.not_found"


class BadRequestError(AppError):
    status_code = 400
    code = "BAD_REQUEST"
    message_key = "errors.error_classes.bad_request"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"
    message_key = "errors.error_classes.unauthorized"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    message_key = "errors.error_classes.conflict"


class PersistenceError(AppError):
    """Unexpected storage failure while writing an application."""

    message_key = "errors.application.persistence_failed"


class JobNotFoundOrInactive(NotFoundError):
    message_key = "errors.job.not_found_or_inactive"


class ApplicationNotFound(NotFoundError):
    message_key = "errors.application.not_found"


class RequiredQuestionMissing(BadRequestError):
    message_key = "errors.application.required_question"

    def __init__(self, label: str, message: str | None = None) -> None:
        self.label = label
        super().__init__(message, params={"question": label})


class InvalidAnswerFormat(BadRequestError):
    message_key = "errors.application.invalid_answer_format"


class ResumeRequired(BadRequestError):
    message_key = "errors.application.resume_required"


class InvalidFileType(BadRequestError):
    message_key = "errors.general.invalid_file_type"


class FileTooLarge(BadRequestError):
    message_key = "errors.general.file_too_large"
