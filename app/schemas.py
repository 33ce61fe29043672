"""Pydantic schemas for the public and admin API."""
from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.models import QuestionType


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnswerOut(CamelModel):
    question_id: str
    text_value: str | None = None
    question_option_id: str | None = None


class SubmissionData(CamelModel):
    id: str
    job_id: str
    submitted_at: datetime
    answers: list[AnswerOut] = Field(default_factory=list)


class SubmissionResponse(CamelModel):
    success: bool = True
    data: SubmissionData
    message: str


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    message: str
    timestamp: datetime
    details: list[dict[str, Any]] | None = None


class OptionOut(CamelModel):
    id: str
    label: str
    order_index: int


class QuestionOut(CamelModel):
    id: str
    label: str
    type: QuestionType
    is_required: bool
    order: int
    options: list[OptionOut] = Field(default_factory=list)


class PositionOut(CamelModel):
    id: str
    title: str
    level: str | None = None
    salary_range: str | None = None


class JobForm(CamelModel):
    id: str
    slug: str
    title: str
    description: str | None = None
    requires_resume: bool
    position: PositionOut | None = None
    questions: list[QuestionOut] = Field(default_factory=list)


class JobFormResponse(CamelModel):
    success: bool = True
    data: JobForm


class JobSummary(CamelModel):
    id: str
    slug: str
    title: str
    position: PositionOut | None = None


class AnswerDetail(AnswerOut):
    question_label: str | None = None
    question_type: QuestionType | None = None
    option_label: str | None = None


class ApplicationDetail(CamelModel):
    id: str
    job_id: str
    resume_url: str | None = None
    created_at: datetime
    updated_at: datetime
    job: JobSummary | None = None
    answers: list[AnswerDetail] = Field(default_factory=list)


class ApplicationResponse(CamelModel):
    success: bool = True
    data: ApplicationDetail


class Pagination(CamelModel):
    limit: int
    offset: int
    total: int


class ApplicationPage(CamelModel):
    success: bool = True
    data: list[ApplicationDetail]
    pagination: Pagination


class JobApplicationCount(CamelModel):
    id: str
    title: str
    slug: str
    applications: int


class RecentApplication(CamelModel):
    id: str
    job_id: str
    job_title: str | None = None
    job_slug: str | None = None
    created_at: datetime


class ApplicationStatsOut(CamelModel):
    total_applications: int
    applications_by_job: list[JobApplicationCount]
    recent_applications: list[RecentApplication]


class ApplicationStatsResponse(CamelModel):
    success: bool = True
    data: ApplicationStatsOut


class MessageResponse(CamelModel):
    success: bool = True
    message: str
