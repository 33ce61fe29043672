"""Shared fixtures for the intake service tests."""
import os
import pathlib
import tempfile
from dataclasses import dataclass

import httpx
import pytest

# Environment must be in place before the app modules are imported.
_TMP = pathlib.Path(tempfile.mkdtemp(prefix="job-intake-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP / 'import.db'}")
os.environ.setdefault("DATA_DIRECTORY", str(_TMP))
os.environ.setdefault("UPLOAD_DIRECTORY", str(_TMP / "uploads"))
os.environ.setdefault("DEFAULT_LOCALE", "en_US")

from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from app.config import Settings  # noqa: E402
from app.database import build_engine, init_models  # noqa: E402
from app.dependencies import db_session, settings_provider  # noqa: E402
from app.i18n import Translator  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models import Job, Position, Question, QuestionOption, QuestionType  # noqa: E402

ADMIN_TOKEN = "test-admin-token"


@dataclass
class SeededJob:
    job_id: str
    slug: str
    name_question: str
    skills_question: str
    seniority_question: str
    cover_question: str
    python_option: str
    sql_option: str
    junior_option: str
    senior_option: str


@pytest.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        data_directory=tmp_path,
        upload_directory=tmp_path / "uploads",
        default_locale="en_US",
        fallback_locale="en_US",
        admin_token=ADMIN_TOKEN,
    )


@pytest.fixture
def translator():
    return Translator.from_directory("en_US", "en_US")


async def create_job(
    session_factory,
    *,
    slug: str = "backend-engineer",
    requires_resume: bool = False,
    is_active: bool = True,
) -> SeededJob:
    """Persist a job with a required text question and three optional ones."""

    async with session_factory() as session:
        position = Position(title="Backend Engineer", level="Mid-level", salary_range="80k-100k")
        name_q = Question(label="Full name", type=QuestionType.SHORT_TEXT, is_required=True, order=1)
        skills_q = Question(
            label="Skills",
            type=QuestionType.MULTIPLE_CHOICE,
            is_required=False,
            order=2,
            options=[
                QuestionOption(label="Python", order_index=0),
                QuestionOption(label="SQL", order_index=1),
            ],
        )
        seniority_q = Question(
            label="Seniority",
            type=QuestionType.SINGLE_CHOICE,
            is_required=False,
            order=5,
            options=[
                QuestionOption(label="Junior", order_index=0),
                QuestionOption(label="Senior", order_index=1),
            ],
        )
        cover_q = Question(label="Cover letter", type=QuestionType.LONG_TEXT, is_required=False, order=9)
        job = Job(
            slug=slug,
            title="Backend Engineer",
            description="Build the intake API",
            requires_resume=requires_resume,
            is_active=is_active,
            position=position,
            questions=[name_q, skills_q, seniority_q, cover_q],
        )
        session.add(job)
        await session.commit()

        return SeededJob(
            job_id=job.id,
            slug=job.slug,
            name_question=name_q.id,
            skills_question=skills_q.id,
            seniority_question=seniority_q.id,
            cover_question=cover_q.id,
            python_option=skills_q.options[0].id,
            sql_option=skills_q.options[1].id,
            junior_option=seniority_q.options[0].id,
            senior_option=seniority_q.options[1].id,
        )


@pytest.fixture
async def seeded(session_factory):
    return await create_job(session_factory)


@pytest.fixture
async def resume_job(session_factory):
    return await create_job(session_factory, slug="data-engineer", requires_resume=True)


@pytest.fixture
async def client(settings, session_factory):
    app = create_app(settings)

    async def _override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[db_session] = _override_session
    app.dependency_overrides[settings_provider] = lambda: settings

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
def minimal_pdf():
    return (
        b"%PDF-1.4\n"
        b"1 0 obj<</Type/Catalog/Pages 2 0 R>>endobj\n"
        b"2 0 obj<</Type/Pages/Kids[]/Count 0>>endobj\n"
        b"trailer<</Root 1 0 R>>\n%%EOF"
    )
