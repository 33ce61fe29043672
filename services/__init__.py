"""Service layer for application intake."""

from .normalizer import AnswerNormalizer, CanonicalAnswer, parse_answer_input
from .resume import ResumeFile, ResumeHandler
from .schema import JobSchemaProvider
from .storage import LocalFileStorage
from .submission import ApplicationSubmissionEngine
from .validator import AnswerValidator
from .writer import ApplicationWriter

__all__ = [
    "AnswerNormalizer",
    "AnswerValidator",
    "ApplicationSubmissionEngine",
    "ApplicationWriter",
    "CanonicalAnswer",
    "JobSchemaProvider",
    "LocalFileStorage",
    "ResumeFile",
    "ResumeHandler",
    "parse_answer_input",
]
