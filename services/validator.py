"""Schema checks for canonical answers."""
from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.errors import InvalidAnswerFormat, RequiredQuestionMissing
from app.models import Question
from services.normalizer import CanonicalAnswer


class AnswerValidator:
    """Check canonical answers against a job's active questions.

    Required questions are checked first, then the text/option exclusivity
    of each answer. Option ownership is left to the writer.
    """

    def validate(
        self,
        answers: Sequence[CanonicalAnswer],
        questions: Iterable[Question],
    ) -> Sequence[CanonicalAnswer]:
        answered = {answer.question_id for answer in answers}
        for question in questions:
            if question.is_active and question.is_required and question.id not in answered:
                raise RequiredQuestionMissing(question.label)

        for answer in answers:
            has_text = answer.text_value is not None
            has_option = answer.question_option_id is not None
            if has_text == has_option:
                raise InvalidAnswerFormat()

        return answers
