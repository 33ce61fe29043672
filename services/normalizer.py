"""Turn submitted answer payloads into canonical answer tuples."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from app.config import OPTION_ID_PREFIX
from app.errors import InvalidAnswerFormat


class RawAnswer(BaseModel):
    """One record of an array-shaped submission."""

    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId")
    value: str | None = Field(default=None, validation_alias=AliasChoices("value", "textValue"))
    question_option_id: str | None = Field(default=None, alias="questionOptionId")


class TaggedValue(BaseModel):
    """A map value whose kind is stated by the caller instead of inferred."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["text", "optionRef"]
    value: str | list[str]


MapValue = Union[TaggedValue, list[str], str, None]


@dataclass(frozen=True)
class ArrayForm:
    answers: list[RawAnswer]


@dataclass(frozen=True)
class MapForm:
    answers: dict[str, MapValue]


AnswerInput = Union[ArrayForm, MapForm]


@dataclass(frozen=True)
class CanonicalAnswer:
    question_id: str
    text_value: str | None = None
    question_option_id: str | None = None


_payload_adapter: TypeAdapter[list[RawAnswer] | dict[str, MapValue]] = TypeAdapter(
    list[RawAnswer] | dict[str, MapValue]
)


def parse_answer_input(raw: Any) -> AnswerInput:
    """Validate a decoded JSON payload into one of the two accepted shapes."""

    try:
        parsed = _payload_adapter.validate_python(raw)
    except ValidationError as exc:
        raise InvalidAnswerFormat() from exc
    if isinstance(parsed, list):
        return ArrayForm(parsed)
    return MapForm(parsed)


class AnswerNormalizer:
    """Flatten an ``AnswerInput`` into ``CanonicalAnswer`` tuples.

    Map-shaped values are classified as follows: a list fans out into one
    option reference per element, a string starting with the option id
    prefix is an option reference, anything else is free text. Tagged values
    skip the prefix check entirely.
    """

    def __init__(self, option_id_prefix: str = OPTION_ID_PREFIX) -> None:
        self.option_id_prefix = option_id_prefix

    def normalize(self, answers: AnswerInput) -> list[CanonicalAnswer]:
        if isinstance(answers, ArrayForm):
            return [self._from_record(record) for record in answers.answers]
        if isinstance(answers, MapForm):
            normalized: list[CanonicalAnswer] = []
            for question_id, value in answers.answers.items():
                normalized.extend(self._from_map_entry(question_id, value))
            return normalized
        raise TypeError(f"Unsupported answer input: {type(answers).__name__}")

    @staticmethod
    def _from_record(record: RawAnswer) -> CanonicalAnswer:
        return CanonicalAnswer(
            question_id=record.question_id,
            text_value=record.value or None,
            question_option_id=record.question_option_id or None,
        )

    def _from_map_entry(self, question_id: str, value: MapValue) -> list[CanonicalAnswer]:
        if isinstance(value, TaggedValue):
            return self._from_tagged(question_id, value)
        if isinstance(value, list):
            return [CanonicalAnswer(question_id, question_option_id=option_id) for option_id in value]
        if value and self.is_option_id(value):
            return [CanonicalAnswer(question_id, question_option_id=value)]
        return [CanonicalAnswer(question_id, text_value=value or None)]

    @staticmethod
    def _from_tagged(question_id: str, tagged: TaggedValue) -> list[CanonicalAnswer]:
        values = tagged.value if isinstance(tagged.value, list) else [tagged.value]
        if tagged.kind == "optionRef":
            return [CanonicalAnswer(question_id, question_option_id=value or None) for value in values]
        return [CanonicalAnswer(question_id, text_value=value or None) for value in values]

    def is_option_id(self, value: str) -> bool:
        return value.startswith(self.option_id_prefix)
