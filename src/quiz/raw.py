"""
Wire-shape models for stored quiz content.

These Pydantic models accept the field spellings that exist in stored LOB
payloads (camelCase envelopes, snake_case legacy questions) and do the
type-level coercion. Kind-specific structure is checked afterwards by the
validators in ``src.quiz.validators``.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    PositiveInt,
    field_validator,
)

from .kinds import Difficulty

# Marker fields that identify the legacy single-question shape
LEGACY_KIND_FIELD = "type"
LEGACY_PROMPT_FIELD = "question_text"


def _no_time_limit(value: Any) -> Any:
    # Stored content uses 0 or "" for "no time limit"
    if value == 0 or (isinstance(value, str) and not value.strip()):
        return None
    return value


class RawQuestion(BaseModel):
    """One question as stored, before kind resolution."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | int | None = None
    kind: Any = Field(
        default=None,
        validation_alias=AliasChoices("kind", "type", "questionType", "question_type"),
    )
    prompt: str | None = Field(
        default=None,
        validation_alias=AliasChoices("prompt", "question", "question_text", "questionText"),
    )
    options: list[Any] | None = None
    correct: Any = Field(
        default=None,
        validation_alias=AliasChoices("correct", "correctAnswer", "correct_answer"),
    )
    points: PositiveFloat | None = None
    difficulty: Difficulty | None = None
    time_limit_seconds: PositiveInt | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "time_limit_seconds", "timeLimitSeconds", "timeLimit", "time_limit"
        ),
    )
    hint: str | None = None
    explanation: str | None = None
    image_ref: str | None = Field(
        default=None,
        validation_alias=AliasChoices("image_ref", "imageRef", "image"),
    )

    # Kind-specific wire fields
    pairs: list[Any] | dict[str, Any] | None = None
    items: list[Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("items", "sequence"),
    )
    blanks: list[Any] | None = None
    fill_in_blanks: dict[str, Any] | None = Field(
        default=None,
        validation_alias=AliasChoices("fill_in_blanks", "fillInBlanks"),
    )
    tolerance: NonNegativeFloat | None = None

    @field_validator("difficulty", mode="before")
    @classmethod
    def _lower_difficulty(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value or None
        return value

    @field_validator("hint", "explanation", "image_ref", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("time_limit_seconds", mode="before")
    @classmethod
    def _zero_limit_to_none(cls, value: Any) -> Any:
        return _no_time_limit(value)


class RawSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    randomize_questions: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("randomize_questions", "randomizeQuestions"),
    )
    randomize_options: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("randomize_options", "randomizeOptions"),
    )
    allow_retry: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("allow_retry", "allowRetry"),
    )
    show_correct_answers: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("show_correct_answers", "showCorrectAnswers"),
    )


class RawQuiz(BaseModel):
    """The multi-question quiz envelope."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title: str | None = None
    description: str | None = None
    instructions: str | None = None
    time_limit_minutes: PositiveFloat | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "time_limit_minutes", "timeLimitMinutes", "timeLimit", "time_limit"
        ),
    )
    passing_score_percent: Annotated[float, Field(ge=0, le=100)] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "passing_score_percent", "passingScorePercent", "passingScore", "passing_score"
        ),
    )
    total_points: NonNegativeFloat | None = Field(
        default=None,
        validation_alias=AliasChoices("total_points", "totalPoints"),
    )
    questions: list[Any]
    settings: RawSettings | None = None

    @field_validator("title", "description", "instructions", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("time_limit_minutes", mode="before")
    @classmethod
    def _zero_limit_to_none(cls, value: Any) -> Any:
        return _no_time_limit(value)
