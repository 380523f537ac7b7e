"""
Canonical quiz data model.

Everything here is a frozen dataclass: a Quiz produced by the normalizer
can be shared read-only between any number of attempts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from .kinds import CHOICE_KINDS, Difficulty, QuestionKind


# =============================================================================
# Kind-specific payloads
# =============================================================================


@dataclass(frozen=True)
class ChoicePayload:
    """Single-choice and image-choice: `correct` is an index into `options`."""

    options: tuple[str, ...]
    correct: int


@dataclass(frozen=True)
class MultiChoicePayload:
    options: tuple[str, ...]
    correct: frozenset[int]


@dataclass(frozen=True)
class TrueFalsePayload:
    correct: bool


@dataclass(frozen=True)
class FillInBlankPayload:
    """
    Fill-in-the-blank payload.

    `blanks` are the blanks as authored, `correct` the expected answer for
    each blank (same length). `text` is the optional sentence template.
    """

    blanks: tuple[str, ...]
    correct: tuple[str, ...]
    text: str | None = None


@dataclass(frozen=True)
class MatchPairsPayload:
    pairs: tuple[tuple[str, str], ...]

    @property
    def lefts(self) -> tuple[str, ...]:
        return tuple(left for left, _ in self.pairs)

    @property
    def rights(self) -> tuple[str, ...]:
        return tuple(right for _, right in self.pairs)


@dataclass(frozen=True)
class SequencePayload:
    """`correct[k]` is the index into `items` of the k-th element in order."""

    items: tuple[str, ...]
    correct: tuple[int, ...]

    @property
    def expected_order(self) -> tuple[str, ...]:
        return tuple(self.items[i] for i in self.correct)


@dataclass(frozen=True)
class ShortAnswerPayload:
    accepted: tuple[str, ...]


@dataclass(frozen=True)
class EssayPayload:
    pass


@dataclass(frozen=True)
class NumericPayload:
    correct: float
    tolerance: float = 0.0


Payload = Union[
    ChoicePayload,
    MultiChoicePayload,
    TrueFalsePayload,
    FillInBlankPayload,
    MatchPairsPayload,
    SequencePayload,
    ShortAnswerPayload,
    EssayPayload,
    NumericPayload,
]


# =============================================================================
# Question / Quiz
# =============================================================================


@dataclass(frozen=True)
class Question:
    """A validated question of one kind."""

    id: str
    kind: QuestionKind
    prompt: str
    payload: Payload
    points: float = 1.0
    difficulty: Difficulty | None = None
    time_limit_seconds: int | None = None
    hint: str | None = None
    explanation: str | None = None
    image_ref: str | None = None

    @property
    def options(self) -> tuple[str, ...]:
        """Option texts for choice kinds, empty for every other kind."""
        if self.kind in CHOICE_KINDS:
            return self.payload.options
        return ()

    @property
    def is_auto_graded(self) -> bool:
        return self.kind is not QuestionKind.ESSAY

    @property
    def correct_answer(self) -> Any:
        """The expected answer in display form (option texts rather than indices)."""
        payload = self.payload
        if isinstance(payload, ChoicePayload):
            return payload.options[payload.correct]
        if isinstance(payload, MultiChoicePayload):
            return tuple(payload.options[i] for i in sorted(payload.correct))
        if isinstance(payload, (TrueFalsePayload, NumericPayload)):
            return payload.correct
        if isinstance(payload, FillInBlankPayload):
            return payload.correct
        if isinstance(payload, MatchPairsPayload):
            return dict(payload.pairs)
        if isinstance(payload, SequencePayload):
            return payload.expected_order
        if isinstance(payload, ShortAnswerPayload):
            return payload.accepted
        return None


@dataclass(frozen=True)
class QuizSettings:
    randomize_questions: bool = False
    randomize_options: bool = False
    allow_retry: bool = False
    show_correct_answers: bool = False


@dataclass(frozen=True)
class Quiz:
    """The normalized quiz aggregate."""

    title: str
    questions: tuple[Question, ...] = ()
    settings: QuizSettings = field(default_factory=QuizSettings)
    description: str | None = None
    instructions: str | None = None
    time_limit_minutes: float | None = None
    passing_score_percent: float | None = None
    declared_total_points: float | None = None

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def total_points(self) -> float:
        return sum(q.points for q in self.questions)

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(q.id for q in self.questions)

    def get(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None
