"""
Answer model: one submitted-answer variant per question kind.

Answers are collected by the presentation layer and graded against the
Question they were collected for. An answer that was never set is the
UNATTEMPTED marker, which is distinct from an empty string.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Union

from .kinds import QuestionKind
from .models import Question


class _Unattempted:
    """Marker for a question the learner never answered."""

    _instance: ClassVar["_Unattempted | None"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNATTEMPTED"

    def __bool__(self) -> bool:
        return False


UNATTEMPTED = _Unattempted()


@dataclass(frozen=True)
class SingleChoiceAnswer:
    """Selected option as a canonical index or the option text."""

    kind: ClassVar[QuestionKind] = QuestionKind.SINGLE_CHOICE
    selected: int | str


@dataclass(frozen=True)
class ImageChoiceAnswer(SingleChoiceAnswer):
    kind: ClassVar[QuestionKind] = QuestionKind.IMAGE_CHOICE


@dataclass(frozen=True)
class MultiChoiceAnswer:
    kind: ClassVar[QuestionKind] = QuestionKind.MULTI_CHOICE
    selected: frozenset[int | str] = frozenset()

    def __post_init__(self):
        if not isinstance(self.selected, frozenset):
            object.__setattr__(self, "selected", frozenset(self.selected))


@dataclass(frozen=True)
class TrueFalseAnswer:
    kind: ClassVar[QuestionKind] = QuestionKind.TRUE_FALSE
    value: bool


@dataclass(frozen=True)
class FillInBlankAnswer:
    """One submitted string per blank, in blank order."""

    kind: ClassVar[QuestionKind] = QuestionKind.FILL_IN_BLANK
    values: tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.values, tuple):
            object.__setattr__(self, "values", tuple(self.values))


@dataclass(frozen=True)
class MatchPairsAnswer:
    """The right side chosen for each left side."""

    kind: ClassVar[QuestionKind] = QuestionKind.MATCH_PAIRS
    matches: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "matches", MappingProxyType(dict(self.matches)))

    def __hash__(self) -> int:
        return hash(frozenset(self.matches.items()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MatchPairsAnswer):
            return NotImplemented
        return dict(self.matches) == dict(other.matches)


@dataclass(frozen=True)
class SequenceAnswer:
    """Submitted ordering, as item indices or item texts."""

    kind: ClassVar[QuestionKind] = QuestionKind.SEQUENCE
    order: tuple[int | str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.order, tuple):
            object.__setattr__(self, "order", tuple(self.order))


@dataclass(frozen=True)
class ShortAnswer:
    kind: ClassVar[QuestionKind] = QuestionKind.SHORT_ANSWER
    text: str


@dataclass(frozen=True)
class EssayAnswer:
    kind: ClassVar[QuestionKind] = QuestionKind.ESSAY
    text: str


@dataclass(frozen=True)
class NumericAnswer:
    kind: ClassVar[QuestionKind] = QuestionKind.NUMERIC
    value: float


Answer = Union[
    SingleChoiceAnswer,
    ImageChoiceAnswer,
    MultiChoiceAnswer,
    TrueFalseAnswer,
    FillInBlankAnswer,
    MatchPairsAnswer,
    SequenceAnswer,
    ShortAnswer,
    EssayAnswer,
    NumericAnswer,
]

ANSWER_TYPES: dict[QuestionKind, type] = {
    QuestionKind.SINGLE_CHOICE: SingleChoiceAnswer,
    QuestionKind.IMAGE_CHOICE: ImageChoiceAnswer,
    QuestionKind.MULTI_CHOICE: MultiChoiceAnswer,
    QuestionKind.TRUE_FALSE: TrueFalseAnswer,
    QuestionKind.FILL_IN_BLANK: FillInBlankAnswer,
    QuestionKind.MATCH_PAIRS: MatchPairsAnswer,
    QuestionKind.SEQUENCE: SequenceAnswer,
    QuestionKind.SHORT_ANSWER: ShortAnswer,
    QuestionKind.ESSAY: EssayAnswer,
    QuestionKind.NUMERIC: NumericAnswer,
}


def is_unattempted(answer: Any) -> bool:
    return answer is None or answer is UNATTEMPTED


def answer_matches(question: Question, answer: Any) -> bool:
    """True if `answer` is the variant collected for `question.kind`."""
    return getattr(answer, "kind", None) is question.kind


# =============================================================================
# Building answers from presentation input
# =============================================================================

_TRUE = {"true", "t", "yes", "y", "1"}
_FALSE = {"false", "f", "no", "n", "0"}


def make_answer(question: Question, value: Any) -> Answer | _Unattempted:
    """
    Build the answer variant for `question` from loosely typed input.

    Accepts what a form or terminal typically yields: "true"/"false" for
    true-false, "10.4" for numeric, a single string for a one-blank
    fill-in, a list of indices or texts for choices and sequences.

    `None` means nothing was entered and yields UNATTEMPTED.

    Raises:
        ValueError: if `value` cannot be read as an answer of that kind.
    """
    if value is None:
        return UNATTEMPTED
    kind = question.kind

    if kind in (QuestionKind.SINGLE_CHOICE, QuestionKind.IMAGE_CHOICE):
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ValueError(f"Choice answer must be an index or option text, got {value!r}")
        return ANSWER_TYPES[kind](selected=value)

    if kind is QuestionKind.MULTI_CHOICE:
        if isinstance(value, (int, str)):
            value = [value]
        if not isinstance(value, Iterable):
            raise ValueError(f"Multi-choice answer must be a collection, got {value!r}")
        return MultiChoiceAnswer(selected=frozenset(value))

    if kind is QuestionKind.TRUE_FALSE:
        if isinstance(value, bool):
            return TrueFalseAnswer(value=value)
        folded = str(value).strip().lower()
        if folded in _TRUE:
            return TrueFalseAnswer(value=True)
        if folded in _FALSE:
            return TrueFalseAnswer(value=False)
        raise ValueError(f"True/false answer expected, got {value!r}")

    if kind is QuestionKind.FILL_IN_BLANK:
        if isinstance(value, str) or not isinstance(value, Iterable):
            value = [value]
        return FillInBlankAnswer(values=tuple("" if v is None else str(v) for v in value))

    if kind is QuestionKind.MATCH_PAIRS:
        if not isinstance(value, Mapping):
            raise ValueError(f"Match answer must map left to right, got {value!r}")
        return MatchPairsAnswer(matches={str(k): str(v) for k, v in value.items()})

    if kind is QuestionKind.SEQUENCE:
        if isinstance(value, str) or not isinstance(value, Iterable):
            raise ValueError(f"Sequence answer must be a list, got {value!r}")
        return SequenceAnswer(order=tuple(value))

    if kind is QuestionKind.SHORT_ANSWER:
        return ShortAnswer(text=str(value))

    if kind is QuestionKind.ESSAY:
        return EssayAnswer(text=str(value))

    if kind is QuestionKind.NUMERIC:
        if isinstance(value, bool):
            raise ValueError("Numeric answer expected, got a boolean")
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError):
            raise ValueError(f"Numeric answer expected, got {value!r}") from None
        if math.isnan(number):
            raise ValueError("Numeric answer must not be NaN")
        return NumericAnswer(value=number)

    raise ValueError(f"Unsupported question kind: {kind}")
