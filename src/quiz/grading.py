"""
Grading strategies per question kind.

``grade(question, answer)`` is a pure, total function: every (Question,
Answer) pair yields an Outcome. Each kind has one grader registered in
GraderRegistry; a registry check at import time guarantees no kind is left
without one.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from loguru import logger

from .answers import (
    EssayAnswer,
    FillInBlankAnswer,
    MatchPairsAnswer,
    MultiChoiceAnswer,
    NumericAnswer,
    SequenceAnswer,
    ShortAnswer,
    SingleChoiceAnswer,
    TrueFalseAnswer,
    answer_matches,
    is_unattempted,
)
from .kinds import QuestionKind
from .models import Question, Quiz
from .validators import resolve_option


# =============================================================================
# Outcome
# =============================================================================


@dataclass(frozen=True)
class Outcome:
    """
    Result of grading one answer.

    `correct` is None for answers that cannot be graded automatically
    (essays); `score_awarded` always lies in [0, question.points].
    """

    correct: bool | None
    score_awarded: float

    @property
    def graded(self) -> bool:
        return self.correct is not None

    def to_dict(self) -> dict[str, Any]:
        return {"correct": self.correct, "score_awarded": self.score_awarded}


INCORRECT = Outcome(correct=False, score_awarded=0.0)
UNGRADED = Outcome(correct=None, score_awarded=0.0)


def normalize_text(text: str) -> str:
    """Collapse internal whitespace, trim and lower-case."""
    return " ".join(str(text).split()).lower()


# =============================================================================
# Registry
# =============================================================================


class GraderRegistry:
    """
    Registry for per-kind graders.

    Example:
        @GraderRegistry.register(QuestionKind.NUMERIC)
        class NumericGrader(Grader):
            ...

        grader = GraderRegistry.get(QuestionKind.NUMERIC)
    """

    _graders: ClassVar[dict[QuestionKind, "Grader"]] = {}

    @classmethod
    def register(cls, *kinds: QuestionKind):
        """Decorator registering a grader class for one or more kinds."""

        def decorator(grader_class: type["Grader"]):
            for kind in kinds:
                cls._graders[kind] = grader_class()
                logger.debug(f"Registered grader: {kind.value} -> {grader_class.__name__}")
            return grader_class

        return decorator

    @classmethod
    def get(cls, kind: QuestionKind) -> "Grader":
        if kind not in cls._graders:
            raise KeyError(f"No grader registered for kind: {kind.value}")
        return cls._graders[kind]

    @classmethod
    def check_complete(cls) -> None:
        missing = [kind.value for kind in QuestionKind if kind not in cls._graders]
        if missing:
            raise RuntimeError(f"Question kinds without a grader: {missing}")


class Grader(ABC):
    """Compares a matching answer variant against a question's payload."""

    @abstractmethod
    def grade(self, question: Question, answer: Any) -> Outcome:
        ...

    @staticmethod
    def all_or_nothing(question: Question, is_correct: bool) -> Outcome:
        return Outcome(correct=is_correct, score_awarded=question.points if is_correct else 0.0)


# =============================================================================
# Graders
# =============================================================================


@GraderRegistry.register(QuestionKind.SINGLE_CHOICE, QuestionKind.IMAGE_CHOICE)
class ChoiceGrader(Grader):
    """Exact match of the selected option; no partial credit."""

    def grade(self, question: Question, answer: SingleChoiceAnswer) -> Outcome:
        payload = question.payload
        index = resolve_option(answer.selected, payload.options, letters=False)
        return self.all_or_nothing(question, index == payload.correct)


@GraderRegistry.register(QuestionKind.MULTI_CHOICE)
class MultiChoiceGrader(Grader):
    """Set equality; a partially correct selection earns nothing."""

    def grade(self, question: Question, answer: MultiChoiceAnswer) -> Outcome:
        payload = question.payload
        selected = {resolve_option(v, payload.options, letters=False) for v in answer.selected}
        if None in selected:
            return INCORRECT
        return self.all_or_nothing(question, selected == payload.correct)


@GraderRegistry.register(QuestionKind.TRUE_FALSE)
class TrueFalseGrader(Grader):
    def grade(self, question: Question, answer: TrueFalseAnswer) -> Outcome:
        return self.all_or_nothing(question, bool(answer.value) == question.payload.correct)


@GraderRegistry.register(QuestionKind.FILL_IN_BLANK)
class FillInBlankGrader(Grader):
    """
    Per-blank comparison, case-insensitive and trimmed. Each blank is an
    independent sub-question, so the score is proportional to the blanks
    matched; the question is correct only when all of them match.
    """

    def grade(self, question: Question, answer: FillInBlankAnswer) -> Outcome:
        expected = question.payload.correct
        submitted = answer.values
        matched = sum(
            1
            for i, want in enumerate(expected)
            if i < len(submitted) and str(submitted[i]).strip().lower() == want.strip().lower()
        )
        return Outcome(
            correct=matched == len(expected),
            score_awarded=question.points * matched / len(expected),
        )


@GraderRegistry.register(QuestionKind.MATCH_PAIRS)
class MatchPairsGrader(Grader):
    """Every left must map to its paired right; graded as one unit."""

    def grade(self, question: Question, answer: MatchPairsAnswer) -> Outcome:
        matches: Mapping[str, str] = answer.matches
        is_correct = all(
            left in matches and str(matches[left]).strip() == right
            for left, right in question.payload.pairs
        )
        return self.all_or_nothing(question, is_correct)


@GraderRegistry.register(QuestionKind.SEQUENCE)
class SequenceGrader(Grader):
    """The submitted ordering must equal the expected order element-wise."""

    def grade(self, question: Question, answer: SequenceAnswer) -> Outcome:
        items = question.payload.items
        order = []
        for value in answer.order:
            if isinstance(value, int) and not isinstance(value, bool):
                order.append(value if 0 <= value < len(items) else None)
            elif isinstance(value, str) and value.strip() in items:
                order.append(items.index(value.strip()))
            else:
                order.append(None)
        return self.all_or_nothing(question, tuple(order) == question.payload.correct)


@GraderRegistry.register(QuestionKind.SHORT_ANSWER)
class ShortAnswerGrader(Grader):
    """Whitespace-normalized, case-insensitive match against any accepted answer."""

    def grade(self, question: Question, answer: ShortAnswer) -> Outcome:
        submitted = normalize_text(answer.text)
        accepted = {normalize_text(a) for a in question.payload.accepted}
        return self.all_or_nothing(question, bool(submitted) and submitted in accepted)


@GraderRegistry.register(QuestionKind.NUMERIC)
class NumericGrader(Grader):
    """Correct iff |submitted - correct| <= tolerance."""

    def grade(self, question: Question, answer: NumericAnswer) -> Outcome:
        payload = question.payload
        try:
            value = float(answer.value)
        except (TypeError, ValueError):
            return INCORRECT
        if not math.isfinite(value):
            return INCORRECT
        diff = abs(value - payload.correct)
        # Absorb float noise exactly at the tolerance boundary
        within = diff <= payload.tolerance or math.isclose(
            diff, payload.tolerance, rel_tol=1e-9, abs_tol=1e-12
        )
        return self.all_or_nothing(question, within)


@GraderRegistry.register(QuestionKind.ESSAY)
class EssayGrader(Grader):
    """Essays need a human grader."""

    def grade(self, question: Question, answer: EssayAnswer) -> Outcome:
        return UNGRADED


GraderRegistry.check_complete()


# =============================================================================
# Entry points
# =============================================================================


def grade(question: Question, answer: Any) -> Outcome:
    """Grade one answer. Unattempted and mismatched answers earn nothing."""
    if is_unattempted(answer):
        return INCORRECT
    if not answer_matches(question, answer):
        logger.warning(
            f"Answer {type(answer).__name__} does not fit {question.kind.value} "
            f"question {question.id!r}; grading as incorrect"
        )
        return INCORRECT
    return GraderRegistry.get(question.kind).grade(question, answer)


def grade_all(quiz: Quiz, answers: Mapping[str, Any]) -> dict[str, Outcome]:
    """Grade every question of `quiz`, in quiz order; missing answers are unattempted."""
    return {q.id: grade(q, answers.get(q.id)) for q in quiz.questions}
