"""
Quiz attempt state machine.

A QuizAttempt walks NOT_STARTED -> IN_PROGRESS -> COMPLETED over a shared,
immutable Quiz. Every transition returns a TransitionResult; expected edge
cases (answering before start, navigating out of range, retrying a quiz that
forbids it) come back as a named TransitionError instead of an exception.

Usage:
    attempt = QuizAttempt(quiz, seed=42)
    attempt.start()
    attempt.set_answer("1", SingleChoiceAnswer(selected=2))
    result = attempt.complete()
    if result.ok:
        print(result.value.score_percent)
"""

from __future__ import annotations

import random
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from types import MappingProxyType
from typing import Any

from loguru import logger

from .answers import Answer, answer_matches, is_unattempted
from .errors import TransitionError
from .grading import Outcome, grade, grade_all
from .kinds import CHOICE_KINDS, QuestionKind
from .models import Question, Quiz


class AttemptStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of one attempt transition."""

    ok: bool
    error: TransitionError | None = None
    detail: str | None = None
    value: Any = None

    @classmethod
    def success(cls, value: Any = None) -> "TransitionResult":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: TransitionError, detail: str) -> "TransitionResult":
        return cls(ok=False, error=error, detail=detail)


# =============================================================================
# Report
# =============================================================================


@dataclass(frozen=True)
class AttemptReport:
    """
    Final grading of a completed attempt.

    Essay points count toward `max_score` only once a human grade is
    supplied; until then the report is `provisional`.
    """

    quiz: Quiz
    outcomes: Mapping[str, Outcome]
    unattempted: tuple[str, ...] = ()
    human_grades: Mapping[str, float] = field(default_factory=dict)
    completed_at: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "outcomes", MappingProxyType(dict(self.outcomes)))
        object.__setattr__(self, "human_grades", MappingProxyType(dict(self.human_grades)))

    def _counts(self, question: Question) -> bool:
        return question.is_auto_graded or question.id in self.human_grades

    def outcome(self, question_id: str) -> Outcome:
        """Outcome for one question, with any human grade applied."""
        if question_id in self.human_grades:
            return Outcome(correct=None, score_awarded=self.human_grades[question_id])
        return self.outcomes[question_id]

    @property
    def score_awarded(self) -> float:
        return sum(self.outcome(q.id).score_awarded for q in self.quiz.questions if self._counts(q))

    @property
    def max_score(self) -> float:
        return sum(q.points for q in self.quiz.questions if self._counts(q))

    @property
    def score_percent(self) -> float:
        if self.max_score <= 0:
            return 0.0
        return self.score_awarded / self.max_score * 100

    @property
    def correct_count(self) -> int:
        return sum(1 for o in self.outcomes.values() if o.correct is True)

    @property
    def provisional(self) -> bool:
        """True while some essay still waits for a human grade."""
        return any(
            q.kind is QuestionKind.ESSAY and q.id not in self.human_grades
            for q in self.quiz.questions
        )

    @property
    def passed(self) -> bool | None:
        """None when the quiz sets no passing score."""
        if self.quiz.passing_score_percent is None:
            return None
        return self.score_percent >= self.quiz.passing_score_percent

    def with_human_grades(self, grades: Mapping[str, float]) -> "AttemptReport":
        """
        Return a new report with essay grades applied.

        Raises:
            ValueError: if a grade targets an unknown or non-essay question,
                or lies outside [0, question.points].
        """
        problem = check_human_grades(self.quiz, grades)
        if problem is not None:
            raise ValueError(problem)
        merged = {**self.human_grades, **{qid: float(g) for qid, g in grades.items()}}
        return replace(self, human_grades=merged)

    def to_dict(self) -> dict[str, Any]:
        return {
            "quiz": self.quiz.title,
            "score_awarded": self.score_awarded,
            "max_score": self.max_score,
            "correct_count": self.correct_count,
            "score_percent": round(self.score_percent, 2),
            "passed": self.passed,
            "provisional": self.provisional,
            "unattempted": list(self.unattempted),
            "outcomes": {qid: self.outcome(qid).to_dict() for qid in self.outcomes},
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def check_human_grades(quiz: Quiz, grades: Mapping[str, float]) -> str | None:
    """Return why `grades` cannot be applied to `quiz`, or None."""
    for qid, score in grades.items():
        question = quiz.get(qid)
        if question is None:
            return f"No question with id {qid!r}"
        if question.kind is not QuestionKind.ESSAY:
            return f"Question {qid!r} is {question.kind.value}; only essays take human grades"
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            return f"Grade for {qid!r} must be a number, got {score!r}"
        if not 0 <= score <= question.points:
            return f"Grade {score} for {qid!r} is outside [0, {question.points}]"
    return None


# =============================================================================
# State
# =============================================================================


@dataclass
class AttemptState:
    """Mutable state of one attempt. Only QuizAttempt transitions touch it."""

    quiz: Quiz
    status: AttemptStatus = AttemptStatus.NOT_STARTED
    answers: dict[str, Answer] = field(default_factory=dict)
    current_index: int = 0
    revealed_explanations: set[str] = field(default_factory=set)
    question_order: tuple[str, ...] = ()
    option_orders: dict[str, tuple[int, ...]] = field(default_factory=dict)
    started_at: datetime | None = None
    completed_at: datetime | None = None
    report: AttemptReport | None = None


@dataclass(frozen=True)
class AttemptSnapshot:
    """What the presentation layer needs to render the current screen."""

    status: AttemptStatus
    current_index: int
    question_count: int
    current_question: Question | None
    option_order: tuple[str, ...]
    answered: frozenset[str]
    revealed_explanations: frozenset[str]
    running_score: float | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index >= self.question_count - 1


# =============================================================================
# Attempt
# =============================================================================


def _shuffle_targets(question: Question) -> int:
    """Number of entries whose presentation order can be shuffled."""
    payload = question.payload
    if question.kind in CHOICE_KINDS:
        return len(payload.options)
    if question.kind is QuestionKind.SEQUENCE:
        return len(payload.items)
    if question.kind is QuestionKind.MATCH_PAIRS:
        return len(payload.pairs)
    return 0


class QuizAttempt:
    """
    One learner's attempt at a Quiz.

    Shuffle permutations are drawn once, at start(), from a generator seeded
    per attempt; an explicit `seed` makes the presentation reproducible and
    `seed=None` draws fresh randomness.
    Transitions are serialized through a per-attempt lock.
    """

    def __init__(
        self,
        quiz: Quiz,
        seed: int | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        if not isinstance(quiz, Quiz):
            raise TypeError(f"QuizAttempt needs a normalized Quiz, got {type(quiz).__name__}")
        self.seed = seed
        self._rng = random.Random(seed)
        self._clock = clock or datetime.now
        self._lock = threading.RLock()
        self._state = AttemptState(quiz=quiz, question_order=quiz.question_ids)

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def quiz(self) -> Quiz:
        return self._state.quiz

    @property
    def status(self) -> AttemptStatus:
        return self._state.status

    @property
    def answers(self) -> Mapping[str, Answer]:
        with self._lock:
            return MappingProxyType(dict(self._state.answers))

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def question_order(self) -> tuple[str, ...]:
        return self._state.question_order

    @property
    def revealed_explanations(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._state.revealed_explanations)

    @property
    def started_at(self) -> datetime | None:
        return self._state.started_at

    @property
    def completed_at(self) -> datetime | None:
        return self._state.completed_at

    @property
    def report(self) -> AttemptReport | None:
        return self._state.report

    @property
    def current_question(self) -> Question | None:
        with self._lock:
            order = self._state.question_order
            if not order:
                return None
            return self.quiz.get(order[self._state.current_index])

    def answer_for(self, question_id: str) -> Answer | None:
        """The answer given so far, or None if unattempted."""
        return self._state.answers.get(question_id)

    def presented_options(self, question_id: str) -> tuple[str, ...]:
        """
        Option texts in presentation order: choice options, sequence items,
        or the right-hand column of match-pairs. Empty for other kinds.
        """
        with self._lock:
            question = self.quiz.get(question_id)
            if question is None:
                return ()
            payload = question.payload
            if question.kind in CHOICE_KINDS:
                entries = payload.options
            elif question.kind is QuestionKind.SEQUENCE:
                entries = payload.items
            elif question.kind is QuestionKind.MATCH_PAIRS:
                entries = payload.rights
            else:
                return ()
            order = self._state.option_orders.get(question_id, tuple(range(len(entries))))
            return tuple(entries[i] for i in order)

    def time_limit_exceeded(self, now: datetime | None = None) -> bool:
        """
        True once the quiz time limit has elapsed since start().

        Purely informational; the attempt never completes itself.
        """
        with self._lock:
            limit = self.quiz.time_limit_minutes
            if limit is None or self._state.started_at is None:
                return False
            end = self._state.completed_at or now or self._clock()
            return end - self._state.started_at > timedelta(minutes=limit)

    def snapshot(self) -> AttemptSnapshot:
        with self._lock:
            state = self._state
            question = self.current_question
            running = None
            if self.quiz.settings.show_correct_answers:
                running = sum(
                    grade(self.quiz.get(qid), answer).score_awarded
                    for qid, answer in state.answers.items()
                )
            return AttemptSnapshot(
                status=state.status,
                current_index=state.current_index,
                question_count=self.quiz.question_count,
                current_question=question,
                option_order=self.presented_options(question.id) if question else (),
                answered=frozenset(state.answers),
                revealed_explanations=frozenset(state.revealed_explanations),
                running_score=running,
                started_at=state.started_at,
                completed_at=state.completed_at,
            )

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _check(
        self, *statuses: AttemptStatus, question_id: str | None = None
    ) -> TransitionResult | None:
        """Return the failure blocking a transition, or None if it may proceed."""
        if self._state.status not in statuses:
            allowed = " or ".join(s.value for s in statuses)
            return TransitionResult.failure(
                TransitionError.INVALID_STATE,
                f"Attempt is {self._state.status.value}; expected {allowed}",
            )
        if question_id is not None and self.quiz.get(question_id) is None:
            return TransitionResult.failure(
                TransitionError.UNKNOWN_QUESTION, f"No question with id {question_id!r}"
            )
        return None

    def start(self) -> TransitionResult:
        """Fix the presentation order and begin the attempt."""
        with self._lock:
            blocked = self._check(AttemptStatus.NOT_STARTED)
            if blocked is not None:
                return blocked

            state = self._state
            settings = self.quiz.settings
            order = list(self.quiz.question_ids)
            if settings.randomize_questions:
                self._rng.shuffle(order)
            state.question_order = tuple(order)

            if settings.randomize_options:
                for question in self.quiz.questions:
                    count = _shuffle_targets(question)
                    if count:
                        permutation = list(range(count))
                        self._rng.shuffle(permutation)
                        state.option_orders[question.id] = tuple(permutation)

            state.current_index = 0
            state.started_at = self._clock()
            state.status = AttemptStatus.IN_PROGRESS
            logger.debug(f"Started attempt on '{self.quiz.title}' (seed={self.seed})")
            return TransitionResult.success()

    def set_answer(self, question_id: str, answer: Answer) -> TransitionResult:
        """Record or overwrite the answer to a question. Does not navigate."""
        with self._lock:
            blocked = self._check(AttemptStatus.IN_PROGRESS, question_id=question_id)
            if blocked is not None:
                return blocked
            if is_unattempted(answer):
                return self.clear_answer(question_id)

            question = self.quiz.get(question_id)
            if not answer_matches(question, answer):
                return TransitionResult.failure(
                    TransitionError.ANSWER_MISMATCH,
                    f"{type(answer).__name__} is not an answer to a {question.kind.value} question",
                )
            self._state.answers[question_id] = answer
            logger.debug(f"Answered question {question_id!r}")
            return TransitionResult.success()

    def clear_answer(self, question_id: str) -> TransitionResult:
        """Return a question to unattempted."""
        with self._lock:
            blocked = self._check(AttemptStatus.IN_PROGRESS, question_id=question_id)
            if blocked is not None:
                return blocked
            self._state.answers.pop(question_id, None)
            return TransitionResult.success()

    def go_to(self, index: int) -> TransitionResult:
        """Move to a position in presentation order."""
        with self._lock:
            blocked = self._check(AttemptStatus.IN_PROGRESS)
            if blocked is not None:
                return blocked
            count = self.quiz.question_count
            if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
                return TransitionResult.failure(
                    TransitionError.OUT_OF_RANGE, f"Index {index!r} is outside [0, {count})"
                )
            self._state.current_index = index
            return TransitionResult.success(value=index)

    def next(self) -> TransitionResult:
        with self._lock:
            return self.go_to(self._state.current_index + 1)

    def previous(self) -> TransitionResult:
        with self._lock:
            return self.go_to(self._state.current_index - 1)

    def reveal_explanation(self, question_id: str) -> TransitionResult:
        """Mark a question's explanation as shown. Idempotent."""
        with self._lock:
            blocked = self._check(
                AttemptStatus.IN_PROGRESS, AttemptStatus.COMPLETED, question_id=question_id
            )
            if blocked is not None:
                return blocked
            self._state.revealed_explanations.add(question_id)
            return TransitionResult.success(value=self.quiz.get(question_id).explanation)

    def complete(self, human_grades: Mapping[str, float] | None = None) -> TransitionResult:
        """
        Grade every question and close the attempt.

        Unattempted questions score 0. Essays count toward the maximum only
        when `human_grades` supplies their score. The value of a successful
        result is the AttemptReport.
        """
        with self._lock:
            blocked = self._check(AttemptStatus.IN_PROGRESS)
            if blocked is not None:
                return blocked
            grades = dict(human_grades or {})
            problem = check_human_grades(self.quiz, grades)
            if problem is not None:
                return TransitionResult.failure(TransitionError.INVALID_GRADE, problem)

            state = self._state
            state.completed_at = self._clock()
            state.report = AttemptReport(
                quiz=self.quiz,
                outcomes=grade_all(self.quiz, state.answers),
                unattempted=tuple(qid for qid in self.quiz.question_ids if qid not in state.answers),
                human_grades={qid: float(g) for qid, g in grades.items()},
                completed_at=state.completed_at,
            )
            state.status = AttemptStatus.COMPLETED
            logger.debug(
                f"Completed attempt on '{self.quiz.title}': "
                f"{state.report.score_awarded}/{state.report.max_score} "
                f"({state.report.score_percent:.1f}%)"
            )
            return TransitionResult.success(value=state.report)

    def retry(self, seed: int | None = None) -> TransitionResult:
        """Open a fresh attempt on the same quiz. This attempt is left as is.

        The new attempt never inherits this seed, so its order is redrawn
        unless `seed` is given.
        """
        with self._lock:
            if not self.quiz.settings.allow_retry:
                return TransitionResult.failure(
                    TransitionError.RETRY_NOT_ALLOWED, f"Quiz '{self.quiz.title}' does not allow retries"
                )
            blocked = self._check(AttemptStatus.COMPLETED)
            if blocked is not None:
                return blocked
            logger.debug(f"Retrying '{self.quiz.title}'")
            return TransitionResult.success(value=QuizAttempt(self.quiz, seed=seed, clock=self._clock))
