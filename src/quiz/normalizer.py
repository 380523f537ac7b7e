"""
Content normalizer: raw LOB quiz JSON -> canonical Quiz.

Two stored shapes are accepted:

1. Legacy single question::

       {"type": "mcq", "question_text": "...", "options": [{"A": "..."}, ...],
        "correct_answer": "B"}

2. Quiz envelope::

       {"title": "...", "questions": [...], "settings": {...}}

Normalization is pure and all-or-nothing: one bad question fails the whole
quiz, and the result carries the error instead of raising it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import ValidationError

from . import validators  # noqa: F401  (registers the kind validators)
from .errors import (
    InvalidJson,
    InvalidQuestion,
    InvalidQuiz,
    NormalizationError,
    UnknownKind,
    UnrecognizedShape,
)
from .kinds import resolve_alias
from .models import (
    ChoicePayload,
    FillInBlankPayload,
    MatchPairsPayload,
    MultiChoicePayload,
    NumericPayload,
    Question,
    Quiz,
    QuizSettings,
    SequencePayload,
    ShortAnswerPayload,
    TrueFalsePayload,
)
from .raw import LEGACY_KIND_FIELD, LEGACY_PROMPT_FIELD, RawQuestion, RawQuiz
from .registry import PayloadError, build_payload, describe_validation_error

LEGACY_QUIZ_TITLE = "Quiz Question"
DEFAULT_QUIZ_TITLE = "Quiz"
DEFAULT_POINTS = 1.0

# Stored content that means "nothing here"
EMPTY_CONTENT = {"", "undefined", "null"}


@dataclass(frozen=True)
class NormalizationResult:
    """Either a Quiz or the NormalizationError explaining why there is none."""

    quiz: Quiz | None = None
    error: NormalizationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Quiz:
        """Return the quiz, raising the carried error if normalization failed."""
        if self.error is not None:
            raise self.error
        return self.quiz


# =============================================================================
# Entry points
# =============================================================================


def normalize_content(content: str | None) -> NormalizationResult:
    """Parse stored LOB text and normalize it."""
    if content is None or content.strip() in EMPTY_CONTENT:
        return NormalizationResult(error=InvalidJson("No quiz data available", raw=content))
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        logger.info(f"Quiz content is not valid JSON: {e}")
        return NormalizationResult(
            error=InvalidJson(f"Failed to parse quiz data: {e.msg} (line {e.lineno})", raw=content)
        )
    return normalize(raw)


def normalize(raw: Any) -> NormalizationResult:
    """Classify raw JSON and normalize it into a Quiz."""
    try:
        quiz = _normalize(raw)
    except NormalizationError as e:
        if e.raw is None:
            e.raw = raw
        logger.debug(f"Quiz normalization failed: {e}")
        return NormalizationResult(error=e)
    logger.debug(f"Normalized quiz '{quiz.title}' with {quiz.question_count} questions")
    return NormalizationResult(quiz=quiz)


def is_legacy_question(raw: Any) -> bool:
    return (
        isinstance(raw, Mapping)
        and raw.get(LEGACY_KIND_FIELD) is not None
        and raw.get(LEGACY_PROMPT_FIELD) is not None
    )


def is_quiz_envelope(raw: Any) -> bool:
    return isinstance(raw, Mapping) and "questions" in raw


# =============================================================================
# Internals
# =============================================================================


def _normalize(raw: Any) -> Quiz:
    if is_legacy_question(raw):
        logger.debug("Classified content as legacy single question")
        question = dict(raw)
        # Legacy payloads store 0 or "" for "default points"
        if not question.get("points"):
            question.pop("points", None)
        return Quiz(title=LEGACY_QUIZ_TITLE, questions=_normalize_questions([question]))

    if is_quiz_envelope(raw):
        try:
            envelope = RawQuiz.model_validate(dict(raw))
        except ValidationError as e:
            first = e.errors()[0]
            field = str(first["loc"][0]) if first.get("loc") else "quiz"
            raise InvalidQuiz(field, first.get("msg", "invalid value")) from None

        questions = _normalize_questions(envelope.questions)
        settings = envelope.settings
        quiz = Quiz(
            title=envelope.title or DEFAULT_QUIZ_TITLE,
            questions=questions,
            settings=QuizSettings(
                randomize_questions=bool(settings and settings.randomize_questions),
                randomize_options=bool(settings and settings.randomize_options),
                allow_retry=bool(settings and settings.allow_retry),
                show_correct_answers=bool(settings and settings.show_correct_answers),
            ),
            description=envelope.description,
            instructions=envelope.instructions,
            time_limit_minutes=envelope.time_limit_minutes,
            passing_score_percent=envelope.passing_score_percent,
            declared_total_points=envelope.total_points,
        )
        if quiz.declared_total_points is not None and quiz.declared_total_points != quiz.total_points:
            logger.warning(
                f"Quiz '{quiz.title}' declares {quiz.declared_total_points} total points "
                f"but its questions add up to {quiz.total_points}"
            )
        return quiz

    raise UnrecognizedShape(
        "Content is neither a single question (type + question_text) "
        "nor a quiz (questions)"
    )


def _normalize_questions(raw_questions: list[Any]) -> tuple[Question, ...]:
    parsed = [_parse_question(i, raw) for i, raw in enumerate(raw_questions)]

    # Explicit ids first, so generated ids can avoid them
    taken: set[str] = set()
    for i, (raw, _, _) in enumerate(parsed):
        if raw.id is None:
            continue
        qid = str(raw.id).strip()
        if not qid:
            raise InvalidQuestion(i, "id: must not be empty")
        if qid in taken:
            raise InvalidQuestion(i, f"id: duplicate id {qid!r}")
        taken.add(qid)

    questions = []
    for i, (raw, kind, payload) in enumerate(parsed):
        qid = str(raw.id).strip() if raw.id is not None else _generate_id(i, taken)
        questions.append(
            Question(
                id=qid,
                kind=kind,
                prompt=raw.prompt.strip(),
                payload=payload,
                points=raw.points if raw.points is not None else DEFAULT_POINTS,
                difficulty=raw.difficulty,
                time_limit_seconds=raw.time_limit_seconds,
                hint=raw.hint,
                explanation=raw.explanation,
                image_ref=raw.image_ref,
            )
        )
    return tuple(questions)


def _parse_question(index: int, raw: Any):
    if not isinstance(raw, Mapping):
        raise InvalidQuestion(index, f"question: expected an object, got {type(raw).__name__}")
    try:
        question = RawQuestion.model_validate(dict(raw))
    except ValidationError as e:
        raise InvalidQuestion(index, describe_validation_error(e)) from None

    kind = resolve_alias(question.kind)
    if kind is None:
        raise UnknownKind(question.kind, index=index)
    if question.prompt is None or not question.prompt.strip():
        raise InvalidQuestion(index, "prompt: question text is required")

    try:
        payload = build_payload(kind, question)
    except PayloadError as e:
        raise InvalidQuestion(index, e.reason) from None
    return question, kind, payload


def _generate_id(index: int, taken: set[str]) -> str:
    candidate = str(index + 1)
    suffix = 1
    while candidate in taken:
        suffix += 1
        candidate = f"{index + 1}-{suffix}"
    taken.add(candidate)
    return candidate


# =============================================================================
# Serialization back to the envelope shape
# =============================================================================


def question_to_raw(question: Question) -> dict[str, Any]:
    """Serialize a Question to the canonical envelope question shape."""
    data: dict[str, Any] = {
        "id": question.id,
        "type": question.kind.value,
        "question": question.prompt,
        "points": question.points,
    }
    if question.difficulty is not None:
        data["difficulty"] = question.difficulty.value
    if question.time_limit_seconds is not None:
        data["timeLimit"] = question.time_limit_seconds
    if question.hint is not None:
        data["hint"] = question.hint
    if question.explanation is not None:
        data["explanation"] = question.explanation
    if question.image_ref is not None:
        data["image"] = question.image_ref

    payload = question.payload
    if isinstance(payload, ChoicePayload):
        data["options"] = list(payload.options)
        data["correctAnswer"] = payload.correct
    elif isinstance(payload, MultiChoicePayload):
        data["options"] = list(payload.options)
        data["correctAnswer"] = sorted(payload.correct)
    elif isinstance(payload, TrueFalsePayload):
        data["correctAnswer"] = payload.correct
    elif isinstance(payload, FillInBlankPayload):
        data["fillInBlanks"] = {"text": payload.text, "blanks": list(payload.blanks)}
        data["correctAnswer"] = list(payload.correct)
    elif isinstance(payload, MatchPairsPayload):
        data["pairs"] = [{"left": left, "right": right} for left, right in payload.pairs]
    elif isinstance(payload, SequencePayload):
        data["sequence"] = list(payload.items)
        data["correctAnswer"] = list(payload.correct)
    elif isinstance(payload, ShortAnswerPayload):
        data["correctAnswer"] = list(payload.accepted)
    elif isinstance(payload, NumericPayload):
        data["correctAnswer"] = payload.correct
        data["tolerance"] = payload.tolerance
    return data


def to_raw(quiz: Quiz) -> dict[str, Any]:
    """
    Serialize a Quiz back to the envelope shape.

    ``normalize(to_raw(quiz))`` reproduces an identical Quiz.
    """
    data: dict[str, Any] = {"title": quiz.title}
    if quiz.description is not None:
        data["description"] = quiz.description
    if quiz.instructions is not None:
        data["instructions"] = quiz.instructions
    if quiz.time_limit_minutes is not None:
        data["timeLimit"] = quiz.time_limit_minutes
    if quiz.passing_score_percent is not None:
        data["passingScore"] = quiz.passing_score_percent
    if quiz.declared_total_points is not None:
        data["totalPoints"] = quiz.declared_total_points
    data["settings"] = {
        "randomizeQuestions": quiz.settings.randomize_questions,
        "randomizeOptions": quiz.settings.randomize_options,
        "allowRetry": quiz.settings.allow_retry,
        "showCorrectAnswers": quiz.settings.show_correct_answers,
    }
    data["questions"] = [question_to_raw(q) for q in quiz.questions]
    return data


__all__ = [
    "DEFAULT_QUIZ_TITLE",
    "LEGACY_QUIZ_TITLE",
    "NormalizationResult",
    "is_legacy_question",
    "is_quiz_envelope",
    "normalize",
    "normalize_content",
    "question_to_raw",
    "to_raw",
]
