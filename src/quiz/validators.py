"""
Per-kind payload validators.

Each validator reads the kind-specific fields of a RawQuestion, checks the
structural invariants of its kind and returns the canonical payload. Any
violation raises PayloadError naming the field at fault.
"""

from __future__ import annotations

import math
import string
from collections.abc import Mapping
from typing import Any

from .kinds import QuestionKind
from .models import (
    ChoicePayload,
    EssayPayload,
    FillInBlankPayload,
    MatchPairsPayload,
    MultiChoicePayload,
    NumericPayload,
    SequencePayload,
    ShortAnswerPayload,
    TrueFalsePayload,
)
from .raw import RawQuestion
from .registry import PayloadError, check_registry_complete, register

TRUE_STRINGS = {"true", "t", "yes", "y"}
FALSE_STRINGS = {"false", "f", "no", "n"}


# =============================================================================
# Shared helpers
# =============================================================================


def _text(value: Any, field: str, what: str) -> str:
    """Coerce a scalar to stripped, non-empty text."""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise PayloadError(field, f"{what} must be text, got {type(value).__name__}")
    text = str(value).strip()
    if not text:
        raise PayloadError(field, f"{what} is empty")
    return text


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _option_entries(raw_options: list[Any] | None) -> tuple[tuple[str, ...], tuple[str | None, ...]]:
    """
    Parse an option list into (texts, labels).

    Options are plain strings, ``{"text": ..., "label": ...}`` objects, or the
    legacy single-entry objects ``{"A": "Paris"}`` whose key is the label.
    """
    if raw_options is None:
        raise PayloadError("options", "missing")

    texts: list[str] = []
    labels: list[str | None] = []
    for i, option in enumerate(raw_options):
        label = None
        if isinstance(option, Mapping):
            if "text" in option:
                label = option.get("label")
                option = option["text"]
            elif len(option) == 1:
                label, option = next(iter(option.items()))
            else:
                raise PayloadError("options", f"option {i} has an unrecognized shape")
        texts.append(_text(option, "options", f"option {i}"))
        labels.append(str(label).strip() if label is not None else None)

    if len(texts) < 2:
        raise PayloadError("options", f"need at least 2 options, got {len(texts)}")
    if len(set(texts)) != len(texts):
        raise PayloadError("options", "options must be unique")
    return tuple(texts), tuple(labels)


def resolve_option(
    value: Any,
    options: tuple[str, ...],
    labels: tuple[str | None, ...] = (),
    letters: bool = True,
) -> int | None:
    """
    Resolve a reference to an option: index, option text, option label or,
    when `letters` is set, a letter ("A" is the first option).
    Returns None if nothing matches.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if 0 <= value < len(options) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text in options:
        return options.index(text)
    folded = text.casefold()
    for i, label in enumerate(labels):
        if label is not None and label.casefold() == folded:
            return i
    if letters and len(text) == 1 and text.upper() in string.ascii_uppercase:
        index = string.ascii_uppercase.index(text.upper())
        if index < len(options):
            return index
    return None


def _resolve_correct(value: Any, options: tuple[str, ...], labels: tuple[str | None, ...]) -> int:
    index = resolve_option(value, options, labels)
    if index is None:
        raise PayloadError("correct", f"{value!r} does not match any option")
    return index


# =============================================================================
# Validators
# =============================================================================


@register(QuestionKind.SINGLE_CHOICE)
class SingleChoiceValidator:
    """Options plus exactly one correct option."""

    def build(self, raw: RawQuestion) -> ChoicePayload:
        options, labels = _option_entries(raw.options)
        correct = raw.correct
        if isinstance(correct, (list, tuple)):
            if len(correct) != 1:
                raise PayloadError("correct", f"expected exactly one answer, got {len(correct)}")
            correct = correct[0]
        if correct is None:
            raise PayloadError("correct", "missing")
        return ChoicePayload(options=options, correct=_resolve_correct(correct, options, labels))


@register(QuestionKind.IMAGE_CHOICE)
class ImageChoiceValidator(SingleChoiceValidator):
    """Single-choice over an image; the image reference is mandatory."""

    def build(self, raw: RawQuestion) -> ChoicePayload:
        if not raw.image_ref:
            raise PayloadError("image_ref", "required for image-choice questions")
        return super().build(raw)


@register(QuestionKind.MULTI_CHOICE)
class MultiChoiceValidator:
    def build(self, raw: RawQuestion) -> MultiChoicePayload:
        options, labels = _option_entries(raw.options)
        if raw.correct is None:
            raise PayloadError("correct", "missing")
        selected = frozenset(_resolve_correct(v, options, labels) for v in _as_list(raw.correct))
        if not selected:
            raise PayloadError("correct", "at least one correct option is required")
        return MultiChoicePayload(options=options, correct=selected)


@register(QuestionKind.TRUE_FALSE)
class TrueFalseValidator:
    def build(self, raw: RawQuestion) -> TrueFalsePayload:
        value = raw.correct
        if isinstance(value, bool):
            return TrueFalsePayload(correct=value)
        if isinstance(value, str):
            folded = value.strip().lower()
            if folded in TRUE_STRINGS:
                return TrueFalsePayload(correct=True)
            if folded in FALSE_STRINGS:
                return TrueFalsePayload(correct=False)
        if value is None:
            raise PayloadError("correct", "missing")
        raise PayloadError("correct", f"expected a boolean, got {value!r}")


@register(QuestionKind.FILL_IN_BLANK)
class FillInBlankValidator:
    """
    Blanks come from ``fillInBlanks.blanks`` or ``blanks``; expected answers
    from ``correct``. Either one stands in for the other when missing.
    """

    def build(self, raw: RawQuestion) -> FillInBlankPayload:
        template = None
        blanks = raw.blanks
        if raw.fill_in_blanks is not None:
            template = raw.fill_in_blanks.get("text")
            if template is not None and not isinstance(template, str):
                raise PayloadError("fill_in_blanks", "text must be a string")
            if blanks is None:
                blanks = raw.fill_in_blanks.get("blanks")
                if blanks is not None and not isinstance(blanks, list):
                    raise PayloadError("blanks", "must be a list")

        correct = raw.correct
        if correct is not None:
            correct = _as_list(correct)
        if blanks is None and correct is None:
            raise PayloadError("blanks", "missing")
        if blanks is None:
            blanks = correct
        if correct is None:
            correct = blanks

        blank_texts = tuple(_text(b, "blanks", f"blank {i}") for i, b in enumerate(blanks))
        expected = tuple(_text(c, "correct", f"answer {i}") for i, c in enumerate(correct))
        if not blank_texts:
            raise PayloadError("blanks", "at least one blank is required")
        if len(expected) != len(blank_texts):
            raise PayloadError(
                "correct", f"expected {len(blank_texts)} answers, got {len(expected)}"
            )
        return FillInBlankPayload(blanks=blank_texts, correct=expected, text=template or None)


@register(QuestionKind.MATCH_PAIRS)
class MatchPairsValidator:
    """Pairs as ``{left, right}``, ``{term, definition}``, ``[left, right]`` or a mapping."""

    def build(self, raw: RawQuestion) -> MatchPairsPayload:
        if raw.pairs is None:
            raise PayloadError("pairs", "missing")

        entries = list(raw.pairs.items()) if isinstance(raw.pairs, dict) else raw.pairs
        pairs: list[tuple[str, str]] = []
        for i, entry in enumerate(entries):
            if isinstance(entry, Mapping):
                if "left" in entry:
                    left, right = entry.get("left"), entry.get("right")
                else:
                    left, right = entry.get("term"), entry.get("definition")
            elif isinstance(entry, (list, tuple)) and len(entry) == 2:
                left, right = entry
            else:
                raise PayloadError("pairs", f"pair {i} has an unrecognized shape")
            if left is None or right is None:
                raise PayloadError("pairs", f"pair {i} needs both a left and a right side")
            pairs.append((_text(left, "pairs", f"pair {i} left"), _text(right, "pairs", f"pair {i} right")))

        if len(pairs) < 2:
            raise PayloadError("pairs", f"need at least 2 pairs, got {len(pairs)}")
        if len({left for left, _ in pairs}) != len(pairs):
            raise PayloadError("pairs", "left sides must be unique")
        if len({right for _, right in pairs}) != len(pairs):
            raise PayloadError("pairs", "right sides must be unique")
        return MatchPairsPayload(pairs=tuple(pairs))


@register(QuestionKind.SEQUENCE)
class SequenceValidator:
    """
    Items plus the correct order. ``correct`` lists item indices or item texts;
    when absent the items are already in the correct order.
    """

    def build(self, raw: RawQuestion) -> SequencePayload:
        if raw.items is None:
            raise PayloadError("items", "missing")
        items = tuple(_text(item, "items", f"item {i}") for i, item in enumerate(raw.items))
        if len(items) < 2:
            raise PayloadError("items", f"need at least 2 items, got {len(items)}")
        if len(set(items)) != len(items):
            raise PayloadError("items", "items must be unique")

        if raw.correct is None:
            return SequencePayload(items=items, correct=tuple(range(len(items))))

        order: list[int] = []
        for value in _as_list(raw.correct):
            if isinstance(value, int) and not isinstance(value, bool):
                index = value if 0 <= value < len(items) else None
            elif isinstance(value, str) and value.strip() in items:
                index = items.index(value.strip())
            else:
                index = None
            if index is None:
                raise PayloadError("correct", f"{value!r} is not one of the items")
            order.append(index)

        if sorted(order) != list(range(len(items))):
            raise PayloadError("correct", "must be a permutation of the items")
        return SequencePayload(items=items, correct=tuple(order))


@register(QuestionKind.SHORT_ANSWER)
class ShortAnswerValidator:
    def build(self, raw: RawQuestion) -> ShortAnswerPayload:
        if raw.correct is None:
            raise PayloadError("correct", "at least one accepted answer is required")
        accepted: list[str] = []
        for value in _as_list(raw.correct):
            if isinstance(value, str) and not value.strip():
                continue
            text = _text(value, "correct", "accepted answer")
            if text not in accepted:
                accepted.append(text)
        if not accepted:
            raise PayloadError("correct", "at least one accepted answer is required")
        return ShortAnswerPayload(accepted=tuple(accepted))


@register(QuestionKind.ESSAY)
class EssayValidator:
    def build(self, raw: RawQuestion) -> EssayPayload:
        correct = raw.correct
        if isinstance(correct, str) and not correct.strip():
            correct = None
        if correct is not None:
            raise PayloadError("correct", "essay questions are graded by hand and take no correct answer")
        return EssayPayload()


@register(QuestionKind.NUMERIC)
class NumericValidator:
    def build(self, raw: RawQuestion) -> NumericPayload:
        value = raw.correct
        if value is None:
            raise PayloadError("correct", "missing")
        if isinstance(value, bool):
            raise PayloadError("correct", "expected a number, got a boolean")
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError):
            raise PayloadError("correct", f"expected a number, got {value!r}") from None
        if not math.isfinite(number):
            raise PayloadError("correct", "must be a finite number")
        return NumericPayload(correct=number, tolerance=raw.tolerance or 0.0)


check_registry_complete()
