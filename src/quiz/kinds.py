"""
Question kinds and the kind-alias table.

Stored LOB content names the same question structure in several ways
("mcq", "multiple-choice", "multiple_choice", ...). Every spelling that has
ever been persisted maps to exactly one canonical QuestionKind here, so no
other module needs to know about the raw strings.
"""

from __future__ import annotations

import re
from enum import Enum


class QuestionKind(str, Enum):
    """Supported question structures."""

    SINGLE_CHOICE = "single-choice"
    MULTI_CHOICE = "multi-choice"
    TRUE_FALSE = "true-false"
    FILL_IN_BLANK = "fill-in-blank"
    MATCH_PAIRS = "match-pairs"
    SEQUENCE = "sequence"
    SHORT_ANSWER = "short-answer"
    ESSAY = "essay"
    NUMERIC = "numeric"
    IMAGE_CHOICE = "image-choice"


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


# Kinds whose payload is an option list with a resolvable `correct`
CHOICE_KINDS = frozenset(
    {QuestionKind.SINGLE_CHOICE, QuestionKind.MULTI_CHOICE, QuestionKind.IMAGE_CHOICE}
)


# Keys are stored in their normalized form (lower case, "-" separators).
KIND_ALIASES: dict[str, QuestionKind] = {
    # single-choice
    "mcq": QuestionKind.SINGLE_CHOICE,
    "multiple-choice": QuestionKind.SINGLE_CHOICE,
    "single-choice": QuestionKind.SINGLE_CHOICE,
    "scq": QuestionKind.SINGLE_CHOICE,
    # multi-choice
    "mcqm": QuestionKind.MULTI_CHOICE,
    "multiple-select": QuestionKind.MULTI_CHOICE,
    "multi-select": QuestionKind.MULTI_CHOICE,
    "multi-choice": QuestionKind.MULTI_CHOICE,
    # true-false
    "tof": QuestionKind.TRUE_FALSE,
    "tf": QuestionKind.TRUE_FALSE,
    "true-false": QuestionKind.TRUE_FALSE,
    "true-or-false": QuestionKind.TRUE_FALSE,
    # fill-in-blank
    "fitb": QuestionKind.FILL_IN_BLANK,
    "fill-in-blanks": QuestionKind.FILL_IN_BLANK,
    "fill-in-blank": QuestionKind.FILL_IN_BLANK,
    "fill-in-the-blank": QuestionKind.FILL_IN_BLANK,
    "fill-in-the-blanks": QuestionKind.FILL_IN_BLANK,
    # match-pairs
    "mtf": QuestionKind.MATCH_PAIRS,
    "match-the-following": QuestionKind.MATCH_PAIRS,
    "matching": QuestionKind.MATCH_PAIRS,
    "match-pairs": QuestionKind.MATCH_PAIRS,
    # sequence
    "seq": QuestionKind.SEQUENCE,
    "sequencing": QuestionKind.SEQUENCE,
    "sequence": QuestionKind.SEQUENCE,
    "ordering": QuestionKind.SEQUENCE,
    # short-answer
    "short": QuestionKind.SHORT_ANSWER,
    "short-answer": QuestionKind.SHORT_ANSWER,
    # essay
    "essay": QuestionKind.ESSAY,
    "long-answer": QuestionKind.ESSAY,
    # numeric
    "num": QuestionKind.NUMERIC,
    "numerical": QuestionKind.NUMERIC,
    "numeric": QuestionKind.NUMERIC,
    # image-choice
    "pic": QuestionKind.IMAGE_CHOICE,
    "image": QuestionKind.IMAGE_CHOICE,
    "image-choice": QuestionKind.IMAGE_CHOICE,
}

_SEPARATORS = re.compile(r"[\s_]+")


def normalize_alias(raw_kind: str) -> str:
    """Lower-case a raw kind string and unify "_"/space separators to "-"."""
    return _SEPARATORS.sub("-", raw_kind.strip().lower())


def resolve_alias(raw_kind: object) -> QuestionKind | None:
    """
    Map a raw kind string to its canonical QuestionKind.

    Matching is case-insensitive and treats "_", "-" and spaces alike.
    Returns None for non-strings and for strings that match no kind.
    """
    if isinstance(raw_kind, QuestionKind):
        return raw_kind
    if not isinstance(raw_kind, str):
        return None
    return KIND_ALIASES.get(normalize_alias(raw_kind))


def aliases_for(kind: QuestionKind) -> list[str]:
    """All alias spellings registered for a kind, in table order."""
    return [alias for alias, target in KIND_ALIASES.items() if target is kind]
