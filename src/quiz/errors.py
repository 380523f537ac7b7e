"""
Error taxonomy for the quiz engine.

Normalization errors are exception types so they can be raised by
``NormalizationResult.unwrap()``, but ``normalize()`` itself only ever
returns them inside a result. Transition errors are plain enum codes
carried by ``TransitionResult``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class NormalizationError(Exception):
    """Base class for raw quiz content that cannot become a Quiz."""

    code = "normalization_error"

    def __init__(self, message: str, raw: Any = None):
        super().__init__(message)
        self.message = message
        # Original payload, kept so callers can show it for diagnosis
        self.raw = raw

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidJson(NormalizationError):
    """Stored content is empty or is not JSON."""

    code = "invalid_json"


class UnrecognizedShape(NormalizationError):
    """Input is neither a legacy single question nor a quiz envelope."""

    code = "unrecognized_shape"


class InvalidQuiz(NormalizationError):
    """An envelope-level field (title, settings, questions...) is malformed."""

    code = "invalid_quiz"

    def __init__(self, field: str, reason: str, raw: Any = None):
        super().__init__(f"{field}: {reason}", raw)
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "field": self.field, "reason": self.reason}


class UnknownKind(NormalizationError):
    """A question's kind string matches no registered alias."""

    code = "unknown_kind"

    def __init__(self, value: Any, index: int | None = None, raw: Any = None):
        where = f"question {index}: " if index is not None else ""
        super().__init__(f"{where}unknown question kind {value!r}", raw)
        self.value = value
        self.index = index

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "value": self.value, "index": self.index}


class InvalidQuestion(NormalizationError):
    """A question violates the structural invariants of its kind."""

    code = "invalid_question"

    def __init__(self, index: int, reason: str, raw: Any = None):
        super().__init__(f"question {index}: {reason}", raw)
        self.index = index
        self.reason = reason

    @property
    def field(self) -> str:
        """Name of the offending field (reasons are formatted "field: detail")."""
        return self.reason.split(":", 1)[0]

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "index": self.index, "reason": self.reason}


class TransitionError(str, Enum):
    """Why an attempt transition was refused."""

    INVALID_STATE = "invalid_state"
    OUT_OF_RANGE = "out_of_range"
    RETRY_NOT_ALLOWED = "retry_not_allowed"
    UNKNOWN_QUESTION = "unknown_question"
    ANSWER_MISMATCH = "answer_mismatch"
    INVALID_GRADE = "invalid_grade"
