"""
LOB (learning object) boundary.

Quiz content is stored as JSON text inside a LOB record
(``lobData.content``). Only some LOB types carry quizzes; the rest hold
reading material, videos or documents and are rejected before parsing.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from loguru import logger
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from config import get_settings

from .errors import UnrecognizedShape
from .normalizer import NormalizationResult, normalize_content


class LobType(str, Enum):
    CONTENT = "CONTENT"
    EXERCISE = "EXERCISE"
    ASSESSMENT = "ASSESSMENT"
    VIDEO = "VIDEO"
    DOCUMENT = "DOCUMENT"


class LobRecord(BaseModel):
    """A stored LOB as returned by the content API."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    lob_type: str = Field(validation_alias=AliasChoices("lob_type", "lobType"))
    content: str | None = None
    id: str | None = None
    topic_id: str | None = Field(default=None, validation_alias=AliasChoices("topic_id", "topicId"))
    topic_title: str | None = Field(
        default=None, validation_alias=AliasChoices("topic_title", "topicTitle")
    )
    quiz_seq_num: str | None = Field(
        default=None, validation_alias=AliasChoices("quiz_seq_num", "quizSeqNum")
    )

    @field_validator("lob_type", mode="before")
    @classmethod
    def upper_type(cls, v):
        if isinstance(v, LobType):
            return v.value
        return str(v).strip().upper() if v is not None else v

    @classmethod
    def from_api(cls, data: dict) -> "LobRecord":
        """Build from an API payload where content sits under ``lobData.content``."""
        data = dict(data)
        lob_data = data.get("lobData") or data.get("lob_data")
        if "content" not in data and isinstance(lob_data, dict):
            data["content"] = lob_data.get("content")
        return cls.model_validate(data)


def quiz_from_lob(lob: LobRecord, allowed_types: Iterable[str] | None = None) -> NormalizationResult:
    """
    Normalize the quiz carried by `lob`.

    LOB types outside `allowed_types` (default: the ``quiz_lob_types``
    setting) yield UnrecognizedShape without looking at the content.
    """
    if allowed_types is None:
        allowed_types = get_settings().get_quiz_lob_types()
    allowed = {str(getattr(t, "value", t)).upper() for t in allowed_types}

    if lob.lob_type not in allowed:
        logger.debug(f"LOB {lob.id or '<new>'} of type {lob.lob_type} carries no quiz")
        return NormalizationResult(
            error=UnrecognizedShape(
                f"LOB type {lob.lob_type} does not carry quiz content "
                f"(expected one of: {', '.join(sorted(allowed))})",
                raw=lob.content,
            )
        )
    return normalize_content(lob.content)
