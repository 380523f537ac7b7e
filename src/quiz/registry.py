"""
Question kind registry.

Each QuestionKind has exactly one validator, registered with the
``@register`` decorator in ``src.quiz.validators``. A validator turns the
kind-specific part of a RawQuestion into a canonical payload, or raises
PayloadError naming the offending field.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import ValidationError

from .kinds import QuestionKind, resolve_alias
from .raw import RawQuestion

if TYPE_CHECKING:
    from .models import Payload


class PayloadError(ValueError):
    """A kind-specific structural invariant does not hold."""

    def __init__(self, field: str, detail: str):
        super().__init__(f"{field}: {detail}")
        self.field = field
        self.detail = detail

    @property
    def reason(self) -> str:
        return f"{self.field}: {self.detail}"


class KindValidator(Protocol):
    """Protocol for per-kind payload validators."""

    kind: QuestionKind

    def build(self, raw: RawQuestion) -> "Payload":
        """Return the canonical payload or raise PayloadError."""
        ...


# Validator registry - populated by @register decorator
VALIDATORS: dict[QuestionKind, KindValidator] = {}


def register(kind: QuestionKind):
    """Decorator to register a kind validator."""
    def decorator(cls):
        instance = cls()
        instance.kind = kind
        VALIDATORS[kind] = instance
        return cls
    return decorator


def get_validator(kind: str | QuestionKind) -> KindValidator | None:
    """Get the validator for a kind or any of its aliases."""
    resolved = resolve_alias(kind)
    if resolved is None:
        return None
    return VALIDATORS.get(resolved)


def build_payload(kind: QuestionKind, raw: RawQuestion) -> "Payload":
    """Build the canonical payload for `kind`; raises PayloadError."""
    validator = VALIDATORS.get(kind)
    if validator is None:
        raise KeyError(f"No validator registered for kind: {kind.value}")
    return validator.build(raw)


def validate_payload(kind: str | QuestionKind, raw: RawQuestion | Mapping[str, Any]) -> str | None:
    """
    Check a raw question against the invariants of `kind`.

    Returns None when valid, otherwise the reason ("field: detail").
    """
    validator = get_validator(kind)
    if validator is None:
        return f"kind: unknown question kind {kind!r}"
    if not isinstance(raw, RawQuestion):
        try:
            raw = RawQuestion.model_validate(raw)
        except ValidationError as e:
            return describe_validation_error(e)
    try:
        validator.build(raw)
    except PayloadError as e:
        return e.reason
    return None


def describe_validation_error(error: ValidationError) -> str:
    """Render the first Pydantic error as "field: message"."""
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first.get("loc", ())) or "value"
    return f"{loc}: {first.get('msg', 'invalid value')}"


def check_registry_complete() -> None:
    """Fail fast if any QuestionKind lacks a validator."""
    missing = [kind.value for kind in QuestionKind if kind not in VALIDATORS]
    if missing:
        raise RuntimeError(f"Question kinds without a validator: {missing}")
