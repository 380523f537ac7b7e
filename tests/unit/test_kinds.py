"""
Unit tests for question kinds, the alias table and the validator registry.
"""

import pytest

from src.quiz import QuestionKind, resolve_alias, validate_payload
from src.quiz.kinds import KIND_ALIASES, aliases_for, normalize_alias
from src.quiz.registry import VALIDATORS, get_validator


class TestAliasResolution:
    """Test mapping stored kind strings to QuestionKind."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("mcq", QuestionKind.SINGLE_CHOICE),
            ("MCQ", QuestionKind.SINGLE_CHOICE),
            ("multiple_choice", QuestionKind.SINGLE_CHOICE),
            ("Multiple Choice", QuestionKind.SINGLE_CHOICE),
            ("multiple-select", QuestionKind.MULTI_CHOICE),
            ("tof", QuestionKind.TRUE_FALSE),
            ("fill_in_blanks", QuestionKind.FILL_IN_BLANK),
            ("match-the-following", QuestionKind.MATCH_PAIRS),
            ("ordering", QuestionKind.SEQUENCE),
            ("short", QuestionKind.SHORT_ANSWER),
            ("long-answer", QuestionKind.ESSAY),
            ("numerical", QuestionKind.NUMERIC),
            ("pic", QuestionKind.IMAGE_CHOICE),
        ],
    )
    def test_known_aliases(self, raw, expected):
        """Historical spellings should resolve to one canonical kind."""
        assert resolve_alias(raw) is expected

    def test_canonical_values_resolve_to_themselves(self):
        """Every canonical value is also an alias."""
        for kind in QuestionKind:
            assert resolve_alias(kind.value) is kind
            assert resolve_alias(kind) is kind

    def test_unknown_kind(self):
        """Unknown strings should not resolve."""
        assert resolve_alias("freeform-drawing") is None

    def test_non_string_kinds(self):
        """Non-string kinds should not resolve."""
        assert resolve_alias(None) is None
        assert resolve_alias(3) is None

    def test_normalize_alias(self):
        """Separators and case should be folded."""
        assert normalize_alias("  True_Or  False ") == "true-or-false"

    def test_alias_keys_are_normalized(self):
        """Table keys are stored in their normalized form."""
        for alias in KIND_ALIASES:
            assert normalize_alias(alias) == alias

    def test_every_kind_has_aliases(self):
        """Every kind should be reachable from at least its canonical name."""
        for kind in QuestionKind:
            assert kind.value in aliases_for(kind)


class TestValidatorRegistry:
    """Test the kind validator registry."""

    def test_all_kinds_registered(self):
        """Every QuestionKind should have exactly one validator."""
        assert set(VALIDATORS) == set(QuestionKind)

    def test_validator_knows_its_kind(self):
        """Registered instances carry the kind they were registered for."""
        for kind, validator in VALIDATORS.items():
            assert validator.kind is kind

    def test_get_validator_by_alias(self):
        """Should get validator by alias."""
        assert get_validator("mcq") is VALIDATORS[QuestionKind.SINGLE_CHOICE]

    def test_get_validator_invalid_kind(self):
        """Should return None for an unknown kind."""
        assert get_validator("invalid_type") is None


class TestValidatePayload:
    """Test the standalone payload check."""

    def test_valid_payload(self):
        """A valid payload yields no reason."""
        raw = {"question": "2 + 2?", "correctAnswer": 4}
        assert validate_payload("numeric", raw) is None

    def test_invalid_payload_names_field(self):
        """The reason should start with the offending field."""
        raw = {"question": "Pick one", "options": ["only"], "correctAnswer": 0}
        reason = validate_payload("mcq", raw)
        assert reason.startswith("options:")

    def test_unknown_kind(self):
        """Unknown kinds are reported, not raised."""
        assert validate_payload("freeform-drawing", {}).startswith("kind:")

    def test_wire_type_error(self):
        """Pydantic type errors are rendered as "field: message"."""
        raw = {"question": "2 + 2?", "correctAnswer": 4, "points": -1}
        assert validate_payload("numeric", raw).startswith("points:")
