"""
Unit tests for the per-kind payload validators.

Each kind is exercised through normalize() so the tests read the way
content is actually stored.
"""

import math

import pytest

from src.quiz import InvalidQuestion, normalize
from src.quiz.models import (
    ChoicePayload,
    EssayPayload,
    MatchPairsPayload,
    MultiChoicePayload,
    NumericPayload,
    SequencePayload,
    ShortAnswerPayload,
)
from src.quiz.validators import resolve_option


def build(question: dict):
    """Normalize a single question and return (payload, error)."""
    question = {"question": "Prompt?", **question}
    result = normalize({"questions": [question]})
    if result.ok:
        return result.quiz.questions[0].payload, None
    return None, result.error


def reason(question: dict) -> str:
    payload, error = build(question)
    assert payload is None, f"expected a failure, got {payload}"
    assert isinstance(error, InvalidQuestion)
    return error.reason


class TestResolveOption:
    """Test option reference resolution."""

    OPTIONS = ("Paris", "London", "Berlin")

    def test_index(self):
        assert resolve_option(1, self.OPTIONS) == 1

    def test_index_out_of_range(self):
        assert resolve_option(3, self.OPTIONS) is None
        assert resolve_option(-1, self.OPTIONS) is None

    def test_text(self):
        assert resolve_option(" Berlin ", self.OPTIONS) == 2

    def test_label(self):
        assert resolve_option("b", self.OPTIONS, labels=("a", "b", "c")) == 1

    def test_letter(self):
        assert resolve_option("C", self.OPTIONS) == 2

    def test_letters_disabled(self):
        """Submitted answers never resolve by letter."""
        assert resolve_option("C", self.OPTIONS, letters=False) is None

    def test_bool_is_not_an_index(self):
        assert resolve_option(True, self.OPTIONS) is None


class TestChoiceValidators:
    """Test single-choice, image-choice and multi-choice."""

    def test_single_choice_by_text(self):
        payload, _ = build({"type": "mcq", "options": ["a", "b"], "correctAnswer": "b"})
        assert payload == ChoicePayload(options=("a", "b"), correct=1)

    def test_single_choice_one_element_list(self):
        payload, _ = build({"type": "mcq", "options": ["a", "b"], "correctAnswer": [0]})
        assert payload.correct == 0

    def test_single_choice_option_objects(self):
        """Options may be {text, label} objects."""
        options = [{"text": "Yes", "label": "Y"}, {"text": "No", "label": "N"}]
        payload, _ = build({"type": "mcq", "options": options, "correctAnswer": "N"})
        assert payload == ChoicePayload(options=("Yes", "No"), correct=1)

    @pytest.mark.parametrize(
        "question, field",
        [
            ({"type": "mcq", "options": ["a"], "correctAnswer": 0}, "options"),
            ({"type": "mcq", "options": ["a", "a"], "correctAnswer": 0}, "options"),
            ({"type": "mcq", "correctAnswer": 0}, "options"),
            ({"type": "mcq", "options": ["a", "b"]}, "correct"),
            ({"type": "mcq", "options": ["a", "b"], "correctAnswer": [0, 1]}, "correct"),
            ({"type": "mcq", "options": ["a", "b"], "correctAnswer": 5}, "correct"),
            ({"type": "mcq", "options": ["a", ""], "correctAnswer": 0}, "options"),
        ],
    )
    def test_single_choice_invalid(self, question, field):
        assert reason(question).startswith(f"{field}:")

    def test_image_choice_requires_image(self):
        question = {"type": "image-choice", "options": ["a", "b"], "correctAnswer": 0}
        assert reason(question).startswith("image_ref:")

    def test_multi_choice(self):
        payload, _ = build(
            {"type": "mcqm", "options": ["a", "b", "c"], "correctAnswer": ["a", 2]}
        )
        assert payload == MultiChoicePayload(options=("a", "b", "c"), correct=frozenset({0, 2}))

    def test_multi_choice_needs_an_answer(self):
        question = {"type": "mcqm", "options": ["a", "b"], "correctAnswer": []}
        assert reason(question).startswith("correct:")


class TestTrueFalseValidator:
    @pytest.mark.parametrize("value, expected", [(True, True), ("F", False), ("yes", True)])
    def test_valid(self, value, expected):
        payload, _ = build({"type": "tf", "correctAnswer": value})
        assert payload.correct is expected

    @pytest.mark.parametrize("value", [None, "maybe", 1])
    def test_invalid(self, value):
        assert reason({"type": "tf", "correctAnswer": value}).startswith("correct:")


class TestFillInBlankValidator:
    def test_blanks_and_answers(self):
        payload, _ = build({"type": "fitb", "blanks": ["first", "second"], "correctAnswer": ["a", "b"]})
        assert payload.blanks == ("first", "second")
        assert payload.correct == ("a", "b")

    def test_answers_only(self):
        """A bare answer list defines the blanks too."""
        payload, _ = build({"type": "fitb", "correctAnswer": "Paris"})
        assert payload.correct == ("Paris",)

    def test_length_mismatch(self):
        question = {"type": "fitb", "blanks": ["a", "b"], "correctAnswer": ["x"]}
        assert reason(question).startswith("correct:")

    def test_missing(self):
        assert reason({"type": "fitb"}).startswith("blanks:")


class TestMatchPairsValidator:
    def test_pair_shapes(self):
        """left/right, term/definition and 2-lists are accepted."""
        pairs = [
            {"left": "a", "right": "1"},
            {"term": "b", "definition": "2"},
            ["c", "3"],
        ]
        payload, _ = build({"type": "matching", "pairs": pairs})
        assert payload == MatchPairsPayload(pairs=(("a", "1"), ("b", "2"), ("c", "3")))
        assert payload.lefts == ("a", "b", "c")
        assert payload.rights == ("1", "2", "3")

    def test_mapping_pairs(self):
        payload, _ = build({"type": "matching", "pairs": {"a": "1", "b": "2"}})
        assert payload.pairs == (("a", "1"), ("b", "2"))

    @pytest.mark.parametrize(
        "pairs",
        [
            [{"left": "a", "right": "1"}],
            [{"left": "a", "right": "1"}, {"left": "a", "right": "2"}],
            [{"left": "a", "right": "1"}, {"left": "b", "right": "1"}],
            [{"left": "a"}, {"left": "b", "right": "2"}],
            ["a", "b"],
        ],
    )
    def test_invalid(self, pairs):
        assert reason({"type": "matching", "pairs": pairs}).startswith("pairs:")


class TestSequenceValidator:
    def test_order_by_text(self):
        payload, _ = build(
            {"type": "sequence", "items": ["b", "a", "c"], "correctAnswer": ["a", "b", "c"]}
        )
        assert payload == SequencePayload(items=("b", "a", "c"), correct=(1, 0, 2))
        assert payload.expected_order == ("a", "b", "c")

    def test_not_a_permutation(self):
        question = {"type": "sequence", "items": ["a", "b", "c"], "correctAnswer": [0, 0, 1]}
        assert reason(question).startswith("correct:")

    def test_too_few_items(self):
        assert reason({"type": "sequence", "items": ["a"]}).startswith("items:")


class TestTextValidators:
    def test_short_answer_dedupes(self):
        payload, _ = build({"type": "short", "correctAnswer": ["ARP", "ARP", " "]})
        assert payload == ShortAnswerPayload(accepted=("ARP",))

    def test_short_answer_requires_answer(self):
        assert reason({"type": "short", "correctAnswer": ""}).startswith("correct:")

    def test_essay(self):
        payload, _ = build({"type": "essay"})
        assert payload == EssayPayload()

    def test_essay_rejects_correct_answer(self):
        assert reason({"type": "essay", "correctAnswer": "anything"}).startswith("correct:")

    @pytest.mark.parametrize("stored", ["", "   "])
    def test_essay_blank_correct_is_absent(self, stored):
        """Blank strings count as absent, as for every other field."""
        payload, _ = build({"type": "essay", "correctAnswer": stored})
        assert payload == EssayPayload()


class TestNumericValidator:
    def test_numeric_string(self):
        payload, _ = build({"type": "numeric", "correctAnswer": " 10 ", "tolerance": 0.5})
        assert payload == NumericPayload(correct=10.0, tolerance=0.5)

    def test_default_tolerance(self):
        payload, _ = build({"type": "numeric", "correctAnswer": 3})
        assert payload.tolerance == 0.0

    @pytest.mark.parametrize("value", [None, "ten", True, math.inf])
    def test_invalid(self, value):
        assert reason({"type": "numeric", "correctAnswer": value}).startswith("correct:")

    def test_negative_tolerance(self):
        payload, error = build({"type": "numeric", "correctAnswer": 3, "tolerance": -1})
        assert payload is None
        assert error.field == "tolerance"
