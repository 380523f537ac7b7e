"""
Unit tests for the answer model and make_answer().
"""

import math

import pytest

from src.quiz import (
    UNATTEMPTED,
    EssayAnswer,
    FillInBlankAnswer,
    ImageChoiceAnswer,
    MatchPairsAnswer,
    MultiChoiceAnswer,
    NumericAnswer,
    Outcome,
    SequenceAnswer,
    ShortAnswer,
    SingleChoiceAnswer,
    TrueFalseAnswer,
    grade,
    make_answer,
    normalize,
)
from src.quiz.answers import ANSWER_TYPES, answer_matches, is_unattempted


class TestUnattempted:
    def test_marker_is_singleton(self):
        from src.quiz.answers import _Unattempted

        assert _Unattempted() is UNATTEMPTED

    def test_marker_is_not_empty_string(self):
        """Unattempted is distinct from an empty answer."""
        assert is_unattempted(UNATTEMPTED)
        assert is_unattempted(None)
        assert not is_unattempted(ShortAnswer(text=""))


class TestAnswerVariants:
    def test_every_kind_has_a_variant(self, sample_quiz):
        for question in sample_quiz.questions:
            assert ANSWER_TYPES[question.kind].kind is question.kind

    def test_answer_matches(self, sample_quiz):
        assert answer_matches(sample_quiz.get("q1"), SingleChoiceAnswer(selected=0))
        assert not answer_matches(sample_quiz.get("q1"), MultiChoiceAnswer(selected={0}))
        assert not answer_matches(sample_quiz.get("q1"), "255.255.255.0")

    def test_image_choice_is_its_own_variant(self, sample_quiz):
        assert answer_matches(sample_quiz.get("q10"), ImageChoiceAnswer(selected=1))
        assert not answer_matches(sample_quiz.get("q10"), SingleChoiceAnswer(selected=1))

    def test_collections_are_frozen(self):
        """Mutable inputs are converted to immutable values."""
        assert MultiChoiceAnswer(selected=[1, 2]).selected == frozenset({1, 2})
        assert FillInBlankAnswer(values=["a"]).values == ("a",)
        assert SequenceAnswer(order=[2, 0, 1]).order == (2, 0, 1)

    def test_match_answer_is_hashable(self):
        a = MatchPairsAnswer(matches={"x": "1"})
        b = MatchPairsAnswer(matches={"x": "1"})
        assert a == b
        assert hash(a) == hash(b)
        with pytest.raises(TypeError):
            a.matches["y"] = "2"


class TestMakeAnswer:
    """Test building answers from loosely typed input."""

    def test_choice(self, sample_quiz):
        assert make_answer(sample_quiz.get("q1"), 2) == SingleChoiceAnswer(selected=2)
        assert make_answer(sample_quiz.get("q10"), "Icon 2") == ImageChoiceAnswer(selected="Icon 2")

    def test_multi_choice_from_single_value(self, sample_quiz):
        assert make_answer(sample_quiz.get("q2"), 0) == MultiChoiceAnswer(selected={0})

    @pytest.mark.parametrize("value, expected", [("true", True), ("N", False), (False, False)])
    def test_true_false(self, sample_quiz, value, expected):
        assert make_answer(sample_quiz.get("q3"), value) == TrueFalseAnswer(value=expected)

    def test_fill_in_single_string(self, sample_quiz):
        assert make_answer(sample_quiz.get("q4"), "80") == FillInBlankAnswer(values=("80",))

    def test_match(self, sample_quiz):
        answer = make_answer(sample_quiz.get("q5"), {"Transport": 4})
        assert answer == MatchPairsAnswer(matches={"Transport": "4"})

    def test_sequence(self, sample_quiz):
        assert make_answer(sample_quiz.get("q6"), [0, 1, 2]) == SequenceAnswer(order=(0, 1, 2))

    def test_text_kinds(self, sample_quiz):
        assert make_answer(sample_quiz.get("q7"), "ARP") == ShortAnswer(text="ARP")
        assert make_answer(sample_quiz.get("q8"), "Because...") == EssayAnswer(text="Because...")

    def test_numeric(self, sample_quiz):
        assert make_answer(sample_quiz.get("q9"), " 10.4 ") == NumericAnswer(value=10.4)

    @pytest.mark.parametrize(
        "question_id, value",
        [
            ("q1", 1.5),
            ("q3", "maybe"),
            ("q5", ["Transport"]),
            ("q6", "SYN"),
            ("q9", "ten"),
            ("q9", True),
            ("q9", math.nan),
        ],
    )
    def test_uncoercible_input(self, sample_quiz, question_id, value):
        """Input that cannot be read as the kind's answer raises ValueError."""
        with pytest.raises(ValueError):
            make_answer(sample_quiz.get(question_id), value)

    @pytest.mark.parametrize("question_id", ["q1", "q4", "q7", "q8", "q9"])
    def test_none_is_unattempted(self, sample_quiz, question_id):
        """Missing input is never turned into the text "None"."""
        assert make_answer(sample_quiz.get(question_id), None) is UNATTEMPTED

    def test_none_never_matches_accepted_text(self):
        q = normalize(
            {"questions": [{"type": "short", "question": "?", "correctAnswer": ["None", "nothing"]}]}
        ).unwrap().questions[0]

        assert grade(q, make_answer(q, None)) == Outcome(False, 0.0)
        assert grade(q, make_answer(q, "none")).correct is True

    def test_fill_in_empty_blank(self, sample_quiz):
        answer = make_answer(sample_quiz.get("q4"), ["80", None, "53"])
        assert answer == FillInBlankAnswer(values=("80", "", "53"))
