"""
Quiz engine for LOB quiz content.

This module provides:
- normalize / normalize_content: raw LOB JSON -> canonical Quiz
- grade / grade_all: per-kind, deterministic grading
- QuizAttempt: the attempt state machine (start, answer, navigate, complete, retry)
- quiz_from_lob: the LOB record boundary

Question Kinds:
- single-choice, multi-choice, true-false, image-choice
- fill-in-blank, match-pairs, sequence
- short-answer, essay (human graded), numeric
"""

from .answers import (
    ANSWER_TYPES,
    UNATTEMPTED,
    Answer,
    EssayAnswer,
    FillInBlankAnswer,
    ImageChoiceAnswer,
    MatchPairsAnswer,
    MultiChoiceAnswer,
    NumericAnswer,
    SequenceAnswer,
    ShortAnswer,
    SingleChoiceAnswer,
    TrueFalseAnswer,
    make_answer,
)
from .attempt import (
    AttemptReport,
    AttemptSnapshot,
    AttemptStatus,
    QuizAttempt,
    TransitionResult,
)
from .errors import (
    InvalidJson,
    InvalidQuestion,
    InvalidQuiz,
    NormalizationError,
    TransitionError,
    UnknownKind,
    UnrecognizedShape,
)
from .grading import Outcome, grade, grade_all
from .kinds import Difficulty, QuestionKind, resolve_alias
from .lob import LobRecord, LobType, quiz_from_lob
from .models import Question, Quiz, QuizSettings
from .normalizer import NormalizationResult, normalize, normalize_content, to_raw
from .registry import validate_payload

__all__ = [
    # Kinds
    "QuestionKind",
    "Difficulty",
    "resolve_alias",
    # Content
    "Question",
    "Quiz",
    "QuizSettings",
    "NormalizationResult",
    "normalize",
    "normalize_content",
    "to_raw",
    "validate_payload",
    # Answers & grading
    "Answer",
    "ANSWER_TYPES",
    "UNATTEMPTED",
    "SingleChoiceAnswer",
    "ImageChoiceAnswer",
    "MultiChoiceAnswer",
    "TrueFalseAnswer",
    "FillInBlankAnswer",
    "MatchPairsAnswer",
    "SequenceAnswer",
    "ShortAnswer",
    "EssayAnswer",
    "NumericAnswer",
    "make_answer",
    "Outcome",
    "grade",
    "grade_all",
    # Attempts
    "QuizAttempt",
    "AttemptStatus",
    "AttemptReport",
    "AttemptSnapshot",
    "TransitionResult",
    # LOB boundary
    "LobRecord",
    "LobType",
    "quiz_from_lob",
    # Errors
    "NormalizationError",
    "InvalidJson",
    "InvalidQuiz",
    "UnrecognizedShape",
    "UnknownKind",
    "InvalidQuestion",
    "TransitionError",
]
