"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import pytest
import sys
from datetime import datetime, timedelta
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from config import get_settings  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop cached settings so monkeypatched env vars take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


class FakeClock:
    """Manually advanced clock for attempt timestamps."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 9, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def legacy_mcq():
    """Provide a legacy single-question LOB payload."""
    return {
        "type": "mcq",
        "question_text": "What is the capital of France?",
        "options": [{"A": "London"}, {"B": "Paris"}, {"C": "Berlin"}],
        "correct_answer": "B",
        "points": 0,
    }


@pytest.fixture
def sample_quiz_raw():
    """Provide a quiz envelope with one question of every kind."""
    return {
        "title": "Networking Basics",
        "description": "Layer 2-4 fundamentals",
        "timeLimit": 10,
        "passingScore": 60,
        "settings": {"allowRetry": True, "showCorrectAnswers": True},
        "questions": [
            {
                "id": "q1",
                "type": "mcq",
                "question": "What is the default subnet mask for a Class C network?",
                "options": ["255.0.0.0", "255.255.0.0", "255.255.255.0"],
                "correctAnswer": 2,
                "explanation": "Class C uses the first three octets for the network.",
            },
            {
                "id": "q2",
                "type": "multiple-select",
                "question": "Which ranges are private?",
                "options": ["10.0.0.0/8", "8.8.8.0/24", "192.168.0.0/16"],
                "correctAnswer": [0, 2],
            },
            {
                "id": "q3",
                "type": "true_false",
                "question": "TCP is connectionless.",
                "correctAnswer": False,
            },
            {
                "id": "q4",
                "type": "fill-in-the-blank",
                "question": "Name the well-known ports.",
                "fillInBlanks": {
                    "text": "HTTP uses ___, HTTPS uses ___ and DNS uses ___.",
                    "blanks": ["80", "443", "53"],
                },
                "points": 3,
            },
            {
                "id": "q5",
                "type": "matching",
                "question": "Match each OSI layer to its number.",
                "pairs": [
                    {"left": "Transport", "right": "4"},
                    {"left": "Network", "right": "3"},
                ],
            },
            {
                "id": "q6",
                "type": "sequence",
                "question": "Order the TCP handshake.",
                "sequence": ["SYN", "SYN-ACK", "ACK"],
            },
            {
                "id": "q7",
                "type": "short",
                "question": "Which protocol resolves IP addresses to MAC addresses?",
                "correctAnswer": ["ARP", "Address Resolution Protocol"],
            },
            {
                "id": "q8",
                "type": "essay",
                "question": "Explain why subnetting reduces broadcast traffic.",
                "points": 5,
            },
            {
                "id": "q9",
                "type": "numeric",
                "question": "How many usable hosts does a /30 provide?",
                "correctAnswer": 2,
            },
            {
                "id": "q10",
                "type": "image-choice",
                "question": "Which icon is the router?",
                "image": "img/topology.png",
                "options": ["Icon 1", "Icon 2"],
                "correctAnswer": "Icon 2",
            },
        ],
    }


@pytest.fixture
def sample_quiz(sample_quiz_raw):
    """Provide the normalized sample quiz."""
    from src.quiz import normalize

    return normalize(sample_quiz_raw).unwrap()
