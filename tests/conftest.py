import random

import pytest

from ripam_tutor.models import AnswerOption, QuestionRecord, Subject
from ripam_tutor.repository import InMemoryQuestionRepository


def _question(qid: str, subject: str) -> QuestionRecord:
    return QuestionRecord(
        id=qid,
        subject=subject,
        text=f"Question {qid}?",
        options=(AnswerOption("a", "Right", correct=True), AnswerOption("b", "Wrong")),
    )


def _situational(qid: str) -> QuestionRecord:
    return QuestionRecord(
        id=qid,
        subject="situazionali",
        text=f"Situation {qid}?",
        options=(
            AnswerOption("a", "Best", correct=True, effectiveness="high"),
            AnswerOption("b", "Okay", effectiveness="neutral"),
            AnswerOption("c", "Bad", effectiveness="low"),
        ),
    )


@pytest.fixture
def tmp_db(tmp_path):
    """Provide a temporary SQLite database path for tests."""
    db_path = str(tmp_path / "test_tutor.db")
    return db_path


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def repo():
    """Three subjects: 10 law, 6 logic, 4 situational questions."""
    subjects = [
        Subject("diritto", "Diritto", quota=5),
        Subject("logica", "Logica", quota=3),
        Subject("situazionali", "Situazionali", quota=2, category="situational"),
    ]
    questions = (
        [_question(f"d{i}", "diritto") for i in range(10)]
        + [_question(f"l{i}", "logica") for i in range(6)]
        + [_situational(f"s{i}") for i in range(4)]
    )
    return InMemoryQuestionRepository(subjects, questions)
