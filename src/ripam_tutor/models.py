"""Data classes for the quiz domain model."""
from dataclasses import dataclass, field
from typing import Optional

# Selection categories, in tier order
UNSEEN = "unseen"
WRONG = "wrong"
LEARNING = "learning"
CORRECT = "correct"
CONSOLIDATED = "consolidated"
MASTERED = "mastered"

CATEGORIES = (UNSEEN, WRONG, LEARNING, CORRECT, CONSOLIDATED, MASTERED)

# Effectiveness levels for situational-judgment options
HIGH = "high"
NEUTRAL = "neutral"
LOW = "low"

EFFECTIVENESS_LEVELS = (HIGH, NEUTRAL, LOW)

SITUATIONAL = "situational"


@dataclass(frozen=True)
class AnswerOption:
    id: str
    text: str
    correct: bool = False
    effectiveness: Optional[str] = None


@dataclass(frozen=True)
class QuestionRecord:
    id: str
    subject: str
    text: str
    options: tuple = ()
    explanation: str = ""

    def correct_option(self) -> AnswerOption | None:
        for option in self.options:
            if option.correct:
                return option
        return None

    def option(self, option_id: str) -> AnswerOption | None:
        for option in self.options:
            if option.id == option_id:
                return option
        return None


@dataclass(frozen=True)
class Subject:
    id: str
    name: str
    quota: int
    category: str = ""
    file: str = ""

    @property
    def is_situational(self) -> bool:
        return self.category == SITUATIONAL


@dataclass(frozen=True)
class LeitnerState:
    question_id: str
    subject: str
    box: int
    total_attempts: int = 0
    total_correct: int = 0
    consecutive_correct: int = 0
    last_attempt_at: int = 0  # ms since epoch
    next_review_at: int = 0


@dataclass(frozen=True)
class SimulationAnswer:
    question_id: str
    subject: str
    answer_given: Optional[str] = None
    is_correct: Optional[bool] = None
    effectiveness: Optional[str] = None
    response_time_ms: int = 0

    @property
    def skipped(self) -> bool:
        return self.is_correct is None


@dataclass
class SelectionSnapshot:
    """Progress views handed to the selection functions."""
    leitner_states: dict = field(default_factory=dict)
    completed: set = field(default_factory=set)
    wrong: set = field(default_factory=set)

    @property
    def has_history(self) -> bool:
        return bool(self.leitner_states or self.completed or self.wrong)
