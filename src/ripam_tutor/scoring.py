"""Exam scoring for simulations."""
from ripam_tutor.config import PASS_THRESHOLD
from ripam_tutor.models import NEUTRAL, QuestionRecord, SimulationAnswer

POINTS_CORRECT = 0.75
POINTS_WRONG = -0.25
POINTS_SKIPPED = 0.0
# Situational-judgment subjects: no penalty, partial credit for a neutral choice
POINTS_NEUTRAL = 0.375


def evaluate_answer(question: QuestionRecord, option_id: str | None) -> tuple:
    """Return (is_correct, effectiveness) for a chosen option, or (None, None) if skipped."""
    if option_id is None:
        return None, None
    chosen = question.option(option_id)
    best = question.correct_option()
    is_correct = best is not None and best.id == option_id
    return is_correct, chosen.effectiveness if chosen else None


def answer_points(answer: SimulationAnswer, situational_subjects: frozenset = frozenset()) -> float:
    if answer.is_correct is None:
        return POINTS_SKIPPED
    if answer.is_correct:
        return POINTS_CORRECT
    if answer.subject in situational_subjects:
        return POINTS_NEUTRAL if answer.effectiveness == NEUTRAL else 0.0
    return POINTS_WRONG


def score(answers: list, situational_subjects: frozenset = frozenset()) -> float:
    """Total exam points, never below zero."""
    total = sum(answer_points(a, situational_subjects) for a in answers)
    return max(0.0, total)


def summarize(answers: list, situational_subjects: frozenset = frozenset()) -> dict:
    """Score plus answer counts, pass flag and per-subject breakdown."""
    total = score(answers, situational_subjects)
    by_subject = {}
    for a in answers:
        stats = by_subject.setdefault(a.subject, {"correct": 0, "wrong": 0, "skipped": 0, "total": 0})
        stats["total"] += 1
        if a.is_correct is None:
            stats["skipped"] += 1
        elif a.is_correct:
            stats["correct"] += 1
        else:
            stats["wrong"] += 1
    return {
        "score": total,
        "correct": sum(1 for a in answers if a.is_correct is True),
        "wrong": sum(1 for a in answers if a.is_correct is False),
        "skipped": sum(1 for a in answers if a.is_correct is None),
        "passed": total >= PASS_THRESHOLD,
        "by_subject": by_subject,
    }
