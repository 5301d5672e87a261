"""Leitner box scheduling for quiz questions."""
import time
from dataclasses import replace

from ripam_tutor.models import LeitnerState

DAY_MS = 24 * 60 * 60 * 1000

MIN_BOX = 1
MAX_BOX = 7

# Review interval in days for each box
BOX_INTERVALS = {
    0: 0,   # never seen
    1: 0,   # not known, review now
    2: 1,
    3: 3,
    4: 7,
    5: 14,
    6: 30,
    7: 60,
}

# Boxes at or above this fall back to 2 on a wrong answer instead of 1
SOFT_DEMOTION_BOX = 5


def now_ms() -> int:
    return int(time.time() * 1000)


def clamp_box(box: int, lowest: int = 0) -> int:
    return max(lowest, min(MAX_BOX, int(box)))


def interval_days(box: int) -> int:
    return BOX_INTERVALS[clamp_box(box)]


def apply_answer(
    state: LeitnerState | None,
    question_id: str,
    subject: str,
    correct: bool,
    now: int | None = None,
) -> LeitnerState:
    """Return the state that follows one answer to a question.

    Args:
        state: Current state, or None if the question was never answered
        question_id: Question identifier
        subject: Subject the question belongs to
        correct: Whether the answer was correct
        now: Timestamp in ms since epoch (defaults to the current time)

    Returns:
        A new LeitnerState. The input state is never modified.
    """
    if now is None:
        now = now_ms()

    if state is None:
        box = 2 if correct else 1
        return LeitnerState(
            question_id=question_id,
            subject=subject,
            box=box,
            total_attempts=1,
            total_correct=1 if correct else 0,
            consecutive_correct=1 if correct else 0,
            last_attempt_at=now,
            next_review_at=now + interval_days(box) * DAY_MS,
        )

    current = clamp_box(state.box, lowest=MIN_BOX)
    if correct:
        box = min(MAX_BOX, current + 1)
        return replace(
            state,
            box=box,
            total_attempts=state.total_attempts + 1,
            total_correct=state.total_correct + 1,
            consecutive_correct=state.consecutive_correct + 1,
            last_attempt_at=now,
            next_review_at=now + interval_days(box) * DAY_MS,
        )

    box = 2 if current >= SOFT_DEMOTION_BOX else 1
    return replace(
        state,
        box=box,
        total_attempts=state.total_attempts + 1,
        consecutive_correct=0,
        last_attempt_at=now,
        next_review_at=now + interval_days(box) * DAY_MS,
    )


def apply_answers(states: dict, answers: list, now: int | None = None) -> dict:
    """Apply a batch of simulation answers, skipping unanswered ones."""
    if now is None:
        now = now_ms()
    updated = dict(states)
    for answer in answers:
        if answer.is_correct is None:
            continue
        updated[answer.question_id] = apply_answer(
            updated.get(answer.question_id),
            answer.question_id,
            answer.subject,
            answer.is_correct,
            now=now,
        )
    return updated


def is_due(state: LeitnerState | None, now: int | None = None) -> bool:
    if state is None:
        return True
    if now is None:
        now = now_ms()
    return now >= state.next_review_at
