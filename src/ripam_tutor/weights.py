"""Selection weights within a category, driven by overdue-ness and error rate.

Weights only rank questions inside one category. Priority across
categories is fixed by tier order in the selection module.
"""
import random

from ripam_tutor.leitner import DAY_MS, interval_days
from ripam_tutor.models import (
    CONSOLIDATED, CORRECT, LEARNING, MASTERED, UNSEEN, WRONG, LeitnerState,
)

UNSEEN_BASE = 80.0
UNSEEN_JITTER = 20.0
WRONG_BASE = 100.0
LEARNING_BASE = 45.0
CONSOLIDATED_BASE = 15.0
CORRECT_BASE = 10.0
CORRECT_JITTER = 5.0

# Growth per day of neglect for boxes with a zero-day interval
IMMEDIATE_GROWTH_PER_DAY = 0.3
MIN_OVERDUE = 0.2
MAX_OVERDUE = 2.5

DEFAULT_ERROR_RATE = 0.5


def overdue_multiplier(state: LeitnerState | None, now: int) -> float:
    """How far a question is past its review interval.

    Boxes 0-1 are always due: the multiplier starts at 1 and keeps growing
    with time since the last attempt. Other boxes use elapsed/interval,
    clamped to [MIN_OVERDUE, MAX_OVERDUE].
    """
    if state is None:
        return 1.0
    elapsed_days = (now - state.last_attempt_at) / DAY_MS
    interval = interval_days(state.box)
    if interval == 0:
        return max(1.0, 1.0 + elapsed_days * IMMEDIATE_GROWTH_PER_DAY)
    ratio = elapsed_days / interval
    return max(MIN_OVERDUE, min(MAX_OVERDUE, ratio))


def error_rate(state: LeitnerState | None) -> float:
    if state is None or state.total_attempts <= 0:
        return DEFAULT_ERROR_RATE
    return 1.0 - state.total_correct / state.total_attempts


def selection_weight(
    state: LeitnerState | None,
    now: int,
    category: str,
    rng: random.Random | None = None,
) -> float:
    rng = rng or random
    if category == UNSEEN:
        return UNSEEN_BASE + rng.random() * UNSEEN_JITTER
    if category == WRONG:
        return WRONG_BASE * (0.7 + 0.3 * error_rate(state)) * overdue_multiplier(state, now)
    if category == LEARNING:
        return LEARNING_BASE * overdue_multiplier(state, now)
    if category == CONSOLIDATED:
        return CONSOLIDATED_BASE * overdue_multiplier(state, now)
    if category == CORRECT:
        return CORRECT_BASE + rng.random() * CORRECT_JITTER
    if category == MASTERED:
        return 0.0
    raise ValueError(f"Unknown category: {category}")
