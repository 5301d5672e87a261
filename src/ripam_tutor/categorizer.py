"""Map a question's Leitner state and answer history to a selection category."""
from ripam_tutor.leitner import MIN_BOX, clamp_box
from ripam_tutor.models import (
    CONSOLIDATED, CORRECT, LEARNING, MASTERED, UNSEEN, WRONG, LeitnerState,
)

MASTERED_BOX = 6
MASTERED_STREAK = 2


def categorize(state: LeitnerState | None, is_completed: bool, is_wrong: bool) -> str:
    """Return the category for a question. First matching rule wins.

    The completed/wrong flags come from the answer history and can disagree
    with the Leitner box (they are synced separately); both are consulted.
    """
    box = clamp_box(state.box, lowest=MIN_BOX) if state is not None else 0

    if state is not None and box >= MASTERED_BOX and state.consecutive_correct >= MASTERED_STREAK:
        return MASTERED
    if not is_completed and state is None:
        return UNSEEN
    if is_wrong or (state is not None and 1 <= box <= 2):
        return WRONG
    if state is not None and 3 <= box <= 4:
        return LEARNING
    if state is not None and box >= 5:
        return CONSOLIDATED
    if is_completed and not is_wrong:
        return CORRECT
    return UNSEEN
