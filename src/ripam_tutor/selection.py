"""Question selection for exam simulations and study sessions."""
import logging
import random

from ripam_tutor.categorizer import categorize
from ripam_tutor.leitner import now_ms
from ripam_tutor.models import (
    CATEGORIES, CONSOLIDATED, CORRECT, LEARNING, UNSEEN, WRONG,
    QuestionRecord, SelectionSnapshot,
)
from ripam_tutor.repository import QuestionRepository
from ripam_tutor.sampler import shuffled, weighted_sample
from ripam_tutor.weights import selection_weight

logger = logging.getLogger(__name__)

# Order in which a simulation quota is filled. Mastered is never drawn.
SIMULATION_TIERS = (UNSEEN, WRONG, LEARNING, CORRECT, CONSOLIDATED)

# Categories eligible under each study filter, in presentation order
STUDY_FILTERS = {
    "all": CATEGORIES,
    "unseen": (UNSEEN,),
    "wrong": (WRONG,),
    "review": (LEARNING, CONSOLIDATED),
}


def bucket_questions(questions: list, snapshot: SelectionSnapshot) -> dict:
    """Group questions by category."""
    buckets = {category: [] for category in CATEGORIES}
    for question in questions:
        category = categorize(
            snapshot.leitner_states.get(question.id),
            question.id in snapshot.completed,
            question.id in snapshot.wrong,
        )
        buckets[category].append(question)
    return buckets


def fill_quota(
    buckets: dict,
    quota: int,
    snapshot: SelectionSnapshot,
    now: int,
    rng: random.Random | None = None,
) -> list:
    """Take questions tier by tier until the quota is met.

    A bucket that fits in the remaining quota is taken whole; otherwise the
    remainder is weighted-sampled from it and filling stops.
    """
    selected = []
    for category in SIMULATION_TIERS:
        remaining = quota - len(selected)
        if remaining <= 0:
            break
        bucket = buckets.get(category, [])
        if not bucket:
            continue
        if len(bucket) <= remaining:
            selected.extend(bucket)
            continue
        weighted = [
            (q, selection_weight(snapshot.leitner_states.get(q.id), now, category, rng))
            for q in bucket
        ]
        selected.extend(weighted_sample(weighted, remaining, rng))
        break
    return selected


def build_simulation(
    repository: QuestionRepository,
    snapshot: SelectionSnapshot,
    subject_quotas: list | None = None,
    now: int | None = None,
    rng: random.Random | None = None,
) -> list[QuestionRecord]:
    """Build an exam simulation following per-subject quotas.

    Args:
        repository: Source of question banks
        snapshot: Leitner states plus completed/wrong question ids
        subject_quotas: (subject_id, count) pairs; defaults to the exam index
        now: Timestamp in ms since epoch
        rng: Random source (seed it for reproducible selections)

    Returns:
        Questions from every subject, shuffled together.
    """
    rng = rng or random.Random()
    if now is None:
        now = now_ms()
    if subject_quotas is None:
        subject_quotas = [(s.id, s.quota) for s in repository.get_subject_index()]

    selection = []
    for subject_id, quota in subject_quotas:
        quota = max(0, int(quota))
        questions = repository.get_questions_by_subject(subject_id)
        if not questions:
            logger.warning("Subject %s has no questions, skipping", subject_id)
            continue
        if not snapshot.has_history:
            chosen = shuffled(questions, rng)[:quota]
        else:
            buckets = bucket_questions(questions, snapshot)
            chosen = fill_quota(buckets, quota, snapshot, now, rng)
            logger.debug(
                "%s: %s -> %d selected", subject_id,
                {c: len(b) for c, b in buckets.items()}, len(chosen),
            )
        if len(chosen) < quota:
            logger.info("Subject %s: only %d of %d questions available", subject_id, len(chosen), quota)
        selection.extend(chosen)

    return shuffled(selection, rng)


def build_study_session(
    repository: QuestionRepository,
    subject_id: str,
    snapshot: SelectionSnapshot,
    filter_mode: str = "all",
    limit: int | None = None,
    rng: random.Random | None = None,
) -> list[QuestionRecord]:
    """Order a subject's questions for practice.

    Eligible categories are presented in tier order, shuffled within each
    tier. Under "all" mastered questions are kept and come last.
    """
    if filter_mode not in STUDY_FILTERS:
        raise ValueError(f"Unknown filter mode: {filter_mode}")
    rng = rng or random.Random()

    buckets = bucket_questions(repository.get_questions_by_subject(subject_id), snapshot)
    ordered = []
    for category in STUDY_FILTERS[filter_mode]:
        ordered.extend(shuffled(buckets[category], rng))

    if limit is not None:
        ordered = ordered[:max(0, limit)]
    return ordered


def category_counts(repository: QuestionRepository, subject_id: str, snapshot: SelectionSnapshot) -> dict:
    buckets = bucket_questions(repository.get_questions_by_subject(subject_id), snapshot)
    return {category: len(questions) for category, questions in buckets.items()}
