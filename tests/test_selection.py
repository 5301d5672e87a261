# tests/test_selection.py
import random
from collections import Counter

import pytest

from ripam_tutor.categorizer import categorize
from ripam_tutor.models import LeitnerState, SelectionSnapshot, Subject
from ripam_tutor.repository import InMemoryQuestionRepository
from ripam_tutor.selection import (
    build_simulation, build_study_session, bucket_questions, category_counts,
)

NOW = 1_700_000_000_000


def leitner(qid, subject, box, streak=0):
    return LeitnerState(
        question_id=qid, subject=subject, box=box, total_attempts=streak + 1,
        total_correct=streak, consecutive_correct=streak,
        last_attempt_at=NOW - 86_400_000, next_review_at=NOW,
    )


def by_subject(questions):
    return Counter(q.subject for q in questions)


def test_bootstrap_simulation_fills_quotas(repo, rng):
    questions = build_simulation(repo, SelectionSnapshot(), now=NOW, rng=rng)
    assert by_subject(questions) == {"diritto": 5, "logica": 3, "situazionali": 2}
    assert len({q.id for q in questions}) == len(questions)


def test_simulation_interleaves_subjects(repo):
    orders = set()
    for seed in range(10):
        questions = build_simulation(repo, SelectionSnapshot(), now=NOW, rng=random.Random(seed))
        orders.add(tuple(q.subject for q in questions))
    assert len(orders) > 1


def test_explicit_quotas(repo, rng):
    questions = build_simulation(repo, SelectionSnapshot(), [("logica", 4)], now=NOW, rng=rng)
    assert by_subject(questions) == {"logica": 4}


def test_quota_larger_than_bank_returns_all(repo, rng):
    questions = build_simulation(repo, SelectionSnapshot(), [("situazionali", 50)], now=NOW, rng=rng)
    assert sorted(q.id for q in questions) == ["s0", "s1", "s2", "s3"]


def test_empty_bank_does_not_abort(repo, rng):
    questions = build_simulation(
        repo, SelectionSnapshot(), [("missing", 5), ("logica", 2)], now=NOW, rng=rng,
    )
    assert by_subject(questions) == {"logica": 2}


def test_negative_quota_selects_nothing(repo, rng):
    snapshot = SelectionSnapshot(completed={"d0"})
    assert build_simulation(repo, snapshot, [("diritto", -3)], now=NOW, rng=rng) == []


def test_mastered_never_in_simulation(repo, rng):
    states = {f"d{i}": leitner(f"d{i}", "diritto", 7, streak=3) for i in range(8)}
    snapshot = SelectionSnapshot(leitner_states=states, completed=set(states))
    for _ in range(20):
        questions = build_simulation(repo, snapshot, [("diritto", 5)], now=NOW, rng=rng)
        assert sorted(q.id for q in questions) == ["d8", "d9"]


def test_unseen_tier_filled_first(repo, rng):
    snapshot = SelectionSnapshot(completed={"d0", "d1", "d2"})
    for _ in range(20):
        questions = build_simulation(repo, snapshot, [("diritto", 5)], now=NOW, rng=rng)
        assert len(questions) == 5
        assert not {q.id for q in questions} & {"d0", "d1", "d2"}


def test_wrong_tier_before_learning(repo, rng):
    states = {
        "l0": leitner("l0", "logica", 1),
        "l1": leitner("l1", "logica", 2, streak=1),
    }
    states.update({f"l{i}": leitner(f"l{i}", "logica", 3, streak=2) for i in range(2, 6)})
    snapshot = SelectionSnapshot(leitner_states=states, completed=set(states), wrong={"l0"})
    for _ in range(20):
        ids = {q.id for q in build_simulation(repo, snapshot, [("logica", 3)], now=NOW, rng=rng)}
        assert len(ids) == 3
        assert {"l0", "l1"} <= ids


def test_quota_per_subject_with_mixed_history(repo, rng):
    states = {
        "d0": leitner("d0", "diritto", 6, streak=2),
        "d1": leitner("d1", "diritto", 5, streak=1),
        "l0": leitner("l0", "logica", 4, streak=2),
    }
    snapshot = SelectionSnapshot(leitner_states=states, completed={"d0", "d1", "l0", "s0"}, wrong={"s0"})
    questions = build_simulation(repo, snapshot, now=NOW, rng=rng)
    assert by_subject(questions) == {"diritto": 5, "logica": 3, "situazionali": 2}
    assert "d0" not in {q.id for q in questions}


def test_bucket_questions(repo):
    snapshot = SelectionSnapshot(
        leitner_states={"l0": leitner("l0", "logica", 3)},
        completed={"l0", "l1"},
        wrong={"l2"},
    )
    buckets = bucket_questions(repo.get_questions_by_subject("logica"), snapshot)
    assert [q.id for q in buckets["learning"]] == ["l0"]
    assert [q.id for q in buckets["correct"]] == ["l1"]
    assert [q.id for q in buckets["unseen"]] == ["l2", "l3", "l4", "l5"]


def _study_snapshot():
    states = {
        "d0": leitner("d0", "diritto", 7, streak=4),   # mastered
        "d1": leitner("d1", "diritto", 1),             # wrong
        "d2": leitner("d2", "diritto", 3, streak=1),   # learning
        "d3": leitner("d3", "diritto", 5, streak=1),   # consolidated
    }
    return SelectionSnapshot(leitner_states=states, completed={"d0", "d1", "d2", "d3", "d4"})


def test_study_all_orders_by_tier_with_mastered_last(repo, rng):
    snapshot = _study_snapshot()
    questions = build_study_session(repo, "diritto", snapshot, "all", rng=rng)
    assert len(questions) == 10
    categories = [
        categorize(snapshot.leitner_states.get(q.id), q.id in snapshot.completed, q.id in snapshot.wrong)
        for q in questions
    ]
    assert categories == ["unseen"] * 5 + ["wrong", "learning", "correct", "consolidated", "mastered"]


def test_study_filters_exclude_mastered(repo, rng):
    snapshot = _study_snapshot()
    assert [q.id for q in build_study_session(repo, "diritto", snapshot, "wrong", rng=rng)] == ["d1"]
    assert [q.id for q in build_study_session(repo, "diritto", snapshot, "review", rng=rng)] == ["d2", "d3"]
    unseen = build_study_session(repo, "diritto", snapshot, "unseen", rng=rng)
    assert sorted(q.id for q in unseen) == ["d5", "d6", "d7", "d8", "d9"]
    for mode in ("unseen", "wrong", "review"):
        assert "d0" not in {q.id for q in build_study_session(repo, "diritto", snapshot, mode, rng=rng)}


def test_study_limit(repo, rng):
    assert len(build_study_session(repo, "diritto", SelectionSnapshot(), "all", limit=4, rng=rng)) == 4
    assert build_study_session(repo, "diritto", SelectionSnapshot(), "all", limit=0, rng=rng) == []
    assert len(build_study_session(repo, "diritto", SelectionSnapshot(), "all", limit=None, rng=rng)) == 10


def test_study_unknown_filter(repo):
    with pytest.raises(ValueError):
        build_study_session(repo, "diritto", SelectionSnapshot(), "hardest")


def test_study_unknown_subject_is_empty(repo):
    assert build_study_session(repo, "missing", SelectionSnapshot()) == []


def test_category_counts(repo):
    counts = category_counts(repo, "diritto", _study_snapshot())
    assert counts == {
        "unseen": 5, "wrong": 1, "learning": 1, "correct": 1, "consolidated": 1, "mastered": 1,
    }


def test_same_seed_same_selection(repo):
    snapshot = SelectionSnapshot(completed={"d0"})
    first = build_simulation(repo, snapshot, now=NOW, rng=random.Random(11))
    second = build_simulation(repo, snapshot, now=NOW, rng=random.Random(11))
    assert [q.id for q in first] == [q.id for q in second]


def test_uses_subject_index_quotas():
    repo = InMemoryQuestionRepository([Subject("x", "X", quota=1)], [])
    assert build_simulation(repo, SelectionSnapshot(), now=NOW) == []
