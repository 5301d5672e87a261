# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random
from collections import Counter

from ripam_tutor.db import init_db
from ripam_tutor.leitner import DAY_MS
from ripam_tutor.models import SimulationAnswer
from ripam_tutor.progress import load_snapshot, record_answer, record_simulation
from ripam_tutor.scoring import evaluate_answer, summarize
from ripam_tutor.selection import build_simulation, build_study_session

NOW = 1_700_000_000_000


def test_simulation_then_study_workflow(tmp_db, repo):
    """Simulate a learner's first exam and the study sessions that follow."""
    init_db(tmp_db)
    rng = random.Random(4)

    # First simulation: nothing known yet
    questions = build_simulation(repo, load_snapshot(tmp_db), now=NOW, rng=rng)
    assert Counter(q.subject for q in questions) == {"diritto": 5, "logica": 3, "situazionali": 2}

    # Get every law question wrong, everything else right
    answers = []
    for q in questions:
        choice = "b" if q.subject == "diritto" else "a"
        is_correct, effectiveness = evaluate_answer(q, choice)
        answers.append(SimulationAnswer(q.id, q.subject, choice, is_correct, effectiveness))
    situational = repo.situational_subject_ids()
    record_simulation(tmp_db, answers, 30 * 60 * 1000, situational, now=NOW)
    result = summarize(answers, situational)
    assert result["score"] == 5 * 0.75 - 5 * 0.25

    # Wrong law questions lead a "wrong" study session
    snapshot = load_snapshot(tmp_db)
    wrong_ids = {a.question_id for a in answers if a.subject == "diritto"}
    session = build_study_session(repo, "diritto", snapshot, "wrong", rng=rng)
    assert {q.id for q in session} == wrong_ids

    # Two correct answers a day later move them up to "learning"
    for q in session:
        record_answer(tmp_db, q.id, q.subject, "a", True, now=NOW + DAY_MS)
        record_answer(tmp_db, q.id, q.subject, "a", True, now=NOW + DAY_MS + 1)
    snapshot = load_snapshot(tmp_db)
    assert build_study_session(repo, "diritto", snapshot, "wrong", rng=rng) == []
    assert not snapshot.wrong
    assert {q.id for q in build_study_session(repo, "diritto", snapshot, "review", rng=rng)} == wrong_ids

    # Second simulation prefers the law questions never seen
    second = build_simulation(repo, snapshot, [("diritto", 5)], now=NOW + 2 * DAY_MS, rng=rng)
    assert {q.id for q in second}.isdisjoint(wrong_ids)
