"""Learner progress: Leitner states, answer log and simulation history."""
import json
import logging
from dataclasses import asdict

from ripam_tutor.db import get_connection
from ripam_tutor.leitner import apply_answer, apply_answers, is_due, now_ms
from ripam_tutor.models import LeitnerState, SelectionSnapshot
from ripam_tutor.scoring import score

logger = logging.getLogger(__name__)

STATE_COLUMNS = (
    "question_id", "subject", "box", "total_attempts", "total_correct",
    "consecutive_correct", "last_attempt_at", "next_review_at",
)


def _row_to_state(row) -> LeitnerState:
    return LeitnerState(**{col: row[col] for col in STATE_COLUMNS})


def _save_state(conn, state: LeitnerState) -> None:
    placeholders = ", ".join("?" for _ in STATE_COLUMNS)
    conn.execute(
        f"INSERT OR REPLACE INTO leitner_states ({', '.join(STATE_COLUMNS)}) VALUES ({placeholders})",
        tuple(getattr(state, col) for col in STATE_COLUMNS),
    )


def _load_state(conn, question_id: str) -> LeitnerState | None:
    row = conn.execute(
        "SELECT * FROM leitner_states WHERE question_id = ?", (question_id,)
    ).fetchone()
    return _row_to_state(row) if row else None


def _log_answer(conn, question_id, subject, answer_given, is_correct, response_time_ms, mode, now) -> None:
    conn.execute(
        """INSERT INTO answers
        (question_id, subject, answer_given, is_correct, response_time_ms, mode, answered_at)
        VALUES (?, ?, ?, ?, ?, ?, ?)""",
        (
            question_id, subject, answer_given,
            None if is_correct is None else int(is_correct),
            response_time_ms, mode, now,
        ),
    )


def load_leitner_states(db_path: str) -> dict:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT * FROM leitner_states").fetchall()
    conn.close()
    return {row["question_id"]: _row_to_state(row) for row in rows}


def save_leitner_state(db_path: str, state: LeitnerState) -> None:
    """Persist a state. The last write for a question wins."""
    conn = get_connection(db_path)
    _save_state(conn, state)
    conn.commit()
    conn.close()


def get_completed_ids(db_path: str) -> set:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT DISTINCT question_id FROM answers WHERE is_correct IS NOT NULL"
    ).fetchall()
    conn.close()
    return {row["question_id"] for row in rows}


def get_wrong_ids(db_path: str) -> set:
    """Questions whose most recent non-skipped answer was incorrect."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT a.question_id, a.is_correct FROM answers a
        WHERE a.is_correct IS NOT NULL AND a.id = (
            SELECT b.id FROM answers b
            WHERE b.question_id = a.question_id AND b.is_correct IS NOT NULL
            ORDER BY b.answered_at DESC, b.id DESC LIMIT 1
        )"""
    ).fetchall()
    conn.close()
    return {row["question_id"] for row in rows if row["is_correct"] == 0}


def load_snapshot(db_path: str) -> SelectionSnapshot:
    return SelectionSnapshot(
        leitner_states=load_leitner_states(db_path),
        completed=get_completed_ids(db_path),
        wrong=get_wrong_ids(db_path),
    )


def record_answer(
    db_path: str,
    question_id: str,
    subject: str,
    answer_given: str | None,
    is_correct: bool | None,
    response_time_ms: int = 0,
    mode: str = "study",
    now: int | None = None,
) -> LeitnerState | None:
    """Log an answer and advance the question's Leitner state.

    Returns the new state, or None when the question was skipped.
    """
    if now is None:
        now = now_ms()
    conn = get_connection(db_path)
    _log_answer(conn, question_id, subject, answer_given, is_correct, response_time_ms, mode, now)
    new_state = None
    if is_correct is not None:
        new_state = apply_answer(_load_state(conn, question_id), question_id, subject, is_correct, now=now)
        _save_state(conn, new_state)
    conn.commit()
    conn.close()
    return new_state


def record_simulation(
    db_path: str,
    answers: list,
    duration_ms: int,
    situational_subjects: frozenset = frozenset(),
    now: int | None = None,
) -> int:
    """Store a finished simulation and apply its answers to the Leitner states."""
    if now is None:
        now = now_ms()
    total = score(answers, situational_subjects)
    conn = get_connection(db_path)
    cur = conn.execute(
        "INSERT INTO simulations (score, duration_ms, answers_json, completed, created_at) VALUES (?, ?, ?, 1, ?)",
        (total, duration_ms, json.dumps([asdict(a) for a in answers]), now),
    )
    simulation_id = cur.lastrowid
    for a in answers:
        _log_answer(conn, a.question_id, a.subject, a.answer_given, a.is_correct, a.response_time_ms, "simulation", now)

    answered = {a.question_id for a in answers if a.is_correct is not None}
    states = {}
    for question_id in answered:
        state = _load_state(conn, question_id)
        if state is not None:
            states[question_id] = state
    updated = apply_answers(states, answers, now=now)
    for question_id in answered:
        _save_state(conn, updated[question_id])
    conn.commit()
    conn.close()
    logger.info("Recorded simulation %d: %.3f points over %d answers", simulation_id, total, len(answers))
    return simulation_id


def get_subject_stats(db_path: str) -> dict:
    """Answer statistics broken down by subject."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT subject, COUNT(*) as total,
            SUM(CASE WHEN is_correct = 1 THEN 1 ELSE 0 END) as correct,
            SUM(CASE WHEN is_correct = 0 THEN 1 ELSE 0 END) as wrong,
            SUM(CASE WHEN is_correct IS NULL THEN 1 ELSE 0 END) as skipped
        FROM answers GROUP BY subject"""
    ).fetchall()
    conn.close()
    stats = {}
    for row in rows:
        answered = row["correct"] + row["wrong"]
        stats[row["subject"]] = {
            "total": row["total"],
            "correct": row["correct"],
            "wrong": row["wrong"],
            "skipped": row["skipped"],
            "percentage": round(row["correct"] / answered * 100) if answered else 0,
        }
    return stats


def get_due_counts(db_path: str, now: int | None = None) -> dict:
    """Number of questions per subject whose review date has passed."""
    if now is None:
        now = now_ms()
    counts = {}
    for state in load_leitner_states(db_path).values():
        if is_due(state, now):
            counts[state.subject] = counts.get(state.subject, 0) + 1
    return counts


def count_simulations(db_path: str) -> int:
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM simulations").fetchone()[0]
    conn.close()
    return count


def get_simulation_history(db_path: str, limit: int = 10) -> list[dict]:
    conn = get_connection(db_path)
    rows = conn.execute(
        "SELECT id, score, duration_ms, completed, created_at FROM simulations ORDER BY created_at DESC, id DESC LIMIT ?",
        (limit,),
    ).fetchall()
    conn.close()
    return [dict(row) for row in rows]


def reset_progress(db_path: str) -> None:
    """Delete all learner data."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM leitner_states")
    conn.execute("DELETE FROM answers")
    conn.execute("DELETE FROM simulations")
    conn.commit()
    conn.close()
    logger.info("Progress reset")
