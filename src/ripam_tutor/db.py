"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

from ripam_tutor.config import DB_PATH

DEFAULT_DB_PATH = DB_PATH

SCHEMA = """
CREATE TABLE IF NOT EXISTS leitner_states (
    question_id TEXT PRIMARY KEY,
    subject TEXT NOT NULL,
    box INTEGER NOT NULL,
    total_attempts INTEGER NOT NULL DEFAULT 0,
    total_correct INTEGER NOT NULL DEFAULT 0,
    consecutive_correct INTEGER NOT NULL DEFAULT 0,
    last_attempt_at INTEGER NOT NULL,
    next_review_at INTEGER NOT NULL
);

CREATE TABLE IF NOT EXISTS answers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    question_id TEXT NOT NULL,
    subject TEXT NOT NULL,
    answer_given TEXT,
    is_correct INTEGER,
    response_time_ms INTEGER DEFAULT 0,
    mode TEXT DEFAULT 'study',
    answered_at INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_answers_question ON answers(question_id, answered_at);

CREATE TABLE IF NOT EXISTS simulations (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    score REAL NOT NULL,
    duration_ms INTEGER NOT NULL,
    answers_json TEXT NOT NULL,
    completed INTEGER DEFAULT 1,
    created_at INTEGER NOT NULL
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
