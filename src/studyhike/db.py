"""Database initialization and connection management."""
import sqlite3
from pathlib import Path

SCHEMA = """
CREATE TABLE IF NOT EXISTS students (
    id TEXT PRIMARY KEY,
    full_name TEXT,
    exam TEXT,
    study_streak INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS study_plans (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id TEXT NOT NULL REFERENCES students(id),
    subject TEXT NOT NULL,
    topic TEXT NOT NULL,
    day_of_week TEXT NOT NULL,
    duration_hours REAL NOT NULL,
    is_completed INTEGER DEFAULT 0,
    start_time TEXT,
    end_time TEXT,
    week_start TEXT,
    added_by TEXT DEFAULT 'student',
    authenticity TEXT DEFAULT 'self-decided',
    mentor_notes TEXT,
    resource_link TEXT,
    question_goal INTEGER,
    completed_questions INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS weak_topics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id TEXT NOT NULL REFERENCES students(id),
    subject TEXT NOT NULL,
    topic TEXT NOT NULL,
    status TEXT DEFAULT 'needs_improvement',
    priority INTEGER DEFAULT 0
);

CREATE TABLE IF NOT EXISTS tests (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    student_id TEXT NOT NULL REFERENCES students(id),
    subject TEXT NOT NULL,
    test_name TEXT NOT NULL,
    score REAL NOT NULL,
    max_score REAL NOT NULL,
    test_date TEXT
);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);

CREATE INDEX IF NOT EXISTS idx_study_plans_student ON study_plans(student_id, week_start);
"""


def get_connection(db_path: str) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()
