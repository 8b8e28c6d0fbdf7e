"""Seed a demo student so a fresh install has something to plan around."""
from datetime import date, timedelta

from studyhike.db import get_connection

DEMO_WEAK_TOPICS = [
    # (subject, topic, status, priority)
    ("Physics", "Rotational Mechanics", "critical_weakness", 10),
    ("Mathematics", "Definite Integration", "critical_weakness", 9),
    ("Chemistry", "Chemical Equilibrium", "needs_improvement", 7),
    ("Physics", "Electrostatics", "needs_improvement", 6),
    ("Chemistry", "Organic Reaction Mechanisms", "needs_improvement", 5),
    ("Mathematics", "Probability", "needs_improvement", 4),
    ("Biology", "Genetics", "needs_improvement", 3),
    ("Mathematics", "Complex Numbers", "good", 1),
]

DEMO_TESTS = [
    # (subject, test_name, score, max_score, days_ago)
    ("Physics", "JEE Mock 1", 52, 120, 21),
    ("Mathematics", "JEE Mock 1", 68, 120, 21),
    ("Chemistry", "JEE Mock 1", 81, 120, 21),
    ("Physics", "Unit Test: Mechanics", 18, 40, 7),
    ("Mathematics", "Unit Test: Calculus", 22, 40, 3),
]


def is_seeded(db_path: str, student_id: str) -> bool:
    conn = get_connection(db_path)
    count = conn.execute(
        "SELECT COUNT(*) FROM students WHERE id = ?", (student_id,)
    ).fetchone()[0]
    conn.close()
    return count > 0


def seed_demo(db_path: str, student_id: str) -> None:
    """Create the student with demo weak topics and test scores, once."""
    if is_seeded(db_path, student_id):
        return
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO students (id, full_name, exam, study_streak) VALUES (?, ?, ?, 0)",
        (student_id, "Demo Student", "JEE"),
    )
    for subject, topic, status, priority in DEMO_WEAK_TOPICS:
        conn.execute(
            "INSERT INTO weak_topics (student_id, subject, topic, status, priority) VALUES (?, ?, ?, ?, ?)",
            (student_id, subject, topic, status, priority),
        )
    today = date.today()
    for subject, name, score, max_score, days_ago in DEMO_TESTS:
        conn.execute(
            """INSERT INTO tests (student_id, subject, test_name, score, max_score, test_date)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (student_id, subject, name, score, max_score, (today - timedelta(days=days_ago)).isoformat()),
        )
    conn.commit()
    conn.close()
