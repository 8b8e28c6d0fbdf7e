"""Runtime settings.

Environment variables set the process-wide defaults; per-user timer
preferences live in the user_settings table.
"""
import os
from pathlib import Path

from studyhike.db import get_connection

DEFAULT_DB_PATH = os.environ.get(
    "STUDYHIKE_DB", str(Path.home() / ".studyhike" / "studyhike.db")
)
DEFAULT_STUDENT_ID = os.environ.get("STUDYHIKE_STUDENT", "local")

LOG_LEVEL = os.environ.get("STUDYHIKE_LOG_LEVEL", "WARNING")
LOG_FORMAT = os.environ.get("STUDYHIKE_LOG_FORMAT", "text")  # "text" or "json"

FOCUS_MINUTES = 25
BREAK_MINUTES = 5
SUBJECT_BREAK_MINUTES = 20


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def _minutes(db_path: str, key: str, default: int) -> int:
    value = get_setting(db_path, key)
    try:
        minutes = int(value) if value is not None else default
    except ValueError:
        return default
    return minutes if minutes > 0 else default


def timer_settings(db_path: str) -> dict:
    """Focus and break lengths in minutes, user overrides applied."""
    return {
        "focus_minutes": _minutes(db_path, "focus_minutes", FOCUS_MINUTES),
        "break_minutes": _minutes(db_path, "break_minutes", BREAK_MINUTES),
        "subject_break_minutes": _minutes(db_path, "subject_break_minutes", SUBJECT_BREAK_MINUTES),
    }
