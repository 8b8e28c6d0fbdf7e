"""Data classes for the study plan domain model."""
from dataclasses import dataclass
from datetime import date
from typing import Optional

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
SUBJECTS = [
    "Physics", "Chemistry", "Mathematics", "Biology",
    "English", "History", "Geography", "Computer Science",
]
AUTHORS = ("student", "mentor", "system")
AUTHENTICITY = ("self-decided", "mentor-assigned", "auto-generated")

CRITICAL = "critical_weakness"
NEEDS_IMPROVEMENT = "needs_improvement"
GOOD = "good"
STATUS_LABELS = {
    CRITICAL: "Critical Weakness",
    NEEDS_IMPROVEMENT: "Needs Improvement",
    GOOD: "Good",
}


@dataclass
class StudyTask:
    id: Optional[int]
    student_id: str
    subject: str
    topic: str
    day: str
    duration: float
    completed: bool = False
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    week_start: Optional[str] = None
    added_by: str = "student"
    authenticity: str = "self-decided"
    mentor_notes: Optional[str] = None
    resource_link: Optional[str] = None
    question_goal: Optional[int] = None
    completed_questions: int = 0

    @property
    def has_question_goal(self) -> bool:
        return bool(self.question_goal)

    @property
    def questions_remaining(self) -> int:
        if not self.question_goal:
            return 0
        return max(0, self.question_goal - self.completed_questions)


@dataclass
class WeakTopic:
    id: Optional[int]
    student_id: str
    subject: str
    topic: str
    status: str = NEEDS_IMPROVEMENT
    priority: int = 0

    @property
    def is_critical(self) -> bool:
        return self.status == CRITICAL

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, "Unknown")


@dataclass
class TestScore:
    __test__ = False

    id: Optional[int]
    student_id: str
    subject: str
    test_name: str
    score: float
    max_score: float
    test_date: Optional[str] = None

    @property
    def percentage(self) -> float:
        if not self.max_score:
            return 0.0
        return round(self.score / self.max_score * 100, 1)


@dataclass(frozen=True)
class WeekWindow:
    """A Monday-to-Sunday span. Derived from a date, never stored."""
    start: date
    end: date

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    @property
    def label(self) -> str:
        return f"{self.start:%b} {self.start.day} - {self.end:%b} {self.end.day}"
