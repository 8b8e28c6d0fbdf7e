"""Focus/break countdown timers and the loop that drives them."""
import enum
import logging
import threading

from studyhike.config import BREAK_MINUTES, FOCUS_MINUTES, SUBJECT_BREAK_MINUTES
from studyhike.errors import ValidationError

logger = logging.getLogger(__name__)

# minutes allowed per practice question
QUESTION_MINUTES = {"Mathematics": 8, "Physics": 5, "Chemistry": 3}
REVISION_MINUTES = 60
SUBJECT_ROTATION = {
    "Revision": "Mathematics",
    "Mathematics": "Physics",
    "Physics": "Chemistry",
}


class Phase(enum.Enum):
    IDLE = "idle"
    FOCUS = "focus"
    BREAK = "break"


class SegmentTimer:
    """Single countdown alternating between a focus and a break segment.

    Idle -> Focus on start(); Focus(0) -> Break and Break(0) -> Focus on
    tick(); anything -> Idle on stop(). reset() restarts the current phase
    at its nominal length. on_phase_change(old, new) is called after every
    transition.
    """

    def __init__(self, focus_seconds: int, break_seconds: int, on_phase_change=None, label: str = "Focus"):
        if focus_seconds <= 0 or break_seconds <= 0:
            raise ValidationError("Timer durations must be positive")
        self.focus_seconds = int(focus_seconds)
        self.break_seconds = int(break_seconds)
        self.label = label
        self.on_phase_change = on_phase_change
        self.phase = Phase.IDLE
        self.remaining = 0
        self.cycles = 0
        self._lock = threading.RLock()

    @property
    def active(self) -> bool:
        return self.phase is not Phase.IDLE

    def _duration(self, phase: Phase) -> int:
        return self.focus_seconds if phase is Phase.FOCUS else self.break_seconds

    def _enter(self, phase: Phase) -> None:
        old = self.phase
        self.phase = phase
        self.remaining = self._duration(phase) if phase is not Phase.IDLE else 0
        logger.debug("%s timer: %s -> %s", self.label, old.value, phase.value)
        if self.on_phase_change is not None:
            self.on_phase_change(old, phase)

    def start(self) -> None:
        with self._lock:
            self._enter(Phase.FOCUS)

    def stop(self) -> None:
        with self._lock:
            if self.phase is not Phase.IDLE:
                self._enter(Phase.IDLE)

    def reset(self) -> None:
        with self._lock:
            if self.phase is not Phase.IDLE:
                self.remaining = self._duration(self.phase)

    def tick(self) -> None:
        with self._lock:
            if self.phase is Phase.IDLE:
                return
            self.remaining = max(0, self.remaining - 1)
            if self.remaining == 0:
                if self.phase is Phase.FOCUS:
                    self.cycles += 1
                    self._enter(Phase.BREAK)
                else:
                    self._enter(Phase.FOCUS)

    def format_remaining(self) -> str:
        mins, secs = divmod(self.remaining, 60)
        return f"{mins:02d}:{secs:02d}"

    def fraction_done(self) -> float:
        if self.phase is Phase.IDLE:
            return 0.0
        total = self._duration(self.phase)
        return (total - self.remaining) / total


def pomodoro_timer(focus_minutes: int = FOCUS_MINUTES, break_minutes: int = BREAK_MINUTES,
                   on_phase_change=None) -> SegmentTimer:
    return SegmentTimer(focus_minutes * 60, break_minutes * 60, on_phase_change, label="Pomodoro")


def subject_minutes(subject: str, questions: int = 10) -> int:
    """Focus length for a subject: paced per question, or a flat revision hour."""
    if subject == "Revision":
        return REVISION_MINUTES
    per_question = QUESTION_MINUTES.get(subject, 5)
    return per_question * max(1, questions)


def subject_timer(subject: str, questions: int = 10, break_minutes: int = SUBJECT_BREAK_MINUTES,
                  on_phase_change=None) -> SegmentTimer:
    return SegmentTimer(subject_minutes(subject, questions) * 60, break_minutes * 60,
                        on_phase_change, label=subject)


def next_subject(subject: str) -> str:
    return SUBJECT_ROTATION.get(subject, "Mathematics")


class TimerLoop:
    """Ticks a SegmentTimer once per interval on a background thread.

    The loop belongs to whoever displays the timer and must be closed when
    that view goes away; close() blocks until the thread has exited.
    """

    def __init__(self, timer: SegmentTimer, interval: float = 1.0):
        self.timer = timer
        self.interval = interval
        self._stop = threading.Event()
        self._thread = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="timer-loop", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.timer.tick()

    def close(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
