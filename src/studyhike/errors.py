"""Exceptions raised by the study plan toolkit."""


class StudyHikeError(Exception):
    """Base class for every error this package raises on purpose."""


class ValidationError(StudyHikeError):
    """Input rejected locally, before anything was written."""


class TaskNotFound(ValidationError):
    def __init__(self, task_id):
        super().__init__(f"No study task with id {task_id}")
        self.task_id = task_id


class PersistenceError(StudyHikeError):
    """The store failed to read or write. Local state has been rolled back."""
