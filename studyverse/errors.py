"""Exception types raised by StudyVerse."""


class StudyVerseError(Exception):
    """Base class for StudyVerse errors."""


class NoProfileError(StudyVerseError):
    """An operation needs the user profile but setup has not run yet."""

    def __init__(self, message: str = "No user profile exists; run setup first."):
        super().__init__(message)


class NotFoundError(StudyVerseError):
    """A lesson id is absent from the persisted collection."""

    def __init__(self, lesson_id: str):
        self.lesson_id = lesson_id
        super().__init__(f"Lesson not found: {lesson_id}")


class InvalidTransitionError(StudyVerseError):
    """A focus session action is not allowed in its current state."""


class GenerationUnavailableError(StudyVerseError):
    """The content generation service is unconfigured or failed."""
