"""
LessonGraph - Lesson unlock state and completion.

Provides:
- Ordered lesson listing for the map
- Completion with next-lesson unlock
- Availability checks and status indicators
- Completion statistics

Every lesson moves forward only: LOCKED -> OPEN -> DONE. Read by order,
a collection is always a run of DONE lessons, at most one OPEN lesson,
then LOCKED lessons.
"""

import logging
from typing import Optional

from studyverse.schemas import Lesson, LessonStatus
from studyverse.errors import NotFoundError

from .store import LESSONS_KEY, ProgressStore


logger = logging.getLogger(__name__)


class LessonGraph:
    """
    Own the lesson collection's status transitions.

    All reads go to the store, so two LessonGraph instances over the same
    store always agree.
    """

    def __init__(self, store: ProgressStore):
        """
        Args:
            store: ProgressStore holding the lesson collection
        """
        self.store = store

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def list_lessons(self) -> list[Lesson]:
        """Return the persisted collection in order (empty before setup)."""
        return self.store.load_lessons()

    def get_lesson(self, lesson_id: str) -> Optional[Lesson]:
        """Get a single lesson by ID."""
        for lesson in self.list_lessons():
            if lesson.id == lesson_id:
                return lesson
        return None

    def get_next_lesson_id(self, lesson_id: str) -> Optional[str]:
        """Get the ID of the lesson directly after this one, by order."""
        lessons = self.list_lessons()
        current = next((lesson for lesson in lessons if lesson.id == lesson_id), None)
        if current is None:
            return None
        successor = next((lesson for lesson in lessons if lesson.order == current.order + 1), None)
        return successor.id if successor else None

    def get_open_lesson_id(self) -> Optional[str]:
        """Get the lesson to study next, or None if everything is done."""
        for lesson in self.list_lessons():
            if lesson.status == LessonStatus.OPEN:
                return lesson.id
        return None

    def is_lesson_available(self, lesson_id: str) -> bool:
        """Check if a lesson can be selected from the map."""
        lesson = self.get_lesson(lesson_id)
        return lesson is not None and lesson.status != LessonStatus.LOCKED

    def get_status_indicator(self, lesson_id: str) -> str:
        """
        Get status indicator for map display.

        Returns:
            ✓ for done
            → for open
            ◌ for locked (or unknown)
        """
        lesson = self.get_lesson(lesson_id)
        if lesson is None:
            return "◌"
        if lesson.status == LessonStatus.DONE:
            return "✓"
        elif lesson.status == LessonStatus.OPEN:
            return "→"
        else:
            return "◌"

    def get_completion_stats(self) -> dict:
        """
        Get completion statistics.

        Returns:
            Dictionary with lesson counts per status and completion percent
        """
        lessons = self.list_lessons()
        total = len(lessons)
        done = sum(1 for lesson in lessons if lesson.status == LessonStatus.DONE)
        open_count = sum(1 for lesson in lessons if lesson.status == LessonStatus.OPEN)

        return {
            "total_lessons": total,
            "done": done,
            "open": open_count,
            "locked": total - done - open_count,
            "completion_percent": round(done / total * 100, 1) if total > 0 else 0,
        }

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def replace_lessons(self, lessons: list[Lesson]):
        """
        Persist a freshly generated collection.

        Raises:
            ValueError: If orders are not 0..n-1 in list order
        """
        orders = [lesson.order for lesson in lessons]
        if orders != list(range(len(lessons))):
            raise ValueError(f"Lesson orders must be 0..{len(lessons) - 1} in sequence, got {orders}")

        with self.store.locked(LESSONS_KEY):
            self.store.save_lessons(lessons)
        logger.info(f"Stored lesson map with {len(lessons)} lessons")

    def complete_lesson(self, lesson_id: str) -> list[Lesson]:
        """
        Mark a lesson DONE and open its successor.

        Completing a lesson that is already DONE leaves the collection as it
        was. Earlier lessons are not inspected.

        Args:
            lesson_id: ID of lesson to complete

        Returns:
            The updated collection

        Raises:
            NotFoundError: If no lesson has this ID
        """
        with self.store.locked(LESSONS_KEY):
            lessons = self.store.load_lessons()
            current = next((lesson for lesson in lessons if lesson.id == lesson_id), None)
            if current is None:
                raise NotFoundError(lesson_id)

            current.status = LessonStatus.DONE
            for lesson in lessons:
                if lesson.order == current.order + 1 and lesson.status == LessonStatus.LOCKED:
                    lesson.status = LessonStatus.OPEN
                    logger.info(f"Unlocked lesson {lesson.id} ({lesson.title})")

            self.store.save_lessons(lessons)

        logger.info(f"Completed lesson {lesson_id}")
        return lessons
