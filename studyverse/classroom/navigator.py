"""
AppNavigator - Page selection and the setup flow.

Provides:
- Initial page choice (landing for new users, map once set up)
- Setup: profile creation + lesson map generation
- Lesson selection from the map and return to the map
- Recovery pages for profile / lesson errors
"""

import logging
from enum import Enum
from typing import Optional

from studyverse.generation import ContentGenerator
from studyverse.schemas import Lesson, SetupForm
from studyverse.errors import NoProfileError, NotFoundError

from .lessons import LessonGraph
from .progress import ProgressTracker


logger = logging.getLogger(__name__)


class Page(str, Enum):
    LANDING = "landing"
    SETUP = "setup"
    MAP = "map"
    LESSON = "lesson"


class AppNavigator:
    """
    Track the current page and the lesson being studied.

    Combines LessonGraph (lesson map), ProgressTracker (profile) and
    ContentGenerator (setup content).
    """

    def __init__(self, lessons: LessonGraph, tracker: ProgressTracker, generator: ContentGenerator):
        """
        Initialize navigator.

        Args:
            lessons: LessonGraph for the lesson map
            tracker: ProgressTracker for the user profile
            generator: ContentGenerator used during setup
        """
        self.lessons = lessons
        self.tracker = tracker
        self.generator = generator
        self.page = self.initial_page()
        self.active_lesson_id: Optional[str] = None

    def initial_page(self) -> Page:
        """Skip landing and setup once a profile exists."""
        return Page.MAP if self.tracker.has_profile() else Page.LANDING

    def begin_setup(self):
        self.page = Page.SETUP

    def complete_setup(self, form: SetupForm) -> list[Lesson]:
        """
        Create the profile and the lesson map, then show the map.

        Setup runs once. When a profile and a lesson map already exist the
        stored map is kept and returned, so progress is never reset.

        Args:
            form: Answers from the setup wizard

        Returns:
            The stored lesson map
        """
        existing = self.lessons.list_lessons()
        if existing and self.tracker.has_profile():
            logger.warning(f"Setup already complete with {len(existing)} lessons; keeping stored map")
            self.page = Page.MAP
            return existing

        self.tracker.create_profile(
            hardest_subject=form.hardest_subject,
            favorite_subject=form.favorite_subject,
            daily_goal_hours=form.daily_goal_hours,
        )

        lessons = self.generator.generate_lessons(form.syllabus, form.days, form.hardest_subject)
        self.lessons.replace_lessons(lessons)

        self.page = Page.MAP
        logger.info(f"Setup complete with {len(lessons)} lessons")
        return lessons

    def select_lesson(self, lesson_id: str) -> bool:
        """
        Open a lesson from the map.

        Returns True if the lesson page was opened, False if the lesson is
        locked or unknown.
        """
        if not self.lessons.is_lesson_available(lesson_id):
            logger.debug(f"Ignoring selection of unavailable lesson {lesson_id}")
            return False

        self.active_lesson_id = lesson_id
        self.page = Page.LESSON
        return True

    def exit_lesson(self):
        self.active_lesson_id = None
        self.page = Page.MAP

    def recover(self, error: Exception) -> Page:
        """
        Move to the page that resolves an error.

        Raises:
            The error itself if it has no recovery page
        """
        if isinstance(error, NoProfileError):
            logger.warning("No profile found; returning to setup")
            self.active_lesson_id = None
            self.page = Page.SETUP
        elif isinstance(error, NotFoundError):
            logger.error(f"Lesson {error.lesson_id} is missing from the map; returning to map")
            self.active_lesson_id = None
            self.page = Page.MAP
        else:
            raise error
        return self.page
