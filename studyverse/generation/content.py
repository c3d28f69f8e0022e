"""
ContentGenerator - Lesson maps, avatars and tutor replies.

Each operation asks Gemini first and falls back to fixed content when the
service is unconfigured or fails, so setup never stalls on the network.
"""

import logging
import time
from typing import Optional

from pydantic import TypeAdapter, ValidationError

from studyverse.errors import GenerationUnavailableError
from studyverse.config import Settings
from studyverse.schemas import AvatarConfig, ChatMessage, Lesson, LessonDraft, LessonStatus
from studyverse.utils.prompt_loader import format_prompt, load_prompt

from .client import GeminiClient


logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Custom Syllabus"

UNCONFIGURED_AVATAR = AvatarConfig(top="longHair", hair_color="pink")
FAILED_AVATAR = AvatarConfig(top="shortHair", clothing="hoodie")

NO_KEY_REPLY = "I need an API Key to think!"
ERROR_REPLY = "Oop! My brain froze."
EMPTY_REPLY = "I'm lost for words!"

_DRAFT_LIST = TypeAdapter(list[LessonDraft])


# -----------------------------------------------------------------------------
# Lesson map construction
# -----------------------------------------------------------------------------

def build_lessons(drafts: list[LessonDraft], subject: str = DEFAULT_SUBJECT) -> list[Lesson]:
    """
    Turn generated drafts into a fresh lesson map.

    The first lesson starts OPEN, the rest LOCKED.
    """
    stamp = int(time.time() * 1000)
    return [
        Lesson(
            id=f"lesson-{stamp}-{index}",
            title=draft.title,
            description=draft.description,
            status=LessonStatus.OPEN if index == 0 else LessonStatus.LOCKED,
            order=index,
            subject=subject,
        )
        for index, draft in enumerate(drafts)
    ]


def fallback_lessons(syllabus_text: str) -> list[Lesson]:
    """Fixed six-level map used when generation is unavailable."""
    topic = syllabus_text[:15] + "..."
    levels = [
        ("l1", f"The Journey Begins: {topic}", "Overview and initial concepts"),
        ("l2", "Deep Dive I", "Core theories and definitions"),
        ("l3", "The Obstacle", "Tackling the hardest parts"),
        ("l4", "Skill Check", "Applying what you learned"),
        ("l5", "Mastery Level", "Advanced applications"),
        ("l6", "Final Boss", "Complete syllabus review"),
    ]
    return [
        Lesson(
            id=lesson_id,
            title=title,
            description=description,
            status=LessonStatus.OPEN if order == 0 else LessonStatus.LOCKED,
            order=order,
            subject=syllabus_text,
        )
        for order, (lesson_id, title, description) in enumerate(levels)
    ]


class ContentGenerator:
    """Generative content with deterministic fallbacks."""

    def __init__(self, client: Optional[GeminiClient] = None):
        """
        Args:
            client: Configured Gemini client, or None to always use fallbacks
        """
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ContentGenerator":
        """Build a generator, without a client if no API key is configured."""
        if not settings.has_api_key:
            logger.info("No Gemini API key configured; using offline content")
            return cls(None)
        return cls(GeminiClient(
            api_key=settings.api_key,
            model=settings.model_fast,
            chat_model=settings.model_smart,
        ))

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _require_client(self) -> GeminiClient:
        if self.client is None:
            raise GenerationUnavailableError("Gemini client is not configured")
        return self.client

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    def generate_lessons(self, syllabus_text: str, days: int, hardest_topic: str) -> list[Lesson]:
        """
        Break a syllabus into 10-15 gamified lessons.

        Returns:
            Lesson map with the first lesson OPEN (fallback map on failure)
        """
        try:
            drafts = self.request_lesson_drafts(syllabus_text, days, hardest_topic)
        except GenerationUnavailableError as e:
            logger.warning(f"Syllabus generation unavailable, using fallback map: {e}")
            return fallback_lessons(syllabus_text)
        return build_lessons(drafts)

    def request_lesson_drafts(self, syllabus_text: str, days: int, hardest_topic: str) -> list[LessonDraft]:
        """
        Ask Gemini for lesson titles and descriptions.

        Raises:
            GenerationUnavailableError: If unconfigured, failing or the reply is unusable
        """
        client = self._require_client()
        prompt = load_prompt("syllabus")
        user_prompt = format_prompt(
            prompt["user_template"],
            syllabus=syllabus_text,
            days=days,
            hardest_topic=hardest_topic or "none given",
        )
        data = client.generate_json(
            user_prompt,
            list[LessonDraft],
            system_prompt=prompt["system"],
            temperature=prompt["meta"].get("temperature"),
        )

        try:
            drafts = _DRAFT_LIST.validate_python(data)
        except ValidationError as e:
            raise GenerationUnavailableError(f"Malformed lesson list: {e}") from e
        if not drafts:
            raise GenerationUnavailableError("Generator returned no lessons")
        return drafts

    # -------------------------------------------------------------------------
    # Avatar
    # -------------------------------------------------------------------------

    def generate_avatar_config(self, description: str) -> AvatarConfig:
        """Describe-to-avatar, falling back to a fixed look."""
        if self.client is None:
            return UNCONFIGURED_AVATAR.model_copy()

        prompt = load_prompt("avatar")
        try:
            data = self.client.generate_json(
                format_prompt(prompt["user_template"], description=description),
                AvatarConfig,
                system_prompt=prompt["system"],
                temperature=prompt["meta"].get("temperature"),
            )
            return AvatarConfig.model_validate(data or {})
        except (GenerationUnavailableError, ValidationError) as e:
            logger.warning(f"Avatar generation failed: {e}")
            return FAILED_AVATAR.model_copy()

    # -------------------------------------------------------------------------
    # Tutor chat
    # -------------------------------------------------------------------------

    def chat_with_tutor(self, history: list[ChatMessage], current_lesson: str, message: str) -> str:
        """Ask Nova, the study companion, about the current lesson."""
        if self.client is None:
            return NO_KEY_REPLY

        prompt = load_prompt("tutor")
        system = format_prompt(prompt["system"], current_lesson=current_lesson)
        try:
            reply = self.client.chat(system, history, format_prompt(prompt["user_template"], message=message))
        except GenerationUnavailableError as e:
            logger.warning(f"Tutor chat failed: {e}")
            return ERROR_REPLY
        return reply or EMPTY_REPLY
