"""
StudyVerse Generation - AI content for setup and tutoring.

This module provides:
- GeminiClient: google-genai wrapper with retries
- ContentGenerator: lessons, avatars and tutor replies with fallbacks
"""

from .client import GeminiClient

from .content import (
    ContentGenerator,
    build_lessons,
    fallback_lessons,
    DEFAULT_SUBJECT,
    UNCONFIGURED_AVATAR,
    FAILED_AVATAR,
    NO_KEY_REPLY,
    ERROR_REPLY,
    EMPTY_REPLY,
)

__all__ = [
    "GeminiClient",
    "ContentGenerator",
    "build_lessons",
    "fallback_lessons",
    "DEFAULT_SUBJECT",
    "UNCONFIGURED_AVATAR",
    "FAILED_AVATAR",
    "NO_KEY_REPLY",
    "ERROR_REPLY",
    "EMPTY_REPLY",
]
