"""
StudyVerse Schemas - Pydantic models for the study planner.

This module exports all schema classes for:
- User: profile, avatar configuration, setup form
- Lesson: lesson map records and generated drafts
- Chat: tutor conversation messages
- Session: focus session states and results
"""

# User schemas
from .user import (
    AvatarConfig,
    DEFAULT_AVATAR,
    User,
    SetupForm,
)

# Lesson schemas
from .lesson import (
    LessonStatus,
    Lesson,
    LessonDraft,
)

# Chat schemas
from .chat import (
    ChatMessage,
    NOVA_GREETING,
)

# Session schemas
from .session import (
    SessionState,
    TERMINAL_STATES,
    SessionResult,
)

__all__ = [
    # User
    'AvatarConfig',
    'DEFAULT_AVATAR',
    'User',
    'SetupForm',
    # Lesson
    'LessonStatus',
    'Lesson',
    'LessonDraft',
    # Chat
    'ChatMessage',
    'NOVA_GREETING',
    # Session
    'SessionState',
    'TERMINAL_STATES',
    'SessionResult',
]
