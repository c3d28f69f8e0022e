"""
Focus session schemas for StudyVerse.

Defines the countdown states and the outcome of a finished session.
Sessions themselves are never persisted.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .user import User


class SessionState(str, Enum):
    READY = "ready"          # remaining == initial, not ticking
    RUNNING = "running"
    PAUSED = "paused"
    FINISHED = "finished"    # terminal, rewards applied
    ABORTED = "aborted"      # terminal, discarded without rewards


TERMINAL_STATES = frozenset({SessionState.FINISHED, SessionState.ABORTED})


class SessionResult(BaseModel):
    lesson_id: str
    xp_awarded: int = 0
    next_lesson_id: Optional[str] = None
    user: Optional[User] = None
