"""
Lesson schemas for StudyVerse.

Defines Pydantic models for the lesson map:
- Lesson unlock status
- Lesson records as persisted
- Lesson drafts as returned by content generation
"""

from enum import Enum

from pydantic import BaseModel, Field


class LessonStatus(str, Enum):
    LOCKED = "LOCKED"
    OPEN = "OPEN"
    DONE = "DONE"


class Lesson(BaseModel):
    id: str
    title: str
    description: str = ""
    status: LessonStatus = LessonStatus.LOCKED
    order: int = Field(..., ge=0)   # zero-based position on the map
    subject: str = ""


class LessonDraft(BaseModel):
    """Title/description pair produced by the generator before ids are assigned."""
    title: str
    description: str
