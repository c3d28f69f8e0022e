"""
User profile schemas for StudyVerse.

Defines Pydantic models for the single local learner:
- Avatar display configuration
- User profile with XP / streak counters
- Setup form submitted on first launch
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AvatarConfig(BaseModel):
    """Avataaars-style display options. Opaque to progression logic."""
    top: Optional[str] = None
    accessories: Optional[str] = None
    hair_color: Optional[str] = None
    facial_hair: Optional[str] = None
    clothing: Optional[str] = None
    eyes: Optional[str] = None
    eyebrows: Optional[str] = None
    mouth: Optional[str] = None
    skin_color: Optional[str] = None
    background_color: Optional[str] = None


DEFAULT_AVATAR = AvatarConfig(
    skin_color="light",
    top="shortHair",
    hair_color="brown",
    clothing="hoodie",
    eyes="happy",
    mouth="smile",
    background_color="b6e3f4",
)


class User(BaseModel):
    id: str
    display_name: Optional[str] = "Traveler"
    xp: int = Field(0, ge=0)
    streak: int = Field(0, ge=0)
    last_study_date: datetime        # compared by calendar day only
    setup_complete: bool = True
    hardest_subject: str = ""
    favorite_subject: str = ""
    daily_goal_hours: float = Field(1.0, gt=0)
    avatar_config: AvatarConfig = Field(default_factory=lambda: DEFAULT_AVATAR.model_copy())


class SetupForm(BaseModel):
    """Answers collected by the setup wizard."""
    syllabus: str = Field(..., min_length=1)
    days: int = Field(30, ge=1, le=120)
    daily_goal_hours: float = Field(2.0, gt=0)
    hardest_subject: str = ""
    favorite_subject: str = ""
