"""
Tutor chat schemas for StudyVerse.
"""

from typing import Literal

from pydantic import BaseModel


class ChatMessage(BaseModel):
    role: Literal["user", "model"]
    text: str


NOVA_GREETING = ChatMessage(role="model", text="Hi! I am Nova. Stuck? Ask me anything!")
