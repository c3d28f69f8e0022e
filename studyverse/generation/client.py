"""
Gemini API client for StudyVerse content generation.

Wraps the google-genai SDK with retries. Every failure surfaces as
GenerationUnavailableError so callers can fall back to fixed content.
"""

import json
import logging
import os
import time
from typing import Any, Optional

from google import genai
from google.genai import types as genai_types

from studyverse.errors import GenerationUnavailableError
from studyverse.config import MODEL_FAST, MODEL_SMART
from studyverse.schemas import ChatMessage


logger = logging.getLogger(__name__)

DEFAULT_API_SLEEP = 1.0


class GeminiClient:
    """Wrapper for Gemini API with retries."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = MODEL_FAST,
        chat_model: str = MODEL_SMART,
        temperature: float = 0.7,
        max_retries: int = 2,
        sleep_seconds: float = DEFAULT_API_SLEEP,
    ):
        self.api_key = api_key or os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise GenerationUnavailableError("GEMINI_API_KEY not set. Check your .env file.")

        self.client = genai.Client(api_key=self.api_key)
        self.model_name = model
        self.chat_model_name = chat_model
        self.temperature = temperature
        self.max_retries = max_retries
        self.sleep_seconds = sleep_seconds

    def generate_json(
        self,
        prompt: str,
        response_schema: Any,
        system_prompt: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Any:
        """
        Generate a structured JSON response.

        Args:
            prompt: User prompt
            response_schema: Pydantic model or type describing the response
            system_prompt: Optional system instruction
            temperature: Override the client temperature

        Returns:
            Parsed JSON value

        Raises:
            GenerationUnavailableError: After the last failed attempt
        """
        config = genai_types.GenerateContentConfig(
            temperature=self.temperature if temperature is None else temperature,
            system_instruction=system_prompt,
            response_mime_type="application/json",
            response_schema=response_schema,
        )

        for attempt in range(self.max_retries):
            try:
                response = self.client.models.generate_content(
                    model=self.model_name,
                    contents=prompt,
                    config=config,
                )
                if not response.text:
                    raise ValueError("Empty response from API")
                return json.loads(response.text)

            except Exception as e:
                logger.warning(f"API call failed (attempt {attempt + 1}/{self.max_retries}): {e}")
                if attempt < self.max_retries - 1:
                    time.sleep(self.sleep_seconds * (attempt + 1))
                else:
                    raise GenerationUnavailableError(str(e)) from e

    def chat(
        self,
        system_instruction: str,
        history: list[ChatMessage],
        message: str,
    ) -> str:
        """
        Send one message in a multi-turn conversation.

        Returns:
            Reply text (may be empty)

        Raises:
            GenerationUnavailableError: If the request fails
        """
        try:
            chat = self.client.chats.create(
                model=self.chat_model_name,
                config=genai_types.GenerateContentConfig(
                    system_instruction=system_instruction,
                ),
                history=[
                    genai_types.Content(role=m.role, parts=[genai_types.Part(text=m.text)])
                    for m in history
                ],
            )
            result = chat.send_message(message)
        except Exception as e:
            raise GenerationUnavailableError(str(e)) from e
        return result.text or ""
