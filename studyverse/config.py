"""
Runtime configuration for StudyVerse.

Values come from the environment, optionally seeded from a project-level
.env file (GEMINI_API_KEY=..., STUDYVERSE_DB_PATH=...).
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


PROJECT_ROOT = Path(__file__).parent.parent

DEFAULT_DATA_DIR = Path.home() / ".studyverse"
DEFAULT_DB_PATH = DEFAULT_DATA_DIR / "studyverse.db"

MODEL_FAST = "gemini-3-flash-preview"
MODEL_SMART = "gemini-3-pro-preview"


class Settings(BaseModel):
    api_key: Optional[str] = None
    db_path: Path = DEFAULT_DB_PATH
    model_fast: str = MODEL_FAST
    model_smart: str = MODEL_SMART

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build settings from the environment.

    Args:
        env_file: Optional .env file (default: PROJECT_ROOT/.env). Existing
            environment variables take precedence over the file.
    """
    load_dotenv(env_file or PROJECT_ROOT / ".env")

    db_path = os.environ.get("STUDYVERSE_DB_PATH")
    return Settings(
        api_key=os.environ.get("GEMINI_API_KEY") or os.environ.get("API_KEY") or None,
        db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
        model_fast=os.environ.get("STUDYVERSE_MODEL_FAST", MODEL_FAST),
        model_smart=os.environ.get("STUDYVERSE_MODEL_SMART", MODEL_SMART),
    )
