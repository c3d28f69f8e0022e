"""
Prompt templates for StudyVerse content generation.

Templates live as YAML files in studyverse/prompts/, one per generation
task (syllabus, avatar, tutor). Each file has:
- meta: version, model tier (fast / smart), temperature
- system: system instruction, may contain {placeholders}
- user_template: user message with {placeholders}
"""

from pathlib import Path
from typing import Any
import yaml


PROMPTS_DIR = Path(__file__).parent.parent / "prompts"

REQUIRED_KEYS = ("meta", "system", "user_template")


def load_prompt(name: str, prompts_dir: Path | None = None) -> dict[str, Any]:
    """
    Load and check a prompt template.

    Args:
        name: Template name without .yaml (e.g., "tutor")
        prompts_dir: Directory to read from (default: the packaged prompts)

    Returns:
        Parsed template with meta, system and user_template keys

    Raises:
        FileNotFoundError: If no such template exists
        ValueError: If the template is missing a required key
    """
    file_path = (prompts_dir or PROMPTS_DIR) / f"{name}.yaml"
    if not file_path.exists():
        raise FileNotFoundError(f"Prompt template not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        prompt = yaml.safe_load(f) or {}

    missing = [key for key in REQUIRED_KEYS if key not in prompt]
    if missing:
        raise ValueError(f"Prompt template '{name}' is missing: {', '.join(missing)}")
    prompt["meta"] = prompt["meta"] or {}
    return prompt


def format_prompt(template: str, **kwargs) -> str:
    """Fill a template's {placeholders}."""
    return template.format(**kwargs)


def get_available_prompts(prompts_dir: Path | None = None) -> list[str]:
    """Names of the templates in a directory, sorted."""
    dir_path = prompts_dir or PROMPTS_DIR
    if not dir_path.exists():
        return []
    return sorted(p.stem for p in dir_path.glob("*.yaml"))
