#!/usr/bin/env python3
"""
generate_lessons.py - Generate a lesson map from a syllabus file.

Runs the setup flow without the UI: creates the profile, asks Gemini to
break the syllabus into levels (falling back to the offline map when no API
key is configured), and stores the result. A database that is already set
up keeps its lesson map and progress.

Usage:
  python scripts/generate_lessons.py --syllabus syllabus.txt
  python scripts/generate_lessons.py --syllabus syllabus.txt --days 14 --hardest "Thermodynamics"
  python scripts/generate_lessons.py --syllabus syllabus.txt --dry-run   # Print, don't store
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Project root for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from studyverse.classroom import AppNavigator, LessonGraph, ProgressStore, ProgressTracker
from studyverse.config import load_settings
from studyverse.generation import ContentGenerator
from studyverse.schemas import SetupForm

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a StudyVerse lesson map from a syllabus")
    parser.add_argument("--syllabus", type=Path, required=True, help="Text file with the syllabus")
    parser.add_argument("--days", type=int, default=30, help="Days available to study (1-120)")
    parser.add_argument("--hours", type=float, default=2.0, help="Daily study goal in hours")
    parser.add_argument("--hardest", default="", help="Hardest subject or topic")
    parser.add_argument("--favorite", default="", help="Favorite subject")
    parser.add_argument("--db", type=Path, default=None, help="Database path (default: from settings)")
    parser.add_argument("--dry-run", action="store_true", help="Print lessons as JSON without storing")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    if not args.syllabus.exists():
        logger.error(f"Syllabus file not found: {args.syllabus}")
        return 1

    syllabus = args.syllabus.read_text(encoding="utf-8").strip()
    if not syllabus:
        logger.error("Syllabus file is empty")
        return 1

    settings = load_settings()
    generator = ContentGenerator.from_settings(settings)

    if args.dry_run:
        lessons = generator.generate_lessons(syllabus, args.days, args.hardest)
        print(json.dumps([lesson.model_dump(mode="json") for lesson in lessons], indent=2, ensure_ascii=False))
        return 0

    store = ProgressStore.open(args.db or settings.db_path)
    navigator = AppNavigator(LessonGraph(store), ProgressTracker(store), generator)

    form = SetupForm(
        syllabus=syllabus,
        days=args.days,
        daily_goal_hours=args.hours,
        hardest_subject=args.hardest,
        favorite_subject=args.favorite,
    )
    lessons = navigator.complete_setup(form)

    for lesson in lessons:
        logger.info(f"  [{lesson.order}] {lesson.status.value:<6} {lesson.title}")
    logger.info(f"Stored {len(lessons)} lessons in {store.records.db_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
