"""
Map renderer - Lesson path, stats bar and quest board.

Provides:
- Winding node offsets for the lesson path
- Lesson node HTML colored by status
- Avatar image URLs
- XP / streak header, daily quests and leaderboard rows
"""

import html
import math
from urllib.parse import urlencode

from studyverse.schemas import AvatarConfig, Lesson, LessonStatus, User


AVATAR_BASE_URL = "https://api.dicebear.com/9.x/avataaars/svg"

STATUS_COLORS = {
    LessonStatus.DONE: ("#ffc800", "#e5b400"),
    LessonStatus.OPEN: ("#58cc02", "#46a302"),
    LessonStatus.LOCKED: ("#374151", "#1f2937"),
}

# AvatarConfig field -> Avataaars query parameter
_AVATAR_PARAMS = {
    "top": "top",
    "accessories": "accessories",
    "hair_color": "hairColor",
    "facial_hair": "facialHair",
    "clothing": "clothing",
    "eyes": "eyes",
    "eyebrows": "eyebrows",
    "mouth": "mouth",
    "skin_color": "skinColor",
    "background_color": "backgroundColor",
}


def get_map_css() -> str:
    """Get CSS styles for the lesson map."""
    return """
    <style>
    .map-node {
        width: 5em;
        height: 5em;
        border-radius: 50%;
        border-bottom: 6px solid;
        display: flex;
        align-items: center;
        justify-content: center;
        font-size: 1.6em;
        color: white;
        margin: 0 auto;
    }
    .map-node-title {
        text-align: center;
        font-weight: 700;
        margin-top: 0.4em;
    }
    .map-node-locked .map-node-title {
        color: #6b7280;
    }
    .map-stats {
        display: flex;
        gap: 1.5em;
        font-weight: 800;
        font-size: 1.1em;
    }
    .leaderboard-row {
        display: flex;
        align-items: center;
        gap: 1em;
        padding: 0.6em 1em;
        border: 2px solid;
        border-radius: 16px;
        margin-bottom: 0.6em;
    }
    .leaderboard-rank {
        font-weight: 900;
        color: #6b7280;
        width: 1.5em;
    }
    .quest-bar {
        background: #1f2937;
        border-radius: 8px;
        height: 0.8em;
        overflow: hidden;
    }
    .quest-bar-fill {
        background: #58cc02;
        height: 100%;
    }
    </style>
    """


def node_offset(index: int, amplitude: float = 80.0) -> float:
    """Horizontal offset (px) of the index-th node on the winding path."""
    return math.sin(index * 1.5) * amplitude


def avatar_url(config: AvatarConfig) -> str:
    """Build an Avataaars image URL from the non-empty config fields."""
    params = {}
    for field, param in _AVATAR_PARAMS.items():
        value = getattr(config, field)
        if value and value != "none":
            params[param] = value
    return f"{AVATAR_BASE_URL}?{urlencode(params)}"


def seed_avatar_url(seed: str) -> str:
    """Avatar URL for a random look picked by seed."""
    return f"{AVATAR_BASE_URL}?{urlencode({'seed': seed})}"


def render_lesson_node(lesson: Lesson, index: int) -> str:
    """
    Render one lesson node.

    Args:
        lesson: Lesson to draw
        index: Position on the path (controls the horizontal offset)

    Returns:
        HTML string for the node
    """
    fill, border = STATUS_COLORS[lesson.status]
    icon = {"DONE": "★", "OPEN": "▶", "LOCKED": "🔒"}[lesson.status.value]
    offset = node_offset(index)

    parts = [
        f'<div class="map-node-wrap map-node-{lesson.status.value.lower()}" '
        f'style="transform: translateX({offset:.1f}px);">'
    ]
    parts.append(f'<div class="map-node" style="background: {fill}; border-color: {border};">{icon}</div>')
    parts.append(f'<div class="map-node-title">{html.escape(lesson.title)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_stats_bar(user: User) -> str:
    """Render the streak / XP header."""
    return (
        '<div class="map-stats">'
        f'<span>🔥 {user.streak}</span>'
        f'<span>⚡ {user.xp} XP</span>'
        '</div>'
    )


def render_quest(quest: dict) -> str:
    """Render one daily quest with a progress bar."""
    total = max(1, quest["total"])
    percent = min(100, round(quest["progress"] / total * 100))
    return (
        '<div class="quest">'
        f'<div><b>{html.escape(quest["title"])}</b> · {html.escape(quest["reward"])}</div>'
        f'<div class="quest-bar"><div class="quest-bar-fill" style="width: {percent}%;"></div></div>'
        f'<div>{quest["progress"]} / {quest["total"]}</div>'
        '</div>'
    )


def render_leaderboard_entry(entry: dict) -> str:
    """Render one leaderboard row; the learner's row is highlighted."""
    if entry["avatar_config"] is not None:
        image = avatar_url(entry["avatar_config"])
    else:
        image = seed_avatar_url(entry["seed"] or entry["name"])
    border = "#58cc02" if entry["is_user"] else "#1f2937"
    crown = " 👑" if entry["rank"] == 1 else ""
    return (
        f'<div class="leaderboard-row" style="border-color: {border};">'
        f'<span class="leaderboard-rank">{entry["rank"]}</span>'
        f'<img src="{html.escape(image)}" width="48" height="48" />'
        f'<span><b>{html.escape(entry["name"])}</b> · {entry["xp"]} XP{crown}</span>'
        '</div>'
    )
