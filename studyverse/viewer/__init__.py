"""
StudyVerse Viewer - Rendering components for the Streamlit app.

This module provides:
- Lesson map rendering (nodes, stats, quests, avatars)
- Focus session countdown ring and celebration
"""

from .map import (
    get_map_css,
    node_offset,
    avatar_url,
    render_lesson_node,
    render_stats_bar,
    render_quest,
    render_leaderboard_entry,
    seed_avatar_url,
    STATUS_COLORS,
)

from .session import (
    render_timer_ring,
    celebration_message,
    RING_CIRCUMFERENCE,
)

__all__ = [
    # Map
    "get_map_css",
    "node_offset",
    "avatar_url",
    "render_lesson_node",
    "render_stats_bar",
    "render_quest",
    "render_leaderboard_entry",
    "seed_avatar_url",
    "STATUS_COLORS",
    # Session
    "render_timer_ring",
    "celebration_message",
    "RING_CIRCUMFERENCE",
]
