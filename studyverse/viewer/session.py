"""
Session renderer - Countdown ring for the focus session page.
"""

import math

from studyverse.classroom.session import FocusSession, format_time
from studyverse.schemas import SessionResult


RING_RADIUS = 120
RING_CIRCUMFERENCE = 2 * math.pi * RING_RADIUS


def render_timer_ring(session: FocusSession) -> str:
    """
    Render the countdown as an SVG progress ring.

    The ring turns red when the session is urgent (active, under a minute left).
    """
    offset = RING_CIRCUMFERENCE - RING_CIRCUMFERENCE * session.progress_percent / 100
    stroke = "#ef4444" if session.is_urgent else "#58cc02"
    label = "Stay Focused" if session.is_active else "Ready?"
    size = RING_RADIUS * 2 + 48
    center = size // 2

    return f"""
    <div style="position: relative; width: {size}px; height: {size}px; margin: 0 auto;">
      <svg width="{size}" height="{size}" style="transform: rotate(-90deg);">
        <circle cx="{center}" cy="{center}" r="{RING_RADIUS}" stroke="#1f2937"
                stroke-width="16" fill="transparent" />
        <circle cx="{center}" cy="{center}" r="{RING_RADIUS}" stroke="{stroke}"
                stroke-width="16" fill="transparent" stroke-linecap="round"
                stroke-dasharray="{RING_CIRCUMFERENCE:.2f}" stroke-dashoffset="{offset:.2f}" />
      </svg>
      <div style="position: absolute; inset: 0; display: flex; flex-direction: column;
                  align-items: center; justify-content: center;">
        <div style="font-size: 3.5em; font-family: monospace; font-weight: 700;">
          {format_time(session.remaining_seconds)}
        </div>
        <div style="font-size: 0.8em; text-transform: uppercase; letter-spacing: 0.2em;">{label}</div>
      </div>
    </div>
    """


def celebration_message(title: str, result: SessionResult) -> str:
    """Markdown shown when a session finishes, with the XP actually awarded."""
    message = f"**{title}** complete! +{result.xp_awarded} XP"
    if result.user is None:
        message += " (set up a profile to keep your XP)"
    return message
