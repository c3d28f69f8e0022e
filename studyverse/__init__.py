"""
StudyVerse - Gamified study planner.

Turns a syllabus into a map of lesson levels that unlock one after another
as timed focus sessions are completed, rewarding XP and daily streaks.
"""

__version__ = "0.1.0"
