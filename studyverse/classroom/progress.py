"""
ProgressTracker - XP, streaks and the user profile.

Stores the single local user through ProgressStore:
- Profile creation during setup
- XP awards with once-per-day streak increments
- Avatar updates
- Daily quest progress and the leaderboard for the map
"""

import logging
import time
from datetime import date, datetime
from typing import Callable, Optional

from studyverse.schemas import AvatarConfig, DEFAULT_AVATAR, User
from studyverse.errors import NoProfileError

from .store import USER_KEY, ProgressStore


logger = logging.getLogger(__name__)

QUEST_XP_TARGET = 50
QUEST_STREAK_TARGET = 7

# Fixed rivals shown on the leaderboard: (name, xp, avatar seed)
LEADERBOARD_RIVALS = [
    ("Marcus", 4500, "felix"),
    ("Sarah", 3200, "aneka"),
    ("Jin", 1200, "zack"),
]


def _local_date(moment: datetime) -> date:
    """Calendar day of a timestamp in local time."""
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.date()


class ProgressTracker:
    """
    Track the learner's XP and streak.

    Streaks count calendar days, not elapsed time: the first XP award on a
    new local day adds one, later awards that day add none. Missed days are
    not penalised.
    """

    def __init__(self, store: ProgressStore, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize progress tracker.

        Args:
            store: ProgressStore holding the user profile
            clock: Returns the current local time (default: datetime.now)
        """
        self.store = store
        self.clock = clock or datetime.now

    # -------------------------------------------------------------------------
    # Profile
    # -------------------------------------------------------------------------

    def get_user(self) -> Optional[User]:
        """Get the profile, or None before setup."""
        return self.store.load_user()

    def require_user(self) -> User:
        """Get the profile, raising NoProfileError before setup."""
        user = self.store.load_user()
        if user is None:
            raise NoProfileError()
        return user

    def has_profile(self) -> bool:
        return self.store.load_user() is not None

    def create_profile(
        self,
        hardest_subject: str = "",
        favorite_subject: str = "",
        daily_goal_hours: float = 1.0,
    ) -> User:
        """
        Create the user profile.

        A profile is only ever created once; if one exists it is returned
        unchanged.
        """
        with self.store.locked(USER_KEY):
            existing = self.store.load_user()
            if existing is not None:
                logger.warning(f"Profile {existing.id} already exists; not recreating")
                return existing

            now = self.clock()
            user = User(
                id=f"user-{int(time.time() * 1000)}",
                last_study_date=now,
                hardest_subject=hardest_subject,
                favorite_subject=favorite_subject,
                daily_goal_hours=daily_goal_hours or 1.0,
                avatar_config=DEFAULT_AVATAR.model_copy(),
            )
            self.store.save_user(user)

        logger.info(f"Created profile {user.id} (daily goal {user.daily_goal_hours}h)")
        return user

    def update_avatar(self, config: AvatarConfig) -> User:
        """
        Apply a generated avatar on top of the current one.

        Only the fields set in `config` change; the rest of the look is kept.
        """
        with self.store.locked(USER_KEY):
            user = self.require_user()
            user.avatar_config = user.avatar_config.model_copy(
                update=config.model_dump(exclude_none=True)
            )
            self.store.save_user(user)
        return user

    # -------------------------------------------------------------------------
    # Rewards
    # -------------------------------------------------------------------------

    def add_xp(self, amount: int) -> User:
        """
        Award XP, counting today toward the streak if it is a new day.

        Args:
            amount: XP to add (not validated)

        Returns:
            The updated user

        Raises:
            NoProfileError: If setup has not created a profile
        """
        with self.store.locked(USER_KEY):
            user = self.require_user()

            now = self.clock()
            if _local_date(now) != _local_date(user.last_study_date):
                user.streak += 1
                user.last_study_date = now
                logger.info(f"Streak extended to {user.streak} day(s)")

            user.xp += amount
            self.store.save_user(user)

        logger.info(f"Awarded {amount} XP (total {user.xp})")
        return user

    def get_daily_quests(self) -> list[dict]:
        """
        Get quest board progress for the map.

        Returns:
            List of dicts with title, progress, total and reward
        """
        user = self.get_user()
        xp = user.xp if user else 0
        streak = user.streak if user else 0

        return [
            {"title": f"Earn {QUEST_XP_TARGET} XP", "progress": min(QUEST_XP_TARGET, xp),
             "total": QUEST_XP_TARGET, "reward": "⚡ 10"},
            {"title": "Finish 1 Focus Session", "progress": 0, "total": 1, "reward": "🎁 Chest"},
            {"title": f"{QUEST_STREAK_TARGET} Day Streak", "progress": streak,
             "total": QUEST_STREAK_TARGET, "reward": "🔥 20"},
        ]

    def get_leaderboard(self) -> list[dict]:
        """
        Rank the learner against the fixed rivals by XP.

        Returns:
            Entries sorted by XP (highest first) with rank, name, xp,
            seed (rivals) or avatar_config (the learner) and is_user
        """
        user = self.get_user()
        entries = [
            {"name": name, "xp": xp, "seed": seed, "avatar_config": None, "is_user": False}
            for name, xp, seed in LEADERBOARD_RIVALS
        ]
        entries.append({
            "name": "You",
            "xp": user.xp if user else 0,
            "seed": None,
            "avatar_config": user.avatar_config if user else None,
            "is_user": True,
        })

        entries.sort(key=lambda entry: entry["xp"], reverse=True)
        for rank, entry in enumerate(entries, start=1):
            entry["rank"] = rank
        return entries
