"""
ProgressStore - Persist the user profile and lesson map.

Exactly two records are stored, each replaced wholesale on write:
- studyverse_user: the single User profile
- studyverse_lessons: the ordered Lesson collection

Records are kept as versioned JSON payloads in a small key-value table
(~/.studyverse/studyverse.db by default). Callers read, mutate and write
back whole records inside ProgressStore.locked(key).
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional, Protocol

from pydantic import TypeAdapter

from studyverse.config import DEFAULT_DB_PATH
from studyverse.schemas import Lesson, User


logger = logging.getLogger(__name__)

USER_KEY = "studyverse_user"
LESSONS_KEY = "studyverse_lessons"

SCHEMA_VERSION = 1

_LESSON_LIST = TypeAdapter(list[Lesson])


class RecordStore(Protocol):
    """Raw get/set storage for serialized records."""

    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, payload: str) -> None:
        ...


class MemoryRecordStore:
    """In-process record store, useful for tests and throwaway sessions."""

    def __init__(self):
        self._records: dict[str, str] = {}

    def load(self, key: str) -> Optional[str]:
        return self._records.get(key)

    def save(self, key: str, payload: str) -> None:
        self._records[key] = payload


class SQLiteRecordStore:
    """
    Record store backed by a single SQLite table.

    Each method opens its own connection, so the store can be shared with
    the countdown timer thread.
    """

    def __init__(self, db_path: Optional[Path] = None):
        """
        Initialize the store.

        Args:
            db_path: Path to the database file (default: ~/.studyverse/studyverse.db)
        """
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._ensure_database()

    def _ensure_database(self):
        """Create database and table if they don't exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(self.db_path))
        try:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS records (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
            """)
            conn.commit()
        finally:
            conn.close()

    def _get_connection(self) -> sqlite3.Connection:
        """Get a new database connection."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        return conn

    def load(self, key: str) -> Optional[str]:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT value FROM records WHERE key = ?", (key,)
            ).fetchone()
            return row["value"] if row else None
        finally:
            conn.close()

    def save(self, key: str, payload: str) -> None:
        conn = self._get_connection()
        try:
            now = datetime.now().isoformat()
            conn.execute(
                """INSERT INTO records (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                     value = excluded.value,
                     updated_at = excluded.updated_at""",
                (key, payload, now)
            )
            conn.commit()
        finally:
            conn.close()


class ProgressStore:
    """
    Typed repository over a RecordStore.

    Absence of a record is a normal "not set up yet" state: load_user()
    returns None and load_lessons() returns an empty list.
    """

    def __init__(self, records: Optional[RecordStore] = None):
        """
        Args:
            records: Backing record store (default: SQLiteRecordStore at the default path)
        """
        self.records = records if records is not None else SQLiteRecordStore()
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def open(cls, db_path: Optional[Path] = None) -> "ProgressStore":
        """Open a SQLite-backed store."""
        return cls(SQLiteRecordStore(db_path))

    @contextmanager
    def locked(self, key: str) -> Iterator[None]:
        """Hold the per-record lock for a read-modify-write cycle."""
        with self._locks_guard:
            lock = self._locks.setdefault(key, threading.Lock())
        with lock:
            yield

    # -------------------------------------------------------------------------
    # Envelope
    # -------------------------------------------------------------------------

    def _read(self, key: str) -> Optional[object]:
        payload = self.records.load(key)
        if payload is None:
            return None

        envelope = json.loads(payload)
        version = int(envelope.get("schema_version", 0))
        if version > SCHEMA_VERSION:
            raise RuntimeError(
                f"Record '{key}' has schema version {version}, newer than supported {SCHEMA_VERSION}."
            )
        return envelope["data"]

    def _write(self, key: str, data: object):
        envelope = {"schema_version": SCHEMA_VERSION, "data": data}
        self.records.save(key, json.dumps(envelope, ensure_ascii=False))

    # -------------------------------------------------------------------------
    # User
    # -------------------------------------------------------------------------

    def load_user(self) -> Optional[User]:
        data = self._read(USER_KEY)
        if data is None:
            return None
        return User.model_validate(data)

    def save_user(self, user: User):
        self._write(USER_KEY, user.model_dump(mode="json"))
        logger.debug(f"Saved user {user.id} (xp={user.xp}, streak={user.streak})")

    # -------------------------------------------------------------------------
    # Lessons
    # -------------------------------------------------------------------------

    def load_lessons(self) -> list[Lesson]:
        data = self._read(LESSONS_KEY)
        if data is None:
            return []
        return _LESSON_LIST.validate_python(data)

    def save_lessons(self, lessons: list[Lesson]):
        self._write(LESSONS_KEY, _LESSON_LIST.dump_python(lessons, mode="json"))
        logger.debug(f"Saved {len(lessons)} lessons")
