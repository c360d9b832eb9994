"""Credibility cache with time-based expiry.

This module provides:
- CacheEntry, the stored summary of one computed breakdown
- CredibilityCache, the abstract keyed store injected into the service
- InMemoryCredibilityCache and SQLiteCredibilityCache implementations

Expiry is computed here from the TTL; backends only persist ``expires_at``.
Writers upsert by user id and the last write wins.
"""

from __future__ import annotations

import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.credibility.models import CredibilityScoreBreakdown
from src.models import CredibilitySummary
from src.scoring import credibility_label
from src.store.db import SQLiteDB

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS user_credibility_cache (
    user_id TEXT PRIMARY KEY,
    credibility_score INTEGER NOT NULL,
    confidence_multiplier REAL NOT NULL,
    final_rank_score INTEGER NOT NULL,
    skill_evidence_score INTEGER NOT NULL,
    execution_proof_score INTEGER NOT NULL,
    social_validation_score INTEGER NOT NULL,
    reliability_score INTEGER NOT NULL,
    consistency_score INTEGER NOT NULL,
    data_points_count INTEGER NOT NULL,
    last_computed TEXT NOT NULL,
    expires_at TEXT NOT NULL
);
"""


class CacheWriteError(Exception):
    """Raised when a cache entry cannot be persisted."""

    pass


class CacheEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    credibility_score: int = Field(ge=0, le=100)
    confidence_multiplier: float = Field(ge=0.1, le=1.0)
    final_rank_score: int = Field(ge=0, le=100)
    skill_evidence_score: int = Field(ge=0, le=100)
    execution_proof_score: int = Field(ge=0, le=100)
    social_validation_score: int = Field(ge=0, le=100)
    reliability_score: int = Field(ge=0, le=100)
    consistency_score: int = Field(ge=0, le=100)
    data_points_count: int = Field(ge=0)
    last_computed: str  # ISO8601
    expires_at: str  # ISO8601

    def summary(self) -> CredibilitySummary:
        return CredibilitySummary(
            credibility_score=self.credibility_score,
            final_rank_score=self.final_rank_score,
            label=credibility_label(self.final_rank_score),
            confidence_multiplier=self.confidence_multiplier,
        )


class CredibilityCache(ABC):
    """Keyed credibility store with a fixed TTL."""

    DEFAULT_TTL_SECONDS = 3600  # 1 hour

    def __init__(self, ttl_seconds: int | None = None) -> None:
        self.ttl_seconds = ttl_seconds or self.DEFAULT_TTL_SECONDS

    @abstractmethod
    def get(self, user_id: str) -> CacheEntry | None:
        """Return the stored entry for ``user_id`` regardless of expiry."""
        ...

    @abstractmethod
    def set(self, entry: CacheEntry) -> None:
        """Upsert ``entry`` by user id."""
        ...

    def is_expired(self, entry: CacheEntry, now: datetime | None = None) -> bool:
        now = now or datetime.now(UTC)
        try:
            expires_at = datetime.fromisoformat(entry.expires_at)
        except ValueError:
            return True
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= now

    def get_live(self, user_id: str, now: datetime | None = None) -> CacheEntry | None:
        """Return the entry for ``user_id`` only if it has not expired."""
        entry = self.get(user_id)
        if entry is None or self.is_expired(entry, now):
            return None
        return entry

    def build_entry(
        self,
        user_id: str,
        breakdown: CredibilityScoreBreakdown,
        now: datetime | None = None,
    ) -> CacheEntry:
        now = now or datetime.now(UTC)
        pillars = breakdown.pillars
        return CacheEntry(
            user_id=user_id,
            credibility_score=breakdown.credibility_score,
            confidence_multiplier=breakdown.confidence_multiplier,
            final_rank_score=breakdown.final_rank_score,
            skill_evidence_score=pillars.skill_evidence.score,
            execution_proof_score=pillars.execution_proof.score,
            social_validation_score=pillars.social_validation.score,
            reliability_score=pillars.reliability.score,
            consistency_score=pillars.consistency.score,
            data_points_count=breakdown.data_points_count,
            last_computed=now.isoformat(),
            expires_at=(now + timedelta(seconds=self.ttl_seconds)).isoformat(),
        )


class InMemoryCredibilityCache(CredibilityCache):
    """Process-local cache backed by a dict."""

    def __init__(self, ttl_seconds: int | None = None) -> None:
        super().__init__(ttl_seconds)
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> CacheEntry | None:
        with self._lock:
            return self._entries.get(user_id)

    def set(self, entry: CacheEntry) -> None:
        with self._lock:
            self._entries[entry.user_id] = entry


class SQLiteCredibilityCache(CredibilityCache):
    """Cache persisted in the ``user_credibility_cache`` table."""

    def __init__(self, db_path: str, ttl_seconds: int | None = None) -> None:
        super().__init__(ttl_seconds)
        self._db = SQLiteDB(db_path, SCHEMA_SQL)

    @classmethod
    def from_env(cls, db_path: str) -> SQLiteCredibilityCache:
        """Create a cache with its TTL taken from the environment."""
        ttl = int(os.environ.get("CREDIBILITY_CACHE_TTL_SECONDS", str(cls.DEFAULT_TTL_SECONDS)))
        return cls(db_path=db_path, ttl_seconds=ttl)

    def get(self, user_id: str) -> CacheEntry | None:
        row = self._db.fetch_one(
            "SELECT * FROM user_credibility_cache WHERE user_id = ?", (user_id,),
        )
        if row is None:
            return None
        return self._row_to_entry(row)

    def set(self, entry: CacheEntry) -> None:
        data = entry.model_dump()
        columns = list(data)
        updates = ", ".join(f"{c}=excluded.{c}" for c in columns if c != "user_id")
        try:
            self._db.execute(
                f"""INSERT INTO user_credibility_cache ({", ".join(columns)})
                    VALUES ({", ".join("?" * len(columns))})
                    ON CONFLICT(user_id) DO UPDATE SET {updates}""",
                tuple(data[c] for c in columns),
            )
        except Exception as exc:
            raise CacheWriteError(f"Failed to cache credibility for {entry.user_id}") from exc

    def close(self) -> None:
        self._db.close()

    def _row_to_entry(self, row: dict[str, Any]) -> CacheEntry | None:
        try:
            return CacheEntry(**row)
        except ValidationError as exc:
            logger.warning("Ignoring corrupt cache row for %s: %s", row.get("user_id"), exc)
            return None
