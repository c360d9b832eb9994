"""Record store for profiles, projects, memberships, invites and activity.

This module provides:
- RecordStore, the read interface the scoring services depend on
- SQLiteRecordStore, a SQLite-backed implementation with insert helpers

Stored rows are read leniently: a null or corrupt list column reads as an
empty list, an unknown enum value falls back to its default, and a row
that still cannot be parsed is skipped with a warning.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Protocol, TypeVar

from pydantic import BaseModel, ValidationError

from src.models import (
    InviteStatus,
    ProficiencyLevel,
    ProjectRole,
    ProjectStatus,
    VerificationType,
)
from src.store.db import SQLiteDB, placeholders
from src.store.models import (
    ActivityEntry,
    Endorsement,
    Invite,
    Membership,
    Profile,
    Project,
    SkillVerification,
)

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS profiles (
    id TEXT PRIMARY KEY,
    username TEXT,
    full_name TEXT,
    avatar_url TEXT,
    github_username TEXT,
    bio TEXT,
    role TEXT,
    skills_json TEXT,
    availability TEXT,
    timezone TEXT,
    portfolio_url TEXT,
    website TEXT,
    created_at TEXT,
    updated_at TEXT
);

CREATE TABLE IF NOT EXISTS projects (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    title TEXT,
    description TEXT,
    status TEXT,
    required_skills_json TEXT,
    team_size INTEGER,
    availability_required TEXT,
    timezone_preferred TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_projects_owner ON projects(owner_id);

CREATE TABLE IF NOT EXISTS project_members (
    project_id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    role TEXT,
    PRIMARY KEY (project_id, user_id)
);

CREATE INDEX IF NOT EXISTS idx_members_user ON project_members(user_id);

CREATE TABLE IF NOT EXISTS endorsements (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    endorser_id TEXT NOT NULL,
    endorsed_id TEXT NOT NULL,
    skill_name TEXT,
    project_id TEXT
);

CREATE INDEX IF NOT EXISTS idx_endorsements_endorsed ON endorsements(endorsed_id);

CREATE TABLE IF NOT EXISTS project_invites (
    id TEXT PRIMARY KEY,
    project_id TEXT NOT NULL,
    sender_id TEXT NOT NULL,
    receiver_id TEXT NOT NULL,
    status TEXT,
    message TEXT,
    created_at TEXT
);

CREATE INDEX IF NOT EXISTS idx_invites_receiver ON project_invites(receiver_id);

CREATE TABLE IF NOT EXISTS skill_verifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    skill_name TEXT NOT NULL,
    verification_type TEXT,
    proficiency TEXT
);

CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    action_type TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_activity_user ON activity_log(user_id, created_at);
"""

ModelT = TypeVar("ModelT", bound=BaseModel)
EnumT = TypeVar("EnumT", bound=Enum)


class RecordStore(Protocol):
    """Read interface over the persistent records used for scoring."""

    def get_profile(self, user_id: str) -> Profile | None: ...

    def get_profiles(self, user_ids: Iterable[str]) -> list[Profile]: ...

    def list_profiles(self, exclude_ids: Iterable[str] = ()) -> list[Profile]: ...

    def get_project(self, project_id: str) -> Project | None: ...

    def get_projects(self, project_ids: Iterable[str]) -> list[Project]: ...

    def projects_owned_by(self, user_id: str) -> list[Project]: ...

    def memberships_for_user(self, user_id: str) -> list[Membership]: ...

    def members_of_projects(self, project_ids: Iterable[str]) -> list[Membership]: ...

    def endorsements_for(self, user_id: str) -> list[Endorsement]: ...

    def invites_received(self, user_id: str) -> list[Invite]: ...

    def invites_for_project(
        self, project_id: str, statuses: Iterable[InviteStatus] = (),
    ) -> list[Invite]: ...

    def verifications_for(self, user_id: str) -> list[SkillVerification]: ...

    def activity_for(self, user_id: str) -> list[ActivityEntry]: ...


def _json_list(raw: Any) -> list[str]:
    if raw is None or raw == "":
        return []
    try:
        value = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed list column: %r", raw)
        return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _enum_value(enum_cls: type[EnumT], raw: Any, default: EnumT) -> EnumT:
    try:
        return enum_cls(raw)
    except ValueError:
        return default


def _parse(model: type[ModelT], data: dict[str, Any]) -> ModelT | None:
    try:
        return model(**data)
    except ValidationError as exc:
        logger.warning("Skipping malformed %s record: %s", model.__name__, exc)
        return None


def _parse_all(model: type[ModelT], rows: list[dict[str, Any]]) -> list[ModelT]:
    parsed = (_parse(model, row) for row in rows)
    return [record for record in parsed if record is not None]


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class SQLiteRecordStore:
    """SQLite-backed RecordStore."""

    def __init__(self, db_path: str) -> None:
        self._db = SQLiteDB(db_path, SCHEMA_SQL)

    # --- Row mapping ---

    @staticmethod
    def _profile_data(row: dict[str, Any]) -> dict[str, Any]:
        data = {k: v for k, v in row.items() if k != "skills_json"}
        data["skills"] = _json_list(row.get("skills_json"))
        return data

    @staticmethod
    def _project_data(row: dict[str, Any]) -> dict[str, Any]:
        return {
            "id": row["id"],
            "owner_id": row["owner_id"],
            "title": row.get("title") or "",
            "description": row.get("description") or "",
            "status": _enum_value(ProjectStatus, row.get("status"), ProjectStatus.OPEN),
            "required_skills": _json_list(row.get("required_skills_json")),
            "team_size": row.get("team_size") or 1,
            "availability_required": row.get("availability_required"),
            "timezone_preferred": row.get("timezone_preferred"),
            "created_at": row.get("created_at"),
        }

    @staticmethod
    def _membership_data(row: dict[str, Any]) -> dict[str, Any]:
        return {
            "project_id": row["project_id"],
            "user_id": row["user_id"],
            "role": _enum_value(ProjectRole, row.get("role"), ProjectRole.MEMBER),
        }

    @staticmethod
    def _invite_data(row: dict[str, Any]) -> dict[str, Any]:
        data = dict(row)
        data["status"] = _enum_value(InviteStatus, row.get("status"), InviteStatus.PENDING)
        return data

    @staticmethod
    def _verification_data(row: dict[str, Any]) -> dict[str, Any]:
        return {
            "user_id": row["user_id"],
            "skill_name": row["skill_name"],
            "verification_type": _enum_value(
                VerificationType, row.get("verification_type"), VerificationType.SELF_DECLARED,
            ),
            "proficiency": _enum_value(
                ProficiencyLevel, row.get("proficiency"), ProficiencyLevel.INTERMEDIATE,
            ),
        }

    # --- Reads ---

    def get_profile(self, user_id: str) -> Profile | None:
        row = self._db.fetch_one("SELECT * FROM profiles WHERE id = ?", (user_id,))
        if row is None:
            return None
        return _parse(Profile, self._profile_data(row))

    def get_profiles(self, user_ids: Iterable[str]) -> list[Profile]:
        ids = list(user_ids)
        if not ids:
            return []
        rows = self._db.fetch_all(
            f"SELECT * FROM profiles WHERE id IN ({placeholders(len(ids))})", tuple(ids),
        )
        return _parse_all(Profile, [self._profile_data(r) for r in rows])

    def list_profiles(self, exclude_ids: Iterable[str] = ()) -> list[Profile]:
        excluded = set(exclude_ids)
        rows = self._db.fetch_all("SELECT * FROM profiles ORDER BY id")
        profiles = _parse_all(Profile, [self._profile_data(r) for r in rows])
        return [p for p in profiles if p.id not in excluded]

    def get_project(self, project_id: str) -> Project | None:
        row = self._db.fetch_one("SELECT * FROM projects WHERE id = ?", (project_id,))
        if row is None:
            return None
        return _parse(Project, self._project_data(row))

    def get_projects(self, project_ids: Iterable[str]) -> list[Project]:
        ids = list(project_ids)
        if not ids:
            return []
        rows = self._db.fetch_all(
            f"SELECT * FROM projects WHERE id IN ({placeholders(len(ids))})", tuple(ids),
        )
        return _parse_all(Project, [self._project_data(r) for r in rows])

    def projects_owned_by(self, user_id: str) -> list[Project]:
        rows = self._db.fetch_all("SELECT * FROM projects WHERE owner_id = ?", (user_id,))
        return _parse_all(Project, [self._project_data(r) for r in rows])

    def memberships_for_user(self, user_id: str) -> list[Membership]:
        rows = self._db.fetch_all(
            "SELECT * FROM project_members WHERE user_id = ?", (user_id,),
        )
        return _parse_all(Membership, [self._membership_data(r) for r in rows])

    def members_of_projects(self, project_ids: Iterable[str]) -> list[Membership]:
        ids = list(project_ids)
        if not ids:
            return []
        rows = self._db.fetch_all(
            f"SELECT * FROM project_members WHERE project_id IN ({placeholders(len(ids))})",
            tuple(ids),
        )
        return _parse_all(Membership, [self._membership_data(r) for r in rows])

    def endorsements_for(self, user_id: str) -> list[Endorsement]:
        rows = self._db.fetch_all(
            """SELECT endorser_id, endorsed_id, skill_name, project_id
               FROM endorsements WHERE endorsed_id = ?""",
            (user_id,),
        )
        return _parse_all(Endorsement, rows)

    def invites_received(self, user_id: str) -> list[Invite]:
        rows = self._db.fetch_all(
            "SELECT * FROM project_invites WHERE receiver_id = ?", (user_id,),
        )
        return _parse_all(Invite, [self._invite_data(r) for r in rows])

    def invites_for_project(
        self, project_id: str, statuses: Iterable[InviteStatus] = (),
    ) -> list[Invite]:
        rows = self._db.fetch_all(
            "SELECT * FROM project_invites WHERE project_id = ?", (project_id,),
        )
        invites = _parse_all(Invite, [self._invite_data(r) for r in rows])
        wanted = set(statuses)
        if not wanted:
            return invites
        return [i for i in invites if i.status in wanted]

    def verifications_for(self, user_id: str) -> list[SkillVerification]:
        rows = self._db.fetch_all(
            "SELECT * FROM skill_verifications WHERE user_id = ?", (user_id,),
        )
        return _parse_all(SkillVerification, [self._verification_data(r) for r in rows])

    def activity_for(self, user_id: str) -> list[ActivityEntry]:
        rows = self._db.fetch_all(
            """SELECT user_id, action_type, created_at FROM activity_log
               WHERE user_id = ? ORDER BY created_at ASC""",
            (user_id,),
        )
        return _parse_all(ActivityEntry, rows)

    # --- Writes ---

    def add_profile(self, profile: Profile) -> None:
        self._db.execute(
            """INSERT INTO profiles
               (id, username, full_name, avatar_url, github_username, bio, role,
                skills_json, availability, timezone, portfolio_url, website,
                created_at, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                 username=excluded.username, full_name=excluded.full_name,
                 avatar_url=excluded.avatar_url, github_username=excluded.github_username,
                 bio=excluded.bio, role=excluded.role, skills_json=excluded.skills_json,
                 availability=excluded.availability, timezone=excluded.timezone,
                 portfolio_url=excluded.portfolio_url, website=excluded.website,
                 created_at=excluded.created_at, updated_at=excluded.updated_at""",
            (
                profile.id,
                profile.username,
                profile.full_name,
                profile.avatar_url,
                profile.github_username,
                profile.bio,
                profile.role,
                json.dumps(profile.skills),
                profile.availability,
                profile.timezone,
                profile.portfolio_url,
                profile.website,
                profile.created_at or _now_iso(),
                profile.updated_at or profile.created_at or _now_iso(),
            ),
        )

    def add_project(self, project: Project) -> None:
        self._db.execute(
            """INSERT INTO projects
               (id, owner_id, title, description, status, required_skills_json,
                team_size, availability_required, timezone_preferred, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                 owner_id=excluded.owner_id, title=excluded.title,
                 description=excluded.description, status=excluded.status,
                 required_skills_json=excluded.required_skills_json,
                 team_size=excluded.team_size,
                 availability_required=excluded.availability_required,
                 timezone_preferred=excluded.timezone_preferred""",
            (
                project.id,
                project.owner_id,
                project.title,
                project.description,
                project.status.value,
                json.dumps(project.required_skills),
                project.team_size,
                project.availability_required,
                project.timezone_preferred,
                project.created_at or _now_iso(),
            ),
        )

    def add_membership(self, membership: Membership) -> None:
        self._db.execute(
            """INSERT INTO project_members (project_id, user_id, role)
               VALUES (?, ?, ?)
               ON CONFLICT(project_id, user_id) DO UPDATE SET role=excluded.role""",
            (membership.project_id, membership.user_id, membership.role.value),
        )

    def add_endorsement(self, endorsement: Endorsement) -> None:
        self._db.execute(
            """INSERT INTO endorsements (endorser_id, endorsed_id, skill_name, project_id)
               VALUES (?, ?, ?, ?)""",
            (
                endorsement.endorser_id,
                endorsement.endorsed_id,
                endorsement.skill_name,
                endorsement.project_id,
            ),
        )

    def add_invite(self, invite: Invite) -> None:
        self._db.execute(
            """INSERT INTO project_invites
               (id, project_id, sender_id, receiver_id, status, message, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET status=excluded.status""",
            (
                invite.id,
                invite.project_id,
                invite.sender_id,
                invite.receiver_id,
                invite.status.value,
                invite.message,
                invite.created_at or _now_iso(),
            ),
        )

    def add_verification(self, verification: SkillVerification) -> None:
        self._db.execute(
            """INSERT INTO skill_verifications
               (user_id, skill_name, verification_type, proficiency)
               VALUES (?, ?, ?, ?)""",
            (
                verification.user_id,
                verification.skill_name,
                verification.verification_type.value,
                verification.proficiency.value,
            ),
        )

    def add_activity(self, entry: ActivityEntry) -> None:
        self._db.execute(
            "INSERT INTO activity_log (user_id, action_type, created_at) VALUES (?, ?, ?)",
            (entry.user_id, entry.action_type, entry.created_at),
        )

    def close(self) -> None:
        self._db.close()

    def __enter__(self) -> SQLiteRecordStore:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        self.close()
