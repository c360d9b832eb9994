"""Record storage for profiles, projects and activity."""

from src.store.db import SQLiteDB
from src.store.models import (
    ActivityEntry,
    Endorsement,
    Invite,
    Membership,
    Profile,
    Project,
    SkillVerification,
)
from src.store.records import RecordStore, SQLiteRecordStore

__all__ = [
    "ActivityEntry",
    "Endorsement",
    "Invite",
    "Membership",
    "Profile",
    "Project",
    "RecordStore",
    "SQLiteDB",
    "SQLiteRecordStore",
    "SkillVerification",
]
