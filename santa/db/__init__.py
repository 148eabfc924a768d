from santa.db.models import (
    Assignment,
    Base,
    Exclusion,
    Group,
    GroupStatus,
    User,
    group_admins,
    group_members,
)
from santa.db.session import SessionLocal, get_session, init_engine, session_scope

__all__ = [
    "Assignment",
    "Base",
    "Exclusion",
    "Group",
    "GroupStatus",
    "User",
    "group_admins",
    "group_members",
    "SessionLocal",
    "get_session",
    "init_engine",
    "session_scope",
]
