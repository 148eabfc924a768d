from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from santa.db import Group, GroupStatus, User, repo
from santa.services.constraints import Constraint, Exclude, ExcludePair


class GroupError(RuntimeError):
    pass


class StaleSnapshotError(GroupError):
    def __init__(self, group_name: str, expected: int, actual: int) -> None:
        super().__init__(
            f"Group {group_name} changed while drawing (version {expected} -> {actual})."
        )
        self.group_name = group_name
        self.expected = expected
        self.actual = actual


@dataclass(frozen=True)
class JoinResult:
    added: bool
    message: str


@dataclass(frozen=True)
class GroupSnapshot:
    group_name: str
    version: int
    participants: Tuple[str, ...]
    constraints: Tuple[Constraint, ...]


def ensure_user(session, name: str) -> User:
    return repo.get_or_create_user(session, name)


def _require_group(session, group_name: str) -> Group:
    group = repo.get_group_by_name(session, group_name)
    if not group:
        raise GroupError(f"Group {group_name} does not exist")
    return group


def _require_user(session, name: str) -> User:
    user = repo.get_user_by_name(session, name)
    if not user:
        raise GroupError(f"User {name} does not exist")
    return user


def _require_admin(session, group: Group, actor: str) -> User:
    user = _require_user(session, actor)
    if user not in group.admins:
        raise GroupError(f"User {actor} is not an admin of group {group.name}")
    return user


def _require_member(group: Group, user: User) -> None:
    if user not in group.members:
        raise GroupError(f"User {user.name} is not a member of group {group.name}")


def create_group(session, group_name: str, creator: str) -> Group:
    if repo.get_group_by_name(session, group_name):
        raise GroupError(f"Group {group_name} already exists")
    user = _require_user(session, creator)
    try:
        group = repo.create_group(session, group_name, user)
    except IntegrityError as exc:
        raise GroupError(f"Group {group_name} already exists") from exc
    logger.bind(group=group_name, creator=creator).info("Group created")
    return group


def join_group(session, group_name: str, user_name: str) -> JoinResult:
    group = _require_group(session, group_name)
    user = _require_user(session, user_name)

    if group.status == GroupStatus.ASSIGNED:
        return JoinResult(False, f"Secret Santa for {group_name} has already been drawn.")
    if user in group.members:
        return JoinResult(False, f"User {user_name} is already a member of group {group_name}")
    if group.status == GroupStatus.CLOSED:
        return JoinResult(False, f"Group {group_name} is closed")

    repo.add_member(session, group, user)
    repo.touch_group(session, group)
    logger.bind(group=group_name, user=user_name).info("User joined group")
    return JoinResult(True, f"User {user_name} joined group {group_name}")


def leave_group(session, group_name: str, user_name: str) -> None:
    group = _require_group(session, group_name)
    user = _require_user(session, user_name)
    _require_member(group, user)

    if group.status == GroupStatus.ASSIGNED:
        raise GroupError(f"Secret Santa for {group_name} has already been drawn. Reset it first.")
    if group.admins == [user] and len(group.members) > 1:
        raise GroupError(
            f"User {user_name} is the only admin of group {group_name}. Assign another admin first."
        )

    repo.remove_member(session, group, user)
    if not group.members:
        repo.delete_group(session, group)
        logger.bind(group=group_name, user=user_name).info("Last member left, group deleted")
        return
    repo.touch_group(session, group)
    logger.bind(group=group_name, user=user_name).info("User left group")


def assign_admin(session, group_name: str, actor: str, new_admin: str) -> None:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    user = _require_user(session, new_admin)
    _require_member(group, user)
    if user in group.admins:
        raise GroupError(f"User {new_admin} is already an admin of group {group_name}")

    repo.add_admin(session, group, user)
    repo.touch_group(session, group)
    logger.bind(group=group_name, actor=actor, admin=new_admin).info("Admin assigned")


def resign_admin(session, group_name: str, actor: str) -> None:
    group = _require_group(session, group_name)
    user = _require_admin(session, group, actor)
    if len(group.admins) == 1:
        raise GroupError(
            f"User {actor} cannot resign their admin status because they are the only admin "
            f"of group {group_name}"
        )

    repo.remove_admin(session, group, user)
    repo.touch_group(session, group)
    logger.bind(group=group_name, actor=actor).info("Admin resigned")


def close_group(session, group_name: str, actor: str) -> bool:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    if group.status != GroupStatus.OPEN:
        return False
    repo.update_group_status(session, group, GroupStatus.CLOSED)
    repo.touch_group(session, group)
    return True


def reopen_group(session, group_name: str, actor: str) -> bool:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    if group.status != GroupStatus.CLOSED:
        return False
    repo.update_group_status(session, group, GroupStatus.OPEN)
    repo.touch_group(session, group)
    return True


def add_exclusion(
    session,
    group_name: str,
    actor: str,
    giver: str,
    recipient: str,
    symmetric: bool = False,
) -> None:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    giver_user = _require_user(session, giver)
    recipient_user = _require_user(session, recipient)
    _require_member(group, giver_user)
    _require_member(group, recipient_user)
    if giver_user == recipient_user:
        raise GroupError("Nobody can draw themselves; that exclusion is implied.")

    repo.add_exclusion(session, group, giver_user, recipient_user, symmetric)
    repo.touch_group(session, group)
    logger.bind(group=group_name, giver=giver, recipient=recipient, symmetric=symmetric).info(
        "Exclusion added"
    )


def _constraints_for(session, group: Group) -> List[Constraint]:
    constraints: List[Constraint] = []
    for exclusion in repo.list_exclusions(session, group.id):
        if exclusion.symmetric:
            constraints.append(ExcludePair(exclusion.giver.name, exclusion.receiver.name))
        else:
            constraints.append(Exclude(exclusion.giver.name, exclusion.receiver.name))
    return constraints


def snapshot_group(session, group_name: str, actor: str) -> GroupSnapshot:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    if group.status == GroupStatus.ASSIGNED:
        raise GroupError(f"Secret Santa for {group_name} has already been drawn.")

    return GroupSnapshot(
        group_name=group.name,
        version=group.version,
        participants=tuple(member.name for member in group.members),
        constraints=tuple(_constraints_for(session, group)),
    )


def commit_assignment(session, snapshot: GroupSnapshot, pairs: Sequence[Tuple[str, str]]) -> None:
    group = _require_group(session, snapshot.group_name)
    if group.version != snapshot.version or group.status == GroupStatus.ASSIGNED:
        raise StaleSnapshotError(snapshot.group_name, snapshot.version, group.version)

    users: Dict[str, User] = {member.name: member for member in group.members}
    assignments = {users[giver].id: users[recipient].id for giver, recipient in pairs}
    repo.create_assignments(session, group.id, assignments)
    repo.update_group_status(
        session,
        group,
        GroupStatus.ASSIGNED,
        assigned_at=datetime.datetime.now(datetime.timezone.utc),
    )
    repo.touch_group(session, group)
    try:
        # The version UPDATE only matches the row this session read.
        session.flush()
    except StaleDataError as exc:
        raise StaleSnapshotError(snapshot.group_name, snapshot.version, group.version) from exc
    except IntegrityError as exc:
        raise GroupError(f"Secret Santa assignments already exist for group {group.name}.") from exc
    logger.bind(group=group.name, version=group.version).info("Assignments committed")


def get_recipient(session, group_name: str, user_name: str) -> Optional[str]:
    group = _require_group(session, group_name)
    user = _require_user(session, user_name)
    _require_member(group, user)
    assignment = repo.get_assignment_for_giver(session, group.id, user.id)
    return assignment.receiver.name if assignment else None


def reset_group(session, group_name: str, actor: str) -> bool:
    group = _require_group(session, group_name)
    _require_admin(session, group, actor)
    if group.status != GroupStatus.ASSIGNED:
        return False
    repo.clear_assignments(session, group.id)
    repo.update_group_status(session, group, GroupStatus.OPEN, assigned_at=None)
    repo.touch_group(session, group)
    logger.bind(group=group_name, actor=actor).info("Group reset")
    return True
