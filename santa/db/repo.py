from __future__ import annotations

import datetime
from typing import List, Optional

from sqlalchemy import and_, delete, or_, select

from santa.db.models import Assignment, Exclusion, Group, GroupStatus, User


def get_user_by_name(session, name: str) -> Optional[User]:
    return session.scalar(select(User).where(User.name == name))


def create_user(session, name: str) -> User:
    user = User(name=name)
    session.add(user)
    session.flush()
    return user


def get_or_create_user(session, name: str) -> User:
    return get_user_by_name(session, name) or create_user(session, name)


def get_group_by_name(session, name: str) -> Optional[Group]:
    return session.scalar(select(Group).where(Group.name == name))


def create_group(session, name: str, creator: User) -> Group:
    group = Group(name=name, creator=creator, status=GroupStatus.OPEN, version=0)
    group.members.append(creator)
    group.admins.append(creator)
    session.add(group)
    session.flush()
    return group


def touch_group(session, group: Group) -> int:
    group.version = (group.version or 0) + 1
    return group.version


def delete_group(session, group: Group) -> None:
    session.delete(group)
    session.flush()


def add_member(session, group: Group, user: User) -> bool:
    if user in group.members:
        return False
    group.members.append(user)
    return True


def remove_member(session, group: Group, user: User) -> bool:
    if user not in group.members:
        return False
    group.members.remove(user)
    if user in group.admins:
        group.admins.remove(user)
    session.execute(
        delete(Exclusion).where(
            and_(
                Exclusion.group_id == group.id,
                or_(Exclusion.giver_user_id == user.id, Exclusion.receiver_user_id == user.id),
            )
        )
    )
    session.expire(group, ["exclusions"])
    return True


def add_admin(session, group: Group, user: User) -> None:
    group.admins.append(user)


def remove_admin(session, group: Group, user: User) -> None:
    group.admins.remove(user)


def update_group_status(
    session,
    group: Group,
    status: GroupStatus,
    assigned_at: Optional[datetime.datetime] = None,
) -> None:
    group.status = status
    group.assigned_at = assigned_at


def add_exclusion(session, group: Group, giver: User, receiver: User, symmetric: bool) -> Exclusion:
    exclusion = Exclusion(group=group, giver=giver, receiver=receiver, symmetric=symmetric)
    session.add(exclusion)
    session.flush()
    return exclusion


def list_exclusions(session, group_id: int) -> List[Exclusion]:
    return list(
        session.scalars(
            select(Exclusion).where(Exclusion.group_id == group_id).order_by(Exclusion.id)
        ).all()
    )


def create_assignments(session, group_id: int, assignments: dict[int, int]) -> None:
    rows = [
        Assignment(group_id=group_id, giver_user_id=giver_id, receiver_user_id=receiver_id)
        for giver_id, receiver_id in assignments.items()
    ]
    session.add_all(rows)


def get_assignment_for_giver(session, group_id: int, giver_user_id: int) -> Optional[Assignment]:
    return session.scalar(
        select(Assignment).where(
            and_(Assignment.group_id == group_id, Assignment.giver_user_id == giver_user_id)
        )
    )


def clear_assignments(session, group_id: int) -> None:
    session.execute(delete(Assignment).where(Assignment.group_id == group_id))
