from __future__ import annotations

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class GroupStatus(str, enum.Enum):
    OPEN = "open"
    CLOSED = "closed"
    ASSIGNED = "assigned"


group_members = Table(
    "group_members",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    UniqueConstraint("user_id", "group_id", name="uq_group_members_user_group"),
)

group_admins = Table(
    "group_admins",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("group_id", Integer, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True),
    UniqueConstraint("user_id", "group_id", name="uq_group_admins_user_group"),
)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    groups = relationship("Group", secondary=group_members, back_populates="members")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"


class Group(Base):
    __tablename__ = "groups"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False, index=True)
    creator_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(
        Enum(GroupStatus, name="group_status"),
        nullable=False,
        default=GroupStatus.OPEN,
        server_default=GroupStatus.OPEN.name,
    )
    # Bumped on every mutation. Flushes carry "WHERE version = <read version>",
    # so a write based on an outdated read fails with StaleDataError.
    version = Column(Integer, nullable=False, default=0, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    assigned_at = Column(DateTime(timezone=True), nullable=True)

    creator = relationship("User", foreign_keys=[creator_id])
    members = relationship(
        "User", secondary=group_members, back_populates="groups", order_by="User.id"
    )
    admins = relationship("User", secondary=group_admins, order_by="User.id")
    exclusions = relationship(
        "Exclusion", back_populates="group", cascade="all, delete-orphan", order_by="Exclusion.id"
    )
    assignments = relationship("Assignment", back_populates="group", cascade="all, delete-orphan")

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    def __repr__(self) -> str:
        return f"<Group(id={self.id}, name={self.name}, status={self.status}, version={self.version})>"


class Exclusion(Base):
    __tablename__ = "exclusions"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    giver_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    symmetric = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    group = relationship("Group", back_populates="exclusions")
    giver = relationship("User", foreign_keys=[giver_user_id])
    receiver = relationship("User", foreign_keys=[receiver_user_id])


class Assignment(Base):
    __tablename__ = "assignments"

    id = Column(Integer, primary_key=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    giver_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    group = relationship("Group", back_populates="assignments")
    giver = relationship("User", foreign_keys=[giver_user_id])
    receiver = relationship("User", foreign_keys=[receiver_user_id])

    __table_args__ = (
        UniqueConstraint("group_id", "giver_user_id", name="uq_assignments_group_giver"),
        UniqueConstraint("group_id", "receiver_user_id", name="uq_assignments_group_receiver"),
    )
