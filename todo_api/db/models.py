"""SQLAlchemy models for identity (users, roles, one-time codes) and to-do data."""
from __future__ import annotations

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .session import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(256), nullable=False)
    normalized_email = Column(String(256), unique=True, nullable=False, index=True)
    username = Column(String(256), nullable=False)
    normalized_username = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=False)
    email_confirmed = Column(Boolean, default=False, nullable=False)
    security_stamp = Column(String(64), nullable=False)
    access_failed_count = Column(Integer, default=0, nullable=False)
    lockout_end = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owned_lists = relationship("TodoList", back_populates="owner", cascade="all,delete-orphan")
    sharings = relationship("Sharing", back_populates="user", cascade="all,delete-orphan")


class Role(Base):
    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(256), nullable=False)
    normalized_name = Column(String(256), unique=True, nullable=False)


class UserRole(Base):
    __tablename__ = "user_roles"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_id = Column(String(36), ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True)


class UserToken(Base):
    __tablename__ = "user_tokens"

    code = Column(String(255), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    purpose = Column(String(64), nullable=False)
    security_stamp = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class TodoList(Base):
    __tablename__ = "todo_lists"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    owner = relationship("User", back_populates="owned_lists")
    items = relationship("TodoItem", back_populates="todo_list", cascade="all,delete-orphan")
    sharings = relationship("Sharing", back_populates="todo_list", cascade="all,delete-orphan")


class TodoItem(Base):
    __tablename__ = "todo_items"

    id = Column(String(36), primary_key=True, default=_new_id)
    list_id = Column(String(36), ForeignKey("todo_lists.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    position = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    todo_list = relationship("TodoList", back_populates="items")


class Sharing(Base):
    __tablename__ = "sharings"

    list_id = Column(String(36), ForeignKey("todo_lists.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    todo_list = relationship("TodoList", back_populates="sharings")
    user = relationship("User", back_populates="sharings")
