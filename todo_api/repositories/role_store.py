"""Role persistence and membership helpers backed by SQLAlchemy."""
from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from todo_api.db.models import Role, User, UserRole
from todo_api.db.session import get_session
from todo_api.domain.identity import IdentityError, IdentityResult, normalize

logger = logging.getLogger(__name__)


class RoleStore:
    """Named roles and user-role memberships."""

    def role_exists(self, name: str) -> bool:
        return self.find_by_name(name) is not None

    def find_by_name(self, name: str) -> Optional[Role]:
        key = normalize(name)
        if not key:
            return None
        with get_session() as session:
            stmt = select(Role).where(Role.normalized_name == key)
            return session.execute(stmt).scalar_one_or_none()

    def create_role(self, name: str) -> IdentityResult:
        raw = (name or "").strip()
        if not raw:
            return IdentityResult.failed(IdentityError("InvalidRoleName", "Role name is invalid."))
        with get_session() as session:
            session.add(Role(name=raw, normalized_name=normalize(raw)))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return IdentityResult.failed(IdentityError("DuplicateRoleName", f"Role name '{raw}' is already taken."))
        return IdentityResult.success()

    def ensure_roles(self, names: Iterable[str]) -> None:
        """Create the given roles when missing; a concurrent creator winning the insert is fine."""
        for name in names:
            if self.role_exists(name):
                continue
            result = self.create_role(name)
            if result.succeeded:
                logger.info("Seeded role %s", name)
            elif not self.role_exists(name):
                raise RuntimeError(f"Unable to create role {name}: {result.error_dicts()}")

    def add_user_to_role(self, user: User, name: str) -> IdentityResult:
        role = self.find_by_name(name)
        if role is None:
            return IdentityResult.failed(IdentityError("InvalidRoleName", f"Role '{name}' does not exist."))
        with get_session() as session:
            session.add(UserRole(user_id=user.id, role_id=role.id))
            try:
                session.commit()
            except IntegrityError:
                session.rollback()
                return IdentityResult.failed(IdentityError("UserAlreadyInRole", f"User already in role '{name}'."))
        return IdentityResult.success()

    def remove_user_from_role(self, user: User, name: str) -> IdentityResult:
        role = self.find_by_name(name)
        if role is None:
            return IdentityResult.failed(IdentityError("InvalidRoleName", f"Role '{name}' does not exist."))
        with get_session() as session:
            session.execute(delete(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == role.id))
            session.commit()
        return IdentityResult.success()

    def is_in_role(self, user: User, name: str) -> bool:
        key = normalize(name)
        with get_session() as session:
            stmt = (
                select(UserRole.user_id)
                .join(Role, Role.id == UserRole.role_id)
                .where(UserRole.user_id == user.id, Role.normalized_name == key)
                .limit(1)
            )
            return session.execute(stmt).first() is not None

    def roles_for_user(self, user: User) -> list[str]:
        with get_session() as session:
            stmt = (
                select(Role.name)
                .join(UserRole, UserRole.role_id == Role.id)
                .where(UserRole.user_id == user.id)
                .order_by(Role.name)
            )
            return list(session.execute(stmt).scalars().all())
