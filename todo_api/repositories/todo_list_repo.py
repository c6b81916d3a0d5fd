"""To-do list persistence and sharing helpers."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from todo_api.db.models import Sharing, TodoList


class TodoListRepository:
    """List access scoped to a unit-of-work session; callers commit via save()."""

    def __init__(self, session: Session):
        self.session = session

    def create_list(self, owner_id: str, title: str) -> TodoList:
        now = datetime.now(timezone.utc)
        entity = TodoList(owner_id=owner_id, title=title, created_at=now, updated_at=now)
        self.session.add(entity)
        self.session.flush()
        return entity

    def get_list(self, list_id: str) -> Optional[TodoList]:
        return self.session.get(TodoList, list_id)

    def lists_for_user(self, user_id: str) -> list[TodoList]:
        shared = select(Sharing.list_id).where(Sharing.user_id == user_id)
        stmt = (
            select(TodoList)
            .where(or_(TodoList.owner_id == user_id, TodoList.id.in_(shared)))
            .order_by(TodoList.created_at, TodoList.title)
        )
        return list(self.session.execute(stmt).scalars().all())

    def remove_list(self, list_id: str) -> bool:
        entity = self.get_list(list_id)
        if entity is None:
            return False
        self.session.delete(entity)
        return True

    def share_list(self, list_id: str, user_id: str) -> bool:
        """Grant access; returns False when the user already has it."""
        if self.session.get(Sharing, (list_id, user_id)) is not None:
            return False
        self.session.add(Sharing(list_id=list_id, user_id=user_id, created_at=datetime.now(timezone.utc)))
        return True

    def user_can_access(self, list_id: str, user_id: str) -> bool:
        entity = self.get_list(list_id)
        if entity is None:
            return False
        if entity.owner_id == user_id:
            return True
        return self.session.get(Sharing, (list_id, user_id)) is not None

    def save(self) -> bool:
        self.session.commit()
        return True
