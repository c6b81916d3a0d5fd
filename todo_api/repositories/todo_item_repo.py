"""
To-do item data access.

``TodoItemRepository`` is the storage seam used by the item routes;
``SQLTodoItemRepository`` implements it on a SQLAlchemy unit-of-work session.
Mutations are staged in the session and only persisted by ``save()``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

from sqlalchemy import inspect as sa_inspect, select
from sqlalchemy.orm import Session

from todo_api.db.models import TodoItem


class TodoItemRepository(ABC):
    @abstractmethod
    def create_item(self, new_item: TodoItem) -> TodoItem: ...

    @abstractmethod
    def get_item_by_id(self, item_id: str) -> Optional[TodoItem]: ...

    @abstractmethod
    def update_item(self, updated_item: TodoItem) -> Optional[TodoItem]: ...

    @abstractmethod
    def remove_item(self, item_id: str) -> bool: ...

    @abstractmethod
    def update_all_items_in_list(self, items: Sequence[TodoItem]) -> list[TodoItem]: ...

    @abstractmethod
    def get_all_items_for_list(self, list_id: str) -> list[TodoItem]: ...

    @abstractmethod
    def get_active_items_for_list(self, list_id: str) -> list[TodoItem]: ...

    @abstractmethod
    def get_completed_items_for_list(self, list_id: str) -> list[TodoItem]: ...

    @abstractmethod
    def toggle_item_complete(self, item_id: str) -> bool: ...

    @abstractmethod
    def save(self) -> bool: ...


class SQLTodoItemRepository(TodoItemRepository):
    _EDITABLE = ("title", "notes", "completed", "position")

    def __init__(self, session: Session):
        self.session = session

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def create_item(self, new_item: TodoItem) -> TodoItem:
        now = self._now()
        new_item.completed = bool(new_item.completed)
        if new_item.position is None:
            new_item.position = self._next_position(new_item.list_id)
        new_item.created_at = now
        new_item.updated_at = now
        self.session.add(new_item)
        self.session.flush()
        return new_item

    def _next_position(self, list_id: str) -> int:
        positions = [item.position or 0 for item in self.get_all_items_for_list(list_id)]
        return (max(positions) + 1) if positions else 0

    def get_item_by_id(self, item_id: str) -> Optional[TodoItem]:
        if not item_id:
            return None
        return self.session.get(TodoItem, item_id)

    def update_item(self, updated_item: TodoItem) -> Optional[TodoItem]:
        existing = self.get_item_by_id(updated_item.id)
        if existing is None:
            return None
        self._copy_fields(updated_item, existing)
        return existing

    def _copy_fields(self, source: TodoItem, target: TodoItem) -> None:
        # only attributes set on the source are applied; null clears nullable columns
        given = sa_inspect(source).dict
        for name in self._EDITABLE:
            if name not in given:
                continue
            value = given[name]
            if value is None and not TodoItem.__table__.c[name].nullable:
                continue
            setattr(target, name, value)
        target.updated_at = self._now()

    def remove_item(self, item_id: str) -> bool:
        existing = self.get_item_by_id(item_id)
        if existing is None:
            return False
        self.session.delete(existing)
        return True

    def update_all_items_in_list(self, items: Sequence[TodoItem]) -> list[TodoItem]:
        """Apply each item's fields; items outside the first item's list are ignored."""
        if not items:
            return []
        first = self.get_item_by_id(items[0].id)
        if first is None:
            return []
        list_id = first.list_id
        for item in items:
            existing = self.get_item_by_id(item.id)
            if existing is None or existing.list_id != list_id:
                continue
            self._copy_fields(item, existing)
        self.session.flush()
        return self.get_all_items_for_list(list_id)

    def _query(self, list_id: str, completed: Optional[bool] = None) -> list[TodoItem]:
        stmt = select(TodoItem).where(TodoItem.list_id == list_id)
        if completed is not None:
            stmt = stmt.where(TodoItem.completed.is_(completed))
        stmt = stmt.order_by(TodoItem.position, TodoItem.created_at)
        return list(self.session.execute(stmt).scalars().all())

    def get_all_items_for_list(self, list_id: str) -> list[TodoItem]:
        return self._query(list_id)

    def get_active_items_for_list(self, list_id: str) -> list[TodoItem]:
        return self._query(list_id, completed=False)

    def get_completed_items_for_list(self, list_id: str) -> list[TodoItem]:
        return self._query(list_id, completed=True)

    def toggle_item_complete(self, item_id: str) -> bool:
        existing = self.get_item_by_id(item_id)
        if existing is None:
            return False
        existing.completed = not existing.completed
        existing.updated_at = self._now()
        return True

    def save(self) -> bool:
        self.session.commit()
        return True


def items_from_payload(rows: Iterable[dict]) -> list[TodoItem]:
    """Build transient items carrying exactly the fields present in each payload row.

    Rows should come from `model_dump(exclude_unset=True)` so an omitted field
    stays untouched while an explicit null is applied.
    """
    return [TodoItem(**row) for row in rows]
