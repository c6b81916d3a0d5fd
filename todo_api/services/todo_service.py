"""
To-do list and item use cases with per-user access checks.

A list is visible to its owner and to users it was shared with; anything
else is reported as not found. Sharing is a PRO feature.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from todo_api.db.models import TodoItem, TodoList
from todo_api.domain.identity import ROLE_PRO
from todo_api.repositories.role_store import RoleStore
from todo_api.repositories.todo_item_repo import SQLTodoItemRepository, TodoItemRepository
from todo_api.repositories.todo_list_repo import TodoListRepository
from todo_api.repositories.user_store import UserStore

logger = logging.getLogger(__name__)


class TodoError(Exception):
    pass


class TodoNotFoundError(TodoError):
    pass


class TodoForbiddenError(TodoError):
    pass


class TodoService:
    def __init__(self, session: Session, items: Optional[TodoItemRepository] = None):
        self.lists = TodoListRepository(session)
        self.items = items or SQLTodoItemRepository(session)
        self.users = UserStore()
        self.roles = RoleStore()

    # -------------------------- lists --------------------------
    def _accessible_list(self, list_id: str, user_id: str) -> TodoList:
        if not self.lists.user_can_access(list_id, user_id):
            raise TodoNotFoundError("List not found.")
        return self.lists.get_list(list_id)

    def _owned_list(self, list_id: str, user_id: str) -> TodoList:
        entity = self._accessible_list(list_id, user_id)
        if entity.owner_id != user_id:
            raise TodoForbiddenError("Only the owner can do that.")
        return entity

    def create_list(self, user_id: str, title: str) -> TodoList:
        entity = self.lists.create_list(user_id, title)
        self.lists.save()
        return entity

    def lists_for_user(self, user_id: str) -> list[TodoList]:
        return self.lists.lists_for_user(user_id)

    def remove_list(self, user_id: str, list_id: str) -> None:
        self._owned_list(list_id, user_id)
        self.lists.remove_list(list_id)
        self.lists.save()

    def share_list(self, user_id: str, list_id: str, email: str) -> bool:
        self._owned_list(list_id, user_id)
        owner = self.users.find_by_id(user_id)
        if owner is None or not self.roles.is_in_role(owner, ROLE_PRO):
            raise TodoForbiddenError("Sharing lists requires a PRO account.")
        target = self.users.find_by_email(email)
        if target is None:
            raise TodoNotFoundError("User not found.")
        if target.id == user_id:
            return False
        added = self.lists.share_list(list_id, target.id)
        self.lists.save()
        if added:
            logger.info("List %s shared by %s with %s", list_id, user_id, target.id)
        return added

    # -------------------------- items --------------------------
    def _accessible_item(self, item_id: str, user_id: str) -> TodoItem:
        item = self.items.get_item_by_id(item_id)
        if item is None or not self.lists.user_can_access(item.list_id, user_id):
            raise TodoNotFoundError("Item not found.")
        return item

    def create_item(self, user_id: str, item: TodoItem) -> TodoItem:
        self._accessible_list(item.list_id, user_id)
        created = self.items.create_item(item)
        self.items.save()
        return created

    def get_item(self, user_id: str, item_id: str) -> TodoItem:
        return self._accessible_item(item_id, user_id)

    def update_item(self, user_id: str, item: TodoItem) -> TodoItem:
        self._accessible_item(item.id, user_id)
        updated = self.items.update_item(item)
        self.items.save()
        return updated

    def remove_item(self, user_id: str, item_id: str) -> None:
        self._accessible_item(item_id, user_id)
        self.items.remove_item(item_id)
        self.items.save()

    def update_all_items(self, user_id: str, items: Sequence[TodoItem]) -> list[TodoItem]:
        if not items:
            return []
        self._accessible_item(items[0].id, user_id)
        updated = self.items.update_all_items_in_list(items)
        self.items.save()
        return updated

    def items_for_list(self, user_id: str, list_id: str, scope: str = "all") -> list[TodoItem]:
        self._accessible_list(list_id, user_id)
        if scope == "active":
            return self.items.get_active_items_for_list(list_id)
        if scope == "completed":
            return self.items.get_completed_items_for_list(list_id)
        return self.items.get_all_items_for_list(list_id)

    def toggle_complete(self, user_id: str, item_id: str) -> TodoItem:
        item = self._accessible_item(item_id, user_id)
        self.items.toggle_item_complete(item_id)
        self.items.save()
        return item
