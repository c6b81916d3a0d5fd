"""
Tests for the SQL to-do item repository against a temporary SQLite database.
"""
from __future__ import annotations

import pytest

from conftest import STRONG_PASSWORD
from todo_api.db.models import TodoItem
from todo_api.db.session import get_session
from todo_api.repositories.todo_item_repo import SQLTodoItemRepository, items_from_payload
from todo_api.repositories.todo_list_repo import TodoListRepository
from todo_api.repositories.user_store import UserStore


@pytest.fixture()
def todo_list(db_env):
    _result, owner = UserStore().create("owner@example.com", STRONG_PASSWORD)
    with get_session() as session:
        lists = TodoListRepository(session)
        entity = lists.create_list(owner.id, "Groceries")
        lists.save()
        return entity


def _seed(repo: SQLTodoItemRepository, list_id: str, *titles: str) -> list[TodoItem]:
    items = [repo.create_item(TodoItem(list_id=list_id, title=title)) for title in titles]
    repo.save()
    return items


def test_create_assigns_ids_and_positions(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        milk, eggs = _seed(repo, todo_list.id, "milk", "eggs")

        assert milk.id and eggs.id
        assert (milk.position, eggs.position) == (0, 1)
        assert milk.completed is False
        assert repo.get_item_by_id(milk.id).title == "milk"


def test_changes_are_persisted_by_save(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        (milk,) = _seed(repo, todo_list.id, "milk")
        repo.update_item(TodoItem(id=milk.id, title="oat milk"))
        session.rollback()

    with get_session() as session:
        assert SQLTodoItemRepository(session).get_item_by_id(milk.id).title == "milk"


def test_active_and_completed_views(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        milk, eggs, bread = _seed(repo, todo_list.id, "milk", "eggs", "bread")
        assert repo.toggle_item_complete(eggs.id)
        repo.save()

        assert [i.title for i in repo.get_all_items_for_list(todo_list.id)] == ["milk", "eggs", "bread"]
        assert [i.title for i in repo.get_active_items_for_list(todo_list.id)] == ["milk", "bread"]
        assert [i.title for i in repo.get_completed_items_for_list(todo_list.id)] == ["eggs"]

        assert repo.toggle_item_complete(eggs.id)
        repo.save()
        assert repo.get_completed_items_for_list(todo_list.id) == []


def test_update_and_remove(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        (milk,) = _seed(repo, todo_list.id, "milk")

        updated = repo.update_item(TodoItem(id=milk.id, notes="2 litres", completed=True))
        repo.save()
        assert updated.title == "milk"
        assert updated.notes == "2 litres"
        assert updated.completed is True

        assert repo.update_item(TodoItem(id="missing", title="x")) is None
        assert repo.remove_item(milk.id)
        repo.save()
        assert repo.get_item_by_id(milk.id) is None
        assert not repo.remove_item(milk.id)
        assert not repo.toggle_item_complete(milk.id)


def test_update_all_items_reorders_within_one_list(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        milk, eggs, bread = _seed(repo, todo_list.id, "milk", "eggs", "bread")
        other_list = TodoListRepository(session).create_list(todo_list.owner_id, "Other")
        (stray,) = _seed(repo, other_list.id, "stray")

        result = repo.update_all_items_in_list(
            items_from_payload(
                [
                    {"id": bread.id, "position": 0},
                    {"id": milk.id, "position": 1, "completed": True},
                    {"id": eggs.id, "position": 2},
                    {"id": stray.id, "title": "moved?"},
                ]
            )
        )
        repo.save()

        assert [i.title for i in result] == ["bread", "milk", "eggs"]
        assert repo.get_item_by_id(milk.id).completed is True
        assert repo.get_item_by_id(stray.id).title == "stray"
        assert repo.update_all_items_in_list([]) == []


def test_explicit_null_clears_notes_but_omitted_fields_stay(todo_list):
    with get_session() as session:
        repo = SQLTodoItemRepository(session)
        (milk,) = _seed(repo, todo_list.id, "milk")
        repo.update_item(TodoItem(id=milk.id, notes="2 litres"))
        repo.save()

        (change,) = items_from_payload([{"id": milk.id, "title": None, "notes": None}])
        updated = repo.update_item(change)
        repo.save()

        assert updated.notes is None
        assert updated.title == "milk"
        assert updated.position == 0
