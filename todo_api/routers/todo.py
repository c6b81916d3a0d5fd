"""To-do list and item endpoints under /api/TodoListAPI and /api/TodoItemAPI."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from todo_api.db.models import TodoItem
from todo_api.db.session import get_db
from todo_api.repositories.todo_item_repo import items_from_payload
from todo_api.schemas import (
    CreateItemDto,
    CreateListDto,
    ShareListDto,
    TodoItemOut,
    TodoListOut,
    UpdateAllItemsDto,
    UpdateItemDto,
)
from todo_api.services.todo_service import TodoForbiddenError, TodoNotFoundError, TodoService
from todo_api.services.token_service import current_user_id

list_router = APIRouter(prefix="/api/TodoListAPI", tags=["todo-lists"])
item_router = APIRouter(prefix="/api/TodoItemAPI", tags=["todo-items"])


def get_todo_service(db: Session = Depends(get_db)) -> TodoService:
    return TodoService(db)


def _run(action, *args):
    try:
        return action(*args)
    except TodoNotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, str(exc)) from exc
    except TodoForbiddenError as exc:
        raise HTTPException(status.HTTP_403_FORBIDDEN, str(exc)) from exc


def _item_out(item: TodoItem) -> dict:
    return TodoItemOut.model_validate(item).model_dump(by_alias=True, mode="json")


def _items_out(items) -> list[dict]:
    return [_item_out(item) for item in items]


# ---------------------------------- lists ----------------------------------
@list_router.post("/CreateList")
def create_list(
    model: CreateListDto,
    user_id: str = Depends(current_user_id),
    service: TodoService = Depends(get_todo_service),
):
    entity = service.create_list(user_id, model.title)
    return TodoListOut.model_validate(entity).model_dump(by_alias=True, mode="json")


@list_router.get("/Lists")
def lists(user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return [
        TodoListOut.model_validate(entity).model_dump(by_alias=True, mode="json")
        for entity in service.lists_for_user(user_id)
    ]


@list_router.delete("/RemoveList/{list_id}")
def remove_list(list_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    _run(service.remove_list, user_id, list_id)
    return {"removed": True}


@list_router.post("/ShareList")
def share_list(
    model: ShareListDto,
    user_id: str = Depends(current_user_id),
    service: TodoService = Depends(get_todo_service),
):
    added = _run(service.share_list, user_id, model.list_id, str(model.email))
    return {"shared": added}


# ---------------------------------- items ----------------------------------
@item_router.post("/CreateItem")
def create_item(
    model: CreateItemDto,
    user_id: str = Depends(current_user_id),
    service: TodoService = Depends(get_todo_service),
):
    item = TodoItem(
        list_id=model.list_id,
        title=model.title,
        notes=model.notes,
        completed=model.completed,
        position=model.position,
    )
    return _item_out(_run(service.create_item, user_id, item))


@item_router.get("/Item/{item_id}")
def get_item(item_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return _item_out(_run(service.get_item, user_id, item_id))


@item_router.post("/UpdateItem")
def update_item(
    model: UpdateItemDto,
    user_id: str = Depends(current_user_id),
    service: TodoService = Depends(get_todo_service),
):
    item = items_from_payload([model.model_dump(exclude_unset=True)])[0]
    return _item_out(_run(service.update_item, user_id, item))


@item_router.delete("/RemoveItem/{item_id}")
def remove_item(item_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    _run(service.remove_item, user_id, item_id)
    return {"removed": True}


@item_router.post("/UpdateAllItems")
def update_all_items(
    model: UpdateAllItemsDto,
    user_id: str = Depends(current_user_id),
    service: TodoService = Depends(get_todo_service),
):
    items = items_from_payload(row.model_dump(exclude_unset=True) for row in model.items)
    return _items_out(_run(service.update_all_items, user_id, items))


@item_router.get("/AllItems/{list_id}")
def all_items(list_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return _items_out(_run(service.items_for_list, user_id, list_id, "all"))


@item_router.get("/ActiveItems/{list_id}")
def active_items(list_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return _items_out(_run(service.items_for_list, user_id, list_id, "active"))


@item_router.get("/CompletedItems/{list_id}")
def completed_items(list_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return _items_out(_run(service.items_for_list, user_id, list_id, "completed"))


@item_router.post("/ToggleComplete/{item_id}")
def toggle_complete(item_id: str, user_id: str = Depends(current_user_id), service: TodoService = Depends(get_todo_service)):
    return _item_out(_run(service.toggle_complete, user_id, item_id))
