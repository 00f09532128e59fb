from __future__ import annotations

from typing import Callable, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_category_service, get_task_service
from ..errors import InvalidArgumentError
from ..models import Task, TaskPriority, TaskStatus
from ..schemas import (
    DueDateUpdate,
    ErrorOut,
    PriorityUpdate,
    TaskCreate,
    TaskOut,
    TaskStats,
    TaskUpdate,
    parse_datetime_input,
)
from ..services import CategoryService, TaskService

router = APIRouter(
    prefix="/api/v1/tasks",
    tags=["tasks"],
)

Presenter = Callable[[Task], TaskOut]

_NOT_FOUND = {404: {"model": ErrorOut, "description": "Task or category not found"}}
_BAD_REQUEST = {400: {"model": ErrorOut, "description": "Invalid argument or validation error"}}


def _presenter(categories: CategoryService = Depends(get_category_service)) -> Presenter:
    """
    Dependency returning a function that renders a task, resolving its category
    name at read time.
    """
    return lambda task: TaskOut.from_entity(task, categories.find_category)


def _parse_query_datetime(value: str, argument: str):
    try:
        return parse_datetime_input(value)
    except ValueError as e:
        raise InvalidArgumentError(str(e), argument=argument) from e


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[TaskOut],
    summary="List Tasks",
    description=(
        "List tasks with optional filters.\n\n"
        "Query parameters (combined with AND):\n"
        "- status: PENDING, IN_PROGRESS, COMPLETED or CANCELLED\n"
        "- priority: LOW, MEDIUM, HIGH or CRITICAL\n"
        "- category_id: only tasks referencing this category\n"
        "- q: case-insensitive substring of the title"
    ),
    responses=_BAD_REQUEST,
)
def list_tasks(
    status_: Optional[str] = Query(None, alias="status", description="Filter by status"),
    priority: Optional[str] = Query(None, description="Filter by priority"),
    category_id: Optional[str] = Query(None, description="Filter by category ID"),
    q: Optional[str] = Query(None, description="Search text for the title"),
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    tasks = service.search_tasks(q)
    if status_:
        wanted_status = TaskStatus.from_string(status_)
        tasks = [t for t in tasks if t.status == wanted_status]
    if priority:
        wanted_priority = TaskPriority.from_string(priority)
        tasks = [t for t in tasks if t.priority == wanted_priority]
    if category_id:
        ids = {t.id for t in service.get_tasks_by_category(category_id)}
        tasks = [t for t in tasks if t.id in ids]
    return [present(t) for t in tasks]


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=TaskOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create Task",
    description="Create a task, optionally assigning it to an existing category.",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
def create_task(
    payload: TaskCreate,
    service: TaskService = Depends(get_task_service),
    categories: CategoryService = Depends(get_category_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    if payload.category_id:
        # Fail before anything is stored if the category does not exist
        categories.get_category_by_id(payload.category_id)
    created = service.create_task(payload.to_entity())
    if payload.category_id:
        created = service.assign_category(created.id, payload.category_id)
    return present(created)


# PUBLIC_INTERFACE
@router.get("/status/{task_status}", response_model=List[TaskOut], summary="Tasks By Status", responses=_BAD_REQUEST)
def tasks_by_status(
    task_status: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    return [present(t) for t in service.get_tasks_by_status(TaskStatus.from_string(task_status))]


# PUBLIC_INTERFACE
@router.get("/priority/{task_priority}", response_model=List[TaskOut], summary="Tasks By Priority", responses=_BAD_REQUEST)
def tasks_by_priority(
    task_priority: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    return [present(t) for t in service.get_tasks_by_priority(TaskPriority.from_string(task_priority))]


# PUBLIC_INTERFACE
@router.get("/starred", response_model=List[TaskOut], summary="Starred Tasks")
def starred_tasks(
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    return [present(t) for t in service.get_starred_tasks()]


# PUBLIC_INTERFACE
@router.get("/overdue", response_model=List[TaskOut], summary="Overdue Tasks")
def overdue_tasks(
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    return [present(t) for t in service.get_overdue_tasks()]


# PUBLIC_INTERFACE
@router.get(
    "/due",
    response_model=List[TaskOut],
    summary="Tasks Due Between",
    description="Tasks whose due date lies between start and end, both inclusive.",
    responses=_BAD_REQUEST,
)
def tasks_due_between(
    start: str = Query(..., description="ISO8601 date or datetime"),
    end: str = Query(..., description="ISO8601 date or datetime"),
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> List[TaskOut]:
    start_at = _parse_query_datetime(start, "start")
    end_at = _parse_query_datetime(end, "end")
    return [present(t) for t in service.get_tasks_due_between(start_at, end_at)]


# PUBLIC_INTERFACE
@router.get("/stats", response_model=TaskStats, summary="Task Counts")
def task_stats(service: TaskService = Depends(get_task_service)) -> TaskStats:
    return TaskStats(
        total=service.get_total_count(),
        by_status={s.value: service.count_by_status(s) for s in TaskStatus},
    )


# PUBLIC_INTERFACE
@router.get("/{task_id}", response_model=TaskOut, summary="Get Task", responses=_NOT_FOUND)
def get_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.get_task_by_id(task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}",
    response_model=TaskOut,
    summary="Update Task",
    description="Change the provided fields of a task; omitted fields are kept.",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
@router.patch(
    "/{task_id}",
    response_model=TaskOut,
    summary="Patch Task",
    description="Same as PUT: only provided fields are changed.",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
def update_task(
    task_id: str,
    payload: TaskUpdate,
    service: TaskService = Depends(get_task_service),
    categories: CategoryService = Depends(get_category_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    task = service.get_task_by_id(task_id)
    if payload.category_id:
        # Fail before any change is stored if the category does not exist
        categories.get_category_by_id(payload.category_id)
    task = payload.apply_to(task)
    updated = service.update_task(task)
    if payload.category_id:
        updated = service.assign_category(task_id, payload.category_id)
    return present(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Task",
    responses=_NOT_FOUND,
)
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)) -> None:
    service.delete_task(task_id)
    return None


# PUBLIC_INTERFACE
@router.post("/{task_id}/complete", response_model=TaskOut, summary="Complete Task", responses=_NOT_FOUND)
def complete_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.complete_task(task_id))


# PUBLIC_INTERFACE
@router.post("/{task_id}/start", response_model=TaskOut, summary="Start Task", responses=_NOT_FOUND)
def start_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.start_task(task_id))


# PUBLIC_INTERFACE
@router.post("/{task_id}/cancel", response_model=TaskOut, summary="Cancel Task", responses=_NOT_FOUND)
def cancel_task(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.cancel_task(task_id))


# PUBLIC_INTERFACE
@router.post("/{task_id}/star", response_model=TaskOut, summary="Toggle Starred", responses=_NOT_FOUND)
def toggle_starred(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.toggle_starred(task_id))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/priority",
    response_model=TaskOut,
    summary="Set Priority",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
def set_priority(
    task_id: str,
    payload: PriorityUpdate,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.set_priority(task_id, payload.priority))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/due-date",
    response_model=TaskOut,
    summary="Set Due Date",
    description="Set the due date, or clear it by sending null.",
    responses=_NOT_FOUND,
)
def set_due_date(
    task_id: str,
    payload: DueDateUpdate,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.set_due_date(task_id, payload.due_date))


# PUBLIC_INTERFACE
@router.put(
    "/{task_id}/category/{category_id}",
    response_model=TaskOut,
    summary="Assign Category",
    responses={**_BAD_REQUEST, **_NOT_FOUND},
)
def assign_category(
    task_id: str,
    category_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.assign_category(task_id, category_id))


# PUBLIC_INTERFACE
@router.delete("/{task_id}/category", response_model=TaskOut, summary="Unassign Category", responses=_NOT_FOUND)
def unassign_category(
    task_id: str,
    service: TaskService = Depends(get_task_service),
    present: Presenter = Depends(_presenter),
) -> TaskOut:
    return present(service.unassign_category(task_id))
