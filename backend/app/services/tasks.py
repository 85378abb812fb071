from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import asc, desc
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, ValidationError
from app.models.task import DEFAULT_PRIORITY, TASK_PRIORITIES, Task
from app.schemas.common import as_utc
from app.schemas.task import TaskCreate, TaskOut, TaskUpdate

TASK_NOT_FOUND_MESSAGE = "Task not found"

# Public sort keys (API spelling and column spelling) -> column
SORTABLE_FIELDS = {
    "description": Task.description,
    "completed": Task.completed,
    "priority": Task.priority,
    "dueDate": Task.due_date,
    "due_date": Task.due_date,
    "createdAt": Task.created_at,
    "created_at": Task.created_at,
    "updatedAt": Task.updated_at,
    "updated_at": Task.updated_at,
}


@dataclass(frozen=True)
class TaskListQuery:
    completed: Optional[bool] = None
    limit: int = 0  # 0 = no limit
    skip: int = 0
    sort_field: Optional[str] = None
    sort_descending: bool = False


def _parse_count(raw: str | None) -> int:
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return 0
    return max(value, 0)


def parse_list_query(
    completed: str | None = None,
    limit: str | None = None,
    skip: str | None = None,
    sort_by: str | None = None,
) -> TaskListQuery:
    """
    Query strings are lenient: only the literal "true" means completed, bad
    numbers fall back to 0 and unknown sort fields are ignored.
    """
    completed_filter: Optional[bool] = None
    if completed:
        completed_filter = completed.strip().lower() == "true"

    sort_field: Optional[str] = None
    sort_descending = False
    if sort_by:
        field, _, direction = sort_by.partition(":")
        field = field.strip()
        if field in SORTABLE_FIELDS:
            sort_field = field
            sort_descending = direction.strip().lower() == "desc"

    return TaskListQuery(
        completed=completed_filter,
        limit=_parse_count(limit),
        skip=_parse_count(skip),
        sort_field=sort_field,
        sort_descending=sort_descending,
    )


def normalize_description(raw: str | None) -> str:
    text = (raw or "").strip()
    if not text:
        raise ValidationError("Description is required")
    return text


def normalize_priority(raw: str | None) -> str:
    value = (raw or "").strip().lower()
    if value not in TASK_PRIORITIES:
        raise ValidationError(
            f"Priority must be one of: {', '.join(TASK_PRIORITIES)}",
            details={"allowed": list(TASK_PRIORITIES)},
        )
    return value


def create_task(db: Session, owner_id: str, payload: TaskCreate) -> Task:
    description = normalize_description(payload.description)
    priority = DEFAULT_PRIORITY if payload.priority is None else normalize_priority(payload.priority)

    task = Task(
        description=description,
        completed=bool(payload.completed),
        priority=priority,
        due_date=as_utc(payload.due_date),
    )
    task.owner_id = owner_id  # ✅ ownership

    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def list_tasks(db: Session, owner_id: str, query: TaskListQuery | None = None) -> list[Task]:
    query = query or TaskListQuery()
    qry = db.query(Task).filter(Task.owner_id == owner_id)  # ✅ scope

    if query.completed is not None:
        qry = qry.filter(Task.completed == query.completed)

    if query.sort_field:
        column = SORTABLE_FIELDS[query.sort_field]
        qry = qry.order_by(desc(column) if query.sort_descending else asc(column), asc(Task.created_at))
    else:
        qry = qry.order_by(asc(Task.created_at))

    if query.skip:
        qry = qry.offset(query.skip)
    if query.limit:
        qry = qry.limit(query.limit)

    return qry.all()


def get_task(db: Session, owner_id: str, task_id: str) -> Task:
    """
    A task that does not exist and a task owned by someone else are
    indistinguishable to the caller.
    """
    task = (
        db.query(Task)
        .filter(Task.id == str(task_id), Task.owner_id == owner_id)
        .first()
    )
    if not task:
        raise NotFoundError(TASK_NOT_FOUND_MESSAGE)
    return task


def update_task(db: Session, owner_id: str, task_id: str, payload: TaskUpdate) -> Task:
    task = get_task(db, owner_id, task_id)

    data = payload.model_dump(exclude_unset=True)
    if not data:
        return task

    changes: dict = {}
    if "description" in data:
        changes["description"] = normalize_description(data["description"])
    if "completed" in data:
        if data["completed"] is None:
            raise ValidationError("completed cannot be null")
        changes["completed"] = bool(data["completed"])
    if "priority" in data:
        changes["priority"] = normalize_priority(data["priority"])
    if "due_date" in data:
        changes["due_date"] = as_utc(data["due_date"])

    for k, v in changes.items():
        setattr(task, k, v)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, owner_id: str, task_id: str) -> TaskOut:
    task = get_task(db, owner_id, task_id)
    # Snapshot first; the instance is unusable once the delete is committed.
    deleted = TaskOut.model_validate(task)
    db.delete(task)
    db.commit()
    return deleted


def delete_tasks_for_owner(db: Session, owner_id: str) -> int:
    """
    Bulk delete used by account deletion. Does not commit.
    """
    return (
        db.query(Task)
        .filter(Task.owner_id == owner_id)
        .delete(synchronize_session=False)
    )
