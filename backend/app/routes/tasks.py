from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.dependencies.auth import get_current_user
from app.core.database import get_db
from app.core.rate_limit import maybe_limit_api
from app.models.user import User
from app.schemas.task import TaskCreate, TaskOut, TaskUpdate
from app.services.tasks import (
    create_task,
    delete_task,
    get_task,
    list_tasks,
    parse_list_query,
    update_task,
)

router = APIRouter(prefix="/tasks", tags=["tasks"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
@maybe_limit_api()
def create(
    request: Request,  # noqa: ARG001
    payload: TaskCreate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return create_task(db, user.id, payload)


@router.get("", response_model=list[TaskOut])
@maybe_limit_api()
def list_mine(
    request: Request,  # noqa: ARG001
    completed: str | None = None,
    limit: str | None = None,
    skip: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    # e.g. GET /tasks?completed=true&limit=10&skip=20&sortBy=createdAt:desc
    query = parse_list_query(completed=completed, limit=limit, skip=skip, sort_by=sort_by)
    return list_tasks(db, user.id, query)


@router.get("/{task_id}", response_model=TaskOut)
@maybe_limit_api()
def get_one(
    request: Request,  # noqa: ARG001
    task_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return get_task(db, user.id, task_id)


@router.patch("/{task_id}", response_model=TaskOut)
@maybe_limit_api()
def update(
    request: Request,  # noqa: ARG001
    task_id: str,
    payload: TaskUpdate,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return update_task(db, user.id, task_id, payload)


@router.delete("/{task_id}", response_model=TaskOut)
@maybe_limit_api()
def delete(
    request: Request,  # noqa: ARG001
    task_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    return delete_task(db, user.id, task_id)
