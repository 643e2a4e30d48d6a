from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from sqlalchemy.orm import Session

from todo_api.database import get_db
from todo_api.schemas.task_schema import (
    Priority,
    TaskComplete,
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskUpdate,
)
from todo_api.task import task_service
from todo_api.task.query_builder import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    MAX_LIMIT,
    SessionExecutor,
    TaskFilters,
    list_tasks,
)

# ==========================
#  ROUTER
# ==========================
router = APIRouter(
    prefix="/tasks",
    tags=["tasks"],
)

TaskId = Annotated[int, Path(ge=1, description="Task ID must be a positive integer")]


@router.get("", response_model=TaskListResponse)
def get_all_tasks(
    page: int = Query(DEFAULT_PAGE, ge=1),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
    priority: Optional[Priority] = None,
    completed: Optional[bool] = None,
    search: Optional[str] = Query(None, max_length=255),
    db: Session = Depends(get_db),
):
    filters = TaskFilters(
        page=page,
        limit=limit,
        priority=priority,
        completed=completed,
        search=search,
    )
    return list_tasks(SessionExecutor(db), filters)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: TaskId, db: Session = Depends(get_db)):
    return {"task": task_service.get_task(db, task_id)}


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(data: TaskCreate, db: Session = Depends(get_db)):
    return {"task": task_service.create_task(db, data)}


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(data: TaskUpdate, task_id: TaskId, db: Session = Depends(get_db)):
    return {"task": task_service.update_task(db, task_id, data)}


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: TaskId, db: Session = Depends(get_db)):
    task_service.delete_task(db, task_id)
    return Response(status_code=204)


@router.patch("/{task_id}/complete", response_model=TaskResponse)
def complete_task(data: TaskComplete, task_id: TaskId, db: Session = Depends(get_db)):
    return {"task": task_service.set_completed(db, task_id, data.completed)}
