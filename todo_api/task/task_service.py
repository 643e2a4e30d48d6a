from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from todo_api.models.task import Task, utcnow
from todo_api.schemas.task_schema import TaskCreate, TaskUpdate

logger = logging.getLogger("todo_api.task")


class TaskServiceError(Exception):
    status_code = 400


class TaskNotFoundError(TaskServiceError):
    status_code = 404

    def __init__(self, task_id: int):
        super().__init__("Task not found")
        self.task_id = task_id


class NoFieldsToUpdateError(TaskServiceError):
    status_code = 400

    def __init__(self):
        super().__init__("No fields to update")


def create_task(db: Session, data: TaskCreate) -> Task:
    now = utcnow()
    task = Task(
        title=data.title,
        description=data.description,
        priority=data.priority.value,
        due_date=data.due_date,
        completed=data.completed,
        created_at=now,
        updated_at=now,
    )
    db.add(task)
    db.commit()
    db.refresh(task)

    logger.info("task_created", extra={"task_id": task.id, "priority": task.priority})
    return task


def get_task(db: Session, task_id: int) -> Task:
    task = db.get(Task, task_id)
    if not task:
        raise TaskNotFoundError(task_id)
    return task


def update_task(db: Session, task_id: int, data: TaskUpdate) -> Task:
    task = get_task(db, task_id)

    changes = data.changes()
    if not changes:
        raise NoFieldsToUpdateError()

    # only what the client sent; None is kept for description / due_date
    for column, value in changes.items():
        setattr(task, column, value)
    task.updated_at = utcnow()

    db.commit()
    db.refresh(task)

    logger.info("task_updated", extra={"task_id": task_id, "fields": ",".join(sorted(changes))})
    return task


def set_completed(db: Session, task_id: int, completed: bool) -> Task:
    task = get_task(db, task_id)

    task.completed = completed
    task.updated_at = utcnow()
    db.commit()
    db.refresh(task)

    logger.info("task_completion_set", extra={"task_id": task_id, "completed": completed})
    return task


def delete_task(db: Session, task_id: int) -> None:
    task = get_task(db, task_id)

    db.delete(task)
    db.commit()

    logger.info("task_deleted", extra={"task_id": task_id})
