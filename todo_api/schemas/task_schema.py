# todo_api/schemas/task_schema.py

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# camelCase on the wire, snake_case in Python
class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _strip_title(value):
    if isinstance(value, str):
        return value.strip()
    return value


# --------- For CREATE (POST) ----------
class TaskCreate(_CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: Priority = Priority.medium
    due_date: Optional[datetime] = None
    completed: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip_title(value)


# --------- For UPDATE (PUT, partial) ----------
class TaskUpdate(_CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    priority: Optional[Priority] = None
    due_date: Optional[datetime] = None
    completed: Optional[bool] = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value):
        return _strip_title(value)

    @field_validator("title", "priority", "completed")
    @classmethod
    def not_null(cls, value, info):
        # only description and dueDate may be cleared
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    def changes(self) -> dict:
        """Fields the client actually sent, keyed by column name."""
        data = self.model_dump(exclude_unset=True)
        if "priority" in data and data["priority"] is not None:
            data["priority"] = data["priority"].value
        return data


# --------- For PATCH /complete ----------
class TaskComplete(BaseModel):
    completed: bool


# --------- For READ (responses) ----------
class TaskRead(_CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: Optional[str] = None
    priority: Priority
    due_date: Optional[datetime] = None
    completed: bool
    created_at: datetime
    updated_at: datetime


class TaskResponse(BaseModel):
    task: TaskRead


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class TaskListResponse(BaseModel):
    tasks: List[TaskRead]
    pagination: Pagination
