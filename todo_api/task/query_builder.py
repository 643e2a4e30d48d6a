# todo_api/task/query_builder.py

"""Filtered, paginated listing of tasks.

Filters are collected as an ordered list of ``(predicate, values)`` pairs.
Predicates carry ``{}`` slots instead of placeholders; the slots are only
numbered (``:p1``, ``:p2``, ...) when a query is rendered, so the data query
and the count query share the same filters but each number their own
parameters from 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from sqlalchemy import select, text
from sqlalchemy.orm import Session

from todo_api.models.task import Task
from todo_api.schemas.task_schema import Pagination, Priority, TaskListResponse, TaskRead

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

TABLE = "tasks"


class QueryExecutor(Protocol):
    """Storage access needed by the list query: run SQL, get rows back."""

    def fetch_tasks(self, sql: str, params: Dict[str, Any]) -> Sequence[Any]:
        ...

    def fetch_scalar(self, sql: str, params: Dict[str, Any]) -> Any:
        ...


@dataclass(frozen=True)
class TaskFilters:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    search: Optional[str] = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@dataclass
class QueryBuilder:
    base: str
    predicates: List[Tuple[str, Tuple[Any, ...]]] = field(default_factory=list)

    def where(self, predicate: str, *values: Any) -> "QueryBuilder":
        if predicate.count("{}") != len(values):
            raise ValueError(f"predicate {predicate!r} expects {predicate.count('{}')} values, got {len(values)}")
        self.predicates.append((predicate, values))
        return self

    def render(self, suffix: str = "", suffix_values: Sequence[Any] = ()) -> Tuple[str, Dict[str, Any]]:
        """Render the query text and its parameters, numbering slots in order."""
        params: Dict[str, Any] = {}

        def bind(value: Any) -> str:
            name = f"p{len(params) + 1}"
            params[name] = value
            return f":{name}"

        sql = self.base + " WHERE 1=1"
        for predicate, values in self.predicates:
            sql += " AND " + predicate.format(*(bind(v) for v in values))
        if suffix:
            sql += " " + suffix.format(*(bind(v) for v in suffix_values))
        return sql, params


def apply_filters(builder: QueryBuilder, filters: TaskFilters) -> QueryBuilder:
    # order matters: priority, completed, search
    if filters.priority is not None:
        builder.where("priority = {}", Priority(filters.priority).value)
    if filters.completed is not None:
        builder.where("completed = {}", filters.completed)
    if filters.search:
        pattern = f"%{escape_like(filters.search.lower())}%"
        builder.where(
            "(lower(title) LIKE {} ESCAPE '\\' OR lower(description) LIKE {} ESCAPE '\\')",
            pattern,
            pattern,
        )
    return builder


def build_list_queries(filters: TaskFilters) -> Tuple[Tuple[str, Dict[str, Any]], Tuple[str, Dict[str, Any]]]:
    """Return ``(data_sql, data_params), (count_sql, count_params)``."""
    data = apply_filters(QueryBuilder(f"SELECT * FROM {TABLE}"), filters).render(
        "ORDER BY created_at DESC, id DESC LIMIT {} OFFSET {}",
        (filters.limit, filters.offset),
    )
    count = apply_filters(QueryBuilder(f"SELECT COUNT(*) FROM {TABLE}"), filters).render()
    return data, count


def count_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def list_tasks(executor: QueryExecutor, filters: TaskFilters) -> TaskListResponse:
    (data_sql, data_params), (count_sql, count_params) = build_list_queries(filters)

    rows = executor.fetch_tasks(data_sql, data_params)
    total = int(executor.fetch_scalar(count_sql, count_params) or 0)

    return TaskListResponse(
        tasks=[TaskRead.model_validate(row) for row in rows],
        pagination=Pagination(
            page=filters.page,
            limit=filters.limit,
            total=total,
            pages=count_pages(total, filters.limit),
        ),
    )


class SessionExecutor:
    """QueryExecutor backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_tasks(self, sql: str, params: Dict[str, Any]) -> List[Task]:
        stmt = select(Task).from_statement(text(sql).bindparams(**params))
        return list(self.db.execute(stmt).scalars().all())

    def fetch_scalar(self, sql: str, params: Dict[str, Any]) -> Any:
        return self.db.execute(text(sql), params).scalar()
