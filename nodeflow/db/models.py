"""SQLModel database models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime
from sqlmodel import Column, Field, SQLModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite drops the offset on storage; stored values are always UTC."""
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class WorkflowModel(SQLModel, table=True):
    """Saved workflow graph."""

    __tablename__ = "workflows"

    id: str = Field(primary_key=True)
    name: str = Field(index=True)

    # Full graph as JSON: {"nodes": [...], "edges": [...]}
    definition: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utc_now, sa_type=DateTime(timezone=True))


class ExecutionModel(SQLModel, table=True):
    """Run record in the capped execution log."""

    __tablename__ = "executions"

    id: str = Field(primary_key=True)
    workflow_id: str | None = Field(default=None, index=True)
    workflow_name: str | None = Field(default=None)

    status: str = Field(index=True)  # success, error
    started_at: datetime = Field(
        default_factory=utc_now, sa_type=DateTime(timezone=True), index=True
    )
    duration_ms: int = 0
    nodes_executed: int = 0
    total_nodes: int = 0
    error_message: str | None = Field(default=None)

    # NodeResultEntry list in completion order
    per_node: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
