"""Execution repository - the capped, durable log of run records."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, TYPE_CHECKING

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..db.models import ExecutionModel, as_utc

if TYPE_CHECKING:
    from ..engine.types import NodeResultEntry, RunRecord

DEFAULT_MAX_RECORDS = 50


def _to_json_safe(value: Any) -> Any:
    """Round-trip through JSON so node outputs fit a JSON column."""
    return json.loads(json.dumps(value, default=str))


class ExecutionRepository:
    """Repository for run record persistence. Newest records first."""

    def __init__(self, session: AsyncSession, max_records: int = DEFAULT_MAX_RECORDS) -> None:
        self._session = session
        self._max_records = max_records

    async def save(self, record: RunRecord) -> RunRecord:
        """Store a finished run, then evict the oldest beyond the cap."""
        db_execution = ExecutionModel(
            id=record.id,
            workflow_id=record.workflow_id,
            workflow_name=record.workflow_name,
            status=record.status,
            started_at=record.started_at,
            duration_ms=record.duration_ms,
            nodes_executed=record.nodes_executed,
            total_nodes=record.total_nodes,
            error_message=record.error_message,
            per_node=[
                {
                    "node_id": e.node_id,
                    "node_name": e.node_name,
                    "status": e.status,
                    "duration_ms": e.duration_ms,
                    "output": _to_json_safe(e.output),
                    "error": e.error,
                }
                for e in record.per_node
            ],
        )

        try:
            await self._session.merge(db_execution)
            await self._session.commit()
            await self._cleanup()
        except Exception:
            # Leave the session usable for the rest of the request
            await self._session.rollback()
            raise

        return record

    async def get(self, execution_id: str) -> RunRecord | None:
        """Get a run record by ID."""
        db_execution = await self._session.get(ExecutionModel, execution_id)
        if not db_execution:
            return None
        return self._to_run_record(db_execution)

    async def list(self, workflow_id: str | None = None) -> list[RunRecord]:
        """List run records newest first, optionally for one workflow."""
        statement = select(ExecutionModel).order_by(ExecutionModel.started_at.desc())

        if workflow_id:
            statement = statement.where(ExecutionModel.workflow_id == workflow_id)

        result = await self._session.execute(statement)
        executions = result.scalars().all()

        return [self._to_run_record(e) for e in executions]

    async def delete(self, execution_id: str) -> bool:
        """Delete a run record."""
        db_execution = await self._session.get(ExecutionModel, execution_id)
        if not db_execution:
            return False

        await self._session.delete(db_execution)
        await self._session.commit()
        return True

    async def clear(self) -> int:
        """Clear all run records. Returns the number removed."""
        result = await self._session.execute(select(ExecutionModel))
        executions = result.scalars().all()

        for execution in executions:
            await self._session.delete(execution)

        await self._session.commit()
        return len(executions)

    async def _cleanup(self) -> None:
        """Remove old records if over max."""
        statement = select(ExecutionModel).order_by(ExecutionModel.started_at.desc())
        result = await self._session.execute(statement)
        executions = result.scalars().all()

        if len(executions) > self._max_records:
            for execution in executions[self._max_records:]:
                await self._session.delete(execution)
            await self._session.commit()

    def _to_run_record(self, db_execution: ExecutionModel) -> RunRecord:
        """Convert database model to RunRecord."""
        from ..engine.types import NodeResultEntry, RunRecord

        per_node: tuple[NodeResultEntry, ...] = tuple(
            NodeResultEntry(
                node_id=e["node_id"],
                node_name=e.get("node_name") or e["node_id"],
                status=e["status"],
                duration_ms=e.get("duration_ms", 0),
                output=e.get("output"),
                error=e.get("error"),
            )
            for e in db_execution.per_node or []
        )

        return RunRecord(
            id=db_execution.id,
            started_at=(
                as_utc(db_execution.started_at)
                if db_execution.started_at
                else datetime.now(timezone.utc)
            ),
            duration_ms=db_execution.duration_ms,
            status=db_execution.status,  # type: ignore[arg-type]
            nodes_executed=db_execution.nodes_executed,
            total_nodes=db_execution.total_nodes,
            per_node=per_node,
            error_message=db_execution.error_message,
            workflow_id=db_execution.workflow_id,
            workflow_name=db_execution.workflow_name,
        )
