"""Run recorder - accumulates per-node results into a frozen RunRecord."""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Protocol

from .types import NodeResultEntry, RunRecord

logger = logging.getLogger(__name__)


class RunStore(Protocol):
    async def save(self, record: RunRecord) -> Any: ...


def generate_run_id() -> str:
    """Generate unique run ID."""
    return f"exec_{int(datetime.now().timestamp() * 1000)}_{uuid.uuid4().hex[:7]}"


class RunRecorder:
    """Owns the RunRecord of one in-progress run."""

    def __init__(
        self,
        total_nodes: int,
        store: RunStore | None = None,
        run_id: str | None = None,
        workflow_id: str | None = None,
        workflow_name: str | None = None,
    ) -> None:
        self.run_id = run_id or generate_run_id()
        self._total_nodes = total_nodes
        self._store = store
        self._workflow_id = workflow_id
        self._workflow_name = workflow_name
        self._entries: list[NodeResultEntry] = []
        self._started_at: datetime | None = None
        self._start_clock = 0.0

    @property
    def entries(self) -> list[NodeResultEntry]:
        return list(self._entries)

    def start(self) -> None:
        self._started_at = datetime.now(timezone.utc)
        self._start_clock = time.perf_counter()
        self._entries = []

    def record(self, entry: NodeResultEntry) -> None:
        """Append a settled node, in completion order."""
        self._entries.append(entry)

    def build(self) -> RunRecord:
        """Freeze the current state into a RunRecord."""
        if self._started_at is None:
            self.start()

        errors = [e for e in self._entries if e.status in ("error", "skipped")]
        error_message = next((e.error for e in reversed(errors) if e.error), None)

        return RunRecord(
            id=self.run_id,
            started_at=self._started_at,
            duration_ms=int((time.perf_counter() - self._start_clock) * 1000),
            status="error" if errors else "success",
            nodes_executed=sum(1 for e in self._entries if e.status != "skipped"),
            total_nodes=self._total_nodes,
            per_node=tuple(self._entries),
            error_message=error_message,
            workflow_id=self._workflow_id,
            workflow_name=self._workflow_name,
        )

    async def finish(self) -> RunRecord:
        """Freeze the record and hand it to the store, if any."""
        record = self.build()

        if self._store is not None:
            try:
                await self._store.save(record)
            except Exception:
                logger.exception("Failed to persist run record %s", record.id)

        logger.info(
            "Run %s finished: %s (%d/%d nodes, %dms)",
            record.id,
            record.status,
            record.nodes_executed,
            record.total_nodes,
            record.duration_ms,
        )
        return record
