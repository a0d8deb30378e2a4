"""Audit log repository."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

DEFAULT_MAX_ENTRIES = 10000


@dataclass(frozen=True)
class AuditEntry:
    """One recorded bookkeeping event."""

    id: int
    action: str
    entity: str
    entity_key: str | None
    detail: str
    created_at: datetime


class AuditRepository:
    """Keeps bookkeeping audit logs in memory, oldest first."""

    def __init__(
        self,
        clock: Callable[[], datetime] = datetime.now,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ):
        self._clock = clock
        self._max_entries = max_entries
        self._entries: list[AuditEntry] = []
        self._next_id = 1

    def add_log(
        self,
        action: str,
        entity: str,
        entity_key: str | None,
        detail: str,
        created_at: datetime | None = None,
    ) -> AuditEntry:
        """Append an audit log record, dropping the oldest beyond max_entries."""
        entry = AuditEntry(
            id=self._next_id,
            action=action,
            entity=entity,
            entity_key=entity_key,
            detail=detail,
            created_at=created_at if created_at is not None else self._clock(),
        )
        self._next_id += 1
        self._entries.append(entry)
        if len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]
        return entry

    def cleanup_old_logs(self, retention_days: int) -> int:
        """Delete logs older than retention_days and return removed count."""
        threshold = self._clock() - timedelta(days=retention_days)
        kept = [entry for entry in self._entries if entry.created_at >= threshold]
        removed = len(self._entries) - len(kept)
        self._entries = kept
        return removed

    def list_logs(
        self,
        limit: int = 200,
        offset: int = 0,
        action: str | None = None,
        entity: str | None = None,
        keyword: str | None = None,
    ) -> list[dict[str, Any]]:
        """List audit logs with optional filters, newest first."""
        rows = reversed(self._entries)
        if action:
            rows = (entry for entry in rows if entry.action == action)
        if entity:
            rows = (entry for entry in rows if entry.entity == entity)
        if keyword:
            needle = keyword.strip()
            rows = (entry for entry in rows if needle in entry.detail)

        selected = list(rows)[offset : offset + limit]
        return [
            {
                "id": entry.id,
                "action": entry.action,
                "entity": entry.entity,
                "entity_key": entry.entity_key,
                "detail": entry.detail,
                "created_at": entry.created_at.isoformat(),
            }
            for entry in selected
        ]

    def purge_all_logs(self) -> None:
        """Delete all audit logs and reset the id sequence."""
        self._entries.clear()
        self._next_id = 1
