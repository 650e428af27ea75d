import time
from dataclasses import replace
from datetime import datetime, timezone

from .config import FALLBACK_CAPACITY
from .models import CommandRecord


class CommandHistory:
    """Bounded newest-first buffer used while the database is unavailable."""

    def __init__(self, max_records: int = FALLBACK_CAPACITY):
        self.max_records = max_records
        self._records: list[CommandRecord] = []
        self._last_id = 0

    def _next_id(self) -> str:
        # ms clock, bumped so two saves in the same millisecond stay distinct
        now_ms = time.time_ns() // 1_000_000
        self._last_id = max(now_ms, self._last_id + 1)
        return str(self._last_id)

    def push(self, record: CommandRecord) -> CommandRecord:
        stored = replace(
            record,
            id=self._next_id(),
            timestamp=datetime.now(timezone.utc),
        )
        self._records.insert(0, stored)
        if len(self._records) > self.max_records:
            del self._records[self.max_records:]
        return stored

    def latest(self, limit: int) -> list[CommandRecord]:
        if limit <= 0:
            return []
        return self._records[:limit]

    def clear(self):
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)
