"""Generation history tracking."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Deque, Iterator, Optional


def utc_timestamp() -> str:
    """Return the current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class GenerationRecord:
    """Metadata describing a generation event."""

    prompt: str
    resolution: str
    image_url: Optional[str]
    raw_response: Any
    timestamp: str

    def to_resource_payload(self) -> dict[str, Any]:
        return {
            "prompt": self.prompt,
            "resolution": self.resolution,
            "timestamp": self.timestamp,
            "imageUrl": self.image_url,
            "apiResponse": self.raw_response,
        }


class _IndexedHistory:
    """Restartable newest-first view of (index, record) pairs."""

    def __init__(self, records: Deque[GenerationRecord]) -> None:
        self._records = records

    def __iter__(self) -> Iterator[tuple[int, GenerationRecord]]:
        return enumerate(self._records)

    def __len__(self) -> int:
        return len(self._records)


class GenerationHistoryService:
    """Bounded in-memory history, newest entry first."""

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError(f"history capacity must be at least 1, got {capacity}")
        # appendleft on a full deque drops the rightmost (oldest) record.
        self._records: Deque[GenerationRecord] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._records.maxlen or 0

    def record(self, record: GenerationRecord) -> None:
        """Prepend a record, evicting the oldest one when full."""
        self._records.appendleft(record)

    def list(self) -> _IndexedHistory:
        """Return the records paired with their index, newest first."""
        return _IndexedHistory(self._records)

    def get(self, index: int) -> Optional[GenerationRecord]:
        """Return the record at index, or None when it is out of range."""
        if index < 0 or index >= len(self._records):
            return None
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)
