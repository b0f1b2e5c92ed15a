"""
Append-only narration log with per-entry audience.
"""

from dataclasses import dataclass
from typing import List, Optional, FrozenSet, Iterable


@dataclass(frozen=True)
class LogEntry:
    """A single narrated event. audience=None means everyone may read it."""
    text: str
    day: int
    phase: str
    audience: Optional[FrozenSet[str]] = None

    def visible_to(self, viewer_id: Optional[str]) -> bool:
        if self.audience is None:
            return True
        return viewer_id is not None and viewer_id in self.audience


class EventLog:
    """Ordered record of narration; never rewritten, only appended."""

    def __init__(self):
        self._entries: List[LogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def append(self, text: str, day: int, phase: str,
               audience: Optional[Iterable[str]] = None) -> LogEntry:
        entry = LogEntry(
            text=text,
            day=day,
            phase=phase,
            audience=frozenset(audience) if audience is not None else None,
        )
        self._entries.append(entry)
        return entry

    def recent(self, limit: int, viewer_id: Optional[str] = None, reveal_all: bool = False) -> List[str]:
        """Most recent `limit` entries the viewer may read, oldest first."""
        visible = [e.text for e in self._entries if reveal_all or e.visible_to(viewer_id)]
        if limit <= 0:
            return []
        return visible[-limit:]

    def texts(self) -> List[str]:
        return [e.text for e in self._entries]
