"""
In-memory index over a snapshot of log records.

Built once per query from LogStoreInterface.read_all(). The store stays the
single source of truth; the index is never persisted.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from lazi.domain.models import EventFamily, LogRecord


@dataclass
class LogIndex:
    """
    Lookup tables for id and parent queries.

    Duplicate ids (possible after the counter file is lost) are kept;
    ``get`` resolves to the most recently written one.
    """

    records: list[LogRecord] = field(default_factory=list)
    by_id: dict[int, list[LogRecord]] = field(default_factory=dict)
    children: dict[int, list[LogRecord]] = field(default_factory=dict)

    @classmethod
    def build(cls, records: Iterable[LogRecord]) -> LogIndex:
        ordered = list(records)
        by_id: dict[int, list[LogRecord]] = defaultdict(list)
        children: dict[int, list[LogRecord]] = defaultdict(list)
        for record in ordered:
            by_id[record.log_id].append(record)
            if record.parent_id is not None:
                children[record.parent_id].append(record)
        return cls(records=ordered, by_id=dict(by_id), children=dict(children))

    def get(
        self, log_id: int, where: Callable[[LogRecord], bool] | None = None
    ) -> LogRecord | None:
        """Latest record with this id, optionally the latest one satisfying where."""
        matches = self.by_id.get(log_id, [])
        if where is not None:
            matches = [r for r in matches if where(r)]
        return matches[-1] if matches else None

    def starts(self) -> list[LogRecord]:
        """Event-start and batch-start records in write order."""
        return [r for r in self.records if r.kind.is_start]

    def family(self, start: LogRecord) -> EventFamily:
        """Group start with every record naming its id as parent, of any kind."""
        return EventFamily(start=start, children=tuple(self.children.get(start.log_id, [])))
