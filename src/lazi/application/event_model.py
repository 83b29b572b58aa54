"""
Read-side queries over the execution log.

Every query takes a fresh snapshot of the store and indexes it once;
nothing here is persisted.
"""

from __future__ import annotations

from lazi.domain.exceptions import (
    EventNotFoundError,
    LogNotFoundError,
    StepNotFoundError,
)
from lazi.domain.interfaces import LogStoreInterface
from lazi.domain.log_index import LogIndex
from lazi.domain.models import EventFamily, LogRecord, RecordKind


def _is_start(record: LogRecord) -> bool:
    return record.kind.is_start


def _is_event_step(record: LogRecord) -> bool:
    return record.kind is RecordKind.EVENT_STEP


class EventQueries:
    """Event, step and free-text lookups against a log store."""

    def __init__(self, store: LogStoreInterface) -> None:
        self._store = store

    def index(self) -> LogIndex:
        return LogIndex.build(self._store.read_all())

    def get_record(self, log_id: int) -> LogRecord:
        record = self.index().get(log_id)
        if record is None:
            raise LogNotFoundError(log_id)
        return record

    def get_family(self, start_id: int) -> EventFamily:
        """
        The start record with this id plus every record naming it as parent.

        Raises:
            EventNotFoundError: If no event-start or batch-start has this id
        """
        index = self.index()
        start = index.get(start_id, where=_is_start)
        if start is None:
            raise EventNotFoundError(start_id)
        return index.family(start)

    def list_events(self, last: int | None = None) -> list[LogRecord]:
        """Start records newest first, truncated to the last ``last`` when given."""
        starts = self.index().starts()
        if last:
            starts = starts[-last:]
        return list(reversed(starts))

    def get_step(self, log_id: int) -> LogRecord:
        """
        Raises:
            StepNotFoundError: If the id is absent or not an event-step record
        """
        record = self.index().get(log_id, where=_is_event_step)
        if record is None:
            raise StepNotFoundError(log_id)
        return record

    def get_steps_of(self, start_id: int) -> tuple[LogRecord, ...]:
        """Steps of an event in step-number order."""
        return self.get_family(start_id).steps

    def recent(self, count: int | None = None) -> list[LogRecord]:
        return self._store.read_last(count)

    def search_text(self, query: str) -> list[LogRecord]:
        """Records whose text contains query, ignoring case."""
        needle = query.lower()
        return self._store.search(lambda raw: needle in raw.lower())

    def search_session(self, session_id: str) -> list[LogRecord]:
        """Records written from the session with exactly this id."""
        return [
            r
            for r in self._store.read_all()
            if r.session is not None and r.session.session_id == session_id
        ]

    def count(self) -> int:
        return self._store.count()
