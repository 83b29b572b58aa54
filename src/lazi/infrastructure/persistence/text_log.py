"""
Append-only execution log implementations.

FilesystemLogStore writes the human-readable text layout from
record_format; InMemoryLogStore keeps records in a list for tests.
"""

from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

from lazi.domain.interfaces import IdAllocatorInterface, LogStoreInterface
from lazi.domain.models import LogRecord
from lazi.infrastructure.persistence.record_format import (
    SEPARATOR,
    format_record,
    parse_store,
)


def _tail(records: list[LogRecord], count: int | None) -> list[LogRecord]:
    if not count or count <= 0:
        return records
    return records[-count:]


class FilesystemLogStore(LogStoreInterface):
    """
    Log file of records separated by ``---`` lines.

    Every read parses the whole file, so queries always see the latest
    appends from any process.
    """

    def __init__(self, log_path: Path, allocator: IdAllocatorInterface | None = None):
        self._path = Path(log_path)
        self._allocator = allocator

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: LogRecord) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "a", encoding="utf-8", newline="\n") as f:
            f.write(format_record(record) + f"\n{SEPARATOR}\n")

    def _read_text(self) -> str:
        if not self._path.exists():
            return ""
        return self._path.read_text(encoding="utf-8", errors="replace")

    def read_all(self) -> list[LogRecord]:
        return parse_store(self._read_text())

    def read_last(self, count: int | None = None) -> list[LogRecord]:
        return _tail(self.read_all(), count)

    def search(self, predicate: Callable[[str], bool]) -> list[LogRecord]:
        return [r for r in self.read_all() if predicate(r.raw)]

    def count(self) -> int:
        return len(self.read_all())

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
        if self._allocator is not None:
            self._allocator.reset()


class InMemoryLogStore(LogStoreInterface):
    """In-memory log for testing. Raw text is rendered on append."""

    def __init__(self, allocator: IdAllocatorInterface | None = None) -> None:
        self._records: list[LogRecord] = []
        self._allocator = allocator

    def append(self, record: LogRecord) -> None:
        self._records.append(replace(record, raw=format_record(record)))

    def read_all(self) -> list[LogRecord]:
        return list(self._records)

    def read_last(self, count: int | None = None) -> list[LogRecord]:
        return _tail(self.read_all(), count)

    def search(self, predicate: Callable[[str], bool]) -> list[LogRecord]:
        return [r for r in self._records if predicate(r.raw)]

    def count(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        self._records.clear()
        if self._allocator is not None:
            self._allocator.reset()
