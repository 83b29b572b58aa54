"""Log id allocators."""

import logging
import time
from pathlib import Path

from lazi.domain.interfaces import IdAllocatorInterface

logger = logging.getLogger(__name__)


def _time_based_id() -> int:
    return int(time.time() * 1000)


class FileIdAllocator(IdAllocatorInterface):
    """
    Counter persisted as a decimal integer in a small text file.

    Read-increment-write is not atomic across processes. When the file
    cannot be read or written the allocator falls back to a millisecond
    timestamp, which keeps ids increasing but leaves a gap.
    """

    def __init__(self, counter_path: Path):
        self._path = Path(counter_path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> int:
        if not self._path.exists():
            return 0
        return int(self._path.read_text(encoding="utf-8").strip() or 0)

    def next_id(self) -> int:
        try:
            value = self._read() + 1
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(str(value), encoding="utf-8")
            return value
        except (OSError, ValueError) as e:
            fallback = _time_based_id()
            logger.warning("Counter %s unusable (%s); using id %d", self._path, e, fallback)
            return fallback

    def reset(self) -> None:
        self._path.unlink(missing_ok=True)


class InMemoryIdAllocator(IdAllocatorInterface):
    """In-memory counter for testing."""

    def __init__(self, start: int = 0) -> None:
        self._value = start

    def next_id(self) -> int:
        self._value += 1
        return self._value

    def reset(self) -> None:
        self._value = 0
