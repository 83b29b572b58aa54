"""Shared pytest fixtures for lazi tests."""

from collections.abc import Sequence

import pytest

from lazi.application import EventLogger, EventQueries
from lazi.domain.interfaces import ProcessRunnerInterface
from lazi.domain.models import ProcessResult, SessionInfo
from lazi.infrastructure import InMemoryIdAllocator, InMemoryLogStore

SESSION = SessionInfo(
    session_id="4242",
    working_dir="/home/dev/project",
    user="dev",
    hostname="devbox",
    shell="/bin/sh",
)

FIXED_TIMESTAMP = "2025-03-01T12:00:00+00:00"


class FakeRunner(ProcessRunnerInterface):
    """Records every call; returns queued results, then ``default``."""

    def __init__(
        self,
        results: Sequence[ProcessResult] = (),
        default: ProcessResult | None = None,
    ) -> None:
        self.results = list(results)
        self.default = default or ProcessResult(exit_code=0, stdout="ok")
        self.shell_commands: list[str] = []
        self.scripts: list[tuple[str, str]] = []
        self.spawned: list[list[str]] = []

    def _next(self) -> ProcessResult:
        return self.results.pop(0) if self.results else self.default

    def run_shell(self, command: str) -> ProcessResult:
        self.shell_commands.append(command)
        return self._next()

    def run_script(self, script: str, script_type: str) -> ProcessResult:
        self.scripts.append((script, script_type))
        return self._next()

    def spawn(self, argv: Sequence[str]) -> ProcessResult:
        self.spawned.append(list(argv))
        return self._next()


@pytest.fixture
def session() -> SessionInfo:
    return SESSION


@pytest.fixture
def allocator() -> InMemoryIdAllocator:
    return InMemoryIdAllocator()


@pytest.fixture
def memory_store(allocator: InMemoryIdAllocator) -> InMemoryLogStore:
    """In-memory log store sharing the allocator fixture."""
    return InMemoryLogStore(allocator)


@pytest.fixture
def event_logger(memory_store: InMemoryLogStore, allocator: InMemoryIdAllocator) -> EventLogger:
    """Logger with a fixed session and timestamp."""
    return EventLogger(
        memory_store,
        allocator,
        session_provider=lambda: SESSION,
        clock=lambda: FIXED_TIMESTAMP,
    )


@pytest.fixture
def queries(memory_store: InMemoryLogStore) -> EventQueries:
    return EventQueries(memory_store)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


class ReadOnlyLogStore(InMemoryLogStore):
    """Store whose writes always fail."""

    def append(self, record) -> None:
        raise OSError("disk full")


@pytest.fixture
def make_runner():
    """FakeRunner factory: ``make_runner([ProcessResult(...), ...])``."""
    return FakeRunner


@pytest.fixture
def failing_logger() -> EventLogger:
    """Logger over a store that rejects every append."""
    allocator = InMemoryIdAllocator()
    return EventLogger(
        ReadOnlyLogStore(allocator),
        allocator,
        session_provider=lambda: SESSION,
        clock=lambda: FIXED_TIMESTAMP,
    )
