"""
Domain interfaces (Ports) for lazi.

These abstract base classes define the contracts that adapters must satisfy.
They have no external dependencies; the application layer depends on them only.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lazi.domain.models import (
        CustomNode,
        LogRecord,
        ProcessResult,
        RegisteredCommand,
        WorkflowGraph,
    )


class IdAllocatorInterface(ABC):
    """
    Port for log id allocation.

    One counter is shared by every record kind in a store.
    Not safe under concurrent writers: two processes may read the same
    value before either writes back.
    """

    @abstractmethod
    def next_id(self) -> int:
        """
        Issue the next identifier.

        Returns:
            A value strictly greater than the previous one. On I/O failure a
            coarse time-derived value is returned instead of raising.
        """
        pass

    @abstractmethod
    def reset(self) -> None:
        """Forget the persisted counter so numbering restarts at 1."""
        pass


class LogStoreInterface(ABC):
    """
    Port for the append-only execution log.

    Records are immutable once appended; the only deletion is clear().
    """

    @abstractmethod
    def append(self, record: "LogRecord") -> None:
        """
        Append a record, creating the store if absent.

        Raises:
            OSError: If the store cannot be written
        """
        pass

    @abstractmethod
    def read_all(self) -> list["LogRecord"]:
        """Return every well-formed record in write order."""
        pass

    @abstractmethod
    def read_last(self, count: int | None = None) -> list["LogRecord"]:
        """
        Return the most recent records in write order.

        Args:
            count: Number of records; 0 or None returns the whole store
        """
        pass

    @abstractmethod
    def search(self, predicate: Callable[[str], bool]) -> list["LogRecord"]:
        """Return records whose raw text satisfies predicate, in write order."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of well-formed records."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete the store and its id counter."""
        pass


class WorkflowRepositoryInterface(ABC):
    """Port for reading workflow definitions (external collaborator)."""

    @abstractmethod
    def list_names(self) -> list[str]:
        """Names of all stored workflows, sorted."""
        pass

    @abstractmethod
    def load(self, name: str) -> "WorkflowGraph":
        """
        Load a workflow by name.

        Raises:
            WorkflowNotFoundError: If no workflow has this name
            ConfigurationError: If the document is invalid
        """
        pass


class CustomNodeCatalogInterface(ABC):
    """Port for reading custom-node definitions (external collaborator)."""

    @abstractmethod
    def get(self, node_id: str) -> "CustomNode | None":
        """Return the custom node with this id, or None."""
        pass

    @abstractmethod
    def list_nodes(self) -> Sequence["CustomNode"]:
        """All custom nodes in catalog order."""
        pass


class CommandRegistryInterface(ABC):
    """Port for reading registered commands (external collaborator)."""

    @abstractmethod
    def get_command(self, name: str) -> "RegisteredCommand | None":
        """Return the registered command with this name, or None."""
        pass


class ProcessRunnerInterface(ABC):
    """
    Port for spawning external processes.

    Every call blocks until the process exits; nothing runs concurrently.
    """

    @abstractmethod
    def run_shell(self, command: str) -> "ProcessResult":
        """Run a command line through the platform shell, teeing and capturing output."""
        pass

    @abstractmethod
    def run_script(self, script: str, script_type: str) -> "ProcessResult":
        """
        Run script text with the interpreter for its type, teeing and capturing output.

        The text is written to a temporary file that is removed afterwards.
        """
        pass

    @abstractmethod
    def spawn(self, argv: Sequence[str]) -> "ProcessResult":
        """Run argv attached to the current terminal; output is not captured."""
        pass
