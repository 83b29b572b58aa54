"""
Infrastructure layer for lazi.

Adapters for external concerns: the log file, workflow and catalog
documents, the command registry, subprocesses and session identity.
"""

from lazi.infrastructure.persistence import (
    FileIdAllocator,
    FilesystemLogStore,
    InMemoryIdAllocator,
    InMemoryLogStore,
)
from lazi.infrastructure.process import SubprocessRunner
from lazi.infrastructure.registry import InMemoryCommandRegistry, JsonCommandRegistry
from lazi.infrastructure.session import capture_session
from lazi.infrastructure.workflows import (
    FilesystemWorkflowRepository,
    InMemoryCustomNodeCatalog,
    InMemoryWorkflowRepository,
    JsonCustomNodeCatalog,
)

__all__ = [
    # Persistence
    "FileIdAllocator",
    "InMemoryIdAllocator",
    "FilesystemLogStore",
    "InMemoryLogStore",
    # Documents
    "FilesystemWorkflowRepository",
    "InMemoryWorkflowRepository",
    "JsonCustomNodeCatalog",
    "InMemoryCustomNodeCatalog",
    "JsonCommandRegistry",
    "InMemoryCommandRegistry",
    # Processes
    "SubprocessRunner",
    "capture_session",
]
