"""
lazi: command runner with an append-only execution log and a workflow
script builder.

Example:
    from lazi import EventLogger, EventQueries, ScriptAssembler
    from lazi.infrastructure import (
        InMemoryCustomNodeCatalog,
        InMemoryIdAllocator,
        InMemoryLogStore,
        capture_session,
    )

    allocator = InMemoryIdAllocator()
    store = InMemoryLogStore(allocator)
    events = EventLogger(store, allocator, capture_session)
    event_id = events.start_event("deploy", "bash", total_steps=2)

    assembler = ScriptAssembler(InMemoryCustomNodeCatalog(), log_store=store)
    script = assembler.assemble(graph, "bash")
"""

# Application layer (use cases)
from lazi.application import (
    BatchOrchestrator,
    CommandExecutor,
    EventLogger,
    EventQueries,
    ScriptAssembler,
    WorkflowExecutor,
    build_script_from_steps,
)

# Domain exceptions
from lazi.domain.exceptions import CycleDetected, LaziError, NotFoundError

# Domain interfaces (for type hints and custom adapters)
from lazi.domain.interfaces import (
    IdAllocatorInterface,
    LogStoreInterface,
    ProcessRunnerInterface,
)
from lazi.domain.models import (
    AssembledScript,
    EventFamily,
    LogRecord,
    Node,
    RecordKind,
    WorkflowGraph,
)
from lazi.domain.scripts import ScriptType

# Generators
from lazi.generators import compile_generator

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Domain models
    "AssembledScript",
    "EventFamily",
    "LogRecord",
    "Node",
    "RecordKind",
    "ScriptType",
    "WorkflowGraph",
    # Domain interfaces
    "IdAllocatorInterface",
    "LogStoreInterface",
    "ProcessRunnerInterface",
    # Domain exceptions
    "CycleDetected",
    "LaziError",
    "NotFoundError",
    # Application layer
    "BatchOrchestrator",
    "CommandExecutor",
    "EventLogger",
    "EventQueries",
    "ScriptAssembler",
    "WorkflowExecutor",
    "build_script_from_steps",
    # Generators
    "compile_generator",
]
