"""
Domain models for the execution log and the workflow graph.

These are pure data structures with no I/O.
All models are immutable (frozen dataclasses); collections are tuples or
read-only mappings so a record read back from the store can be shared freely.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

# =============================================================================
# LOG RECORDS
# =============================================================================


class RecordKind(str, Enum):
    """Discriminator for the record variants sharing one append stream."""

    SINGLE = "single"
    EVENT_START = "event-start"
    EVENT_STEP = "event-step"
    EVENT_END = "event-end"
    BATCH_START = "batch-start"
    BATCH_STEP = "batch-step"
    BATCH_END = "batch-end"

    @property
    def family(self) -> str | None:
        """'event' or 'batch' for grouped kinds, None for singles."""
        if self is RecordKind.SINGLE:
            return None
        return self.value.split("-", 1)[0]

    @property
    def is_start(self) -> bool:
        return self.value.endswith("-start")

    @property
    def is_step(self) -> bool:
        return self.value.endswith("-step")

    @property
    def is_end(self) -> bool:
        return self.value.endswith("-end")


@dataclass(frozen=True)
class SessionInfo:
    """Where and by whom a record was written. Captured once, never mutated."""

    session_id: str  # parent process id of the invoking CLI
    working_dir: str
    user: str
    hostname: str
    shell: str


@dataclass(frozen=True)
class SinglePayload:
    """One command execution."""

    command_name: str
    command_executed: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class EventStartPayload:
    """Opens a script execution event."""

    script_name: str
    script_type: str
    total_steps: int
    script_content: str | None = None  # present when the event can be rerun


@dataclass(frozen=True)
class EventStepPayload:
    """One workflow node inside a script execution event."""

    step_number: int
    step_name: str
    step_code: str | None = None


@dataclass(frozen=True)
class EventEndPayload:
    """Closes a script execution event with the overall result."""

    script_name: str
    exit_code: int
    duration: float  # seconds
    stdout: str = ""
    stderr: str = ""


@dataclass(frozen=True)
class BatchStartPayload:
    """Opens a batch of sub-invocations."""

    total_commands: int


@dataclass(frozen=True)
class BatchStepPayload:
    """One sub-invocation inside a batch."""

    step_number: int
    command_name: str
    command: str
    exit_code: int
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class BatchEndPayload:
    """Closes a batch with its tallies."""

    total_commands: int
    successful: int
    failed: int
    duration: float  # seconds


Payload = (
    SinglePayload
    | EventStartPayload
    | EventStepPayload
    | EventEndPayload
    | BatchStartPayload
    | BatchStepPayload
    | BatchEndPayload
)


@dataclass(frozen=True)
class LogRecord:
    """
    Atomic unit of the append-only log.

    ``log_id`` comes from one counter shared by all kinds, so ids are
    strictly increasing in write order across the whole store.
    ``parent_id`` is set on step and end kinds and points at the start
    record of the same family; readers must tolerate it dangling.
    """

    log_id: int
    timestamp: str  # ISO 8601
    kind: RecordKind
    payload: Payload
    parent_id: int | None = None
    session: SessionInfo | None = None
    raw: str = field(default="", compare=False)  # text as read from the store

    @property
    def name(self) -> str:
        """Display name: command, script or step name depending on the kind."""
        p = self.payload
        if isinstance(p, SinglePayload):
            return p.command_name
        if isinstance(p, (EventStartPayload, EventEndPayload)):
            return p.script_name
        if isinstance(p, EventStepPayload):
            return p.step_name
        if isinstance(p, BatchStepPayload):
            return p.command_name
        return "Batch Execution"

    @property
    def step_number(self) -> int | None:
        if isinstance(self.payload, (EventStepPayload, BatchStepPayload)):
            return self.payload.step_number
        return None


@dataclass(frozen=True)
class EventFamily:
    """
    A start record plus every record naming it as parent.

    ``children`` keeps store order and may mix kinds, including records
    of another family that share the parent id after a counter reset.
    ``steps`` and ``end`` keep only the start's own family. A missing end
    means the event is still open or was abandoned.
    """

    start: LogRecord
    children: tuple[LogRecord, ...] = ()

    @property
    def records(self) -> tuple[LogRecord, ...]:
        return (self.start, *self.children)

    def _own(self) -> list[LogRecord]:
        return [r for r in self.children if r.kind.family == self.start.kind.family]

    @property
    def steps(self) -> tuple[LogRecord, ...]:
        steps = [r for r in self._own() if r.kind.is_step]
        return tuple(sorted(steps, key=lambda r: r.step_number or 0))

    @property
    def end(self) -> LogRecord | None:
        for record in self._own():
            if record.kind.is_end:
                return record
        return None

    @property
    def is_open(self) -> bool:
        return self.end is None


@dataclass(frozen=True)
class BatchResult:
    """Outcome of a batch run."""

    event_id: int | None  # None when the batch-start record could not be written
    total: int
    successful: int
    failed: int
    duration: float

    @property
    def exit_code(self) -> int:
        return 0 if self.failed == 0 else 1


# =============================================================================
# WORKFLOW GRAPH
# =============================================================================


class OperationKind(Enum):
    """What a node's operation reference points at."""

    LOG = "log"  # replay a historical single record
    COMMAND = "command"  # invoke a registered command
    CUSTOM = "custom"  # custom node generator


LOG_OPERATION_IDS = frozenset({"cmdregistry-log", "lazi-log"})
COMMAND_OPERATION_PREFIX = "lazi-"


@dataclass(frozen=True)
class Node:
    """One workflow step."""

    node_id: str
    operation: str
    label: str = ""
    config: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def operation_kind(self) -> OperationKind:
        if self.operation in LOG_OPERATION_IDS:
            return OperationKind.LOG
        if self.operation.startswith(COMMAND_OPERATION_PREFIX):
            return OperationKind.COMMAND
        return OperationKind.CUSTOM

    @property
    def command_name(self) -> str:
        """Registered command name for COMMAND nodes."""
        return self.operation.removeprefix(COMMAND_OPERATION_PREFIX)

    @property
    def display_name(self) -> str:
        return self.label or self.operation


@dataclass(frozen=True)
class Edge:
    """Dependency ``source -> target``; ``source_handle`` names a branch."""

    source: str
    target: str
    source_handle: str | None = None


@dataclass(frozen=True)
class WorkflowGraph:
    """Nodes in declaration order plus edges in declaration order."""

    name: str
    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    script_type: str | None = None
    description: str = ""
    created_at: str = ""

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.node_id == node_id:
                return node
        return None


@dataclass(frozen=True)
class CustomField:
    """Configurable input of a custom node."""

    key: str
    label: str = ""
    field_type: str = "text"
    default: Any = None


@dataclass(frozen=True)
class OutputHandle:
    """Named branch output of a custom node."""

    handle_id: str
    label: str = ""


@dataclass(frozen=True)
class CustomNode:
    """User-authored node: fields plus one generator source per script type."""

    node_id: str
    name: str
    category: str = ""
    description: str = ""
    fields: tuple[CustomField, ...] = ()
    output_handles: tuple[OutputHandle, ...] = ()
    generators: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    tags: tuple[str, ...] = ()

    def generator_for(self, script_type: str) -> str | None:
        return self.generators.get(script_type)


@dataclass(frozen=True)
class ScriptSection:
    """Generated code for one node, as placed in the assembled script."""

    node_id: str
    label: str
    code: str


@dataclass(frozen=True)
class AssembledScript:
    """Output of the assembly pipeline."""

    script_type: str
    text: str
    sections: tuple[ScriptSection, ...] = ()


@dataclass(frozen=True)
class RegisteredCommand:
    """Command definition read from the registry collaborator."""

    name: str
    command: str
    parameters: tuple[str, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""

    exit_code: int
    stdout: str = ""
    stderr: str = ""
    error: str | None = None  # set when the process could not be started
