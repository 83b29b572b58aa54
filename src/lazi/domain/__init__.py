"""
Domain layer for lazi.

Log records, workflow graphs and their pure operations. No I/O and no
third-party dependencies.
"""

from lazi.domain.exceptions import (
    CommandNotFoundError,
    ConfigurationError,
    CustomNodeNotFoundError,
    CycleDetected,
    EventNotFoundError,
    LaziError,
    LogNotFoundError,
    MissingParametersError,
    NotFoundError,
    NotRerunnableError,
    StepNotFoundError,
    WorkflowNotFoundError,
)
from lazi.domain.interfaces import (
    CommandRegistryInterface,
    CustomNodeCatalogInterface,
    IdAllocatorInterface,
    LogStoreInterface,
    ProcessRunnerInterface,
    WorkflowRepositoryInterface,
)
from lazi.domain.log_index import LogIndex
from lazi.domain.models import (
    AssembledScript,
    BatchEndPayload,
    BatchResult,
    BatchStartPayload,
    BatchStepPayload,
    CustomField,
    CustomNode,
    Edge,
    EventEndPayload,
    EventFamily,
    EventStartPayload,
    EventStepPayload,
    LogRecord,
    Node,
    OperationKind,
    OutputHandle,
    ProcessResult,
    RecordKind,
    RegisteredCommand,
    ScriptSection,
    SessionInfo,
    SinglePayload,
    WorkflowGraph,
)
from lazi.domain.scripts import ScriptType
from lazi.domain.workflow import branch_members, dependency_map, linearize

__all__ = [
    # Log records
    "RecordKind",
    "SessionInfo",
    "SinglePayload",
    "EventStartPayload",
    "EventStepPayload",
    "EventEndPayload",
    "BatchStartPayload",
    "BatchStepPayload",
    "BatchEndPayload",
    "LogRecord",
    "EventFamily",
    "BatchResult",
    "LogIndex",
    # Workflow graph
    "OperationKind",
    "Node",
    "Edge",
    "WorkflowGraph",
    "CustomField",
    "OutputHandle",
    "CustomNode",
    "ScriptSection",
    "AssembledScript",
    "ScriptType",
    "RegisteredCommand",
    "ProcessResult",
    "dependency_map",
    "linearize",
    "branch_members",
    # Interfaces
    "IdAllocatorInterface",
    "LogStoreInterface",
    "WorkflowRepositoryInterface",
    "CustomNodeCatalogInterface",
    "CommandRegistryInterface",
    "ProcessRunnerInterface",
    # Exceptions
    "LaziError",
    "ConfigurationError",
    "NotFoundError",
    "LogNotFoundError",
    "EventNotFoundError",
    "StepNotFoundError",
    "WorkflowNotFoundError",
    "CustomNodeNotFoundError",
    "CommandNotFoundError",
    "NotRerunnableError",
    "MissingParametersError",
    "CycleDetected",
]
