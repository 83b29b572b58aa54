"""
Application layer for lazi.

Use cases that coordinate domain objects through the domain ports:
recording executions, querying the log, batching, assembling scripts.
"""

from lazi.application.assembly import ScriptAssembler
from lazi.application.batch import BatchOrchestrator, split_batch_commands
from lazi.application.event_logger import EventLogger
from lazi.application.event_model import EventQueries
from lazi.application.executors import (
    CommandExecutor,
    CommandOutcome,
    WorkflowExecutor,
    WorkflowRun,
)
from lazi.application.step_builder import StepBuildResult, build_script_from_steps

__all__ = [
    "BatchOrchestrator",
    "CommandExecutor",
    "CommandOutcome",
    "EventLogger",
    "EventQueries",
    "ScriptAssembler",
    "StepBuildResult",
    "WorkflowExecutor",
    "WorkflowRun",
    "build_script_from_steps",
    "split_batch_commands",
]
