"""
Domain exceptions for lazi.

Not-found conditions abort the requested operation; the CLI turns every
LaziError into an error message and a non-zero exit status.
"""

from __future__ import annotations


class LaziError(Exception):
    """Base class for errors reported to the user."""


class ConfigurationError(LaziError):
    """Raised when settings, workflow files or the node catalog are invalid."""

    pass


class NotFoundError(LaziError):
    """A referenced log, event, step, workflow, node or command does not exist."""

    def __init__(self, message: str, key: object = None):
        super().__init__(message)
        self.key = key


class LogNotFoundError(NotFoundError):
    def __init__(self, log_id: int):
        super().__init__(f"Log-{log_id} not found", log_id)


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int):
        super().__init__(f"Event {event_id} not found", event_id)


class StepNotFoundError(NotFoundError):
    """Raised for unknown ids and for ids that are not event-step records."""

    def __init__(self, step_ids: int | tuple[int, ...]):
        ids = step_ids if isinstance(step_ids, tuple) else (step_ids,)
        listed = ", ".join(f"Log-{i}" for i in ids)
        super().__init__(f"Not found or not a step entry: {listed}", ids)
        self.step_ids = ids


class WorkflowNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Workflow '{name}' not found", name)


class CustomNodeNotFoundError(NotFoundError):
    def __init__(self, node_id: str):
        super().__init__(f"Node '{node_id}' not found", node_id)


class CommandNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Command '{name}' not found", name)


class NotRerunnableError(LaziError):
    """The log id exists but its record cannot be executed again."""

    pass


class MissingParametersError(LaziError):
    """A registered command was invoked without all of its parameters."""

    def __init__(self, command: str, missing: tuple[str, ...], required: tuple[str, ...]):
        super().__init__(f"Missing required parameters: {', '.join(missing)}")
        self.command = command
        self.missing = missing
        self.required = required


class CycleDetected(LaziError):
    """
    Raised when workflow linearization meets a back-edge.

    The graph must be a DAG for a dependency-respecting order to exist.
    """

    def __init__(self, cycle: tuple[str, ...]):
        """
        Args:
            cycle: Node ids along the cycle, first node repeated at the end
        """
        super().__init__(f"Cycle detected in workflow: {' -> '.join(cycle)}")
        self.cycle = cycle
