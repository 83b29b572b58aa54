"""
Use cases that execute something and record it.

CommandExecutor covers registered, ad-hoc and repeated commands (single
records); WorkflowExecutor assembles and runs a workflow as one event.
The command always runs to completion; logging failures only produce a
missing log id.
"""

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from lazi.application.assembly import ScriptAssembler
from lazi.application.event_logger import EventLogger
from lazi.application.event_model import EventQueries
from lazi.application.parameters import resolve_command
from lazi.domain.exceptions import CommandNotFoundError, NotRerunnableError
from lazi.domain.interfaces import (
    CommandRegistryInterface,
    ProcessRunnerInterface,
    WorkflowRepositoryInterface,
)
from lazi.domain.models import (
    AssembledScript,
    EventStartPayload,
    ProcessResult,
    SinglePayload,
    WorkflowGraph,
)
from lazi.domain.scripts import ScriptType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandOutcome:
    """A finished command and the id of its single record (None if not logged)."""

    name: str
    command: str
    result: ProcessResult
    log_id: int | None = None
    note: str | None = None  # user-facing remark, e.g. parameters ignored

    @property
    def exit_code(self) -> int:
        return self.result.exit_code


@dataclass(frozen=True)
class WorkflowRun:
    """A finished workflow execution."""

    script: AssembledScript
    result: ProcessResult
    duration: float
    event_id: int | None = None


class CommandExecutor:
    """Runs commands through the platform shell and writes single records."""

    def __init__(
        self,
        registry: CommandRegistryInterface,
        runner: ProcessRunnerInterface,
        event_logger: EventLogger,
        queries: EventQueries,
    ) -> None:
        self._registry = registry
        self._runner = runner
        self._events = event_logger
        self._queries = queries

    def _execute(self, name: str, command: str, log: bool) -> CommandOutcome:
        result = self._runner.run_shell(command)
        log_id = self._events.write_single(name, command, result) if log else None
        return CommandOutcome(name=name, command=command, result=result, log_id=log_id)

    def prepare_run(
        self,
        name: str,
        params: Sequence[str] = (),
        passthrough: Sequence[str] | None = None,
    ) -> str:
        """
        Command text for a registered command with parameters bound.

        Raises:
            CommandNotFoundError: If no command has this name
            MissingParametersError: If a declared parameter is not supplied
        """
        registered = self._registry.get_command(name)
        if registered is None:
            raise CommandNotFoundError(name)
        return resolve_command(registered, params, passthrough)

    def run(
        self,
        name: str,
        params: Sequence[str] = (),
        passthrough: Sequence[str] | None = None,
        log: bool = True,
    ) -> CommandOutcome:
        command = self.prepare_run(name, params, passthrough)
        return self._execute(name, command, log)

    def quick(self, tokens: Sequence[str], log: bool = True) -> CommandOutcome:
        """Run an ad-hoc command line; its text doubles as the record name."""
        command = " ".join(tokens)
        return self._execute(command, command, log)

    def rerun(self, log_id: int, params: Sequence[str] = (), log: bool = True) -> CommandOutcome:
        """
        Execute a logged single command or a logged event's script again.

        Raises:
            LogNotFoundError: If the id does not exist
            NotRerunnableError: If the record is neither a single nor an
                event-start with stored script content
            MissingParametersError: If new parameters leave one unbound
        """
        record = self._queries.get_record(log_id)
        payload = record.payload

        if isinstance(payload, EventStartPayload):
            if not payload.script_content:
                raise NotRerunnableError(
                    f"Event Log-{log_id} does not contain script content"
                )
            try:
                script_type = ScriptType.parse(payload.script_type)
            except ValueError as e:
                raise NotRerunnableError(f"Event Log-{log_id}: {e}") from e
            result = self._runner.run_script(payload.script_content, script_type.value)
            name = f"rerun-event-{log_id} ({payload.script_name})"
            command = f"Event rerun: {payload.script_type or 'unknown'} script"
            new_id = self._events.write_single(name, command, result) if log else None
            return CommandOutcome(name=name, command=command, result=result, log_id=new_id)

        if not isinstance(payload, SinglePayload):
            raise NotRerunnableError(f"Log-{log_id} is a {record.kind.value} record and cannot be re-run")

        command = payload.command_executed
        note = None
        if params:
            registered = self._registry.get_command(payload.command_name)
            if registered is not None and registered.parameters:
                command = resolve_command(registered, params)
            else:
                note = "Cannot override parameters for this command (not in registry or no parameters)"
                logger.warning("Log-%d: %s", log_id, note)

        outcome = self._execute(f"rerun-{log_id} ({payload.command_name})", command, log)
        return CommandOutcome(
            name=outcome.name,
            command=outcome.command,
            result=outcome.result,
            log_id=outcome.log_id,
            note=note,
        )


class WorkflowExecutor:
    """Loads, assembles and runs workflows, recording each run as an event."""

    def __init__(
        self,
        repository: WorkflowRepositoryInterface,
        assembler: ScriptAssembler,
        runner: ProcessRunnerInterface,
        event_logger: EventLogger,
        default_script_type: ScriptType = ScriptType.POWERSHELL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._repository = repository
        self._assembler = assembler
        self._runner = runner
        self._events = event_logger
        self._default_type = default_script_type
        self._clock = clock

    def resolve_type(self, graph: WorkflowGraph, script_type: ScriptType | str | None) -> ScriptType:
        """Explicit type, else the workflow's own, else the configured default."""
        chosen = script_type or graph.script_type
        if chosen is None:
            return self._default_type
        return ScriptType.parse(chosen) if isinstance(chosen, str) else chosen

    def build(self, name: str, script_type: ScriptType | str | None = None) -> AssembledScript:
        """
        Raises:
            WorkflowNotFoundError: If no workflow has this name
            CycleDetected: If the workflow graph has a cycle
        """
        graph = self._repository.load(name)
        return self._assembler.assemble(graph, self.resolve_type(graph, script_type))

    def run(
        self,
        name: str,
        script_type: ScriptType | str | None = None,
        log: bool = True,
        script: AssembledScript | None = None,
    ) -> WorkflowRun:
        """
        Execute a workflow: event-start, one event-step per section, run, event-end.

        Args:
            script: Already assembled script to reuse (e.g. after --show)
        """
        if script is None:
            script = self.build(name, script_type)

        event_id = None
        if log:
            event_id = self._events.start_event(
                name, script.script_type, len(script.sections), script.text
            )
            if event_id is None:
                logger.warning("Could not create event log for workflow %s", name)
            else:
                for number, section in enumerate(script.sections, start=1):
                    self._events.log_step(event_id, number, section.label, section.code)

        started = self._clock()
        result = self._runner.run_script(script.text, script.script_type)
        duration = self._clock() - started

        if event_id is not None:
            self._events.end_event(event_id, name, result, duration)
        return WorkflowRun(script=script, result=result, duration=duration, event_id=event_id)
