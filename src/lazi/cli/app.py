"""Composition root: wires infrastructure adapters into the use cases."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass

from lazi.application import (
    BatchOrchestrator,
    CommandExecutor,
    EventLogger,
    EventQueries,
    ScriptAssembler,
    WorkflowExecutor,
)
from lazi.config import Settings
from lazi.domain.interfaces import (
    CommandRegistryInterface,
    CustomNodeCatalogInterface,
    IdAllocatorInterface,
    LogStoreInterface,
    ProcessRunnerInterface,
    WorkflowRepositoryInterface,
)
from lazi.infrastructure import (
    FileIdAllocator,
    FilesystemLogStore,
    FilesystemWorkflowRepository,
    JsonCommandRegistry,
    JsonCustomNodeCatalog,
    SubprocessRunner,
    capture_session,
)


def self_invocation() -> list[str]:
    """argv prefix that re-enters this CLI in a child process."""
    return [sys.executable, "-m", "lazi"]


@dataclass
class LaziApp:
    """Everything a CLI command needs, built once per invocation."""

    settings: Settings
    allocator: IdAllocatorInterface
    store: LogStoreInterface
    registry: CommandRegistryInterface
    catalog: CustomNodeCatalogInterface
    workflows: WorkflowRepositoryInterface
    runner: ProcessRunnerInterface

    def __post_init__(self) -> None:
        self.events = EventLogger(self.store, self.allocator, capture_session)
        self.queries = EventQueries(self.store)
        self.assembler = ScriptAssembler(
            self.catalog,
            log_store=self.store,
            allow_code=self.settings.allow_code_generators,
        )
        self.commands = CommandExecutor(self.registry, self.runner, self.events, self.queries)
        self.workflow_executor = WorkflowExecutor(
            self.workflows,
            self.assembler,
            self.runner,
            self.events,
            default_script_type=self.settings.default_script_type,
        )

    def batch_orchestrator(self, global_args: Sequence[str] = ()) -> BatchOrchestrator:
        """Orchestrator whose children re-enter this CLI with global_args first."""
        return BatchOrchestrator(self.events, self.runner, [*self_invocation(), *global_args])


def build_app(settings: Settings, runner: ProcessRunnerInterface | None = None) -> LaziApp:
    """Create the filesystem-backed application for the given settings."""
    allocator = FileIdAllocator(settings.counter_path)
    return LaziApp(
        settings=settings,
        allocator=allocator,
        store=FilesystemLogStore(settings.log_path, allocator),
        registry=JsonCommandRegistry(settings.registry_path),
        catalog=JsonCustomNodeCatalog(settings.custom_nodes_path),
        workflows=FilesystemWorkflowRepository(settings.workflows_dir),
        runner=runner or SubprocessRunner(),
    )
