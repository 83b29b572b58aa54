"""
Script assembly: workflow graph -> one script text.

1. Linearize the graph (dependencies first).
2. Resolve each node's code from its operation reference:
   log replay, registered command, or custom-node generator.
3. Concatenate a script-type header and one labelled section per node.

Assembly is best-effort: a node that cannot be resolved becomes a
comment in the output instead of aborting the build. Only a cycle
(CycleDetected) stops it, since no order exists.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from lazi.domain.interfaces import CustomNodeCatalogInterface, LogStoreInterface
from lazi.domain.log_index import LogIndex
from lazi.domain.models import (
    AssembledScript,
    CustomNode,
    LogRecord,
    Node,
    OperationKind,
    RecordKind,
    ScriptSection,
    SinglePayload,
    WorkflowGraph,
)
from lazi.domain.scripts import ScriptType, render_section, script_header
from lazi.domain.workflow import branch_members, linearize
from lazi.generators import CompiledGenerator, compile_generator, stringify

logger = logging.getLogger(__name__)


def _is_single(record: LogRecord) -> bool:
    return record.kind is RecordKind.SINGLE


def command_invocation(node: Node) -> str:
    """``lazi run <name>`` with non-empty config values in declaration order."""
    params = [stringify(v) for v in node.config.values() if v is not None and v != ""]
    suffix = f" {' '.join(params)}" if params else ""
    return f"# Run lazi command: {node.command_name}\nlazi run {node.command_name}{suffix}"


class ScriptAssembler:
    """
    Renders workflow graphs into PowerShell or bash text.

    Args:
        catalog: Custom-node definitions
        log_store: Source for log-replay nodes; read at most once per assemble()
        allow_code: Permit executable (function-form) generators
        expand_branches: Render handle-edge targets into their owner's branches
    """

    def __init__(
        self,
        catalog: CustomNodeCatalogInterface,
        log_store: LogStoreInterface | None = None,
        allow_code: bool = False,
        expand_branches: bool = True,
    ) -> None:
        self._catalog = catalog
        self._log_store = log_store
        self._allow_code = allow_code
        self._expand_branches = expand_branches

    def assemble(self, graph: WorkflowGraph, script_type: ScriptType | str) -> AssembledScript:
        """
        Raises:
            CycleDetected: If the graph is not a DAG
        """
        script_type = ScriptType.parse(script_type) if isinstance(script_type, str) else script_type
        order = linearize(graph)
        nodes = {node.node_id: node for node in graph.nodes}

        ctx = _AssemblyContext(script_type, nodes)
        for node in graph.nodes:
            if node.operation_kind is OperationKind.CUSTOM:
                compiled = self._compile(node, script_type)
                if compiled is not None:
                    ctx.generators[node.node_id] = compiled

        if self._expand_branches:
            owners: dict[str, set[str]] = {}
            for node_id, (custom, generator) in ctx.generators.items():
                handles = {
                    h.handle_id
                    for h in custom.output_handles
                    if generator.references_branch(h.handle_id)
                }
                if handles:
                    owners[node_id] = handles
            ctx.branches = branch_members(graph, order, owners)
        claimed = {
            member
            for handles in ctx.branches.values()
            for ids in handles.values()
            for member in ids
        }

        sections = tuple(
            ScriptSection(
                node_id=node_id,
                label=nodes[node_id].display_name,
                code=self._render(nodes[node_id], ctx),
            )
            for node_id in order
            if node_id not in claimed
        )
        text = script_header(script_type, [f"Workflow: {graph.name}"]) + "".join(
            render_section(s.label, s.code, s.node_id) for s in sections
        )
        logger.debug(
            "Assembled %s: %d sections, %d branch nodes",
            graph.name,
            len(sections),
            len(claimed),
        )
        return AssembledScript(script_type=script_type.value, text=text, sections=sections)

    def _compile(
        self, node: Node, script_type: ScriptType
    ) -> tuple[CustomNode, CompiledGenerator] | None:
        custom = self._catalog.get(node.operation)
        if custom is None:
            return None
        source = custom.generator_for(script_type.value)
        if source is None:
            return None
        return custom, compile_generator(source, allow_code=self._allow_code)

    def _render(self, node: Node, ctx: _AssemblyContext) -> str:
        kind = node.operation_kind
        if kind is OperationKind.LOG:
            return self._render_log(node, ctx)
        if kind is OperationKind.COMMAND:
            return command_invocation(node)
        return self._render_custom(node, ctx)

    def _render_log(self, node: Node, ctx: _AssemblyContext) -> str:
        raw_id = node.config.get("logId")
        try:
            log_id = int(raw_id) if raw_id not in (None, "") else None
        except (TypeError, ValueError):
            log_id = None
        if log_id is None:
            return f"# Error: No log ID specified for {node.operation} node"
        if ctx.index is None:
            records = self._log_store.read_all() if self._log_store is not None else []
            ctx.index = LogIndex.build(records)
        record = ctx.index.get(log_id, where=_is_single)
        if record is None or not isinstance(record.payload, SinglePayload):
            return f"# Error: Log-{log_id} not found or contains no command"
        return f"# From Log-{log_id}\n{record.payload.command_executed}"

    def _render_custom(self, node: Node, ctx: _AssemblyContext) -> str:
        compiled = ctx.generators.get(node.node_id)
        if compiled is None:
            return f"# TODO: Unknown operation {node.operation}"
        _, generator = compiled
        branch_text = {
            handle: self._render_branch(member_ids, ctx)
            for handle, member_ids in ctx.branches.get(node.node_id, {}).items()
        }
        return generator(node.config, branch_text)

    def _render_branch(self, member_ids: list[str], ctx: _AssemblyContext) -> str:
        parts = []
        for member_id in member_ids:
            member = ctx.nodes[member_id]
            parts.append(f"# {member.display_name}\n{self._render(member, ctx)}")
        return "\n".join(parts)


@dataclass
class _AssemblyContext:
    """State of one assemble() call. The log index is built on first use."""

    script_type: ScriptType
    nodes: Mapping[str, Node]
    generators: dict[str, tuple[CustomNode, CompiledGenerator]] = field(default_factory=dict)
    branches: Mapping[str, Mapping[str, list[str]]] = field(default_factory=dict)
    index: LogIndex | None = None
