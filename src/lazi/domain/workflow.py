"""
Workflow graph ordering.

Pure functions over WorkflowGraph:
- dependency_map: target -> sources, in edge declaration order
- linearize: depth-first post-order with back-edge detection
- branch_members: which nodes render inside another node's branch
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping

from lazi.domain.exceptions import CycleDetected
from lazi.domain.models import WorkflowGraph


def dependency_map(graph: WorkflowGraph) -> dict[str, list[str]]:
    """
    Record every edge source as a dependency of its target.

    Edges naming unknown nodes are ignored.
    """
    deps: dict[str, list[str]] = {node.node_id: [] for node in graph.nodes}
    for edge in graph.edges:
        if edge.target in deps and edge.source in deps:
            deps[edge.target].append(edge.source)
    return deps


def linearize(graph: WorkflowGraph) -> list[str]:
    """
    Order node ids so every dependency precedes its dependents.

    Seeds a depth-first post-order traversal from each node in declaration
    order; a node's dependencies are visited in edge declaration order.
    The result is a valid topological order but not the only one.

    Raises:
        CycleDetected: If the graph contains a cycle
    """
    deps = dependency_map(graph)
    visited: set[str] = set()
    order: list[str] = []

    for root in graph.nodes:
        if root.node_id in visited:
            continue
        # Explicit stack so long chains cannot hit the recursion limit
        stack: list[tuple[str, Iterator[str]]] = [(root.node_id, iter(deps[root.node_id]))]
        on_path = {root.node_id}
        while stack:
            node_id, pending = stack[-1]
            for dep in pending:
                if dep in visited:
                    continue
                if dep in on_path:
                    path = [entry[0] for entry in stack]
                    cycle = path[path.index(dep) :]
                    raise CycleDetected((*reversed(cycle), cycle[-1]))
                stack.append((dep, iter(deps[dep])))
                on_path.add(dep)
                break
            else:
                stack.pop()
                on_path.discard(node_id)
                visited.add(node_id)
                order.append(node_id)

    return order


def branch_members(
    graph: WorkflowGraph,
    order: list[str],
    owners: Mapping[str, Collection[str]],
) -> dict[str, dict[str, list[str]]]:
    """
    Assign nodes to the branches of their owners.

    An edge whose source_handle is one of the handles ``owners`` lists for
    its source opens that handle's branch at the edge target. Targets of
    any other handle edge stay at top level. The branch then grows along plain
    edges to every node whose predecessors are all already in the branch,
    so a join node after an if/else stays at top level. A node belongs to
    at most one branch; earlier handle edges claim first.

    Args:
        graph: The workflow
        order: Result of linearize(graph)
        owners: Owner node id -> handle ids whose branch text it renders

    Returns:
        owner id -> handle id -> member ids in linear order
    """
    position = {node_id: i for i, node_id in enumerate(order)}
    preds: dict[str, set[str]] = {node_id: set() for node_id in position}
    plain_succs: dict[str, list[str]] = {node_id: [] for node_id in position}
    for edge in graph.edges:
        if edge.source not in position or edge.target not in position:
            continue
        preds[edge.target].add(edge.source)
        if edge.source_handle is None:
            plain_succs[edge.source].append(edge.target)

    claimed: set[str] = set()
    result: dict[str, dict[str, list[str]]] = {}

    for edge in graph.edges:
        if edge.source_handle not in owners.get(edge.source, ()):
            continue
        if edge.target not in position or edge.target in claimed:
            continue
        if edge.target == edge.source:
            continue

        members = {edge.target}
        frontier = [edge.target]
        while frontier:
            current = frontier.pop()
            for succ in plain_succs[current]:
                if succ in members or succ in claimed or succ == edge.source:
                    continue
                if preds[succ] <= members:
                    members.add(succ)
                    frontier.append(succ)

        claimed |= members
        handles = result.setdefault(edge.source, {})
        branch = handles.setdefault(edge.source_handle, [])
        branch.extend(members)
        branch.sort(key=position.__getitem__)

    return result
