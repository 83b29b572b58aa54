"""Tests for workflow graph ordering and branch membership."""

import pytest

from lazi.domain.exceptions import CycleDetected
from lazi.domain.models import Edge, Node, WorkflowGraph
from lazi.domain.workflow import branch_members, dependency_map, linearize


def graph(node_ids, edges):
    """Build a graph from ids and (source, target[, handle]) tuples."""
    return WorkflowGraph(
        name="wf",
        nodes=tuple(Node(n, "lazi-echo") for n in node_ids),
        edges=tuple(Edge(*e) for e in edges),
    )


def assert_topological(g, order):
    position = {n: i for i, n in enumerate(order)}
    for edge in g.edges:
        if edge.source in position and edge.target in position:
            assert position[edge.source] < position[edge.target], edge


class TestDependencyMap:
    def test_sources_in_edge_order(self):
        g = graph(["a", "b", "c"], [("b", "c"), ("a", "c")])
        assert dependency_map(g) == {"a": [], "b": [], "c": ["b", "a"]}

    def test_unknown_nodes_ignored(self):
        g = graph(["a"], [("ghost", "a"), ("a", "missing")])
        assert dependency_map(g) == {"a": []}


class TestLinearize:
    """Tests for dependency-respecting order."""

    def test_chain_declared_backwards(self):
        g = graph(["c", "b", "a"], [("a", "b"), ("b", "c")])
        assert linearize(g) == ["a", "b", "c"]

    def test_every_node_exactly_once(self):
        g = graph(
            ["a", "b", "c", "d", "e"],
            [("a", "b"), ("a", "c"), ("b", "d"), ("c", "d"), ("e", "d")],
        )
        order = linearize(g)
        assert sorted(order) == ["a", "b", "c", "d", "e"]
        assert_topological(g, order)

    def test_independent_nodes_keep_declaration_order(self):
        g = graph(["x", "y", "z"], [])
        assert linearize(g) == ["x", "y", "z"]

    def test_empty_graph(self):
        assert linearize(WorkflowGraph("empty")) == []

    def test_long_chain_does_not_recurse(self):
        ids = [f"n{i}" for i in range(3000)]
        edges = [(ids[i], ids[i + 1]) for i in range(len(ids) - 1)]
        g = graph(list(reversed(ids)), edges)
        assert linearize(g) == ids

    def test_cycle_detected(self):
        g = graph(["a", "b", "c"], [("a", "b"), ("b", "c"), ("c", "a")])
        with pytest.raises(CycleDetected) as exc_info:
            linearize(g)
        cycle = exc_info.value.cycle
        assert cycle[0] == cycle[-1]
        assert set(cycle) == {"a", "b", "c"}
        assert "Cycle detected" in str(exc_info.value)

    def test_self_loop_detected(self):
        g = graph(["a"], [("a", "a")])
        with pytest.raises(CycleDetected):
            linearize(g)


class TestBranchMembers:
    """Tests for handle-edge branch assignment."""

    def test_handle_targets_and_descendants_join_branch(self):
        g = graph(
            ["check", "yes1", "yes2", "no1"],
            [
                ("check", "yes1", "true"),
                ("yes1", "yes2"),
                ("check", "no1", "false"),
            ],
        )
        order = linearize(g)
        branches = branch_members(g, order, {"check": {"true", "false"}})
        assert branches == {"check": {"true": ["yes1", "yes2"], "false": ["no1"]}}

    def test_join_node_stays_top_level(self):
        g = graph(
            ["check", "yes", "no", "after"],
            [
                ("check", "yes", "true"),
                ("check", "no", "false"),
                ("yes", "after"),
                ("no", "after"),
            ],
        )
        branches = branch_members(g, linearize(g), {"check": {"true", "false"}})
        members = {m for handles in branches.values() for ids in handles.values() for m in ids}
        assert "after" not in members

    def test_only_owners_open_branches(self):
        g = graph(["a", "b"], [("a", "b", "out")])
        assert branch_members(g, linearize(g), {}) == {}

    def test_first_handle_edge_claims_node(self):
        g = graph(["a", "b"], [("a", "b", "first"), ("a", "b", "second")])
        assert branch_members(g, linearize(g), {"a": {"first", "second"}}) == {"a": {"first": ["b"]}}

    def test_unrendered_handle_leaves_target_top_level(self):
        g = graph(
            ["check", "yes", "no"],
            [("check", "yes", "true"), ("check", "no", "false")],
        )
        assert branch_members(g, linearize(g), {"check": {"true"}}) == {"check": {"true": ["yes"]}}
