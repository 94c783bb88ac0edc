"""Tests for NodeGraph and the iterative graph traversals."""

import pytest

from agentfactory._graph import NodeGraph, find_cycle, reachable_from


class TestReachableFrom:
    """Tests for the reachable_from traversal."""

    def test_single_node(self) -> None:
        assert reachable_from([[]], 0) == {0}

    def test_linear_chain(self) -> None:
        assert reachable_from([[1], [2], []], 0) == {0, 1, 2}

    def test_does_not_follow_edges_backwards(self) -> None:
        assert reachable_from([[1], [2], []], 1) == {1, 2}

    def test_disconnected_node_is_not_reached(self) -> None:
        assert reachable_from([[1], [], []], 0) == {0, 1}

    def test_tolerates_cycles(self) -> None:
        assert reachable_from([[1], [0]], 0) == {0, 1}

    def test_allowed_restricts_traversal(self) -> None:
        # 0 -> 1 -> 2, but 1 is not allowed
        assert reachable_from([[1], [2], []], 0, allowed={0, 2}) == {0}

    def test_long_chain_does_not_recurse(self) -> None:
        n = 100_000
        successors = [[i + 1] for i in range(n - 1)] + [[]]
        assert len(reachable_from(successors, 0)) == n


class TestFindCycle:
    """Tests for the white/gray/black cycle search."""

    def test_empty_graph(self) -> None:
        assert find_cycle([], []) is None

    def test_acyclic_chain(self) -> None:
        assert find_cycle([[1], [2], []], [0, 1, 2]) is None

    def test_diamond_is_not_a_cycle(self) -> None:
        # 0 -> 1, 0 -> 2, 1 -> 3, 2 -> 3
        assert find_cycle([[1, 2], [3], [3], []], [0, 1, 2, 3]) is None

    def test_two_node_cycle(self) -> None:
        assert find_cycle([[1], [0]], [0, 1]) == [0, 1, 0]

    def test_self_loop(self) -> None:
        assert find_cycle([[0]], [0]) == [0, 0]

    def test_cycle_not_including_root(self) -> None:
        # 0 -> 1 -> 2 -> 1
        assert find_cycle([[1], [2], [1]], [0]) == [1, 2, 1]

    def test_stops_at_first_cycle(self) -> None:
        # Two disjoint cycles: 0 <-> 1 and 2 <-> 3
        assert find_cycle([[1], [0], [3], [2]], [2, 0]) == [2, 3, 2]

    def test_cycle_reached_from_later_root(self) -> None:
        # 0 is isolated; 1 -> 2 -> 1
        assert find_cycle([[], [2], [1]], [0, 1, 2]) == [1, 2, 1]

    def test_long_chain_does_not_recurse(self) -> None:
        n = 100_000
        successors = [[i + 1] for i in range(n - 1)] + [[0]]
        cycle = find_cycle(successors, [0])
        assert cycle is not None
        assert len(cycle) == n + 1


class TestNodeGraph:
    """Tests for NodeGraph construction and queries."""

    def test_empty_graph(self) -> None:
        graph = NodeGraph.from_edges([], [])
        assert len(graph) == 0
        assert graph.find_cycle() is None

    def test_ids_are_sorted_regardless_of_declaration_order(self) -> None:
        graph = NodeGraph.from_edges(["c", "a", "b"], [])
        assert graph.ids == ("a", "b", "c")
        assert graph.index == {"a": 0, "b": 1, "c": 2}

    def test_dangling_endpoints_are_indexed_but_not_declared(self) -> None:
        graph = NodeGraph.from_edges(["a"], [("a", "x")])
        assert "x" in graph
        assert graph.index["x"] not in graph.declared
        assert graph.index["a"] in graph.declared

    def test_successor_ids_are_sorted_and_keep_parallel_edges(self) -> None:
        graph = NodeGraph.from_edges(["a", "b", "c"], [("a", "c"), ("a", "b"), ("a", "c")])
        assert graph.successor_ids("a") == ("b", "c", "c")

    def test_successor_ids_of_unknown_node(self) -> None:
        graph = NodeGraph.from_edges(["a"], [])
        assert graph.successor_ids("zzz") == ()

    def test_reachable_skips_undeclared_nodes(self) -> None:
        graph = NodeGraph.from_edges(["a", "b"], [("a", "x"), ("x", "b")])
        assert graph.reachable("a") == frozenset({"a"})

    def test_reachable_unknown_start(self) -> None:
        graph = NodeGraph.from_edges(["a"], [])
        with pytest.raises(KeyError):
            graph.reachable("missing")

    def test_find_cycle_returns_ids(self) -> None:
        graph = NodeGraph.from_edges(["a", "b"], [("a", "b"), ("b", "a")])
        assert graph.find_cycle() == ["a", "b", "a"]
        assert graph.has_cycle() is True

    def test_cycle_through_undeclared_node_is_found(self) -> None:
        graph = NodeGraph.from_edges(["a"], [("a", "x"), ("x", "a")])
        assert graph.find_cycle() == ["a", "x", "a"]

    def test_is_frozen(self) -> None:
        graph = NodeGraph.from_edges(["a"], [])
        with pytest.raises(AttributeError):
            graph.ids = ()  # type: ignore[misc]
