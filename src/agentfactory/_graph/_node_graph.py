"""Index-based view of an orchestration's node/edge graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ._algorithms import find_cycle, reachable_from

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class NodeGraph:
    """A directed graph over string node ids, stored as an arena of indices.

    Node ids are sorted so the index assignment (and therefore every
    traversal order) is independent of declaration order. Edge endpoints
    that are not declared nodes still get an index so traversals can see
    them; ``declared`` records which indices are real nodes.

    Attributes:
        ids: Node ids, sorted; position is the node's index.
        index: Mapping from node id to index.
        successors: ``successors[i]`` is the sorted tuple of target indices
            of edges leaving node ``i`` (parallel edges appear repeatedly).
        declared: Indices of declared nodes.

    """

    ids: tuple[str, ...] = ()
    index: dict[str, int] = field(default_factory=dict)
    successors: tuple[tuple[int, ...], ...] = ()
    declared: frozenset[int] = frozenset()

    @classmethod
    def from_edges(cls, node_ids: Iterable[str], edges: Iterable[tuple[str, str]]) -> NodeGraph:
        """Build a graph from declared node ids and (source, target) pairs.

        Example:
            >>> graph = NodeGraph.from_edges(["a", "b"], [("a", "b"), ("b", "x")])
            >>> graph.ids
            ('a', 'b', 'x')
            >>> graph.successor_ids("a")
            ('b',)

        """
        edge_list = list(edges)
        declared_ids = set(node_ids)
        all_ids = declared_ids | {s for s, _ in edge_list} | {t for _, t in edge_list}
        ids = tuple(sorted(all_ids))
        index = {node_id: i for i, node_id in enumerate(ids)}

        adjacency: list[list[int]] = [[] for _ in ids]
        for src, dst in edge_list:
            adjacency[index[src]].append(index[dst])

        return cls(
            ids=ids,
            index=index,
            successors=tuple(tuple(sorted(targets)) for targets in adjacency),
            declared=frozenset(index[node_id] for node_id in declared_ids),
        )

    def successor_ids(self, node_id: str) -> tuple[str, ...]:
        """Targets of edges leaving ``node_id``, sorted."""
        if node_id not in self.index:
            return ()
        return tuple(self.ids[i] for i in self.successors[self.index[node_id]])

    def reachable(self, start: str) -> frozenset[str]:
        """Declared nodes reachable from ``start``, following only edges into declared nodes.

        Raises:
            KeyError: If ``start`` is not in the graph.

        """
        visited = reachable_from(self.successors, self.index[start], self.declared)
        return frozenset(self.ids[i] for i in visited)

    def find_cycle(self) -> list[str] | None:
        """Return the first cycle found scanning declared nodes in id order, or None."""
        roots = sorted(self.declared)
        cycle = find_cycle(self.successors, roots)
        if cycle is None:
            return None
        return [self.ids[i] for i in cycle]

    def has_cycle(self) -> bool:
        return self.find_cycle() is not None

    def __len__(self) -> int:
        """Return the number of indexed nodes (declared or not)."""
        return len(self.ids)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self.index
