"""Graph traversals over integer node indices.

Both traversals use explicit work stacks instead of recursion so very long
chains cannot exhaust the interpreter's call stack.
"""

from collections.abc import Collection, Iterable, Sequence

_WHITE = 0
_GRAY = 1
_BLACK = 2


def reachable_from(
    successors: Sequence[Sequence[int]],
    start: int,
    allowed: Collection[int] | None = None,
) -> set[int]:
    """Collect every node reachable from ``start`` by following edges forward.

    Args:
        successors: ``successors[i]`` lists the targets of edges leaving node ``i``.
        start: Index of the traversal root (always included in the result).
        allowed: If given, edges into nodes outside this collection are not followed.

    Returns:
        Set of visited node indices.

    Example:
        >>> sorted(reachable_from([[1], [2], [], [0]], 0))
        [0, 1, 2]

    """
    visited = {start}
    stack = [start]
    while stack:
        node = stack.pop()
        for succ in successors[node]:
            if succ in visited or (allowed is not None and succ not in allowed):
                continue
            visited.add(succ)
            stack.append(succ)
    return visited


def find_cycle(successors: Sequence[Sequence[int]], roots: Iterable[int]) -> list[int] | None:
    """Find the first directed cycle using white/gray/black depth-first search.

    Roots are scanned in the given order; the scan stops at the first edge
    that points back to a node on the active path.

    Args:
        successors: ``successors[i]`` lists the targets of edges leaving node ``i``.
        roots: Node indices to start searches from.

    Returns:
        The cycle as a list of node indices, starting and ending at the node
        the back edge points to, or None if the graph is acyclic.

    Example:
        >>> find_cycle([[1], [2], [0]], [0])
        [0, 1, 2, 0]
        >>> find_cycle([[1], []], [0, 1]) is None
        True

    """
    color = [_WHITE] * len(successors)

    for root in roots:
        if color[root] != _WHITE:
            continue
        color[root] = _GRAY
        # Each frame is (node, position of the next successor to visit).
        path = [root]
        frames = [(root, 0)]
        while frames:
            node, pos = frames[-1]
            if pos == len(successors[node]):
                frames.pop()
                path.pop()
                color[node] = _BLACK
                continue
            frames[-1] = (node, pos + 1)
            succ = successors[node][pos]
            if color[succ] == _GRAY:
                return [*path[path.index(succ) :], succ]
            if color[succ] == _WHITE:
                color[succ] = _GRAY
                path.append(succ)
                frames.append((succ, 0))
    return None
