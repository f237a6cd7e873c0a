"""Graph algorithms for topological ordering."""

from __future__ import annotations

import heapq
from collections import defaultdict
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable


def kahn_sort[N: Hashable](
    nodes: Iterable[N],
    edges: Iterable[tuple[N, N]],
) -> tuple[list[N], list[tuple[N, N]]]:
    """Order nodes so that every ancestor precedes its dependents.

    Runs Kahn's algorithm on private working state; neither input is
    modified. Among nodes whose ancestors have all been emitted, the one
    that comes first in ``nodes`` is emitted next, so the result is
    reproducible for a given input order.

    Args:
        nodes: All nodes of the graph, in tie-break order.
        edges: ``(ancestor, dependent)`` pairs. Both ends must appear in
            ``nodes``. Repeated nodes and repeated edges are counted once;
            a repeated node keeps its first position.

    Returns:
        A tuple ``(order, remaining)``. ``order`` lists the nodes that could
        be emitted, ancestors first. ``remaining`` lists the edges that could
        not be resolved, in input order; it is empty iff the graph is acyclic.

    Example:
        >>> kahn_sort(["a", "b", "c"], [("a", "b"), ("b", "c")])
        (['a', 'b', 'c'], [])
        >>> kahn_sort(["a", "b"], [("a", "b"), ("b", "a")])
        ([], [('a', 'b'), ('b', 'a')])

    """
    node_list = list(dict.fromkeys(nodes))
    position = {node: index for index, node in enumerate(node_list)}

    # Incoming edge counts and outgoing adjacency over the working copy
    incoming: dict[N, int] = dict.fromkeys(node_list, 0)
    outgoing: defaultdict[N, list[tuple[N, N]]] = defaultdict(list)
    remaining: dict[tuple[N, N], None] = {}
    for edge in edges:
        if edge in remaining:
            continue
        ancestor, dependent = edge
        remaining[edge] = None
        outgoing[ancestor].append(edge)
        incoming[dependent] += 1

    # Frontier holds positions so the heap never compares nodes directly
    frontier = [position[node] for node in node_list if incoming[node] == 0]
    heapq.heapify(frontier)
    order: list[N] = []

    while frontier:
        node = node_list[heapq.heappop(frontier)]
        order.append(node)
        for edge in outgoing.get(node, ()):
            del remaining[edge]
            dependent = edge[1]
            incoming[dependent] -= 1
            if incoming[dependent] == 0:
                heapq.heappush(frontier, position[dependent])

    return order, list(remaining)
