"""One-shot sorting of values that declare their own predecessors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._collection import SortResult, TopologicalCollection

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from topograph._diagnostics import DiagnosticSink

    from ._equality import EqualityStrategy


def sort_values[T](
    items: Iterable[T],
    predecessors_of: Callable[[T], Iterable[T]],
    *,
    equality: EqualityStrategy[T] | None = None,
    sink: DiagnosticSink | None = None,
) -> SortResult[T]:
    """Sort items given a function returning each item's predecessors.

    A temporary ``TopologicalCollection`` is built and discarded. Items keep
    their iteration order as the tie-break. Predecessors that are not in
    ``items`` are still added to the graph and appear in the order.

    Args:
        items: The values to sort.
        predecessors_of: Returns the values that must precede a given item.
        equality: Equality strategy for the temporary collection.
        sink: Diagnostic sink for the temporary collection.

    Returns:
        The ``SortResult`` of the temporary collection.

    Example:
        >>> steps = {"test": ["build"], "build": ["fetch"], "fetch": []}
        >>> sort_values(steps, steps.__getitem__).order
        ('fetch', 'build', 'test')

    """
    collection: TopologicalCollection[T] = TopologicalCollection(equality, sink=sink)
    for item in items:
        collection.add_value(item)
        for predecessor in predecessors_of(item):
            collection.add_dependency(predecessor, item)
    return collection.sort()
