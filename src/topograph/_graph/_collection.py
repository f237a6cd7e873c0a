"""Mutable graph collection with topological sorting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any, NamedTuple, cast

from topograph._diagnostics import get_sink
from topograph._errors import SortError

from ._algorithms import kahn_sort
from ._equality import DefaultEquality

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from topograph._diagnostics import DiagnosticSink

    from ._equality import EqualityStrategy


class Node[T]:
    """A value registered in a ``TopologicalCollection``.

    Equality and hashing delegate to the owning collection's equality
    strategy, so two nodes are the same node iff their values are equal
    under that strategy. Nodes of different collections never compare
    equal. Neighbour views are computed from the collection's edge set on
    every access.
    """

    __slots__ = ("_collection", "_value")

    def __init__(self, value: T, collection: TopologicalCollection[T]) -> None:
        self._value = value
        self._collection = collection

    @property
    def value(self) -> T:
        """The wrapped value."""
        return self._value

    @property
    def collection(self) -> TopologicalCollection[T]:
        """The collection this node belongs to."""
        return self._collection

    @property
    def dependents(self) -> list[Node[T]]:
        """Nodes with an edge coming from this node."""
        return self._collection.dependents(self)

    @property
    def ancestors(self) -> list[Node[T]]:
        """Nodes with an edge going into this node."""
        return self._collection.ancestors(self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node) or other._collection is not self._collection:
            return NotImplemented
        return self._collection.equals(self._value, cast("T", other._value))

    def __hash__(self) -> int:
        return self._collection.equality.hash(self._value)

    def __repr__(self) -> str:
        return f"Node({self._value!r})"


class Dependency[T](NamedTuple):
    """An edge meaning ``ancestor`` must be processed before ``dependent``."""

    ancestor: Node[T]
    dependent: Node[T]

    def __str__(self) -> str:
        return f"{self.ancestor.value} -> {self.dependent.value}"


class SortFailure(StrEnum):
    """Why a sort did not produce a total order."""

    EMPTY = auto()  # No nodes registered
    INCONSISTENT_SINGLETON = auto()  # One node but edges present
    CYCLE = auto()  # Edges left over after Kahn's algorithm


@dataclass(frozen=True, slots=True)
class SortResult[T]:
    """Outcome of ``TopologicalCollection.sort``.

    Attributes:
        success: True if a total order was found.
        order: Values ancestors-first on success, None otherwise.
        remaining_edges: Edges that could not be resolved. Empty on success,
            non-empty for a cycle, None when the sort was refused up front.
        failure: The failure kind, None on success.

    """

    success: bool
    order: tuple[T, ...] | None = None
    remaining_edges: tuple[Dependency[T], ...] | None = None
    failure: SortFailure | None = None

    def raise_for_failure(self) -> tuple[T, ...]:
        """Return the order, or raise ``SortError`` if there is none.

        Raises:
            SortError: If the sort failed. The error carries this result.

        """
        if self.success and self.order is not None:
            return self.order

        match self.failure:
            case SortFailure.EMPTY:
                msg = "Cannot sort an empty collection"
            case SortFailure.INCONSISTENT_SINGLETON:
                msg = "Collection has a single node but dependencies are present"
            case _:
                edges = ", ".join(str(edge) for edge in self.remaining_edges or ())
                msg = f"Cycle detected; unresolved dependencies: {edges}"
        raise SortError(msg, self)


class TopologicalCollection[T]:
    """A directed graph of values that can be sorted topologically.

    Values are added directly or as the two ends of a dependency. An edge
    ``a -> b`` means ``a`` must come before ``b``. The collection stays
    mutable; ``sort`` works on a snapshot and caches its result until the
    next mutation.

    Not thread-safe: callers sharing a collection across threads must
    serialize access themselves.

    Example:
        >>> graph = TopologicalCollection[str]()
        >>> _ = graph.add_dependency("fetch", "build")
        >>> _ = graph.add_dependency("build", "test")
        >>> graph.sort().order
        ('fetch', 'build', 'test')

    """

    def __init__(
        self,
        equality: EqualityStrategy[T] | None = None,
        *,
        sink: DiagnosticSink | None = None,
    ) -> None:
        """Create an empty collection.

        Args:
            equality: Strategy deciding when two values are the same node.
                Defaults to the values' own ``==`` and ``hash``, which
                requires hashable values; use ``KeyEquality`` or
                ``PredicateEquality`` otherwise.
            sink: Where diagnostics go. Defaults to this module's logger.

        """
        self._equality: EqualityStrategy[T] = equality if equality is not None else DefaultEquality()
        self._sink = get_sink(sink, __name__)
        # Insertion-ordered; keys map to themselves so lookups return the stored node
        self._nodes: dict[Node[T], Node[T]] = {}
        self._edges: dict[Dependency[T], None] = {}
        self._revision = 0
        self._last_result: SortResult[T] | None = None
        self._last_revision = -1

    @property
    def equality(self) -> EqualityStrategy[T]:
        """The equality strategy all identity checks go through."""
        return self._equality

    @property
    def revision(self) -> int:
        """Counter bumped by every mutation that changed the graph."""
        return self._revision

    @property
    def nodes(self) -> list[Node[T]]:
        """All nodes in insertion order."""
        return list(self._nodes)

    @property
    def values(self) -> list[T]:
        """All values in insertion order."""
        return [node.value for node in self._nodes]

    @property
    def edges(self) -> list[Dependency[T]]:
        """All dependencies in insertion order."""
        return list(self._edges)

    @property
    def last_result(self) -> SortResult[T] | None:
        """The cached sort result, or None if the graph changed since."""
        if self._last_revision != self._revision:
            return None
        return self._last_result

    def equals(self, x: T, y: T) -> bool:
        """Compare two values with the collection's equality strategy."""
        return self._equality.equals(x, y)

    def _touch(self) -> None:
        self._revision += 1

    def _resolve(self, item: Node[T] | T) -> Node[T] | None:
        if isinstance(item, Node):
            if item.collection is self:
                return self._nodes.get(item)
            # Nodes of other collections are looked up by value
            item = item.value
        return self._nodes.get(Node(item, self))

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        """Remove every node and dependency."""
        self._nodes.clear()
        self._edges.clear()
        self._touch()

    def add_value(self, value: T) -> Node[T]:
        """Register ``value`` and return its node.

        If an equal value is already registered, its existing node is
        returned and the collection is left unchanged.
        """
        probe = Node(value, self)
        existing = self._nodes.get(probe)
        if existing is not None:
            return existing

        self._nodes[probe] = probe
        self._touch()
        self._sink.debug("Added node %r", value)
        return probe

    def add_dependency(self, ancestor_value: T, dependent_value: T) -> Node[T]:
        """Declare that ``ancestor_value`` must come before ``dependent_value``.

        Both values are registered if needed. When the two values are equal
        no edge is added, since a node cannot depend on itself. Adding an
        existing dependency again is a no-op.

        Args:
            ancestor_value: The value that must be processed first.
            dependent_value: The value that depends on it.

        Returns:
            The node for ``dependent_value``.

        """
        ancestor = self.add_value(ancestor_value)
        dependent = self.add_value(dependent_value)

        if self.equals(ancestor_value, dependent_value):
            self._sink.debug("Ignored self-dependency on %r", ancestor_value)
            return dependent

        edge = Dependency(ancestor, dependent)
        if edge not in self._edges:
            self._edges[edge] = None
            self._touch()
            self._sink.debug("Added dependency %s", edge)

        return dependent

    def add_dependencies(self, pairs: Iterable[tuple[T, T]]) -> None:
        """Add several ``(ancestor, dependent)`` pairs."""
        for ancestor_value, dependent_value in pairs:
            self.add_dependency(ancestor_value, dependent_value)

    def remove(self, value: T) -> bool:
        """Remove ``value`` and every dependency that touches it.

        Returns:
            True if a node was removed, False if the value was not present.

        """
        node = self._nodes.pop(Node(value, self), None)
        if node is None:
            return False

        self._edges = {edge: None for edge in self._edges if node not in edge}
        self._touch()
        self._sink.debug("Removed node %r", value)
        return True

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find(self, value: T) -> Node[T] | None:
        """Return the node for ``value``, or None if it is not registered."""
        return self._resolve(value)

    def roots(self) -> list[Node[T]]:
        """Nodes with no incoming dependency, in insertion order."""
        has_incoming = {edge.dependent for edge in self._edges}
        return [node for node in self._nodes if node not in has_incoming]

    def leaves(self) -> list[Node[T]]:
        """Nodes with no outgoing dependency, in insertion order."""
        has_outgoing = {edge.ancestor for edge in self._edges}
        return [node for node in self._nodes if node not in has_outgoing]

    def ancestors(self, item: Node[T] | T) -> list[Node[T]]:
        """Direct ancestors of a node or value (one hop).

        Returns an empty list for values that are not registered.
        """
        node = self._resolve(item)
        if node is None:
            return []
        found = {edge.ancestor: None for edge in self._edges if edge.dependent == node}
        return list(found)

    def dependents(self, item: Node[T] | T) -> list[Node[T]]:
        """Direct dependents of a node or value (one hop).

        Returns an empty list for values that are not registered.
        """
        node = self._resolve(item)
        if node is None:
            return []
        found = {edge.dependent: None for edge in self._edges if edge.ancestor == node}
        return list(found)

    def has_cycle(self) -> bool:
        """Check whether the dependencies contain a cycle."""
        return self.sort().failure is SortFailure.CYCLE

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------

    def sort(self) -> SortResult[T]:
        """Sort the values so that every ancestor precedes its dependents.

        Never raises for graph-shape problems; inspect the result instead.
        Among values that are ready at the same time, the one added to the
        collection first comes first.

        Returns:
            A ``SortResult``. An empty collection, or a single node with
            dependencies, fails without outputs. A cycle fails with the
            unresolved dependencies in ``remaining_edges``.

        """
        cached = self.last_result
        if cached is not None:
            return cached

        result = self._compute_sort()
        self._last_result = result
        self._last_revision = self._revision
        return result

    def _compute_sort(self) -> SortResult[T]:
        match len(self._nodes):
            case 0:
                self._sink.debug("Sort refused: collection is empty")
                return SortResult(success=False, failure=SortFailure.EMPTY)
            case 1 if self._edges:
                self._sink.debug("Sort refused: single node with %d dependencies", len(self._edges))
                return SortResult(success=False, failure=SortFailure.INCONSISTENT_SINGLETON)

        self._sink.debug("Sorting %d nodes with %d dependencies", len(self._nodes), len(self._edges))
        order, remaining = kahn_sort(list(self._nodes), list(self._edges))
        remaining_edges = tuple(cast("list[Dependency[T]]", remaining))

        if remaining_edges:
            self._sink.debug("Sort failed with %d unresolved dependencies", len(remaining_edges))
            return SortResult(success=False, remaining_edges=remaining_edges, failure=SortFailure.CYCLE)

        return SortResult(
            success=True,
            order=tuple(node.value for node in order),
            remaining_edges=(),
        )

    # -------------------------------------------------------------------------
    # Container protocol
    # -------------------------------------------------------------------------

    def __len__(self) -> int:
        """Return the number of nodes."""
        return len(self._nodes)

    def __contains__(self, value: Any) -> bool:
        """Check if a value (or node) is registered."""
        return self._resolve(value) is not None

    def __iter__(self) -> Iterator[T]:
        """Iterate over values in insertion order."""
        return iter(self.values)
