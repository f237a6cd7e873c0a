"""Explicit predecessor declarations wired into a collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._diagnostics import get_sink
from ._errors import WiringError
from ._graph import TopologicalCollection

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

    from ._diagnostics import DiagnosticSink


@dataclass(frozen=True, slots=True)
class CatalogEntry[K, V]:
    """One registered item and the key of the item that must run before it."""

    key: K
    item: V
    predecessor: K | None = None


class PredecessorCatalog[K: Hashable, V]:
    """A closed set of items, each naming at most one predecessor by key.

    Items are registered explicitly at startup instead of being discovered
    by inspecting their types. Wiring produces one edge per declared
    predecessor and requires exactly one root (an item without a
    predecessor).

    Example:
        >>> catalog = PredecessorCatalog[str, str]()
        >>> catalog.register("parse", "Parser")
        >>> catalog.register("check", "Checker", predecessor="parse")
        >>> catalog.register("emit", "Emitter", predecessor="check")
        >>> catalog.sorted_items()
        ['Parser', 'Checker', 'Emitter']

    """

    def __init__(self, *, sink: DiagnosticSink | None = None) -> None:
        self._entries: dict[K, CatalogEntry[K, V]] = {}
        self._sink = get_sink(sink, __name__)
        self._sorted: list[V] | None = None

    def register(self, key: K, item: V, predecessor: K | None = None) -> None:
        """Register ``item`` under ``key``.

        Args:
            key: Identifier of the item. Must be unique in the catalog.
            item: The item itself.
            predecessor: Key of the item that must come before this one,
                or None for the root.

        Raises:
            WiringError: If ``key`` is already registered or names itself
                as its predecessor.

        """
        if key in self._entries:
            msg = f"Item '{key}' is already registered"
            raise WiringError(msg)
        if predecessor is not None and predecessor == key:
            msg = f"Item '{key}' cannot be its own predecessor"
            raise WiringError(msg)

        self._entries[key] = CatalogEntry(key=key, item=item, predecessor=predecessor)
        self._sorted = None

    @property
    def entries(self) -> list[CatalogEntry[K, V]]:
        """Registered entries in registration order."""
        return list(self._entries.values())

    def item_of(self, key: K) -> V:
        """Return the item registered under ``key``.

        Raises:
            KeyError: If ``key`` is not registered.

        """
        return self._entries[key].item

    def predecessor_of(self, key: K) -> K | None:
        """Return the declared predecessor key of ``key``.

        Raises:
            KeyError: If ``key`` is not registered.

        """
        return self._entries[key].predecessor

    def root(self) -> K:
        """Return the key of the single item without a predecessor.

        Raises:
            WiringError: If there is no root or more than one.

        """
        roots = [entry.key for entry in self._entries.values() if entry.predecessor is None]
        if not roots:
            msg = "No root item defined"
            raise WiringError(msg)
        if len(roots) > 1:
            names = ", ".join(f"'{key}'" for key in roots)
            msg = f"Multiple root items defined: {names}"
            raise WiringError(msg)
        return roots[0]

    def build_collection(self) -> TopologicalCollection[K]:
        """Validate the declarations and wire them into a new collection.

        Returns:
            A collection over the registered keys with one edge
            ``predecessor -> key`` per declared predecessor.

        Raises:
            WiringError: If a predecessor is not registered, or the catalog
                does not have exactly one root.

        """
        for entry in self._entries.values():
            if entry.predecessor is not None and entry.predecessor not in self._entries:
                msg = f"Couldn't find predecessor '{entry.predecessor}' of '{entry.key}'"
                raise WiringError(msg)

        root = self.root()

        collection: TopologicalCollection[K] = TopologicalCollection(sink=self._sink)
        collection.add_value(root)
        for entry in self._entries.values():
            if entry.predecessor is not None:
                collection.add_dependency(entry.predecessor, entry.key)

        self._sink.debug("Wired %d items under root '%s'", len(collection), root)
        return collection

    def sorted_items(self) -> list[V]:
        """Return the items with every predecessor ahead of its successors.

        The order is cached until the next ``register``.

        Raises:
            WiringError: If the declarations are invalid (see ``build_collection``).
            SortError: If the declarations form a cycle.

        """
        if self._sorted is None:
            result = self.build_collection().sort()
            if not result.success:
                self._sink.error("Couldn't create execution sequence from %d items", len(self._entries))
            order = result.raise_for_failure()
            self._sorted = [self._entries[key].item for key in order]
        return list(self._sorted)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[K]:
        return iter(self._entries)
