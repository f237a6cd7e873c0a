"""Equality strategies deciding value identity inside a collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable


class EqualityStrategy[T](Protocol):
    """Decides whether two values denote the same graph node.

    Implementations must be an equivalence relation (reflexive, symmetric,
    transitive), and ``hash`` must agree with ``equals``: values that are
    equal must hash equally. Every identity check a collection performs
    goes through exactly one strategy object.
    """

    def equals(self, x: T, y: T) -> bool:
        """Return True if ``x`` and ``y`` denote the same node."""
        ...

    def hash(self, value: T) -> int:
        """Return a hash consistent with ``equals``."""
        ...


@dataclass(frozen=True, slots=True)
class DefaultEquality:
    """Uses the value type's own ``==`` and ``hash``.

    Values must be hashable. For unhashable values such as mutable
    dataclasses, use ``KeyEquality`` with a hashable key, or
    ``PredicateEquality``.
    """

    def equals(self, x: Any, y: Any) -> bool:
        return bool(x == y)

    def hash(self, value: Any) -> int:
        return hash(value)


@dataclass(frozen=True, slots=True)
class KeyEquality[T]:
    """Compares values by a derived, hashable key.

    Example:
        >>> strategy = KeyEquality(str.casefold)
        >>> strategy.equals("Build", "BUILD")
        True

    """

    key: Callable[[T], Hashable]

    def equals(self, x: T, y: T) -> bool:
        return self.key(x) == self.key(y)

    def hash(self, value: T) -> int:
        return hash(self.key(value))


@dataclass(frozen=True, slots=True)
class PredicateEquality[T]:
    """Wraps an arbitrary binary equality predicate.

    A bare predicate cannot provide a hash that agrees with it, so every
    value lands in the same bucket. Lookups stay correct but become linear
    in the number of nodes. Prefer ``KeyEquality`` when a key exists.
    """

    predicate: Callable[[T, T], bool]

    def equals(self, x: T, y: T) -> bool:
        return bool(self.predicate(x, y))

    def hash(self, value: T) -> int:  # noqa: ARG002
        return 0


@dataclass(frozen=True, slots=True)
class TypeEquality:
    """Two values are equal iff they are instances of the exact same class.

    Used for processor collections where at most one instance of each
    processor type may take part in a run.
    """

    def equals(self, x: object, y: object) -> bool:
        return type(x) is type(y)

    def hash(self, value: object) -> int:
        return hash(type(value))
