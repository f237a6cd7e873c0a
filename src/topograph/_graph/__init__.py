"""Graph module providing the topological collection.

This module contains:
- TopologicalCollection[T]: A mutable directed graph sorted with Kahn's algorithm
- Node / Dependency: Graph elements whose identity follows an EqualityStrategy
- kahn_sort: The underlying algorithm over plain nodes and edge pairs
- sort_values: One-shot sort of values that declare their predecessors
"""

from ._algorithms import kahn_sort
from ._collection import Dependency, Node, SortFailure, SortResult, TopologicalCollection
from ._equality import DefaultEquality, EqualityStrategy, KeyEquality, PredicateEquality, TypeEquality
from ._sorting import sort_values

__all__ = [
    "DefaultEquality",
    "Dependency",
    "EqualityStrategy",
    "KeyEquality",
    "Node",
    "PredicateEquality",
    "SortFailure",
    "SortResult",
    "TopologicalCollection",
    "TypeEquality",
    "kahn_sort",
    "sort_values",
]
