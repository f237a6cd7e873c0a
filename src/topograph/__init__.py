"""Topological ordering of values under depends-on constraints."""

__all__ = [
    "Action",
    "CatalogEntry",
    "ConfigError",
    "DefaultEquality",
    "Dependency",
    "DiagnosticSink",
    "DocumentError",
    "EqualityStrategy",
    "GraphDocument",
    "KeyEquality",
    "Node",
    "PredecessorCatalog",
    "PredicateEquality",
    "ProcessOutcome",
    "Processor",
    "ProcessorRunner",
    "RunResult",
    "RunnerConfig",
    "SortError",
    "SortFailure",
    "SortResult",
    "TopographError",
    "TopologicalCollection",
    "TypeEquality",
    "WiringError",
    "get_config",
    "kahn_sort",
    "load_config",
    "load_graph_document",
    "sort_values",
]

from ._config import RunnerConfig, get_config, load_config
from ._diagnostics import DiagnosticSink
from ._document import GraphDocument, load_graph_document
from ._errors import ConfigError, DocumentError, SortError, TopographError, WiringError
from ._graph import (
    DefaultEquality,
    Dependency,
    EqualityStrategy,
    KeyEquality,
    Node,
    PredicateEquality,
    SortFailure,
    SortResult,
    TopologicalCollection,
    TypeEquality,
    kahn_sort,
    sort_values,
)
from ._runner import Action, ProcessOutcome, Processor, ProcessorRunner, RunResult
from ._wiring import CatalogEntry, PredecessorCatalog
