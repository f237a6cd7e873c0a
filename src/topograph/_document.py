"""Graph definitions stored as TOML documents.

A document lists isolated values and a table mapping each dependent to the
values it depends on:

    nodes = ["docs"]

    [dependencies]
    build = ["fetch"]
    test = ["build", "fetch"]

Documents are only an input format; collections are never written back.
"""

from __future__ import annotations

import logging
import tomllib
from typing import TYPE_CHECKING, Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._errors import DocumentError
from ._graph import KeyEquality, TopologicalCollection

if TYPE_CHECKING:
    from pathlib import Path

    from ._graph import EqualityStrategy, SortResult

logger = logging.getLogger(__name__)

NodeName = Annotated[str, Field(min_length=1)]


class GraphDocument(BaseModel):
    """A graph definition read from TOML.

    Attributes:
        nodes: Values to register even if no dependency mentions them.
        dependencies: Mapping from a dependent value to the values that
            must come before it.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    nodes: list[NodeName] = Field(default_factory=list)
    dependencies: dict[NodeName, list[NodeName]] = Field(default_factory=dict)

    def edges(self) -> list[tuple[str, str]]:
        """Return ``(ancestor, dependent)`` pairs in document order."""
        return [
            (ancestor, dependent)
            for dependent, ancestors in self.dependencies.items()
            for ancestor in ancestors
        ]

    def to_collection(
        self,
        equality: EqualityStrategy[str] | None = None,
        *,
        ignore_case: bool = False,
    ) -> TopologicalCollection[str]:
        """Build a collection from the document.

        Values listed under ``nodes`` are added first, then the pairs of
        the dependencies table in document order, which decides ties.

        Args:
            equality: Equality strategy for the collection.
            ignore_case: Shortcut for ``KeyEquality(str.casefold)``. Ignored
                when ``equality`` is given.

        """
        if equality is None and ignore_case:
            equality = KeyEquality(str.casefold)

        collection: TopologicalCollection[str] = TopologicalCollection(equality)
        for name in self.nodes:
            collection.add_value(name)
        for ancestor, dependent in self.edges():
            collection.add_dependency(ancestor, dependent)
        return collection


def load_graph_document(path: Path) -> GraphDocument:
    """Load and validate a graph document.

    Args:
        path: Path to the TOML file.

    Returns:
        The validated GraphDocument.

    Raises:
        DocumentError: If the file cannot be read, is not valid TOML, or
            does not match the document schema.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read {path}: {e}"
        raise DocumentError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise DocumentError(msg) from e

    try:
        document = GraphDocument.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid graph document {path}: {e}"
        raise DocumentError(msg) from e

    logger.debug(f"Loaded graph document from {path}")
    return document


def sort_result_to_dict(result: SortResult[Any]) -> dict[str, Any]:
    """Convert a sort result into TOML/JSON-friendly data."""
    data: dict[str, Any] = {"success": result.success}
    if result.failure is not None:
        data["failure"] = str(result.failure)
    if result.order is not None:
        data["order"] = [str(value) for value in result.order]
    if result.remaining_edges:
        data["remaining"] = [
            {"ancestor": str(edge.ancestor.value), "dependent": str(edge.dependent.value)}
            for edge in result.remaining_edges
        ]
    return data


def export_sort_result(result: SortResult[Any], output_path: Path) -> None:
    """Write a sort result to a TOML file."""
    with output_path.open("wb") as f:
        tomli_w.dump(sort_result_to_dict(result), f)
    logger.debug(f"Exported sort result to {output_path}")
