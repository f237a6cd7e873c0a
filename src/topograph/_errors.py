"""Exception hierarchy for topograph.

Graph-shape problems (empty graphs, cycles) are reported through
``SortResult`` and never raised by the collection itself. These exceptions
cover configuration mistakes and callers that opt into raising.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._graph import SortResult


class TopographError(Exception):
    """Base class for all topograph errors."""


class SortError(TopographError):
    """A sort did not produce a total order.

    Attributes:
        result: The failed ``SortResult``, including any residual edges.

    """

    def __init__(self, msg: str, result: SortResult[Any]) -> None:
        super().__init__(msg)
        self.result = result


class WiringError(TopographError):
    """Predecessor declarations do not describe a single-rooted graph."""


class ConfigError(TopographError):
    """Error in the ``[tool.topograph]`` configuration."""


class DocumentError(TopographError):
    """A graph document could not be read or failed validation."""
