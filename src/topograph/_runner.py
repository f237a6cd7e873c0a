"""Run dependency-ordered processors against a shared input."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from ._config import RunnerConfig
from ._diagnostics import get_sink
from ._errors import WiringError
from ._graph import TopologicalCollection

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

    from ._diagnostics import DiagnosticSink
    from ._graph import EqualityStrategy, Node, SortResult
    from ._wiring import PredecessorCatalog

# Exceptions from user processors that are recorded instead of propagated
_PROCESS_ERRORS = (TypeError, ValueError, AttributeError, KeyError, RuntimeError)


class Processor[I](Protocol):
    """A unit of work that can be run against an input."""

    def process(self, source: I) -> bool:
        """Process ``source`` and return True on success."""
        ...


class Action[I](ABC):
    """Base class for processors made of initialize, loop and finalize steps.

    Two actions are equal iff they are of the same concrete class, so a
    collection holds at most one action per type.
    """

    def __init__(self, *, sink: DiagnosticSink | None = None) -> None:
        self.sink = get_sink(sink, f"{type(self).__module__}.{type(self).__qualname__}")

    def process(self, source: I) -> bool:
        """Run ``initialize``, ``process_loop`` and ``finalize``, stopping at the first False."""
        if not self.initialize(source):
            return False
        if not self.process_loop(source):
            return False
        return self.finalize(source)

    def initialize(self, source: I) -> bool:  # noqa: ARG002
        return True

    def finalize(self, source: I) -> bool:  # noqa: ARG002
        return True

    @abstractmethod
    def process_loop(self, source: I) -> bool:
        """Do the actual work."""

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Action):
            return NotImplemented
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@dataclass(frozen=True, slots=True)
class ProcessOutcome[P]:
    """Result of running one processor.

    Attributes:
        item: The processor that ran.
        succeeded: Whether ``process`` returned True.
        error: Description of the exception raised by ``process``, if any.

    """

    item: P
    succeeded: bool
    error: str | None = None


@dataclass(frozen=True, slots=True)
class RunResult[P]:
    """Result of ``ProcessorRunner.run``.

    Attributes:
        initialized: False if the initialize hook rejected the input.
        sort_result: The sort the run was based on. None if not initialized.
        outcomes: One outcome per processor that ran, in run order.
        skipped: Processors not run because an earlier one failed.
        finalized: Return value of the finalize hook, None if it did not run.

    """

    initialized: bool = True
    sort_result: SortResult[P] | None = None
    outcomes: tuple[ProcessOutcome[P], ...] = field(default_factory=tuple)
    skipped: tuple[P, ...] = field(default_factory=tuple)
    finalized: bool | None = None

    @property
    def sorted(self) -> bool:
        """Check if the processors could be ordered."""
        return self.sort_result is not None and self.sort_result.success

    @property
    def failed(self) -> list[ProcessOutcome[P]]:
        """Outcomes of processors that did not succeed."""
        return [outcome for outcome in self.outcomes if not outcome.succeeded]

    @property
    def success(self) -> bool:
        """Check if everything ran and succeeded."""
        return self.initialized and self.sorted and not self.failed and self.finalized is not False


class ProcessorRunner[I]:
    """Runs the processors of a collection in dependency order.

    Example:
        >>> graph = TopologicalCollection[Processor[list[str]]]()
        >>> # ... add processors and their dependencies ...
        >>> result = ProcessorRunner(graph).run(["input"])  # doctest: +SKIP
        >>> result.success  # doctest: +SKIP
        True

    """

    def __init__(
        self,
        collection: TopologicalCollection[Processor[I]],
        config: RunnerConfig | None = None,
        *,
        initialize: Callable[[I], bool] | None = None,
        finalize: Callable[[I], bool] | None = None,
        sink: DiagnosticSink | None = None,
    ) -> None:
        """Create a runner.

        Args:
            collection: Processors and the dependencies between them.
            config: Error-handling settings. Defaults to ``RunnerConfig()``.
            initialize: Called with the input before sorting; returning
                False aborts the run.
            finalize: Called with the input after processing if sorting
                succeeded and every processor succeeded (or
                ``config.finalize_on_failure`` is set).
            sink: Where diagnostics go. Defaults to this module's logger.

        """
        self.collection = collection
        self.config = config if config is not None else RunnerConfig()
        self._initialize = initialize
        self._finalize = finalize
        self._sink = get_sink(sink, __name__)

    @classmethod
    def from_catalog[K: Hashable](
        cls,
        catalog: PredecessorCatalog[K, Processor[I]],
        config: RunnerConfig | None = None,
        *,
        equality: EqualityStrategy[Processor[I]] | None = None,
        **kwargs: Any,
    ) -> ProcessorRunner[I]:
        """Create a runner over the processors registered in a catalog.

        Every registered item must be a distinct node under ``equality``.

        Raises:
            WiringError: If the catalog's declarations are invalid or two
                keys hold equal items.

        """
        wired = catalog.build_collection()
        collection: TopologicalCollection[Processor[I]] = TopologicalCollection(equality)
        keys: dict[Node[Processor[I]], K] = {}
        for key in wired.values:
            node = collection.add_value(catalog.item_of(key))
            if node in keys:
                msg = f"Items registered as {keys[node]!r} and {key!r} are the same processor"
                raise WiringError(msg)
            keys[node] = key
        for edge in wired.edges:
            collection.add_dependency(catalog.item_of(edge.ancestor.value), catalog.item_of(edge.dependent.value))
        return cls(collection, config, **kwargs)

    def run(self, source: I) -> RunResult[Processor[I]]:
        """Sort the processors and run each against ``source``.

        Returns:
            A ``RunResult``. If sorting fails nothing is processed and the
            failed ``SortResult`` is included for inspection.

        """
        if self._initialize is not None and not self._initialize(source):
            self._sink.error("Initialization failed; no processors were run")
            return RunResult(initialized=False)

        sort_result = self.collection.sort()
        if not sort_result.success or sort_result.order is None:
            self._sink.error("Couldn't topologically sort processors (%s)", sort_result.failure)
            return RunResult(sort_result=sort_result)

        order = sort_result.order
        self._sink.debug("Running %d processors in order", len(order))

        outcomes: list[ProcessOutcome[Processor[I]]] = []
        skipped: tuple[Processor[I], ...] = ()
        for index, processor in enumerate(order):
            outcome = self._process_one(processor, source)
            outcomes.append(outcome)
            if not outcome.succeeded and self.config.stop_on_first_error:
                skipped = order[index + 1 :]
                if skipped:
                    self._sink.info("Stopping after first error; skipped %d processors", len(skipped))
                break

        all_succeeded = all(outcome.succeeded for outcome in outcomes)
        finalized: bool | None = None
        if self._finalize is not None and (all_succeeded or self.config.finalize_on_failure):
            finalized = bool(self._finalize(source))
            if not finalized:
                self._sink.error("Finalization failed")

        return RunResult(
            sort_result=sort_result,
            outcomes=tuple(outcomes),
            skipped=skipped,
            finalized=finalized,
        )

    def _process_one(self, processor: Processor[I], source: I) -> ProcessOutcome[Processor[I]]:
        self._sink.debug("Processing %r", processor)
        try:
            succeeded = bool(processor.process(source))
        except _PROCESS_ERRORS as e:
            self._sink.error("Processor %r raised %s: %s", processor, type(e).__name__, e)
            return ProcessOutcome(item=processor, succeeded=False, error=f"{type(e).__name__}: {e}")

        if not succeeded:
            self._sink.error("Processor %r failed", processor)
        return ProcessOutcome(item=processor, succeeded=succeeded)
