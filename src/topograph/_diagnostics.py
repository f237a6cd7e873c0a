"""Diagnostic sinks passed explicitly into components."""

import logging
from typing import Protocol


class DiagnosticSink(Protocol):
    """Anything that accepts ``%``-style diagnostic messages.

    ``logging.Logger`` satisfies this protocol, so a component can be given
    a dedicated logger, a ``logging.LoggerAdapter``, or a test double.
    """

    def debug(self, msg: str, *args: object) -> None: ...

    def info(self, msg: str, *args: object) -> None: ...

    def error(self, msg: str, *args: object) -> None: ...


def get_sink(sink: DiagnosticSink | None, name: str) -> DiagnosticSink:
    """Return ``sink``, or the module logger called ``name`` when it is None."""
    if sink is not None:
        return sink
    return logging.getLogger(name)
