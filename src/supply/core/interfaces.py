"""Protocol interfaces for the pipeline.

Providers are duck-typed: anything can host a pipeline, and the event
notifications are only sent when the provider implements ``IEventEmitter``.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

# Completion callback: (error, early) -> None
Completion = Callable[[BaseException | None, bool], Any]

# Continuation handed to asynchronous layers: next(error=None, done=False)
Continuation = Callable[..., None]


# ---------------------------------------------------------------------------
# Event sink
# ---------------------------------------------------------------------------

@runtime_checkable
class IEventEmitter(Protocol):
    """Anything exposing ``emit(event, payload)``.

    Pipelines notify ``"use"`` and ``"remove"`` with the affected layer.
    """

    def emit(self, event: str, payload: Any) -> Any: ...


# ---------------------------------------------------------------------------
# Pipeline surface
# ---------------------------------------------------------------------------

@runtime_checkable
class IPipeline(Protocol):
    """Operations every pipeline exposes, regardless of host."""

    @property
    def layers(self) -> tuple[Any, ...]: ...

    def use(self, name: Any, fn: Callable[..., Any] | None = None, **options: Any) -> Any: ...

    def remove(self, name: str) -> bool: ...

    def index_of(self, name: str) -> int: ...

    def each(self, *args: Any, callback: Completion | None = None) -> Any: ...

    def destroy(self) -> bool: ...
