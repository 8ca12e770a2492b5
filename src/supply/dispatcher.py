"""Walk engine: runs a registry's layers for one ``each`` call.

Dispatch rules
--------------
*  A layer whose arity exceeds the number of payload arguments is
   **asynchronous**: it receives the payload plus a continuation and must
   call ``next(error=None, done=False)`` exactly once.
*  Any other layer is **synchronous**: it receives the payload only.
   Returning ``True`` stops the walk early; raising fails it.
*  ``async def`` layers are scheduled on the running asyncio loop; their
   result feeds the continuation the same way.

The first error or early stop ends the walk and reaches the completion
callback exactly once as ``callback(error, early)``.  Each walk works on a
snapshot of the layer list taken at dispatch time, so layers added or
removed mid-walk only affect later walks.

Sync layers (and async layers that continue before returning) are driven
from a loop rather than by recursion, so a long chain does not grow the
stack.
"""

from __future__ import annotations

import asyncio
import logging
import time
from contextvars import ContextVar
from typing import Any

from .core.enums import LayerMode, WalkOutcome
from .core.errors import ContinuationError, LayerExecutionError, PipelineDestroyedError
from .core.interfaces import Completion
from .layer import Layer
from .observability import metrics
from .observability.logger import get_walk_id, new_walk_id, set_walk_id
from .registry import Registry

logger = logging.getLogger(__name__)

# Execution context of the layer currently running (its own context, else
# the provider).
_current_context: ContextVar[Any] = ContextVar("supply_context", default=None)

# Strong references to scheduled coroutine layers until they finish.
_background_tasks: set[asyncio.Task[Any]] = set()


def current_context() -> Any:
    """Context the running layer is bound to, None outside of a layer."""
    return _current_context.get()


def _noop(error: BaseException | None = None, early: bool = False) -> None:
    return None


class Dispatcher:
    """Walks the layers of *registry*.

    Parameters
    ----------
    registry
        Registry whose snapshot is walked on every ``each`` call.
    metrics_enabled
        When False, no Prometheus samples are recorded.
    """

    def __init__(self, registry: Registry, *, metrics_enabled: bool = True) -> None:
        self._registry = registry
        self._metrics_enabled = metrics_enabled

    def each(self, *args: Any, callback: Completion | None = None) -> Any:
        """Run every layer with *args*.

        Without an explicit *callback*, a trailing callable positional
        argument is taken as the completion callback.  Returns the provider.
        """
        if callback is None and args and callable(args[-1]):
            callback = args[-1]
            args = args[:-1]
        completion = callback if callback is not None else _noop

        if self._registry.destroyed:
            completion(PipelineDestroyedError("Pipeline has been destroyed"), False)
            return None

        provider = self._registry.provider
        _Walk(
            layers=self._registry.layers,
            args=tuple(args),
            completion=completion,
            provider=provider,
            metrics_enabled=self._metrics_enabled,
        ).start()
        return provider

    async def each_async(self, *args: Any) -> bool:
        """Awaitable form of ``each``.

        Returns the early-stop flag, or raises the error that ended the walk.
        Every positional argument is payload; none is taken as a callback.
        """
        future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

        def settle(error: BaseException | None, early: bool = False) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(early)

        self.each(*args, callback=settle)
        return await future


class _Continuation:
    """Single-use ``next`` handed to one asynchronous layer step."""

    __slots__ = ("_walk", "_layer", "called")

    def __init__(self, walk: _Walk, layer: Layer) -> None:
        self._walk = walk
        self._layer = layer
        self.called = False

    def __call__(self, error: Any = None, done: Any = False) -> None:
        if self.called:
            raise ContinuationError(self._layer.name)
        self.called = True
        self._walk.advance(_as_error(self._layer, error), bool(done))

    def from_task(self, task: asyncio.Task[Any]) -> None:
        _background_tasks.discard(task)
        if task.cancelled():
            self(asyncio.CancelledError())
            return
        exc = task.exception()
        if exc is not None:
            self(exc)
        else:
            self(None, task.result() is True)


def _as_error(layer: Layer, error: Any) -> BaseException | None:
    if isinstance(error, BaseException):
        return error
    if not error:
        return None
    return LayerExecutionError(layer.name, error)


class _Walk:
    """State of one walk over a layer snapshot."""

    def __init__(
        self,
        *,
        layers: tuple[Layer, ...],
        args: tuple[Any, ...],
        completion: Completion,
        provider: Any,
        metrics_enabled: bool,
    ) -> None:
        self._layers = layers
        self._args = args
        self._completion = completion
        self._provider = provider
        self._metrics_enabled = metrics_enabled

        self._index = 0
        self._pending: tuple[BaseException | None, bool] | None = None
        self._driving = False
        self._current: Layer | None = None
        self._walk_id = ""
        self._started = 0.0
        # Raised by an async layer after it had already continued.
        self._late_error: BaseException | None = None

    def start(self) -> None:
        previous = get_walk_id()
        self._walk_id = new_walk_id()
        set_walk_id(previous)
        self._started = time.monotonic()
        self.advance(None, False)

    def advance(self, error: BaseException | None, done: bool) -> None:
        self._pending = (error, done)
        if not self._driving:
            self._drive()

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def _drive(self) -> None:
        self._driving = True
        previous = get_walk_id()
        set_walk_id(self._walk_id)
        try:
            while self._pending is not None:
                error, done = self._pending
                self._pending = None

                if error is not None or done or self._index >= len(self._layers):
                    self._finish(error, done)
                    break

                layer = self._layers[self._index]
                self._index += 1
                self._invoke(layer)
        finally:
            self._driving = False
            set_walk_id(previous)

        if self._late_error is not None:
            late, self._late_error = self._late_error, None
            raise late

    def _invoke(self, layer: Layer) -> None:
        mode = layer.mode_for(len(self._args))
        self._current = layer
        if self._metrics_enabled:
            metrics.record_layer(mode.value)

        context = layer.context if layer.context is not None else self._provider
        token = _current_context.set(context)
        try:
            if mode is LayerMode.SYNC:
                try:
                    result = layer.fn(*self._args)
                except Exception as exc:
                    self._pending = (exc, False)
                else:
                    self._pending = (None, result is True)
            elif mode is LayerMode.ASYNC:
                step = _Continuation(self, layer)
                try:
                    layer.fn(*self._args, step)
                except Exception as exc:
                    if not step.called:
                        step(exc)
                    elif self._late_error is None:
                        self._late_error = exc
            else:
                self._schedule(layer)
        finally:
            _current_context.reset(token)

    def _schedule(self, layer: Layer) -> None:
        step = _Continuation(self, layer)
        try:
            loop = asyncio.get_running_loop()
            task = loop.create_task(layer.fn(*self._args))
        except Exception as exc:
            step(exc)
            return
        _background_tasks.add(task)
        task.add_done_callback(step.from_task)

    def _finish(self, error: BaseException | None, done: bool) -> None:
        if error is not None:
            outcome = WalkOutcome.FAILED
            logger.warning(
                "Walk failed at layer %s: %s",
                self._current.name if self._current else "?",
                error,
            )
        elif done:
            outcome = WalkOutcome.STOPPED
            logger.debug(
                "Walk stopped early by layer %s",
                self._current.name if self._current else "?",
            )
        else:
            outcome = WalkOutcome.COMPLETED
            logger.debug("Walk completed (%d layers)", len(self._layers))

        if self._metrics_enabled:
            metrics.record_walk(outcome.value, time.monotonic() - self._started)
            if outcome is WalkOutcome.FAILED:
                metrics.record_layer_error()

        self._completion(error, bool(done) and error is None)
