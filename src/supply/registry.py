"""Ordered layer registry.

The registry owns the ordered list of layers for one provider.  Order is
decided by the caller through the ``at`` option, never by insertion time
alone.  Bad positions are clamped, unknown names are reported with
``False`` / ``-1``; nothing in here raises for a lookup miss.

Usage::

    registry = Registry(provider)
    registry.use("auth", check_auth)
    registry.before("trace", start_trace)      # runs first
    registry.use("audit", audit, at="auth")     # lands where "auth" was
    registry.remove("trace")
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Iterator
from typing import Any, Callable

from .core.enums import LayerEvent, LayerMode
from .core.errors import PipelineDestroyedError
from .core.interfaces import IEventEmitter
from .layer import Layer, display_name

logger = logging.getLogger(__name__)


class Registry:
    """Ordered sequence of layers keyed by name.

    Parameters
    ----------
    provider
        Host object the layers run on behalf of.  Receives ``"use"`` and
        ``"remove"`` notifications when it implements ``IEventEmitter``.
        Defaults to the registry itself.
    """

    def __init__(self, provider: Any = None) -> None:
        self._layers: list[Layer] | None = []
        self._provider: Any = provider if provider is not None else self

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def use(
        self,
        name: str | Callable[..., Any],
        fn: Callable[..., Any] | None = None,
        *,
        at: int | str | None = None,
        context: Any = None,
        mode: LayerMode | str | None = None,
    ) -> Any:
        """Add a layer, appended unless *at* says otherwise.

        *name* may be omitted by passing the callable first, in which case
        the name is taken from the callable.  *at* is a position or the name
        of an existing layer; out-of-range positions clamp to the ends and an
        unknown name clamps to the front.  Returns the provider so calls can
        be chained.
        """
        if fn is None:
            if not callable(name):
                raise TypeError("use() needs a callable")
            fn, name = name, display_name(name)

        layer = Layer.create(name, fn, context=context, mode=mode)
        self.insert(layer, at=at)
        return self._provider

    def before(
        self,
        name: str | Callable[..., Any],
        fn: Callable[..., Any] | None = None,
        **options: Any,
    ) -> Any:
        """Add a layer in front of all others (any explicit *at* is ignored)."""
        options["at"] = 0
        return self.use(name, fn, **options)

    def after(
        self,
        name: str | Callable[..., Any],
        fn: Callable[..., Any] | None = None,
        **options: Any,
    ) -> Any:
        """Add a layer behind all others (any explicit *at* is ignored)."""
        options["at"] = len(self)
        return self.use(name, fn, **options)

    def insert(self, layer: Layer, at: int | str | None = None) -> int:
        """Splice a prebuilt *layer* in and return the position it landed at."""
        layers = self._require_layers()
        position = self._normalize_at(at)
        layers.insert(position, layer)

        logger.debug(
            "Layer added: %s at %d (total=%d)", layer.name, position, len(layers)
        )
        self._emit(LayerEvent.USE, layer)
        return position

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove(self, name: str) -> bool:
        """Remove the first layer called *name*. Returns False if none exists."""
        i = self.index_of(name)
        if i == -1:
            return False

        layer = self._layers.pop(i)
        logger.debug("Layer removed: %s (total=%d)", name, len(self._layers))
        self._emit(LayerEvent.REMOVE, layer)
        return True

    def destroy(self) -> bool:
        """Release the layer list and the provider.

        Returns True the first time and False on every later call.
        """
        if self._layers is None:
            return False

        self._layers = None
        self._provider = None
        return True

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def index_of(self, name: str) -> int:
        """Position of the first layer called *name*, or -1."""
        for i, layer in enumerate(self._layers or ()):
            if layer.name == name:
                return i
        return -1

    def get(self, name: str) -> Layer | None:
        """First layer called *name*, or None."""
        i = self.index_of(name)
        return None if i == -1 else self._layers[i]

    @property
    def layers(self) -> tuple[Layer, ...]:
        """Snapshot of the current order."""
        return tuple(self._layers or ())

    @property
    def provider(self) -> Any:
        return self._provider

    @property
    def destroyed(self) -> bool:
        return self._layers is None

    def __len__(self) -> int:
        return len(self._layers or ())

    def __iter__(self) -> Iterator[Layer]:
        return iter(self.layers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.index_of(name) != -1

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_layers(self) -> list[Layer]:
        if self._layers is None:
            raise PipelineDestroyedError("Pipeline has been destroyed")
        return self._layers

    def _normalize_at(self, at: int | str | None) -> int:
        length = len(self._layers)
        if at is None:
            return length
        if isinstance(at, str):
            at = self.index_of(at)
        try:
            position = operator.index(at)
        except TypeError:
            logger.warning("Ignoring non-integer position %r, appending", at)
            return length
        if position > length:
            return length
        if position < 0:
            return 0
        return position

    def _emit(self, event: LayerEvent, layer: Layer) -> None:
        if isinstance(self._provider, IEventEmitter):
            self._provider.emit(event.value, layer)
