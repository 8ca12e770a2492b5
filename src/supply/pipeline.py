"""Supply: a minimal middleware layer system.

Combines the ordered ``Registry`` with the ``Dispatcher`` walk engine and
binds both to a provider.

Usage::

    supply = Supply(provider)
    supply.use("auth", lambda request: request.user is None)   # True stops
    supply.use("load", lambda request, next: fetch(request, next))
    supply.each(request, lambda error, early: respond(request, error))

Subclasses may define ``initialize(options)``; it is called once at the
end of construction.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from .core.config import SupplySettings, load_settings
from .core.enums import LayerMode
from .core.interfaces import Completion
from .dispatcher import Dispatcher
from .layer import Layer
from .plugin import PluginSpecification, Source
from .registry import Registry

logger = logging.getLogger(__name__)


class Supply(Registry):
    """Ordered middleware pipeline delegated by a provider.

    Parameters
    ----------
    provider
        Host object.  Layers run with it as ``current_context()`` and it
        receives ``"use"``/``"remove"`` events if it has ``emit``.
        Defaults to the pipeline itself.
    options
        Free-form mapping handed to ``initialize``.
    settings
        Pipeline settings; loaded from the environment when omitted.
    """

    Layer = Layer

    def __init__(
        self,
        provider: Any = None,
        options: Mapping[str, Any] | None = None,
        *,
        settings: SupplySettings | None = None,
    ) -> None:
        super().__init__(provider)
        self.options: dict[str, Any] = dict(options or {})
        self.settings = settings if settings is not None else load_settings()
        self._dispatcher = Dispatcher(
            self,
            metrics_enabled=self.settings.observability.metrics_enabled,
        )

        initialize = getattr(self, "initialize", None)
        if callable(initialize):
            initialize(self.options)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def each(self, *args: Any, callback: Completion | None = None) -> Any:
        """Walk all layers with *args*; see ``Dispatcher.each``."""
        return self._dispatcher.each(*args, callback=callback)

    async def each_async(self, *args: Any) -> bool:
        """Walk all layers and await the outcome; see ``Dispatcher.each_async``."""
        return await self._dispatcher.each_async(*args)

    # ------------------------------------------------------------------
    # Plugins
    # ------------------------------------------------------------------

    def plugin(
        self,
        name: str,
        server: Callable[..., Any],
        *,
        client: Source = None,
        library: Source = None,
        at: int | str | None = None,
        context: Any = None,
        mode: LayerMode | str | None = None,
    ) -> Any:
        """Register a plugin specification as a layer.

        *client* and *library* are resolved immediately, so a missing file
        raises ``SourceResolutionError`` here and nothing is registered.
        """
        spec = PluginSpecification.build(
            name,
            server,
            client=client,
            library=library,
            context=context,
            mode=mode,
        )
        self.insert(spec, at=at)
        return self.provider

    def plugins(self) -> list[PluginSpecification]:
        """Registered plugin specifications, in walk order."""
        return [layer for layer in self.layers if isinstance(layer, PluginSpecification)]

    def __repr__(self) -> str:
        if self.destroyed:
            return f"<{type(self).__name__} destroyed>"
        names = ", ".join(layer.name for layer in self.layers)
        return f"<{type(self).__name__} [{names}]>"


def create(
    provider: Any = None,
    options: Mapping[str, Any] | None = None,
    **kwargs: Any,
) -> Supply:
    """Factory form of ``Supply(...)``."""
    return Supply(provider, options, **kwargs)
