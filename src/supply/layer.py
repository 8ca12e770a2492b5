"""Layer: one named unit of work in a pipeline.

A layer pairs a name with a callable and the callable's declared arity.
The arity is compared against the number of payload arguments at walk time
to decide whether the layer is synchronous or takes a continuation.
"""

from __future__ import annotations

import functools
import inspect
from dataclasses import dataclass
from typing import Any, Callable

from .core.enums import LayerMode

ANONYMOUS = "anonymous"

_COUNTED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def callable_arity(fn: Callable[..., Any]) -> int:
    """Number of positional parameters of *fn* that have no default.

    ``*args``, keyword-only parameters and defaulted parameters are not
    counted. Bound methods do not count ``self``. Callables whose signature
    cannot be inspected (some builtins) report 0.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 0
    return sum(
        1
        for p in sig.parameters.values()
        if p.kind in _COUNTED_KINDS and p.default is inspect.Parameter.empty
    )


def display_name(fn: Callable[..., Any]) -> str:
    """Human readable name for *fn*, ``"anonymous"`` when it has none."""
    if isinstance(fn, functools.partial):
        return display_name(fn.func)

    name = getattr(fn, "__name__", None)
    if name is None and not inspect.isroutine(fn):
        name = type(fn).__name__
    if not name or name == "<lambda>":
        return ANONYMOUS
    return name


@dataclass(frozen=True, eq=False)
class Layer:
    """Immutable record of a registered callable.

    Layers compare by identity: two registrations of the same function
    under the same name are still two layers.
    """

    name: str
    fn: Callable[..., Any]
    arity: int
    context: Any = None
    mode: LayerMode | None = None

    @classmethod
    def create(
        cls,
        name: str,
        fn: Callable[..., Any],
        *,
        context: Any = None,
        mode: LayerMode | str | None = None,
        **fields: Any,
    ) -> Layer:
        if not callable(fn):
            raise TypeError(f"Layer {name!r} needs a callable, got {type(fn).__name__}")
        if mode is not None:
            mode = LayerMode(mode)
        elif inspect.iscoroutinefunction(fn):
            mode = LayerMode.COROUTINE
        return cls(
            name=name,
            fn=fn,
            arity=callable_arity(fn),
            context=context,
            mode=mode,
            **fields,
        )

    def mode_for(self, argc: int) -> LayerMode:
        """Dispatch mode for a walk carrying *argc* payload arguments."""
        if self.mode is not None:
            return self.mode
        if self.arity > argc:
            return LayerMode.ASYNC
        return LayerMode.SYNC
