"""Install pipeline operations on an existing host class.

Hosts that already have their own vocabulary can rename the three
operations.  Each host instance lazily gets its own ``Supply`` with the
instance as provider, so ``emit`` on the host (if any) receives the
``"use"``/``"remove"`` notifications.

Usage::

    @install(run="dispatch", add="middleware")
    class Router:
        ...

    router = Router()
    router.middleware("auth", check_auth).dispatch(request)
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from .core.config import SupplySettings, load_settings
from .core.errors import ConfigError
from .pipeline import Supply

H = TypeVar("H", bound=type)


def pipeline_of(
    host: Any,
    attribute: str = "_supply",
    settings: SupplySettings | None = None,
) -> Supply:
    """The pipeline owned by *host*, created on first access."""
    supply = getattr(host, attribute, None)
    if supply is None:
        supply = Supply(host, settings=settings)
        setattr(host, attribute, supply)
    return supply


def install(
    host_cls: H | None = None,
    *,
    run: str | None = None,
    add: str | None = None,
    remove: str | None = None,
    attribute: str | None = None,
    settings: SupplySettings | None = None,
) -> H | Callable[[H], H]:
    """Add ``run``/``add``/``remove`` operations to *host_cls*.

    Defaults (``each``/``before``/``remove``, stored on ``_supply``) come
    from ``settings.mixin``.  ``add`` puts a layer in front of all others
    (the host-side ``before``) and returns the host; ``run`` walks and
    returns the host; ``remove`` returns a bool.

    Can be used as ``install(Host)`` or as a decorator, with or without
    arguments.  Raises ``ConfigError`` if two operations share a name or a
    name is already taken on the host class.
    """
    settings = settings if settings is not None else load_settings()
    defaults = settings.mixin
    names = {
        "run": run or defaults.run,
        "add": add or defaults.add,
        "remove": remove or defaults.remove,
    }
    attr = attribute or defaults.attribute

    if len(set(names.values())) != len(names):
        raise ConfigError(f"Operation names must be distinct: {names}")

    def decorate(cls: H) -> H:
        for name in [*names.values(), attr]:
            if hasattr(cls, name):
                raise ConfigError(f"{cls.__name__} already defines {name!r}")

        def _run(self: Any, *args: Any, callback: Any = None) -> Any:
            pipeline_of(self, attr, settings).each(*args, callback=callback)
            return self

        def _add(self: Any, name: Any, fn: Any = None, **options: Any) -> Any:
            pipeline_of(self, attr, settings).before(name, fn, **options)
            return self

        def _remove(self: Any, name: str) -> bool:
            return pipeline_of(self, attr, settings).remove(name)

        for role, method in (("run", _run), ("add", _add), ("remove", _remove)):
            method.__name__ = names[role]
            method.__qualname__ = f"{cls.__qualname__}.{names[role]}"
            setattr(cls, names[role], method)
        setattr(cls, attr, None)
        return cls

    if host_cls is None:
        return decorate
    return decorate(host_cls)
