"""In-memory event emitter for use as a pipeline provider.

No external dependencies.  Listeners are called synchronously in
registration order.  Every emitted event is kept in a history list so
tests and tooling can inspect what a pipeline reported; the history keeps
the most recent ``max_history`` entries.
"""

from __future__ import annotations

import logging
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[Any], Any]


class MemoryEmitter:
    """Minimal ``emit``/``on`` emitter satisfying ``IEventEmitter``.

    A failing listener is logged and counted; the remaining listeners still
    run and the emitting pipeline is not affected.

    Parameters
    ----------
    max_history:
        Number of emitted events to retain; older entries are dropped.
        ``None`` keeps everything.
    """

    def __init__(self, *, max_history: int | None = 1000) -> None:
        if max_history is not None and max_history < 0:
            raise ValueError(f"max_history must be >= 0, got {max_history}")
        # event → list of (listener, once)
        self._listeners: dict[str, list[tuple[Listener, bool]]] = defaultdict(list)
        self._history: deque[tuple[str, Any]] = deque(maxlen=max_history)
        self._error_counts: dict[str, int] = defaultdict(int)

    def on(self, event: str, listener: Listener) -> MemoryEmitter:
        self._listeners[event].append((listener, False))
        return self

    def once(self, event: str, listener: Listener) -> MemoryEmitter:
        self._listeners[event].append((listener, True))
        return self

    def off(self, event: str, listener: Listener) -> bool:
        """Detach the first registration of *listener*. False if not found."""
        entries = self._listeners.get(event, [])
        for i, (registered, _) in enumerate(entries):
            if registered is listener:
                del entries[i]
                return True
        return False

    def emit(self, event: str, payload: Any = None) -> bool:
        """Deliver *payload* to listeners of *event*. True if any listened."""
        self._history.append((event, payload))

        entries = self._listeners.get(event, [])
        if not entries:
            return False
        self._listeners[event] = [entry for entry in entries if not entry[1]]

        for listener, _ in entries:
            try:
                listener(payload)
            except Exception:
                self._error_counts[event] += 1
                logger.exception("Listener error on event=%s", event)
        return True

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def get_error_counts(self) -> dict[str, int]:
        """Return per-event listener error counts."""
        return dict(self._error_counts)

    def get_history(self, event: str | None = None) -> list[tuple[str, Any]]:
        """Get emitted events, optionally filtered by name."""
        if event is None:
            return list(self._history)
        return [(e, p) for e, p in self._history if e == event]

    def clear_history(self) -> None:
        self._history.clear()
