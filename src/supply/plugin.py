"""Plugin specifications: layers that also carry client and library code.

A plugin keeps its server side as a callable (it is dispatched exactly like
any other layer) and carries two pieces of source text, ``client`` and
``library``, meant to be shipped elsewhere.  Both are resolved once, when
the specification is built, so a bad path fails at registration rather than
at walk time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Union

from .core.enums import LayerMode
from .core.errors import SourceResolutionError
from .layer import Layer

Source = Union[str, bytes, bytearray, memoryview, "os.PathLike[str]", None]

# Leading characters that mark a string as inline source.
_COMMENT_OPENERS = ("//", "/*")


def resolve_source(code: Source) -> str:
    """Turn *code* into source text.

    This is a heuristic, not a guarantee:

    * ``None`` and ``""`` resolve to ``""``.
    * bytes-like values are the content itself, decoded as UTF-8.
    * ``os.PathLike`` values are always read from disk.
    * a string starting with ``//`` or ``/*`` is inline source and is
      returned unchanged.
    * any other string is taken as a file path and read as UTF-8.  Inline
      code that does not open with a comment therefore ends up here and
      fails unless such a file exists.

    Raises ``SourceResolutionError`` when the bytes are not UTF-8 or the
    path cannot be read.
    """
    if code is None:
        return ""
    if isinstance(code, (bytes, bytearray, memoryview)):
        try:
            return bytes(code).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SourceResolutionError(code, f"not valid UTF-8 ({exc.reason})") from exc
    if isinstance(code, os.PathLike):
        return _read(Path(code))
    if not isinstance(code, str):
        raise SourceResolutionError(code, f"unsupported type {type(code).__name__}")
    if not code or code[:2] in _COMMENT_OPENERS:
        return code
    return _read(Path(code))


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SourceResolutionError(str(path), "no such file") from exc
    except UnicodeDecodeError as exc:
        raise SourceResolutionError(str(path), f"not valid UTF-8 ({exc.reason})") from exc
    except OSError as exc:
        raise SourceResolutionError(str(path), exc.strerror or str(exc)) from exc


@dataclass(frozen=True, eq=False)
class PluginSpecification(Layer):
    """A layer with resolved ``client`` and ``library`` source text."""

    client: str = ""
    library: str = ""

    @classmethod
    def build(
        cls,
        name: str,
        server: Callable[..., Any],
        *,
        client: Source = None,
        library: Source = None,
        context: Any = None,
        mode: LayerMode | str | None = None,
    ) -> PluginSpecification:
        """Resolve *client* and *library* and build the specification."""
        return cls.create(
            name,
            server,
            context=context,
            mode=mode,
            client=resolve_source(client),
            library=resolve_source(library),
        )

    @property
    def server(self) -> Callable[..., Any]:
        return self.fn
