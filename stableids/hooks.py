"""Explicit named-callback hooks for the build lifecycle."""

from __future__ import annotations

from typing import Any, Callable, List, Tuple

from loguru import logger


class Hook:
    """Ordered list of named callbacks invoked synchronously."""

    def __init__(self, name: str):
        self.name = name
        self._taps: List[Tuple[str, Callable[..., Any]]] = []

    def tap(self, name: str, callback: Callable[..., Any]) -> None:
        """Subscribe `callback` under the plugin name `name`."""
        self._taps.append((name, callback))

    @property
    def tap_names(self) -> list[str]:
        return [name for name, _ in self._taps]

    def call(self, *args: Any) -> None:
        for name, callback in self._taps:
            logger.debug("hook {} -> {}", self.name, name)
            callback(*args)


class CompilerHooks:
    """Hooks owned by a compiler; `compilation` fires once per new compilation."""

    def __init__(self) -> None:
        self.compilation = Hook("compilation")


class CompilationHooks:
    """Hooks owned by one compilation; `module_ids` is the id-assignment phase."""

    def __init__(self) -> None:
        self.module_ids = Hook("module_ids")
