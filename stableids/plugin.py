"""Compiler orchestration and the constant hashed-ids plugin."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional

from loguru import logger

from .assigner import HashedIdAssigner, StableNameFn
from .graph import Compilation, Module
from .hooks import CompilerHooks
from .naming import clear_name_cache
from .options import IdOptions

PLUGIN_NAME = "ConstantHashedIdsPlugin"


class Compiler:
    """Drives compilations and fires lifecycle hooks in a fixed order.

    Parameters:
        context: Build root; default base directory for short module names.
        root: Scope key for name caches shared by child compilers.
    """

    def __init__(self, context: str, *, root: Optional[str] = None, plugins: Optional[List[Any]] = None):
        self.context = context
        self.root = root or context
        self.hooks = CompilerHooks()
        for plugin in plugins or []:
            plugin.apply(self)

    def compile(self, compilation: Compilation) -> Compilation:
        """Fire `compilation` taps, then the `module_ids` phase exactly once.

        Short names cached under this compiler's `root` are dropped afterwards,
        so no naming state outlives the compilation.
        """
        try:
            self.hooks.compilation.call(compilation)
            compilation.hooks.module_ids.call(list(compilation.modules))
        finally:
            clear_name_cache(self.root)
        return compilation


class ConstantHashedIdsPlugin:
    """Assigns hashed module ids that only change when a module's own name changes.

    Options are validated at construction, so a bad configuration fails before
    any compilation starts.
    """

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        *,
        name_of: Optional[StableNameFn] = None,
    ):
        self.options = IdOptions.from_mapping(options)
        self.name_of = name_of

    def apply(self, compiler: Compiler) -> None:
        assigner = HashedIdAssigner(self.options, name_of=self.name_of)

        def on_compilation(compilation: Compilation) -> None:
            def on_module_ids(modules: Iterable[Module]) -> None:
                assigned = assigner.assign(
                    modules,
                    compilation,
                    context=compiler.context,
                    root=compiler.root,
                )
                logger.debug("{} assigned {} id(s)", PLUGIN_NAME, len(assigned))

            compilation.hooks.module_ids.tap(PLUGIN_NAME, on_module_ids)

        compiler.hooks.compilation.tap(PLUGIN_NAME, on_compilation)
