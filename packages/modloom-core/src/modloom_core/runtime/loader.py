"""ModuleLoader: the recursive LoadModule entry point.

create_module() compiles and runs one file but never looks at the registry
and never de-duplicates work. ModuleLoader wraps it with the policy a host
needs to load a whole graph:

- Registry hits return the registered export object
- Concurrent requests for the same unloaded path share one in-flight load
- A wait that would close a cycle raises CircularDependencyError instead of
  hanging (require() only sees finished modules, so a cycle cannot complete)
- Finished modules are registered; failed loads are not, and may be retried
"""

from __future__ import annotations

import asyncio
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from modloom_core.errors import CircularDependencyError
from modloom_core.observability import get_logger, load_span
from modloom_core.runtime.orchestrator import create_module

if TYPE_CHECKING:
    from modloom_core.config import LoaderConfig
    from modloom_core.sources import SourceProvider

# Path of the module whose load the current task is running
_current_load: ContextVar[str | None] = ContextVar("modloom_current_load", default=None)


class ModuleLoader:
    """Load modules by path, sharing in-flight work and detecting cycles.

    Instances are callable with the LoadModule signature, so a loader passes
    itself to create_module for dependencies and dynamic imports.

    Args:
        sources: Provider of raw source text for resolved paths.

    Example:
        >>> loader = ModuleLoader(MemorySourceProvider({"/app/main.py": "x = 1"}))
        >>> exports = await loader("/app/main.py", LoaderConfig())
        >>> exports.x
        1
    """

    def __init__(self, sources: SourceProvider) -> None:
        self.sources = sources
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        # path -> paths its load is currently waiting on
        self._waits: dict[str, set[str]] = {}

    async def __call__(self, path: str, config: LoaderConfig) -> Any:
        return await self.load(path, config)

    async def load(self, path: str, config: LoaderConfig) -> Any:
        """Return the export object for path, loading it if needed.

        Args:
            path: Resolved path of the module.
            config: Loader configuration.

        Returns:
            The module's export object.

        Raises:
            CircularDependencyError: If waiting for path would wait on the
                requesting module itself.
            SourceNotFoundError: If the source provider has no source.
            SyntaxError: If the source cannot be compiled.
        """
        registry = config.module_registry
        if path in registry:
            return registry.get_exports(path)

        requester = _current_load.get()
        if requester not in self._in_flight:
            # Not called from one of this loader's running loads
            requester = None

        if requester is not None:
            cycle = self._find_cycle(path, requester)
            if cycle is not None:
                raise CircularDependencyError(cycle)

        task = self._in_flight.get(path)
        if task is None:
            task = asyncio.ensure_future(self._load(path, config))
            self._in_flight[path] = task

        if requester is not None:
            self._waits.setdefault(requester, set()).add(path)

        return await asyncio.shield(task)

    async def _load(self, path: str, config: LoaderConfig) -> Any:
        token = _current_load.set(path)
        try:
            with load_span("modloom.load", attributes={"modloom.path": path}):
                source = await self.sources.get_source(path)
                exports = await create_module(source.text, source.module_mode, path, config, self)
                config.module_registry.register(path, exports)
            get_logger().info("module_loaded", path=path, module_mode=source.module_mode)
            return exports
        finally:
            self._in_flight.pop(path, None)
            self._waits.pop(path, None)
            _current_load.reset(token)

    def _find_cycle(self, path: str, requester: str) -> list[str] | None:
        """Return the wait chain from requester back to itself through path, if any."""
        stack: list[tuple[str, list[str]]] = [(path, [requester, path])]
        seen: set[str] = set()
        while stack:
            node, trail = stack.pop()
            if node == requester:
                return trail
            if node in seen:
                continue
            seen.add(node)
            for waited in self._waits.get(node, ()):
                if waited in self._in_flight:
                    stack.append((waited, [*trail, waited]))
        return None
