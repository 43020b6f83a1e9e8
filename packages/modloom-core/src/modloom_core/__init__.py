"""modloom-core: Runtime loader for interdependent Python source files.

This package provides:
- ModuleLoader: Load a file and its dependency graph on demand
- create_module: Compile (cached), load dependencies and run one file
- LoaderConfig: Explicit configuration threaded through every call
- with_cache / MemoryCache: Content-addressed compiled-artifact cache
- transform_source: Parse, extract dependencies, lower and emit
- Source providers for in-memory and filesystem sources

Example:
    >>> loader = ModuleLoader(FileSystemSourceProvider())
    >>> config = LoaderConfig(compiled_cache=MemoryCache())
    >>> app = await loader("/srv/app/main.py", config)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Cache
from modloom_core.cache import Cache, CacheControl, MemoryCache, with_cache

# Compiler
from modloom_core.compiler import CompiledArtifact, TransformResult, transform_source

# Configuration
from modloom_core.config import LoaderConfig
from modloom_core.diagnostics import format_error

# Error types
from modloom_core.errors import (
    CircularDependencyError,
    ModloomError,
    ModuleAlreadyRegisteredError,
    ModuleNotLoadedError,
    SourceNotFoundError,
)
from modloom_core.fingerprint import fingerprint
from modloom_core.observability import configure_logging, structlog_sink
from modloom_core.registry import ModuleRecord, ModuleRegistry
from modloom_core.resolver import resolve_specifier

# Runtime
from modloom_core.runtime import (
    ModuleLoader,
    create_module,
    instantiate_module,
    load_dependencies,
)
from modloom_core.sources import (
    FileSystemSourceProvider,
    MemorySourceProvider,
    ModuleSource,
    SourceProvider,
)

__all__ = [
    "__version__",
    # Runtime
    "ModuleLoader",
    "create_module",
    "load_dependencies",
    "instantiate_module",
    # Configuration
    "LoaderConfig",
    "resolve_specifier",
    "ModuleRegistry",
    "ModuleRecord",
    # Cache
    "Cache",
    "CacheControl",
    "MemoryCache",
    "with_cache",
    "fingerprint",
    # Compiler
    "transform_source",
    "CompiledArtifact",
    "TransformResult",
    "format_error",
    # Sources
    "SourceProvider",
    "ModuleSource",
    "MemorySourceProvider",
    "FileSystemSourceProvider",
    # Observability
    "configure_logging",
    "structlog_sink",
    # Errors
    "ModloomError",
    "ModuleNotLoadedError",
    "ModuleAlreadyRegisteredError",
    "CircularDependencyError",
    "SourceNotFoundError",
]
