"""Loader configuration for modloom-core.

LoaderConfig is the explicit configuration value threaded through every
pipeline call. Process-level flags (version tag, source-map emission) are read
from the environment once, when the configuration is constructed, and are
fixed for the lifetime of that value.
"""

from __future__ import annotations

import ast
import os
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modloom_core.cache import Cache
from modloom_core.registry import ModuleRegistry
from modloom_core.resolver import PathResolver, resolve_specifier

# Package version - folded into cache keys when MODLOOM_VERSION is unset
MODLOOM_CORE_VERSION = "0.1.0"

# Environment variable overriding the cache version tag
VERSION_ENV_VAR = "MODLOOM_VERSION"

# Environment variable enabling line maps in compiled artifacts
SOURCE_MAPS_ENV_VAR = "MODLOOM_SOURCE_MAPS"

_TRUTHY = frozenset({"1", "true", "yes", "on"})

LogSink = Callable[..., None]


def get_version_tag() -> str:
    """Get the cache version tag from the environment.

    Returns:
        Value of MODLOOM_VERSION, or the package version.
    """
    return os.environ.get(VERSION_ENV_VAR) or MODLOOM_CORE_VERSION


def get_source_maps_enabled() -> bool:
    """Get the source-map flag from the environment.

    Returns:
        True if MODLOOM_SOURCE_MAPS is set to 1/true/yes/on.
    """
    return os.environ.get(SOURCE_MAPS_ENV_VAR, "").strip().lower() in _TRUTHY


class LoaderConfig(BaseModel):
    """Configuration shared by every stage of a load.

    Attributes:
        resolve: Path resolver ``(from_filename, specifier) -> path``.
        module_registry: Registry of loaded modules.
        compiled_cache: Optional store for compiled artifacts.
        log: Optional sink called as ``log(level, *values)``.
        additional_passes: Syntax passes applied after the built-in lowering,
            in order. Each is an ``ast.NodeTransformer`` or a (possibly async)
            callable taking and returning an ``ast.Module``.
        version: Version tag folded into every cache key.
        source_maps: Whether compiled artifacts carry a line map.

    Example:
        >>> config = LoaderConfig(
        ...     compiled_cache=MemoryCache(),
        ...     module_registry=ModuleRegistry({"json": json}),
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    resolve: PathResolver = Field(
        default=resolve_specifier,
        description="Resolve a specifier against the referencing filename",
    )
    module_registry: ModuleRegistry = Field(
        default_factory=ModuleRegistry,
        description="Registry of fully loaded modules",
    )
    compiled_cache: Cache | None = Field(
        default=None,
        description="Store for compiled artifacts (None disables caching)",
    )
    log: LogSink | None = Field(
        default=None,
        description="Diagnostics sink called as log(level, *values)",
    )
    additional_passes: tuple[Any, ...] = Field(
        default=(),
        description="Syntax passes applied after the built-in lowering",
    )
    version: str = Field(
        default_factory=get_version_tag,
        min_length=1,
        description="Version tag folded into every cache key",
    )
    source_maps: bool = Field(
        default_factory=get_source_maps_enabled,
        description="Emit a generated-to-source line map with compiled artifacts",
    )

    @field_validator("additional_passes")
    @classmethod
    def passes_must_be_applicable(cls, v: tuple[Any, ...]) -> tuple[Any, ...]:
        """Validate that every pass is a NodeTransformer or a callable."""
        for syntax_pass in v:
            if not (isinstance(syntax_pass, ast.NodeTransformer) or callable(syntax_pass)):
                msg = f"syntax pass must be an ast.NodeTransformer or callable, got {syntax_pass!r}"
                raise ValueError(msg)
        return v
