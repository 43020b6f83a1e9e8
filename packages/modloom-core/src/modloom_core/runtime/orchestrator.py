"""Per-file load entry point: compile (cached), load dependencies, instantiate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from modloom_core.cache import CacheControl, with_cache
from modloom_core.compiler.models import CompiledArtifact
from modloom_core.compiler.transformer import transform_source
from modloom_core.observability import get_logger
from modloom_core.runtime.dependencies import load_dependencies
from modloom_core.runtime.instantiate import instantiate_module

if TYPE_CHECKING:
    from modloom_core.config import LoaderConfig
    from modloom_core.runtime.instantiate import LoadModule


async def create_module(
    source: str,
    module_mode: bool,
    filename: str,
    config: LoaderConfig,
    load_module: LoadModule,
) -> Any:
    """Load one source file and return its export object.

    1. Fetch the CompiledArtifact for (version, source, filename) from the
       compiled cache, transforming the source on a miss
    2. Load every declared dependency through load_module
    3. Execute the transformed source

    Identical (version, source, filename) triples are never re-parsed while
    the cache holds their artifact. A transform that produced compiler
    warnings is not cached, so the warnings show up again on the next load.

    Args:
        source: Raw source text.
        module_mode: Parse import statements as loader dependencies.
        filename: Absolute path of the file.
        config: Loader configuration.
        load_module: Loader used for every dependency and dynamic import.

    Returns:
        The module's export object.

    Example:
        >>> exports = await create_module("default = 1 + 1", True, "/app/two.py", config, loader)
        >>> exports.default
        2
    """

    async def produce(control: CacheControl) -> dict[str, Any]:
        result = await transform_source(source, module_mode, filename, config)
        if result.warnings:
            control.prevent_cache()
        return result.to_artifact().model_dump(mode="json")

    cached = await with_cache(config.compiled_cache, [config.version, source, filename], produce)
    artifact = CompiledArtifact.model_validate(cached)

    await load_dependencies(filename, artifact.dependency_specifiers, config, load_module)

    exports = await instantiate_module(
        filename,
        artifact.transformed_source,
        config,
        load_module,
        line_map=artifact.line_map,
    )
    get_logger().debug(
        "module_instantiated",
        filename=filename,
        dependencies=len(artifact.dependency_specifiers),
    )
    return exports
