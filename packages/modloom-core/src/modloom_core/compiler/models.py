"""Compiler output models for modloom-core.

This module defines:
- CompiledArtifact: The cached, immutable output of compiling one source file
- TransformResult: Full output of one transform call, including warnings
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CompiledArtifact(BaseModel):
    """Immutable output of compiling one source file.

    Produced once per distinct (version tag, source text, filename) triple and
    stored in the compiled cache as JSON. Readers re-validate on every cache
    hit; nothing mutates an artifact in place.

    Attributes:
        dependency_specifiers: Statically declared specifiers, in source order,
            duplicates preserved.
        transformed_source: Lowered source text ready for instantiation.
        line_map: For each generated line, the originating source line
            (0 for synthetic lines). None unless source maps are enabled.

    Example:
        >>> artifact = CompiledArtifact(
        ...     dependency_specifiers=[".util"],
        ...     transformed_source="util = require('.util')",
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dependency_specifiers: list[str] = Field(
        ...,
        description="Statically declared dependency specifiers, in source order",
    )
    transformed_source: str = Field(
        ...,
        description="Lowered source text ready for instantiation",
    )
    line_map: list[int] | None = Field(
        default=None,
        description="Originating source line for each generated line",
    )


class TransformResult(BaseModel):
    """Output of transform_source.

    Attributes:
        dependency_specifiers: Statically declared specifiers, in source order.
        transformed_source: Lowered source text.
        line_map: Generated-to-source line map, when source maps are enabled.
        warnings: Compiler warnings raised while parsing, already logged.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    dependency_specifiers: list[str]
    transformed_source: str
    line_map: list[int] | None = None
    warnings: list[str] = Field(default_factory=list)

    def to_artifact(self) -> CompiledArtifact:
        """Drop per-run data, keeping what is safe to cache."""
        return CompiledArtifact(
            dependency_specifiers=self.dependency_specifiers,
            transformed_source=self.transformed_source,
            line_map=self.line_map,
        )
