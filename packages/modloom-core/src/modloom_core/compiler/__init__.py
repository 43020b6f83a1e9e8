"""Compiler module for modloom-core.

This module exports the compile half of the load pipeline:
- transform_source: Parse, extract dependencies, lower and emit one file
- DynamicImportRewriter / rename_dynamic_import: __import__() -> import_()
- DependencyExtractor / parse_dependencies: Static specifier collection
- ImportLowering / lower_imports: Import statements -> require() bindings
- CompiledArtifact: Cached output contract model
- TransformResult: Full transform output model
"""

from __future__ import annotations

from modloom_core.compiler.extractor import (
    REQUIRE_NAME,
    DependencyExtractor,
    parse_dependencies,
)
from modloom_core.compiler.lowering import ImportLowering, lower_imports
from modloom_core.compiler.models import CompiledArtifact, TransformResult
from modloom_core.compiler.rewrite import (
    DYNAMIC_IMPORT_NAME,
    DYNAMIC_IMPORT_OPERATOR,
    DynamicImportRewriter,
    rename_dynamic_import,
)
from modloom_core.compiler.transformer import COMPILE_FLAGS, build_line_map, transform_source

__all__: list[str] = [
    # Transformer
    "transform_source",
    "build_line_map",
    "COMPILE_FLAGS",
    # Syntax passes
    "DynamicImportRewriter",
    "rename_dynamic_import",
    "DependencyExtractor",
    "parse_dependencies",
    "ImportLowering",
    "lower_imports",
    # Reserved names
    "REQUIRE_NAME",
    "DYNAMIC_IMPORT_NAME",
    "DYNAMIC_IMPORT_OPERATOR",
    # Output models
    "CompiledArtifact",
    "TransformResult",
]
