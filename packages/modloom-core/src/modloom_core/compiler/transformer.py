"""Module transformer: parse, extract dependencies, lower, emit.

transform_source() runs the compile half of the pipeline for one file:

1. Parse the source, recording compiler warnings
2. Rewrite dynamic imports (must precede every other pass)
3. Extract static dependency specifiers
4. Apply the syntax passes: built-in import lowering (module mode), then the
   configured additional passes in order
5. Check the lowered tree compiles, then unparse it to text

Syntax failures at any step are rendered as a source-framed diagnostic,
emitted through the configured log sink and re-raised unchanged.
"""

from __future__ import annotations

import ast
import inspect
import warnings
from typing import TYPE_CHECKING, Any

from modloom_core.compiler.extractor import parse_dependencies
from modloom_core.compiler.lowering import ImportLowering
from modloom_core.compiler.models import TransformResult
from modloom_core.compiler.rewrite import rename_dynamic_import
from modloom_core.diagnostics import format_error
from modloom_core.observability import get_logger, load_span

if TYPE_CHECKING:
    from modloom_core.config import LoaderConfig

# Compile flags shared with the instantiator
COMPILE_FLAGS = ast.PyCF_ALLOW_TOP_LEVEL_AWAIT


async def transform_source(
    source: str,
    module_mode: bool,
    filename: str,
    config: LoaderConfig,
) -> TransformResult:
    """Compile one source file to the require() calling convention.

    Args:
        source: Raw source text.
        module_mode: If True, import statements are loader dependencies and
            are lowered to require() calls. If False (script mode), they are
            left to the host interpreter.
        filename: File identifier for diagnostics and path resolution.
        config: Loader configuration (additional passes, log sink, source maps).

    Returns:
        TransformResult with dependency specifiers and transformed source.

    Raises:
        SyntaxError: If the source cannot be parsed, lowered or compiled.

    Example:
        >>> result = await transform_source("import a", True, "/app/m.py", config)
        >>> result.dependency_specifiers
        ['a']
        >>> result.transformed_source
        "a = require('a')"
    """
    logger = get_logger().bind(filename=filename)

    with load_span(
        "modloom.transform",
        attributes={"modloom.filename": filename, "modloom.module_mode": module_mode},
    ):
        # Warning filters are process-global: never hold them across an await
        with warnings.catch_warnings(record=True) as parse_caught:
            warnings.simplefilter("always")
            try:
                tree = ast.parse(source, filename=filename, mode="exec")
            except SyntaxError as exc:
                _report_syntax_error(exc, "parse script", source, filename, config)
                raise

        rename_dynamic_import(tree)
        dependency_specifiers = parse_dependencies(tree, include_imports=module_mode)

        passes: list[Any] = [ImportLowering(filename, source)] if module_mode else []
        passes.extend(config.additional_passes)

        try:
            for syntax_pass in passes:
                tree = await _apply_pass(syntax_pass, tree)
            ast.fix_missing_locations(tree)
            with warnings.catch_warnings(record=True) as compile_caught:
                warnings.simplefilter("always")
                compile(tree, filename, "exec", flags=COMPILE_FLAGS, dont_inherit=True)
        except SyntaxError as exc:
            _report_syntax_error(exc, "transform script", source, filename, config)
            raise

        compiler_warnings = [_describe_warning(w) for w in [*parse_caught, *compile_caught]]
        for message in compiler_warnings:
            if config.log is not None:
                config.log("warn", "parse script", message)
            logger.warning("compile_warning", message=message)

        transformed_source = ast.unparse(tree)
        line_map = build_line_map(tree, transformed_source) if config.source_maps else None

    logger.debug(
        "module_transformed",
        dependencies=len(dependency_specifiers),
        passes=len(passes),
    )
    return TransformResult(
        dependency_specifiers=dependency_specifiers,
        transformed_source=transformed_source,
        line_map=line_map,
        warnings=compiler_warnings,
    )


async def _apply_pass(syntax_pass: Any, tree: ast.Module) -> ast.Module:
    """Apply one syntax pass; a pass returning None keeps the mutated tree."""
    if isinstance(syntax_pass, ast.NodeTransformer):
        result = syntax_pass.visit(tree)
    else:
        result = syntax_pass(tree)
        if inspect.isawaitable(result):
            result = await result
    return tree if result is None else result


def build_line_map(tree: ast.Module, generated: str) -> list[int]:
    """Map each generated line to the source line it came from.

    The generated text is re-parsed and walked in parallel with the lowered
    tree, whose nodes still carry source positions. Lines with no
    corresponding source node map to 0.

    Args:
        tree: Lowered tree that produced generated.
        generated: Output of ast.unparse(tree).

    Returns:
        List indexed by generated line number minus one.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        reparsed = ast.parse(generated)

    line_map = [0] * (generated.count("\n") + 1)
    for original, emitted in zip(ast.walk(tree), ast.walk(reparsed)):
        if type(original) is not type(emitted):
            break
        emitted_line = getattr(emitted, "lineno", None)
        source_line = getattr(original, "lineno", None)
        if emitted_line and source_line and not line_map[emitted_line - 1]:
            line_map[emitted_line - 1] = source_line
    return line_map


def _report_syntax_error(
    exc: SyntaxError,
    stage: str,
    source: str,
    filename: str,
    config: LoaderConfig,
) -> None:
    line = exc.lineno or 1
    column = exc.offset or 1
    diagnostic = format_error(exc.msg, filename, source, line, column)

    if config.log is not None:
        config.log("error", stage, diagnostic)
    get_logger().error(
        "module_syntax_error",
        stage=stage,
        filename=filename,
        line=line,
        column=column,
        message=exc.msg,
    )


def _describe_warning(caught: warnings.WarningMessage) -> str:
    return f"{caught.filename}:{caught.lineno}: {caught.category.__name__}: {caught.message}"
