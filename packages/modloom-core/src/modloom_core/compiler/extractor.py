"""Static dependency extraction.

Collects, in source order, the specifiers a module declares statically:
- Import statements (module mode only)
- ``require('<literal>')`` calls with exactly one string-literal argument

Computed specifiers, multi-argument calls and dynamic imports are not
collected; dynamic dependencies are loaded lazily when the module runs.
"""

from __future__ import annotations

import ast

# Synchronous dependency-fetch function recognised in source
REQUIRE_NAME = "require"

# Imports handled by the compiler itself, never by the loader
FUTURE_MODULE = "__future__"


def import_from_specifiers(node: ast.ImportFrom) -> list[str]:
    """Return the specifiers a ``from ... import`` statement declares.

    ``from m import x`` declares ``m``. ``from . import x, y`` names sibling
    modules, so each imported name becomes its own specifier (``.x``, ``.y``).
    """
    prefix = "." * node.level
    if node.module is not None:
        return [prefix + node.module]
    return [prefix + alias.name for alias in node.names]


class DependencyExtractor(ast.NodeVisitor):
    """Depth-first collector of static dependency specifiers.

    Attributes:
        specifiers: Specifiers found so far, in encounter order.
    """

    def __init__(self, *, include_imports: bool = True) -> None:
        self.include_imports = include_imports
        self.specifiers: list[str] = []

    def visit_Import(self, node: ast.Import) -> None:
        if self.include_imports:
            self.specifiers.extend(alias.name for alias in node.names)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> None:
        if self.include_imports and node.module != FUTURE_MODULE:
            self.specifiers.extend(import_from_specifiers(node))

    def visit_Call(self, node: ast.Call) -> None:
        if (
            isinstance(node.func, ast.Name)
            and node.func.id == REQUIRE_NAME
            and len(node.args) == 1
            and not node.keywords
            and isinstance(node.args[0], ast.Constant)
            and isinstance(node.args[0].value, str)
        ):
            self.specifiers.append(node.args[0].value)
        self.generic_visit(node)


def parse_dependencies(tree: ast.Module, *, include_imports: bool = True) -> list[str]:
    """Extract static dependency specifiers from tree.

    Args:
        tree: Parsed module.
        include_imports: Collect import statements (module mode). In script
            mode imports belong to the host interpreter and are skipped.

    Returns:
        Specifiers in source order, duplicates preserved.

    Example:
        >>> parse_dependencies(ast.parse("import a\\nrequire('b')\\nimport c"))
        ['a', 'b', 'c']
    """
    extractor = DependencyExtractor(include_imports=include_imports)
    extractor.visit(tree)
    return extractor.specifiers
