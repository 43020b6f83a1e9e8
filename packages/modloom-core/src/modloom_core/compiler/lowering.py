"""Built-in lowering of import statements to the require() convention.

In module mode every import statement is resolved by the loader rather than
by the host interpreter:

    import a                   ->  a = require('a')
    import a.b as c            ->  c = require('a.b')
    from .m import x as y      ->  y = require('.m').x
    from . import x            ->  x = require('.x')
    from m import *            ->  globals().update(<public names of require('m')>)

``from __future__`` imports are left for the compiler. An unaliased dotted
import has no single name to bind and is rejected with a SyntaxError.
"""

from __future__ import annotations

import ast

from modloom_core.compiler.extractor import FUTURE_MODULE, REQUIRE_NAME

_STAR_TEMPLATE = (
    "globals().update({{_star_name: getattr(_star_module, _star_name)"
    " for _star_module in [{require}({specifier!r})]"
    " for _star_name in getattr(_star_module, '__all__',"
    " [_public for _public in dir(_star_module) if not _public.startswith('_')])}})"
)


def _require_call(specifier: str) -> ast.Call:
    return ast.Call(
        func=ast.Name(id=REQUIRE_NAME, ctx=ast.Load()),
        args=[ast.Constant(value=specifier)],
        keywords=[],
    )


def _locate(statement: ast.stmt, origin: ast.stmt) -> ast.stmt:
    """Give every node of a synthetic statement the origin's location."""
    for child in ast.walk(statement):
        ast.copy_location(child, origin)
    return statement


class ImportLowering(ast.NodeTransformer):
    """Lower import statements to require() bindings.

    Args:
        filename: File being lowered, used in SyntaxError details.
        source: Source text, used for the offending line in SyntaxError details.
    """

    def __init__(self, filename: str = "<unknown>", source: str = "") -> None:
        self.filename = filename
        self._lines = source.splitlines()

    def visit_Import(self, node: ast.Import) -> list[ast.stmt]:
        statements: list[ast.stmt] = []
        for alias in node.names:
            if alias.asname is None and "." in alias.name:
                raise self._error(
                    node,
                    f"dotted import '{alias.name}' needs an alias in module mode "
                    f"(import {alias.name} as <name>)",
                )
            statements.append(self._bind(alias.asname or alias.name, _require_call(alias.name), node))
        return statements

    def visit_ImportFrom(self, node: ast.ImportFrom) -> ast.stmt | list[ast.stmt]:
        if node.module == FUTURE_MODULE:
            return node

        prefix = "." * node.level
        statements: list[ast.stmt] = []

        if node.module is None:
            for alias in node.names:
                if alias.name == "*":
                    raise self._error(node, f"'from {prefix} import *' is not supported in module mode")
                statements.append(
                    self._bind(alias.asname or alias.name, _require_call(prefix + alias.name), node)
                )
            return statements

        specifier = prefix + node.module
        for alias in node.names:
            if alias.name == "*":
                statements.append(self._star(specifier, node))
                continue
            value = ast.Attribute(value=_require_call(specifier), attr=alias.name, ctx=ast.Load())
            statements.append(self._bind(alias.asname or alias.name, value, node))
        return statements

    def _bind(self, name: str, value: ast.expr, origin: ast.stmt) -> ast.stmt:
        assign = ast.Assign(targets=[ast.Name(id=name, ctx=ast.Store())], value=value)
        return _locate(assign, origin)

    def _star(self, specifier: str, origin: ast.stmt) -> ast.stmt:
        code = _STAR_TEMPLATE.format(require=REQUIRE_NAME, specifier=specifier)
        statement = ast.parse(code).body[0]
        return _locate(statement, origin)

    def _error(self, node: ast.stmt, message: str) -> SyntaxError:
        text = self._lines[node.lineno - 1] if 0 < node.lineno <= len(self._lines) else None
        return SyntaxError(
            message,
            (
                self.filename,
                node.lineno,
                node.col_offset + 1,
                text,
                node.end_lineno or node.lineno,
                (node.end_col_offset or node.col_offset) + 1,
            ),
        )


def lower_imports(tree: ast.Module, filename: str = "<unknown>", source: str = "") -> ast.Module:
    """Apply ImportLowering to tree and return it.

    Raises:
        SyntaxError: If an import cannot be lowered.
    """
    lowered = ImportLowering(filename, source).visit(tree)
    return ast.fix_missing_locations(lowered)
