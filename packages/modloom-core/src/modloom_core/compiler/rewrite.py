"""Dynamic-import rewrite pass.

``__import__(...)`` is the interpreter's reserved import hook, and generic
passes treat it as part of the import machinery rather than an ordinary call.
This pass renames every explicit call to it to the stand-in ``import_``,
which the instantiator binds to the loader's async dynamic-load function.
It must run before any lowering pass.
"""

from __future__ import annotations

import ast

# Reserved dynamic-import callee recognised in source
DYNAMIC_IMPORT_OPERATOR = "__import__"

# Stand-in name bound to the loader's dynamic-load function at execution time
DYNAMIC_IMPORT_NAME = "import_"


class DynamicImportRewriter(ast.NodeTransformer):
    """Replace ``__import__(args)`` calls with ``import_(args)``."""

    def visit_Call(self, node: ast.Call) -> ast.AST:
        self.generic_visit(node)
        if isinstance(node.func, ast.Name) and node.func.id == DYNAMIC_IMPORT_OPERATOR:
            replacement = ast.Call(
                func=ast.Name(id=DYNAMIC_IMPORT_NAME, ctx=ast.Load()),
                args=node.args,
                keywords=node.keywords,
            )
            return ast.copy_location(replacement, node)
        return node


def rename_dynamic_import(tree: ast.Module) -> None:
    """Rewrite dynamic-import calls in tree, in place.

    Example:
        >>> tree = ast.parse("mod = await __import__('./x.py')")
        >>> rename_dynamic_import(tree)
        >>> ast.unparse(tree)
        "mod = await import_('./x.py')"
    """
    DynamicImportRewriter().visit(tree)
    ast.fix_missing_locations(tree)
