"""Module instantiation: execute transformed source in its own binding scope.

Executed code sees its own module namespace (``__name__``, ``__file__``) and,
layered over a private copy of the builtins, the loader bindings:

- ``exports``: the export object (the module namespace itself)
- ``require(spec)``: synchronous fetch of an already loaded module
- ``module``: ModuleRecord wrapping the exports
- ``__dirname__``: directory of the executing file
- ``import_(spec)``: asynchronous load through the full pipeline

Running a module is a trust boundary: its body may do anything the host
process can do.
"""

from __future__ import annotations

import builtins
import inspect
import linecache
import posixpath
import types
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from modloom_core.compiler.transformer import COMPILE_FLAGS
from modloom_core.registry import ModuleRecord

if TYPE_CHECKING:
    from modloom_core.config import LoaderConfig

LoadModule = Callable[[str, "LoaderConfig"], Awaitable[Any]]


async def instantiate_module(
    filename: str,
    source: str,
    config: LoaderConfig,
    load_module: LoadModule,
    *,
    line_map: list[int] | None = None,
) -> Any:
    """Execute transformed source once and return its export object.

    require() only sees modules already in the registry, so every static
    dependency must be loaded before this runs. import_() goes through
    load_module and can load anything.

    Args:
        filename: Absolute path of the module.
        source: Transformed source text.
        config: Loader configuration (resolver, registry).
        load_module: Loader used for dynamic imports.
        line_map: Optional generated-to-source line map. When given, an
            exception escaping the body gets a note naming the source line.

    Returns:
        The module's export object (``module.exports`` after execution).

    Raises:
        ModuleNotLoadedError: If the body requires an unregistered module.
    """
    resolve = config.resolve
    registry = config.module_registry

    def require(specifier: str) -> Any:
        return registry.get_exports(resolve(filename, specifier))

    async def import_(specifier: str) -> Any:
        return await load_module(resolve(filename, specifier), config)

    exports = types.ModuleType(_module_name(filename))
    exports.__file__ = filename
    module = ModuleRecord(path=filename, exports=exports)

    bindings = dict(vars(builtins))
    bindings.update(
        exports=exports,
        require=require,
        module=module,
        import_=import_,
        __dirname__=resolve(filename, "."),
    )
    namespace = vars(exports)
    namespace["__builtins__"] = bindings

    code = compile(source, filename, "exec", flags=COMPILE_FLAGS, dont_inherit=True)
    linecache.cache[filename] = (len(source), None, source.splitlines(keepends=True), filename)

    try:
        result = eval(code, namespace)
        if inspect.iscoroutine(result):
            await result
    except Exception as exc:
        if line_map:
            _note_source_line(exc, filename, line_map)
        raise

    return module.exports


def _module_name(filename: str) -> str:
    return posixpath.splitext(posixpath.basename(filename))[0] or filename


def _note_source_line(exc: Exception, filename: str, line_map: list[int]) -> None:
    generated_line = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == filename:
            generated_line = tb.tb_lineno
        tb = tb.tb_next

    if generated_line is None or generated_line > len(line_map):
        return
    source_line = line_map[generated_line - 1]
    if source_line:
        exc.add_note(f"{filename}: generated line {generated_line} comes from source line {source_line}")
