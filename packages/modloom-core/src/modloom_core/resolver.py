"""Default path resolver for module specifiers.

Specifier forms:
- Path-like (contains "/"): "./util.py", "../lib/x.py", "/srv/app/y.py"
- Dotted relative: ".util", "..lib.x", "." (the importing file's directory)
- Bare: "json", "app.settings" (returned unchanged, for host-registered modules)
"""

from __future__ import annotations

import posixpath
from collections.abc import Callable

PathResolver = Callable[[str, str], str]

# Suffix appended to dotted relative specifiers
SOURCE_SUFFIX = ".py"


def resolve_specifier(from_filename: str, specifier: str) -> str:
    """Resolve a specifier against the file that references it.

    Args:
        from_filename: Absolute path of the importing file.
        specifier: Specifier as written in the source.

    Returns:
        Absolute path for path-like and relative specifiers; the specifier
        itself for bare names.

    Example:
        >>> resolve_specifier("/app/pkg/main.py", ".util")
        '/app/pkg/util.py'
        >>> resolve_specifier("/app/pkg/main.py", "..lib.strings")
        '/app/lib/strings.py'
        >>> resolve_specifier("/app/pkg/main.py", "./data/x.py")
        '/app/pkg/data/x.py'
        >>> resolve_specifier("/app/pkg/main.py", "json")
        'json'
    """
    base = posixpath.dirname(from_filename)

    if "/" in specifier:
        return posixpath.normpath(posixpath.join(base, specifier))

    if not specifier.startswith("."):
        return specifier

    remainder = specifier.lstrip(".")
    level = len(specifier) - len(remainder)
    for _ in range(level - 1):
        base = posixpath.dirname(base)

    if not remainder:
        return base or "/"

    return posixpath.join(base, *remainder.split(".")) + SOURCE_SUFFIX
