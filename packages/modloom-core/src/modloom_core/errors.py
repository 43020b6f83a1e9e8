"""Custom exception hierarchy for modloom-core.

This module defines the exception classes raised by the loader:
- ModloomError: Base exception for all loader errors
- ModuleNotLoadedError: Raised when require() targets an unregistered module
- ModuleAlreadyRegisteredError: Raised when a path is registered twice
- CircularDependencyError: Raised when a load would wait on itself
- SourceNotFoundError: Raised when a source provider has no text for a path

Parse failures are not wrapped: the original SyntaxError is re-raised after
its diagnostic has been logged. Cache store errors and dependency failures
propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

logger = structlog.get_logger(__name__)


class ModloomError(Exception):
    """Base exception for modloom.

    Args:
        user_message: Message safe to display to the user.
        internal_details: Optional technical details. Logged through structlog,
            never part of ``str(error)``.

    Example:
        >>> raise ModloomError(
        ...     "Module load failed",
        ...     internal_details="resolver returned /srv/app/missing.py",
        ... )
    """

    def __init__(
        self,
        user_message: str,
        *,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message)
        self.user_message = user_message

        if internal_details:
            logger.error(
                "modloom_error",
                error_type=self.__class__.__name__,
                user_message=user_message,
                internal_details=internal_details,
            )


class ModuleNotLoadedError(ModloomError, LookupError):
    """Raised when a synchronous require() targets a module not in the registry.

    require() only sees modules that finished loading. Hitting this error means
    a dependency was not declared statically (so it was never loaded before the
    dependent body ran), not that the lookup should be retried.

    Attributes:
        path: The resolved absolute path that was looked up.

    Example:
        >>> raise ModuleNotLoadedError("/app/lib/util.py")
        # User sees: "/app/lib/util.py not found in module registry"
    """

    def __init__(self, path: str, *, internal_details: str | None = None) -> None:
        super().__init__(
            f"{path} not found in module registry",
            internal_details=internal_details,
        )
        self.path = path


class ModuleAlreadyRegisteredError(ModloomError):
    """Raised when a second module record is registered for the same path.

    Attributes:
        path: The path that already has a record.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"Module already registered: {path}")
        self.path = path


class CircularDependencyError(ModloomError):
    """Raised when loading a module would wait on its own completion.

    Static dependencies must be fully loaded before a body runs, so a static
    cycle can never complete. The loader raises instead of waiting forever.

    Attributes:
        cycle: The paths forming the cycle, first path repeated at the end.

    Example:
        >>> raise CircularDependencyError(["/a.py", "/b.py", "/a.py"])
        # User sees: "Circular module dependency: /a.py -> /b.py -> /a.py"
    """

    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(f"Circular module dependency: {' -> '.join(self.cycle)}")


class SourceNotFoundError(ModloomError):
    """Raised when a source provider has no source text for a path.

    Attributes:
        path: The path that was requested.
    """

    def __init__(self, path: str, *, internal_details: str | None = None) -> None:
        super().__init__(f"Module source not found: {path}", internal_details=internal_details)
        self.path = path
