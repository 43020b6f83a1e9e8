"""Process-lifetime registry of loaded modules.

This module provides:
- ModuleRecord: A loaded module's path and export object
- ModuleRegistry: Mapping from absolute path to ModuleRecord
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from modloom_core.errors import ModuleAlreadyRegisteredError, ModuleNotLoadedError


@dataclass
class ModuleRecord:
    """A module's path and its export object.

    Executed module code sees its own record as ``module``; assigning
    ``module.exports`` replaces the object the load returns.

    Attributes:
        path: Absolute path (or bare name) identifying the module.
        exports: The module's export object.
    """

    path: str
    exports: Any


class ModuleRegistry:
    """Registry of fully loaded modules, keyed by absolute path.

    Records are never evicted. At most one record exists per path.
    Hosts can pre-seed the registry with objects that are not loaded from
    source, such as real Python modules addressed by bare name.

    Example:
        >>> import json
        >>> registry = ModuleRegistry({"json": json})
        >>> registry.get_exports("json") is json
        True
    """

    def __init__(self, preloaded: Mapping[str, Any] | None = None) -> None:
        self._records: dict[str, ModuleRecord] = {}
        for path, exports in (preloaded or {}).items():
            self.register(path, exports)

    def register(self, path: str, exports: Any) -> ModuleRecord:
        """Insert the record for a path that has finished loading.

        Raises:
            ModuleAlreadyRegisteredError: If path already has a record.
        """
        if path in self._records:
            raise ModuleAlreadyRegisteredError(path)
        record = ModuleRecord(path=path, exports=exports)
        self._records[path] = record
        return record

    def get_record(self, path: str) -> ModuleRecord:
        """Return the record for path.

        Raises:
            ModuleNotLoadedError: If path is not registered.
        """
        try:
            return self._records[path]
        except KeyError:
            raise ModuleNotLoadedError(path) from None

    def get_exports(self, path: str) -> Any:
        """Return the export object registered for path.

        Raises:
            ModuleNotLoadedError: If path is not registered.
        """
        return self.get_record(path).exports

    def __contains__(self, path: object) -> bool:
        return path in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"ModuleRegistry({len(self._records)} modules)"
