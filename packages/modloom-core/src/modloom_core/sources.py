"""Source providers: where ModuleLoader gets raw source text.

This module provides:
- ModuleSource: Source text plus the parse mode to use for it
- SourceProvider: Protocol for async source lookup
- MemorySourceProvider: Sources held in a dict
- FileSystemSourceProvider: Sources read from disk off the event loop
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from modloom_core.errors import SourceNotFoundError


class ModuleSource(BaseModel):
    """Raw source for one module.

    Attributes:
        text: Source text.
        module_mode: Treat import statements as loader dependencies. False
            parses as a plain script whose imports go to the host interpreter.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    text: str = Field(..., description="Source text")
    module_mode: bool = Field(default=True, description="Parse imports as loader dependencies")


@runtime_checkable
class SourceProvider(Protocol):
    """Async lookup of module source by resolved path."""

    async def get_source(self, path: str) -> ModuleSource:
        """Return the source for path.

        Raises:
            SourceNotFoundError: If there is no source for path.
        """
        ...


class MemorySourceProvider:
    """Serve sources from an in-memory mapping.

    Values may be plain text (module mode) or ModuleSource instances.

    Example:
        >>> sources = MemorySourceProvider({
        ...     "/app/main.py": "from .util import greet\\nmessage = greet()",
        ...     "/app/util.py": "def greet():\\n    return 'hi'",
        ...     "/app/legacy.py": ModuleSource(text="import os", module_mode=False),
        ... })
    """

    def __init__(self, files: Mapping[str, str | ModuleSource]) -> None:
        self.files = dict(files)

    async def get_source(self, path: str) -> ModuleSource:
        try:
            entry = self.files[path]
        except KeyError:
            raise SourceNotFoundError(path) from None
        if isinstance(entry, ModuleSource):
            return entry
        return ModuleSource(text=entry)


class FileSystemSourceProvider:
    """Read sources from the filesystem.

    Reads run in a worker thread so the event loop keeps serving other loads.

    Args:
        module_mode: Parse mode applied to every file read.
        encoding: Text encoding of source files.
    """

    def __init__(self, *, module_mode: bool = True, encoding: str = "utf-8") -> None:
        self.module_mode = module_mode
        self.encoding = encoding

    async def get_source(self, path: str) -> ModuleSource:
        file_path = Path(path)
        try:
            text = await asyncio.to_thread(file_path.read_text, encoding=self.encoding)
        except FileNotFoundError as exc:
            raise SourceNotFoundError(path, internal_details=str(exc)) from exc
        return ModuleSource(text=text, module_mode=self.module_mode)
