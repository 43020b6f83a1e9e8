"""Concurrent loading of a module's declared dependencies."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modloom_core.config import LoaderConfig
    from modloom_core.runtime.instantiate import LoadModule


async def load_dependencies(
    filename: str,
    specifiers: Sequence[str],
    config: LoaderConfig,
    load_module: LoadModule,
) -> None:
    """Load every specifier a module declared, concurrently.

    Each specifier is resolved against filename and handed to load_module.
    All loads are started at once and awaited together; there is no ordering
    between independent subtrees. The first failure propagates and fails the
    dependent module.
    """
    resolve = config.resolve
    await asyncio.gather(*(load_module(resolve(filename, specifier), config) for specifier in specifiers))
