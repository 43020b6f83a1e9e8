"""Shared pytest fixtures for modloom-core tests.

This module provides common fixtures used across unit, integration,
and contract tests.
"""

from __future__ import annotations

import sys
from typing import Any

import pytest
import structlog

from modloom_core.cache import MemoryCache
from modloom_core.config import LoaderConfig
from modloom_core.registry import ModuleRegistry


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    Without this, structlog may use different processors depending on
    test execution order.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


class CountingCache(MemoryCache):
    """MemoryCache that counts store reads and writes."""

    def __init__(self) -> None:
        super().__init__()
        self.gets = 0
        self.sets = 0

    async def get(self, key: str) -> str | None:
        self.gets += 1
        return await super().get(key)

    async def set(self, key: str, value: str) -> None:
        self.sets += 1
        await super().set(key, value)


class RecordingSink:
    """LogSink that keeps every call as a (level, values) tuple."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def __call__(self, level: str, *values: Any) -> None:
        self.calls.append((level, values))

    def levels(self) -> list[str]:
        return [level for level, _ in self.calls]


@pytest.fixture
def counting_cache() -> CountingCache:
    """Return an empty cache that counts get/set calls."""
    return CountingCache()


@pytest.fixture
def recording_sink() -> RecordingSink:
    """Return a log sink recording every message."""
    return RecordingSink()


@pytest.fixture
def registry() -> ModuleRegistry:
    """Return an empty module registry."""
    return ModuleRegistry()


@pytest.fixture
def loader_config(
    registry: ModuleRegistry,
    counting_cache: CountingCache,
    recording_sink: RecordingSink,
) -> LoaderConfig:
    """Return a config with a fresh registry, counting cache and recording sink."""
    return LoaderConfig(
        module_registry=registry,
        compiled_cache=counting_cache,
        log=recording_sink,
        version="test",
        source_maps=False,
    )
