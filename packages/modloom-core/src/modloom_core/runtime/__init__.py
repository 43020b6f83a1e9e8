"""Runtime module for modloom-core.

This module exports the load half of the pipeline:
- create_module: Compile (cached), load dependencies, instantiate one file
- load_dependencies: Concurrently load a module's declared dependencies
- instantiate_module: Execute transformed source in its binding scope
- ModuleLoader: LoadModule implementation with registry, de-duplication
  and cycle detection
"""

from __future__ import annotations

from modloom_core.runtime.dependencies import load_dependencies
from modloom_core.runtime.instantiate import LoadModule, instantiate_module
from modloom_core.runtime.loader import ModuleLoader
from modloom_core.runtime.orchestrator import create_module

__all__: list[str] = [
    "create_module",
    "load_dependencies",
    "instantiate_module",
    "LoadModule",
    "ModuleLoader",
]
