"""Unit tests for transform_source()."""

from __future__ import annotations

import ast
import asyncio
import warnings
from typing import TYPE_CHECKING

import pytest

from modloom_core.compiler.models import CompiledArtifact, TransformResult
from modloom_core.compiler.transformer import build_line_map, transform_source
from modloom_core.config import LoaderConfig
from modloom_core.registry import ModuleRegistry

if TYPE_CHECKING:
    from conftest import RecordingSink


class DoubleIntegers(ast.NodeTransformer):
    """Pass doubling every integer literal."""

    def visit_Constant(self, node: ast.Constant) -> ast.Constant:
        if isinstance(node.value, int) and not isinstance(node.value, bool):
            return ast.copy_location(ast.Constant(value=node.value * 2), node)
        return node


class TestTransformSource:
    """Tests for the compile half of the pipeline."""

    @pytest.mark.asyncio
    async def test_module_mode(self, loader_config: LoaderConfig) -> None:
        """Module mode should collect and lower imports."""
        source = "import a\nfrom .b import c\nx = require('d')"

        result = await transform_source(source, True, "/app/main.py", loader_config)

        assert result.dependency_specifiers == ["a", ".b", "d"]
        assert result.transformed_source == (
            "a = require('a')\nc = require('.b').c\nx = require('d')"
        )
        assert result.warnings == []
        assert result.line_map is None

    @pytest.mark.asyncio
    async def test_script_mode_leaves_imports(self, loader_config: LoaderConfig) -> None:
        """Script mode should leave imports to the host interpreter."""
        source = "import os\nx = require('d')"

        result = await transform_source(source, False, "/app/main.py", loader_config)

        assert result.dependency_specifiers == ["d"]
        assert result.transformed_source == "import os\nx = require('d')"

    @pytest.mark.parametrize("module_mode", [True, False])
    @pytest.mark.asyncio
    async def test_dynamic_import_rewritten(
        self, loader_config: LoaderConfig, module_mode: bool
    ) -> None:
        """Dynamic imports should be renamed in both modes and not declared."""
        result = await transform_source(
            "m = await __import__('./x.py')", module_mode, "/app/main.py", loader_config
        )

        assert result.dependency_specifiers == []
        assert result.transformed_source == "m = await import_('./x.py')"

    @pytest.mark.asyncio
    async def test_empty_source(self, loader_config: LoaderConfig) -> None:
        """Empty source should compile to empty output."""
        result = await transform_source("", True, "/app/empty.py", loader_config)

        assert result.dependency_specifiers == []
        assert result.transformed_source == ""

    @pytest.mark.asyncio
    async def test_parse_error_reported_and_reraised(
        self, loader_config: LoaderConfig, recording_sink: RecordingSink
    ) -> None:
        """Unparseable source should log a framed diagnostic and re-raise."""
        with pytest.raises(SyntaxError):
            await transform_source("x = 1\ny = (", True, "/app/bad.py", loader_config)

        [(level, values)] = recording_sink.calls
        assert level == "error"
        assert values[0] == "parse script"
        assert values[1].startswith("\n/app/bad.py\n")
        assert "^" in values[1]

    @pytest.mark.asyncio
    async def test_lowering_error_reported(
        self, loader_config: LoaderConfig, recording_sink: RecordingSink
    ) -> None:
        """Imports that cannot be lowered should be reported as a transform failure."""
        with pytest.raises(SyntaxError, match="needs an alias"):
            await transform_source("import os.path", True, "/app/bad.py", loader_config)

        assert recording_sink.calls[0][0] == "error"
        assert recording_sink.calls[0][1][0] == "transform script"
        assert "> 1 | import os.path" in recording_sink.calls[0][1][1]

    @pytest.mark.asyncio
    async def test_errors_without_sink(self, registry: ModuleRegistry) -> None:
        """Without a sink, syntax errors should still propagate."""
        config = LoaderConfig(module_registry=registry, version="test")

        with pytest.raises(SyntaxError):
            await transform_source("def", True, "/app/bad.py", config)

    @pytest.mark.asyncio
    async def test_top_level_await_allowed(self, loader_config: LoaderConfig) -> None:
        """Module bodies may await at top level."""
        source = "import asyncio\nawait asyncio.sleep(0)"

        result = await transform_source(source, True, "/app/main.py", loader_config)

        assert result.transformed_source == "asyncio = require('asyncio')\nawait asyncio.sleep(0)"

    @pytest.mark.asyncio
    async def test_compiler_warnings_collected(
        self, loader_config: LoaderConfig, recording_sink: RecordingSink
    ) -> None:
        """Compiler warnings should be returned and sent to the sink."""
        result = await transform_source("x = 1\ny = x is 1", True, "/app/w.py", loader_config)

        assert any("SyntaxWarning" in warning for warning in result.warnings)
        assert "warn" in recording_sink.levels()
        warn_values = [values for level, values in recording_sink.calls if level == "warn"]
        assert warn_values[0][0] == "parse script"


class TestAdditionalPasses:
    """Tests for configured syntax passes."""

    @pytest.mark.asyncio
    async def test_node_transformer_pass(self, registry: ModuleRegistry) -> None:
        """NodeTransformer passes should be applied."""
        config = LoaderConfig(module_registry=registry, additional_passes=(DoubleIntegers(),))

        result = await transform_source("x = 21", True, "/app/m.py", config)

        assert result.transformed_source == "x = 42"

    @pytest.mark.asyncio
    async def test_passes_run_after_lowering_in_order(self, registry: ModuleRegistry) -> None:
        """Passes should see lowered imports and run in configured order."""
        seen: list[str] = []

        def first(tree: ast.Module) -> None:
            seen.append("first")
            assert not any(isinstance(node, ast.Import) for node in ast.walk(tree))

        async def second(tree: ast.Module) -> ast.Module:
            seen.append("second")
            return tree

        config = LoaderConfig(module_registry=registry, additional_passes=(first, second))

        result = await transform_source("import a", True, "/app/m.py", config)

        assert seen == ["first", "second"]
        assert result.transformed_source == "a = require('a')"

    @pytest.mark.asyncio
    async def test_invalid_pass_output_reported(
        self, registry: ModuleRegistry, recording_sink: RecordingSink
    ) -> None:
        """A pass producing uncompilable code should fail as a transform error."""

        def add_module_return(tree: ast.Module) -> ast.Module:
            tree.body.append(ast.Return(value=None))
            return tree

        config = LoaderConfig(
            module_registry=registry,
            log=recording_sink,
            additional_passes=(add_module_return,),
        )

        with pytest.raises(SyntaxError):
            await transform_source("x = 1", True, "/app/m.py", config)

        assert recording_sink.calls[0][1][0] == "transform script"


class TestConcurrentTransforms:
    """Tests for transforms interleaving on one event loop."""

    @pytest.mark.asyncio
    async def test_each_transform_keeps_its_own_warnings(self, registry: ModuleRegistry) -> None:
        """Warnings should stay with their file when passes yield to the loop."""

        async def yielding_pass(tree: ast.Module) -> None:
            await asyncio.sleep(0)

        config = LoaderConfig(module_registry=registry, additional_passes=(yielding_pass,))
        filters_before = list(warnings.filters)

        escape, literal_is = await asyncio.gather(
            transform_source("x = '\\d'", True, "/app/a.py", config),
            transform_source("x = 1 is 1", True, "/app/b.py", config),
        )

        assert any("invalid escape sequence" in w for w in escape.warnings)
        assert not any("is\" with" in w for w in escape.warnings)
        assert any("is\" with" in w for w in literal_is.warnings)
        assert not any("invalid escape sequence" in w for w in literal_is.warnings)
        assert warnings.filters == filters_before

    @pytest.mark.asyncio
    async def test_all_concurrent_transforms_report_warnings(self, registry: ModuleRegistry) -> None:
        """Every file compiled concurrently should report its own warnings."""

        async def yielding_pass(tree: ast.Module) -> None:
            await asyncio.sleep(0)

        config = LoaderConfig(module_registry=registry, additional_passes=(yielding_pass,))

        results = await asyncio.gather(
            *(transform_source(f"v{i} = {i} is 1", True, f"/app/m{i}.py", config) for i in range(4))
        )

        assert all(result.warnings for result in results)


class TestLineMap:
    """Tests for generated-to-source line maps."""

    @pytest.mark.asyncio
    async def test_line_map_follows_lowering(self, registry: ModuleRegistry) -> None:
        """Each generated line should point back at its source line."""
        config = LoaderConfig(module_registry=registry, source_maps=True)

        result = await transform_source("\n\nimport a\n\nx = 1", True, "/app/m.py", config)

        assert result.transformed_source == "a = require('a')\nx = 1"
        assert result.line_map == [3, 5]

    def test_build_line_map_for_compound_statement(self) -> None:
        """Nested statements should map to their own source lines."""
        tree = ast.parse("def f():\n\n    return 1\n")
        generated = ast.unparse(tree)

        assert build_line_map(tree, generated) == [1, 3]


class TestTransformResult:
    """Tests for TransformResult.to_artifact()."""

    def test_to_artifact_drops_warnings(self) -> None:
        """Warnings are per-run data and should not be cached."""
        result = TransformResult(
            dependency_specifiers=["a"],
            transformed_source="a = require('a')",
            line_map=[1],
            warnings=["w"],
        )

        assert result.to_artifact() == CompiledArtifact(
            dependency_specifiers=["a"],
            transformed_source="a = require('a')",
            line_map=[1],
        )
