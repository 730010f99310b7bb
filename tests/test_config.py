"""Tests for compiler configuration."""

import pytest

from pyjmm import compile_source
from pyjmm.config import UNCONSTRAINED, CompilerConfig


class TestCompilerConfig:
    def test_defaults(self):
        config = CompilerConfig()
        assert config.optimize is False
        assert config.register_budget == UNCONSTRAINED
        assert not config.allocate_registers

    def test_zero_budget_allocates(self):
        assert CompilerConfig(register_budget=0).allocate_registers

    def test_invalid_budget(self):
        with pytest.raises(ValueError, match="Invalid register budget: -2"):
            CompilerConfig(register_budget=-2)


class TestFromMapping:
    def test_string_options(self):
        config = CompilerConfig.from_mapping({"optimize": "true", "registerAllocation": "3"})
        assert config.optimize is True
        assert config.register_budget == 3
        assert config.allocate_registers

    def test_empty_mapping(self):
        assert CompilerConfig.from_mapping({}) == CompilerConfig()

    def test_optimize_is_case_insensitive(self):
        assert CompilerConfig.from_mapping({"optimize": " TRUE "}).optimize is True
        assert CompilerConfig.from_mapping({"optimize": "yes"}).optimize is False

    def test_non_numeric_budget(self):
        with pytest.raises(ValueError, match="Invalid register budget: many"):
            CompilerConfig.from_mapping({"registerAllocation": "many"})

    def test_config_reaches_the_pipeline(self):
        source = "class T { public int f() { int x = 2 + 3; return x; } }"
        config = CompilerConfig.from_mapping({"optimize": "true"})
        result = compile_source(source, config)
        assert result.succeeded
        assert "ret.i32 5.i32;" in result.ir.to_text()
