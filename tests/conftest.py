"""Shared fixtures for the pyjmm test suite."""

import pytest

from pyjmm.compiler import Compiler
from pyjmm.config import CompilerConfig
from pyjmm.parser import JmmParser
from pyjmm.symboltable import build_symbol_table


@pytest.fixture(scope="session")
def parser():
    return JmmParser()


@pytest.fixture
def parse(parser):
    return parser.parse


@pytest.fixture
def table_for(parser):
    def build(source):
        return build_symbol_table(parser.parse(source))
    return build


@pytest.fixture
def compile_jmm():
    """Compile source with the given options and return the CompilationResult."""
    def run(source, optimize=False, registers=-1):
        config = CompilerConfig(optimize=optimize, register_budget=registers)
        return Compiler(config).compile_source(source)
    return run
