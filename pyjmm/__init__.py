"""
pyjmm - Jmm to Jasmin compiler.
"""

from .ast import Kind, Node
from .compiler import CompilationResult, Compiler, compile_source
from .config import CompilerConfig
from .parser import JmmParser
from .reports import CompileError, ParseError, Report, ReportType, Stage
from .symboltable import SymbolTable, build_symbol_table

__version__ = "0.1.0"
__all__ = [
    'CompilationResult',
    'CompileError',
    'Compiler',
    'CompilerConfig',
    'JmmParser',
    'Kind',
    'Node',
    'ParseError',
    'Report',
    'ReportType',
    'SymbolTable',
    'Stage',
    'build_symbol_table',
    'compile_source',
]
