"""
Compilation pipeline: symbol table, validation, optimization, IR and Jasmin.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .analysis import validate
from .ast import Node
from .backend import generate_jasmin
from .config import CompilerConfig
from .ir import GenerationContext, IRGenerator, IRProgram
from .optimization import allocate_registers, fold_constants, normalize_varargs
from .parser import JmmParser
from .reports import CompileError, Report, Stage, has_errors
from .symboltable import SymbolTable, build_symbol_table

logger = logging.getLogger(__name__)


@dataclass
class CompilationResult:
    """Everything one compilation produced; later stages are None when an earlier one failed."""
    reports: list[Report] = field(default_factory=list)
    table: Optional[SymbolTable] = None
    ast: Optional[Node] = None
    ir: Optional[IRProgram] = None
    assembly: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.assembly is not None and not has_errors(self.reports)

    @property
    def errors(self) -> list[Report]:
        return [r for r in self.reports if r.is_error]


class Compiler:
    """Runs the pipeline with fresh per-compilation state on every call."""

    def __init__(self, config: Optional[CompilerConfig] = None):
        self.config = config if config is not None else CompilerConfig()

    def parse(self, source: str) -> Node:
        return JmmParser().parse(source)

    def analyze(self, root: Node) -> CompilationResult:
        """Build the symbol table and validate; stops at the first failing stage."""
        result = CompilationResult(ast=root)
        try:
            result.table = build_symbol_table(root)
        except CompileError as e:
            result.reports.append(Report.error(Stage.SEMANTIC, root.line, root.column, str(e)))
            return result

        result.reports.extend(validate(root, result.table))
        logger.debug("Semantic analysis: %d report(s)", len(result.reports))
        return result

    def optimize(self, root: Node, table: SymbolTable) -> Node:
        if self.config.optimize:
            logger.debug("Folding and propagating constants")
            root = fold_constants(root)
        return normalize_varargs(root, table)

    def compile(self, root: Node) -> CompilationResult:
        result = self.analyze(root)
        if result.table is None or has_errors(result.reports):
            return result

        result.ast = self.optimize(root, result.table)
        result.ir = IRGenerator(result.table, GenerationContext()).generate(result.ast)

        if self.config.allocate_registers:
            logger.debug("Allocating registers with budget %d", self.config.register_budget)
            result.reports.extend(allocate_registers(result.ir, self.config.register_budget))

        result.assembly = generate_jasmin(result.ir)
        return result

    def compile_source(self, source: str) -> CompilationResult:
        return self.compile(self.parse(source))


def compile_source(source: str, config: Optional[CompilerConfig] = None) -> CompilationResult:
    """Parse and compile ``source``; syntax errors raise ParseError."""
    return Compiler(config).compile_source(source)
