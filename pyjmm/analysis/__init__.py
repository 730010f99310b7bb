"""
Semantic analysis passes.
"""

import logging

from ..ast import Node
from ..reports import Report
from ..symboltable import SymbolTable
from .declarations import DuplicateDeclarations, VarargsDeclarations
from .flow import ControlFlow, completes
from .references import UndeclaredVariables, UndefinedMethods
from .typecheck import TypeChecks
from .visitor import AnalysisPass

logger = logging.getLogger(__name__)

PASSES = (
    DuplicateDeclarations,
    VarargsDeclarations,
    UndeclaredVariables,
    UndefinedMethods,
    TypeChecks,
    ControlFlow,
)


def validate(root: Node, table: SymbolTable) -> list[Report]:
    """Run every analysis pass and return all reports."""
    reports: list[Report] = []
    for pass_class in PASSES:
        found = pass_class(table).analyze(root)
        logger.debug("%s: %d report(s)", pass_class.__name__, len(found))
        reports.extend(found)
    return reports


__all__ = [
    'AnalysisPass',
    'ControlFlow',
    'DuplicateDeclarations',
    'PASSES',
    'TypeChecks',
    'UndeclaredVariables',
    'UndefinedMethods',
    'VarargsDeclarations',
    'completes',
    'validate',
]
