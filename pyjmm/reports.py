"""
Diagnostics produced by the compiler stages, and the internal error type.
"""

from dataclasses import dataclass
from enum import Enum


class CompileError(Exception):
    """Error during compilation."""
    pass


class ParseError(CompileError):
    """Syntax error in a Jmm source file."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(f"{line}:{column}: {message}")
        self.line = line
        self.column = column


class ReportType(Enum):
    """Severity of a report."""
    ERROR = "error"
    WARNING = "warning"
    LOG = "log"


class Stage(Enum):
    """Pipeline stage that produced a report."""
    SYNTACTIC = "syntactic"
    SEMANTIC = "semantic"
    OPTIMIZATION = "optimization"
    GENERATION = "generation"


@dataclass(frozen=True)
class Report:
    """A positioned diagnostic message."""
    type: ReportType
    stage: Stage
    line: int
    column: int
    message: str

    @classmethod
    def error(cls, stage: Stage, line: int, column: int, message: str) -> "Report":
        return cls(ReportType.ERROR, stage, line, column, message)

    @property
    def is_error(self) -> bool:
        return self.type is ReportType.ERROR

    def __str__(self) -> str:
        return f"{self.type.value}@{self.stage.value}, line {self.line}, col {self.column}: {self.message}"


def has_errors(reports) -> bool:
    """True if any report in the iterable is an error."""
    return any(report.is_error for report in reports)
