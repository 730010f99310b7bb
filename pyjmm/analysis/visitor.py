"""
Base class for semantic analysis passes.
"""

from typing import Callable, Optional

from ..ast import Kind, Node, ParentIndex
from ..reports import Report, Stage
from ..symboltable import SymbolTable
from ..typeutils import TypeUtils
from ..types import Type


class AnalysisPass:
    """A read-only walk over the AST that collects reports.

    Subclasses register handlers for the kinds they check in ``build``.
    Every node is visited in pre-order; the enclosing method of each
    handled node is looked up in a parent index so handlers can resolve
    names.
    """

    def __init__(self, table: SymbolTable):
        self.table = table
        self.types = TypeUtils(table)
        self.reports: list[Report] = []
        self.current_method: Optional[Node] = None
        self.parents: Optional[ParentIndex] = None
        self._handlers: dict[Kind, Callable[[Node], None]] = {}
        self.build()

    def build(self):
        """Register handlers with ``add_visit``."""
        raise NotImplementedError

    def add_visit(self, kind: Kind, handler: Callable[[Node], None]):
        self._handlers[kind] = handler

    def analyze(self, root: Node) -> list[Report]:
        self.parents = ParentIndex(root)
        for node in [root, *root.descendants()]:
            handler = self._handlers.get(node.kind)
            if handler is not None:
                self.current_method = self.enclosing_method(node)
                handler(node)
        self.current_method = None
        return self.reports

    def enclosing_method(self, node: Node) -> Optional[Node]:
        """The method declaration ``node`` belongs to; a method belongs to itself."""
        if node.kind == Kind.METHOD_DECL:
            return node
        return self.parents.enclosing_method(node)

    @property
    def method_name(self) -> Optional[str]:
        return self.current_method.get("name") if self.current_method is not None else None

    @property
    def in_static_method(self) -> bool:
        return self.current_method is not None and bool(self.current_method.get_optional("is_static"))

    def type_of(self, expr: Node) -> Type:
        return self.types.get_expr_type(expr, self.method_name)

    def error(self, node: Node, message: str):
        self.reports.append(Report.error(Stage.SEMANTIC, node.line, node.column, message))
