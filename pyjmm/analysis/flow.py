"""
Control-flow checks: return paths, unreachable code and void declarations.
"""

from ..ast import Kind, Node, method_locals, method_params, method_return_type_node, method_statements
from ..types import VOID, type_from_node
from .visitor import AnalysisPass


def completes(statement: Node) -> bool:
    """True if every path through ``statement`` ends in a return."""
    kind = statement.kind
    if kind == Kind.RETURN_STMT:
        return True
    if kind == Kind.BLOCK_STMT:
        return any(completes(c) for c in statement.children)
    if kind == Kind.IF_STMT:
        return len(statement.children) == 3 and completes(statement.child(1)) and completes(statement.child(2))
    return False


class ControlFlow(AnalysisPass):
    """Return statements, reachability and void declarations."""

    def build(self):
        self.add_visit(Kind.CLASS_DECL, self.visit_class)
        self.add_visit(Kind.METHOD_DECL, self.visit_method)
        self.add_visit(Kind.BLOCK_STMT, self.visit_block)
        self.add_visit(Kind.RETURN_STMT, self.visit_return)

    def visit_class(self, node: Node):
        for field_decl in node.children_of(Kind.VAR_DECL):
            if type_from_node(field_decl.child(0)) == VOID:
                self.error(field_decl, f"Field '{field_decl.get('name')}' cannot be void")

    def visit_method(self, node: Node):
        for variable in method_params(node) + method_locals(node):
            if type_from_node(variable.child(0)) == VOID:
                self.error(variable, f"Variable '{variable.get('name')}' cannot be void")

        statements = method_statements(node)
        self._check_reachability(statements)

        return_type = type_from_node(method_return_type_node(node))
        if return_type != VOID and not any(completes(s) for s in statements):
            self.error(node, f"Method '{node.get('name')}' is missing a return statement")

    def visit_block(self, node: Node):
        self._check_reachability(list(node.children))

    def _check_reachability(self, statements: list[Node]):
        for i, statement in enumerate(statements[:-1]):
            if statement.kind == Kind.RETURN_STMT:
                self.error(statements[i + 1], "Unreachable statement after return")
                return

    def visit_return(self, node: Node):
        method = self.current_method
        if method is None:
            return
        name = method.get("name")
        return_type = type_from_node(method_return_type_node(method))

        if return_type == VOID:
            if node.children:
                self.error(node, f"Void method '{name}' cannot return a value")
            return

        if not node.children:
            self.error(node, f"Method '{name}' must return a value of type '{return_type}'")
            return

        value_type = self.type_of(node.child(0))
        if not self.types.is_compatible(return_type, value_type):
            self.error(node, f"Method '{name}' returns '{value_type}', expected '{return_type}'")
