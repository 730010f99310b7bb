"""
Type checks for conditions, operators, arrays and assignments.
"""

from ..ast import Kind, Node
from ..types import (
    ANY,
    ARITHMETIC_OPERATORS,
    BOOLEAN,
    INT,
    LOGICAL_OPERATORS,
    Type,
)
from .visitor import AnalysisPass

ORDERING_OPERATORS = frozenset({"<", "<=", ">", ">="})


class TypeChecks(AnalysisPass):
    """Checks that every operation is applied to values of the right type."""

    def build(self):
        self.add_visit(Kind.IF_STMT, self.visit_condition)
        self.add_visit(Kind.WHILE_STMT, self.visit_condition)
        self.add_visit(Kind.BINARY_EXPR, self.visit_binary)
        self.add_visit(Kind.UNARY_EXPR, self.visit_unary)
        self.add_visit(Kind.ARRAY_ACCESS_EXPR, self.visit_array_access)
        self.add_visit(Kind.ARRAY_EXPR, self.visit_array_literal)
        self.add_visit(Kind.NEW_ARRAY_EXPR, self.visit_new_array)
        self.add_visit(Kind.LENGTH_EXPR, self.visit_length)
        self.add_visit(Kind.ASSIGN_STMT, self.visit_assign)
        self.add_visit(Kind.ARRAY_ASSIGN_STMT, self.visit_array_assign)

    def _expect(self, expr: Node, expected: Type, what: str):
        actual = self.type_of(expr)
        if not self.types.is_assignable(expected, actual):
            self.error(expr, f"{what} must be of type '{expected}', found '{actual}'")

    def visit_condition(self, node: Node):
        statement = "if" if node.kind == Kind.IF_STMT else "while"
        self._expect(node.child(0), BOOLEAN, f"Condition of {statement} statement")

    def visit_binary(self, node: Node):
        op = node.get("op")
        left, right = node.child(0), node.child(1)
        left_type, right_type = self.type_of(left), self.type_of(right)

        if not (self.types.is_assignable(left_type, right_type) and self.types.is_assignable(right_type, left_type)):
            self.error(node, f"Incompatible operands for '{op}': '{left_type}' and '{right_type}'")
            return

        if op in ARITHMETIC_OPERATORS or op in ORDERING_OPERATORS:
            self._expect(left, INT, f"Operand of '{op}'")
            self._expect(right, INT, f"Operand of '{op}'")
        elif op in LOGICAL_OPERATORS:
            self._expect(left, BOOLEAN, f"Operand of '{op}'")
            self._expect(right, BOOLEAN, f"Operand of '{op}'")

    def visit_unary(self, node: Node):
        self._expect(node.child(0), BOOLEAN, f"Operand of '{node.get('op')}'")

    def _expect_array(self, expr: Node, what: str) -> Type:
        array_type = self.type_of(expr)
        if array_type != ANY and not array_type.is_array:
            self.error(expr, f"{what} requires an array, found '{array_type}'")
        return array_type

    def visit_array_access(self, node: Node):
        self._expect_array(node.child(0), "Indexing")
        self._expect(node.child(1), INT, "Array index")

    def visit_array_literal(self, node: Node):
        if not node.children:
            return
        element_type = Type(self.type_of(node).name)
        for element in node.children:
            element_value = self.type_of(element)
            if not self.types.is_assignable(element_type, element_value):
                self.error(element, f"Array element of type '{element_value}' does not match '{element_type}'")

    def visit_new_array(self, node: Node):
        self._expect(node.child(0), INT, "Array size")

    def visit_length(self, node: Node):
        self._expect_array(node.child(0), "'length'")

    def visit_assign(self, node: Node):
        target, value = node.child(0), node.child(1)
        target_type = self.type_of(target)

        if value.kind == Kind.ARRAY_EXPR and target_type.is_array:
            element_type = Type(target_type.name)
            for element in value.children:
                element_value = self.type_of(element)
                if not self.types.is_assignable(element_type, element_value):
                    self.error(element, f"Cannot assign element of type '{element_value}' to '{target_type}'")
            return

        value_type = self.type_of(value)
        if not self.types.is_compatible(target_type, value_type):
            self.error(node, f"Cannot assign '{value_type}' to '{target.get('name')}' of type '{target_type}'")

    def visit_array_assign(self, node: Node):
        array, index, value = node.children
        array_type = self._expect_array(array, "Indexed assignment")
        self._expect(index, INT, "Array index")
        if array_type.is_array:
            self._expect(value, Type(array_type.name), "Assigned array element")
