"""
Expression type resolution against a symbol table.
"""

from typing import Optional

from .ast import Kind, Node
from .reports import CompileError
from .symboltable import SymbolTable
from .types import ANY, BOOLEAN, INT, Type, binary_operator_type, is_assignable


class TypeUtils:
    """Computes static types of expressions inside a class."""

    def __init__(self, table: SymbolTable):
        self.table = table

    def resolve_variable(self, name: str, method: Optional[str]) -> Optional[Type]:
        """Field, then parameter, then local of ``method``; None if unresolved."""
        symbol = self.table.get_field(name)
        if symbol is None:
            symbol = self.table.get_parameter(method, name)
        if symbol is None:
            symbol = self.table.get_local(method, name)
        return symbol.type if symbol is not None else None

    def get_expr_type(self, expr: Node, method: Optional[str]) -> Type:
        """Static type of an expression appearing in ``method``."""
        kind = expr.kind

        if kind == Kind.BINARY_EXPR:
            return binary_operator_type(expr.get("op"))

        elif kind == Kind.UNARY_EXPR:
            return BOOLEAN

        elif kind == Kind.PAREN_EXPR:
            return self.get_expr_type(expr.child(0), method)

        elif kind == Kind.VAR_REF_EXPR:
            resolved = self.resolve_variable(expr.get("name"), method)
            return resolved if resolved is not None else ANY

        elif kind == Kind.INTEGER_LITERAL:
            return INT

        elif kind == Kind.BOOLEAN_LITERAL:
            return BOOLEAN

        elif kind == Kind.THIS_EXPR:
            return Type(self.table.class_name)

        elif kind == Kind.NEW_EXPR:
            return Type(expr.get("name"))

        elif kind == Kind.NEW_ARRAY_EXPR:
            return Type(expr.get("name"), True)

        elif kind == Kind.ARRAY_EXPR:
            return self.array_literal_type(expr, method)

        elif kind == Kind.ARRAY_ACCESS_EXPR:
            array_type = self.get_expr_type(expr.child(0), method)
            if array_type == ANY:
                return ANY
            return Type(array_type.name)

        elif kind == Kind.LENGTH_EXPR:
            return INT

        elif kind == Kind.FUNC_EXPR:
            return self.call_return_type(expr, method)

        raise CompileError(f"Unsupported expression type: {kind.value}")

    def array_literal_type(self, expr: Node, method: Optional[str]) -> Type:
        element_type = expr.get_optional("element_type")
        if element_type is not None:
            return Type(element_type, True)
        if expr.children:
            return Type(self.get_expr_type(expr.child(0), method).name, True)
        return Type(INT.name, True)

    def call_return_type(self, call: Node, method: Optional[str]) -> Type:
        name = call.get("name")
        if self.table.has_method(name) and self.is_local_receiver(call.child(0), method):
            return self.table.get_return_type(name)
        if name == "length" and len(call.children) == 1:
            return INT
        return ANY

    def is_local_receiver(self, receiver: Node, method: Optional[str]) -> bool:
        """True if calls on ``receiver`` target methods of the current class."""
        if receiver.kind == Kind.THIS_EXPR:
            return True
        receiver_type = self.get_expr_type(receiver, method)
        return not receiver_type.is_array and receiver_type.name == self.table.class_name

    def is_assignable(self, target: Optional[Type], value: Optional[Type]) -> bool:
        return is_assignable(target, value)

    def is_compatible(self, target: Optional[Type], value: Optional[Type]) -> bool:
        """Assignability, extended so the class may stand in for its superclass."""
        if self.is_assignable(target, value):
            return True
        return (
            target is not None
            and value is not None
            and not target.is_array
            and not value.is_array
            and value.name == self.table.class_name
            and target.name == self.table.super_class
        )
