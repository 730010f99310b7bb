"""
Jmm type system.
"""

from dataclasses import dataclass
from typing import Optional

from .ast import Kind, Node
from .reports import CompileError


@dataclass(frozen=True)
class Type:
    """A Jmm type: a base name and whether it is an array of that base."""
    name: str
    is_array: bool = False

    @property
    def is_primitive(self) -> bool:
        return not self.is_array and self.name in PRIMITIVE_NAMES

    @property
    def is_reference(self) -> bool:
        return not self.is_primitive

    def element_type(self) -> "Type":
        if not self.is_array:
            raise CompileError(f"Type {self} is not an array")
        return Type(self.name)

    def array_of(self) -> "Type":
        return Type(self.name, True)

    def __str__(self) -> str:
        return f"{self.name}[]" if self.is_array else self.name


@dataclass(frozen=True)
class Symbol:
    """A named, typed entity: field, parameter or local variable."""
    name: str
    type: Type


INT = Type("int")
BOOLEAN = Type("boolean")
VOID = Type("void")
STRING = Type("String")
ANY = Type("any")
INT_ARRAY = Type("int", True)

PRIMITIVE_NAMES = frozenset({"int", "boolean", "void"})

ARITHMETIC_OPERATORS = frozenset({"+", "-", "*", "/"})
COMPARISON_OPERATORS = frozenset({"<", "<=", ">", ">=", "==", "!="})
LOGICAL_OPERATORS = frozenset({"&&", "||"})


def binary_operator_type(op: str) -> Type:
    """Result type of a binary operator."""
    if op in ARITHMETIC_OPERATORS:
        return INT
    if op in COMPARISON_OPERATORS or op in LOGICAL_OPERATORS:
        return BOOLEAN
    raise CompileError(f"Unknown binary operator: {op}")


def type_from_node(node: Node) -> Type:
    """Build a Type from a TYPE node; varargs parameters are arrays."""
    if node.kind != Kind.TYPE:
        raise CompileError(f"Expected a type node, got {node.kind.value}")
    is_array = bool(node.get_optional("is_array")) or bool(node.get_optional("is_varargs"))
    return Type(node.get("name"), is_array)


def is_assignable(target: Optional[Type], value: Optional[Type]) -> bool:
    """True if a value of type ``value`` may be stored where ``target`` is expected."""
    if target is None or value is None:
        return False
    if target == ANY or value == ANY:
        return True
    if target.is_array or value.is_array:
        return target.is_array and value.is_array and target.name == value.name
    return target.name == value.name
