"""
Immutable AST representation for Jmm.
Every node is a frozen dataclass tagged with a Kind; transformations
build new trees instead of mutating nodes in place.
"""

import dataclasses
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from .reports import CompileError


class Kind(Enum):
    """Closed set of node kinds."""
    PROGRAM = "Program"
    IMPORT_DECL = "ImportDecl"
    CLASS_DECL = "ClassDecl"
    VAR_DECL = "VarDecl"
    METHOD_DECL = "MethodDecl"
    PARAM = "Param"
    TYPE = "Type"

    BLOCK_STMT = "BlockStmt"
    EXPR_STMT = "ExprStmt"
    IF_STMT = "IfStmt"
    WHILE_STMT = "WhileStmt"
    ASSIGN_STMT = "AssignStmt"
    ARRAY_ASSIGN_STMT = "ArrayAssignStmt"
    RETURN_STMT = "ReturnStmt"

    BINARY_EXPR = "BinaryExpr"
    UNARY_EXPR = "UnaryExpr"
    PAREN_EXPR = "ParenExpr"
    VAR_REF_EXPR = "VarRefExpr"
    INTEGER_LITERAL = "IntegerLiteral"
    BOOLEAN_LITERAL = "BooleanLiteral"
    THIS_EXPR = "ThisExpr"
    NEW_EXPR = "NewExpr"
    NEW_ARRAY_EXPR = "NewArrayExpr"
    ARRAY_EXPR = "ArrayExpr"
    ARRAY_ACCESS_EXPR = "ArrayAccessExpr"
    LENGTH_EXPR = "LengthExpr"
    FUNC_EXPR = "FuncExpr"

    @property
    def is_statement(self) -> bool:
        return self in STATEMENT_KINDS

    @property
    def is_expression(self) -> bool:
        return self in EXPRESSION_KINDS


STATEMENT_KINDS = frozenset({
    Kind.BLOCK_STMT,
    Kind.EXPR_STMT,
    Kind.IF_STMT,
    Kind.WHILE_STMT,
    Kind.ASSIGN_STMT,
    Kind.ARRAY_ASSIGN_STMT,
    Kind.RETURN_STMT,
})

EXPRESSION_KINDS = frozenset({
    Kind.BINARY_EXPR,
    Kind.UNARY_EXPR,
    Kind.PAREN_EXPR,
    Kind.VAR_REF_EXPR,
    Kind.INTEGER_LITERAL,
    Kind.BOOLEAN_LITERAL,
    Kind.THIS_EXPR,
    Kind.NEW_EXPR,
    Kind.NEW_ARRAY_EXPR,
    Kind.ARRAY_EXPR,
    Kind.ARRAY_ACCESS_EXPR,
    Kind.LENGTH_EXPR,
    Kind.FUNC_EXPR,
})


@dataclass(frozen=True)
class Node:
    """A node of the Jmm syntax tree.

    ``attributes`` must be treated as read-only; use ``with_attributes``
    to derive a changed node. Positions do not take part in equality so
    that trees can be compared structurally.
    """
    kind: Kind
    children: tuple["Node", ...] = ()
    attributes: dict = field(default_factory=dict)
    line: int = field(default=0, compare=False)
    column: int = field(default=0, compare=False)

    def get(self, key: str) -> Any:
        """Return a required attribute."""
        try:
            return self.attributes[key]
        except KeyError:
            raise CompileError(f"{self.kind.value} node has no attribute '{key}'") from None

    def get_optional(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def has(self, key: str) -> bool:
        return key in self.attributes

    def child(self, index: int) -> "Node":
        try:
            return self.children[index]
        except IndexError:
            raise CompileError(f"{self.kind.value} node has no child {index}") from None

    def children_of(self, *kinds: Kind) -> list["Node"]:
        return [c for c in self.children if c.kind in kinds]

    def descendants(self, *kinds: Kind) -> Iterator["Node"]:
        """Yield all nodes below this one in pre-order, optionally filtered by kind."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if not kinds or node.kind in kinds:
                yield node
            stack.extend(reversed(node.children))

    def with_children(self, children) -> "Node":
        return dataclasses.replace(self, children=tuple(children))

    def with_attributes(self, **updates) -> "Node":
        return dataclasses.replace(self, attributes={**self.attributes, **updates})

    def to_dict(self) -> dict:
        """Convert node to dictionary for JSON serialization."""
        result = {"kind": self.kind.value}
        result.update(self.attributes)
        if self.line:
            result["line"] = self.line
            result["column"] = self.column
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


# Method declaration layout: return TYPE, PARAM*, VAR_DECL*, statements.

def method_return_type_node(method: Node) -> Node:
    return method.children[0]


def method_params(method: Node) -> list[Node]:
    return method.children_of(Kind.PARAM)


def method_locals(method: Node) -> list[Node]:
    return method.children_of(Kind.VAR_DECL)


def method_statements(method: Node) -> list[Node]:
    return [c for c in method.children if c.kind.is_statement]


def class_decl(program: Node) -> Node:
    """Return the class declaration of a program."""
    if program.kind == Kind.CLASS_DECL:
        return program
    for node in program.children:
        if node.kind == Kind.CLASS_DECL:
            return node
    raise CompileError("Program has no class declaration")


class ParentIndex:
    """Maps each node of a tree to its parent, built in one top-down pass."""

    def __init__(self, root: Node):
        self.root = root
        self._parents: dict[int, Node] = {}
        stack = [root]
        while stack:
            node = stack.pop()
            for c in node.children:
                self._parents[id(c)] = node
                stack.append(c)

    def parent(self, node: Node) -> Optional[Node]:
        return self._parents.get(id(node))

    def ancestor(self, node: Node, kind: Kind) -> Optional[Node]:
        """Return the closest ancestor of the given kind."""
        current = self.parent(node)
        while current is not None:
            if current.kind == kind:
                return current
            current = self.parent(current)
        return None

    def enclosing_method(self, node: Node) -> Optional[Node]:
        return self.ancestor(node, Kind.METHOD_DECL)
