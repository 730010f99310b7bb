"""
Constant propagation and folding over the AST.

Both passes build new trees; ``fold_constants`` alternates them until the
tree stops changing.
"""

import logging
from typing import Optional, Union

from ..ast import Kind, Node, class_decl, method_locals, method_params

logger = logging.getLogger(__name__)

Value = Union[int, bool]


def wrap_int(value: int) -> int:
    """Wrap to a 32-bit two's complement integer."""
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value >= 0x80000000 else value


def literal_value(node: Node) -> Optional[Value]:
    if node.kind == Kind.INTEGER_LITERAL:
        return int(node.get("value"))
    if node.kind == Kind.BOOLEAN_LITERAL:
        return bool(node.get("value"))
    return None


def make_literal(value: Value, position: Node) -> Node:
    kind = Kind.BOOLEAN_LITERAL if isinstance(value, bool) else Kind.INTEGER_LITERAL
    return Node(kind, (), {"value": value}, line=position.line, column=position.column)


def _divide(left: int, right: int) -> int:
    # Java division truncates toward zero
    quotient = abs(left) // abs(right)
    return -quotient if (left < 0) != (right < 0) else quotient


def evaluate_binary(op: str, left: Value, right: Value) -> Optional[Value]:
    """Value of ``left op right``, or None when it cannot be folded."""
    if isinstance(left, bool) and isinstance(right, bool):
        if op == "&&":
            return left and right
        if op == "||":
            return left or right
        if op == "==":
            return left == right
        if op == "!=":
            return left != right
        return None

    if isinstance(left, bool) or isinstance(right, bool):
        return None

    if op == "+":
        return wrap_int(left + right)
    if op == "-":
        return wrap_int(left - right)
    if op == "*":
        return wrap_int(left * right)
    if op == "/":
        return wrap_int(_divide(left, right)) if right != 0 else None
    if op == "<":
        return left < right
    if op == "<=":
        return left <= right
    if op == ">":
        return left > right
    if op == ">=":
        return left >= right
    if op == "==":
        return left == right
    if op == "!=":
        return left != right
    return None


def fold(node: Node) -> Node:
    """Collapse every reducible subexpression of ``node`` into a literal."""
    children = tuple(fold(c) for c in node.children)
    if any(new is not old for new, old in zip(children, node.children)):
        node = node.with_children(children)

    if node.kind == Kind.PAREN_EXPR:
        inner = node.child(0)
        if literal_value(inner) is not None:
            return make_literal(literal_value(inner), node)

    elif node.kind == Kind.UNARY_EXPR:
        value = literal_value(node.child(0))
        if isinstance(value, bool) and node.get("op") == "!":
            return make_literal(not value, node)

    elif node.kind == Kind.BINARY_EXPR:
        left, right = literal_value(node.child(0)), literal_value(node.child(1))
        if left is not None and right is not None:
            result = evaluate_binary(node.get("op"), left, right)
            if result is not None:
                return make_literal(result, node)

    return node


def assigned_names(node: Node) -> set[str]:
    """Names of the variables assigned anywhere inside ``node``."""
    names = set()
    for statement in node.descendants(Kind.ASSIGN_STMT):
        target = statement.child(0)
        if target.kind == Kind.VAR_REF_EXPR:
            names.add(target.get("name"))
    if node.kind == Kind.ASSIGN_STMT and node.child(0).kind == Kind.VAR_REF_EXPR:
        names.add(node.child(0).get("name"))
    return names


class ConstantPropagator:
    """Replaces reads of variables holding a known literal with that literal.

    Bindings are tracked per method in statement order. A branch starts
    from the bindings before it; after an if only the bindings both
    branches agree on survive, and a loop drops every name its body
    assigns.
    """

    def __init__(self):
        self.variables: set[str] = set()

    def run(self, root: Node) -> Node:
        cls = class_decl(root)
        members = []
        for member in cls.children:
            if member.kind == Kind.METHOD_DECL:
                member = self.propagate_method(member)
            members.append(member)
        new_cls = cls.with_children(members)
        if root.kind == Kind.CLASS_DECL:
            return new_cls
        return root.with_children(new_cls if c is cls else c for c in root.children)

    def propagate_method(self, method: Node) -> Node:
        self.variables = {n.get("name") for n in method_params(method) + method_locals(method)}
        bindings: dict[str, Node] = {}
        children = [self.statement(c, bindings) if c.kind.is_statement else c for c in method.children]
        return method.with_children(children)

    def substitute(self, expr: Node, bindings: dict[str, Node]) -> Node:
        if expr.kind == Kind.VAR_REF_EXPR:
            bound = bindings.get(expr.get("name"))
            if bound is None:
                return expr
            return make_literal(literal_value(bound), expr)
        if not expr.children:
            return expr
        children = tuple(self.substitute(c, bindings) for c in expr.children)
        if all(new is old for new, old in zip(children, expr.children)):
            return expr
        return expr.with_children(children)

    def statement(self, node: Node, bindings: dict[str, Node]) -> Node:
        kind = node.kind

        if kind == Kind.ASSIGN_STMT:
            target, value = node.children
            value = fold(self.substitute(value, bindings))
            if target.kind != Kind.VAR_REF_EXPR:
                return node.with_children((self.substitute(target, bindings), value))
            name = target.get("name")
            if name in self.variables:
                if literal_value(value) is not None:
                    bindings[name] = value
                else:
                    bindings.pop(name, None)
            return node.with_children((target, value))

        elif kind in (Kind.ARRAY_ASSIGN_STMT, Kind.EXPR_STMT, Kind.RETURN_STMT):
            return self.substitute(node, bindings)

        elif kind == Kind.BLOCK_STMT:
            return node.with_children(self.statement(c, bindings) for c in node.children)

        elif kind == Kind.IF_STMT:
            condition = self.substitute(node.child(0), bindings)
            branch_bindings = []
            branches = []
            for branch in node.children[1:]:
                local = dict(bindings)
                branches.append(self.statement(branch, local))
                branch_bindings.append(local)
            if len(branch_bindings) == 1:
                branch_bindings.append(dict(bindings))
            then_bindings, else_bindings = branch_bindings
            merged = {
                name: value for name, value in then_bindings.items()
                if name in else_bindings and else_bindings[name] == value
            }
            bindings.clear()
            bindings.update(merged)
            return node.with_children((condition, *branches))

        elif kind == Kind.WHILE_STMT:
            for name in assigned_names(node):
                bindings.pop(name, None)
            condition = self.substitute(node.child(0), bindings)
            body = self.statement(node.child(1), dict(bindings))
            return node.with_children((condition, body))

        return node


def propagate_constants(root: Node) -> Node:
    return ConstantPropagator().run(root)


def fold_constants(root: Node) -> Node:
    """Alternate propagation and folding until the tree no longer changes."""
    current = root
    rounds = 0
    while True:
        rounds += 1
        updated = fold(propagate_constants(current))
        if updated == current:
            logger.debug("Constant folding reached a fixed point after %d round(s)", rounds)
            return current
        current = updated
