"""
Varargs call normalization: trailing arguments become one array literal.
"""

from typing import Optional

from ..ast import Kind, Node
from ..symboltable import SymbolTable
from ..typeutils import TypeUtils


class VarargsNormalizer:
    """Rewrites ``foo(1, 2, 3)`` to ``foo([1, 2, 3])`` for varargs methods of the class."""

    def __init__(self, table: SymbolTable):
        self.table = table
        self.types = TypeUtils(table)

    def run(self, root: Node) -> Node:
        return self._rewrite(root, None)

    def _rewrite(self, node: Node, method: Optional[str]) -> Node:
        if node.kind == Kind.METHOD_DECL:
            method = node.get("name")
        children = tuple(self._rewrite(c, method) for c in node.children)
        if any(new is not old for new, old in zip(children, node.children)):
            node = node.with_children(children)
        if node.kind == Kind.FUNC_EXPR:
            return self.normalize_call(node, method)
        return node

    def normalize_call(self, call: Node, method: Optional[str]) -> Node:
        name = call.get("name")
        receiver, args = call.child(0), call.children[1:]
        if not self.table.has_method(name) or not self.types.is_local_receiver(receiver, method):
            return call
        info = self.table.method(name)
        if not info.is_varargs:
            return call

        fixed = len(info.parameters) - 1
        if len(args) < fixed:
            return call
        rest = args[fixed:]
        if len(rest) == 1 and (
            rest[0].kind == Kind.ARRAY_EXPR or self.types.get_expr_type(rest[0], method).is_array
        ):
            return call

        element_type = info.parameters[-1].type.name
        array = Node(Kind.ARRAY_EXPR, tuple(rest), {"element_type": element_type},
                     line=call.line, column=call.column)
        return call.with_children((receiver, *args[:fixed], array))


def normalize_varargs(root: Node, table: SymbolTable) -> Node:
    return VarargsNormalizer(table).run(root)
