"""
Jmm parser using Lark.
"""

from pathlib import Path

from lark import Lark, Token, Transformer, v_args
from lark.exceptions import UnexpectedInput

from .ast import Kind, Node
from .reports import ParseError


GRAMMAR_FILE = Path(__file__).parent / "jmm.lark"


def _position(meta) -> dict:
    return {"line": getattr(meta, "line", 0), "column": getattr(meta, "column", 0)}


def _token_position(token: Token) -> dict:
    return {"line": token.line or 0, "column": token.column or 0}


@v_args(meta=True)
class JmmTransformer(Transformer):
    """Transforms the Lark parse tree into AST nodes.

    Local declarations are hoisted to the enclosing method; an initializer
    stays in place as an assignment statement.
    """

    def __init__(self):
        super().__init__()
        self._pending_locals: list[Node] = []

    def start(self, meta, items):
        return Node(Kind.PROGRAM, tuple(items), {}, **_position(meta))

    def import_decl(self, meta, items):
        return Node(Kind.IMPORT_DECL, (), {"name": items[0]}, **_position(meta))

    def qualified_name(self, meta, items):
        return ".".join(str(token) for token in items)

    def class_decl(self, meta, items):
        names = [item for item in items if isinstance(item, Token)]
        members = tuple(item for item in items if isinstance(item, Node))
        attributes = {"name": str(names[0])}
        if len(names) > 1:
            attributes["superclass"] = str(names[1])
        return Node(Kind.CLASS_DECL, members, attributes, **_position(meta))

    def field_decl(self, meta, items):
        _modifiers, type_node, name = items
        return Node(Kind.VAR_DECL, (type_node,), {"name": str(name)}, **_position(meta))

    def method_decl(self, meta, items):
        modifiers, return_type, name, params = items[:4]
        statements = [item for item in items[4:] if item is not None]
        local_decls, self._pending_locals = self._pending_locals, []
        attributes = {
            "name": str(name),
            "is_public": "public" in modifiers,
            "is_static": "static" in modifiers,
        }
        children = (return_type, *params, *local_decls, *statements)
        return Node(Kind.METHOD_DECL, children, attributes, **_position(meta))

    def modifiers(self, meta, items):
        return {str(token) for token in items}

    def parameters(self, meta, items):
        return list(items)

    def param(self, meta, items):
        type_node, name = items
        return Node(Kind.PARAM, (type_node,), {"name": str(name)}, **_position(meta))

    def _type(self, meta, name, is_array, is_varargs):
        attributes = {"name": name, "is_array": is_array, "is_varargs": is_varargs}
        return Node(Kind.TYPE, (), attributes, **_position(meta))

    def plain_type(self, meta, items):
        return self._type(meta, items[0], False, False)

    def array_type(self, meta, items):
        return self._type(meta, items[0], True, False)

    def varargs_type(self, meta, items):
        return self._type(meta, items[0], True, True)

    def base_type(self, meta, items):
        return str(items[0])

    def local_decl(self, meta, items):
        type_node, name = items[0], str(items[1])
        self._pending_locals.append(Node(Kind.VAR_DECL, (type_node,), {"name": name}, **_position(meta)))
        if len(items) < 3:
            return None
        target = Node(Kind.VAR_REF_EXPR, (), {"name": name}, **_token_position(items[1]))
        return Node(Kind.ASSIGN_STMT, (target, items[2]), {}, **_position(meta))

    # Statements

    def block(self, meta, items):
        statements = tuple(item for item in items if item is not None)
        return Node(Kind.BLOCK_STMT, statements, {}, **_position(meta))

    def if_stmt(self, meta, items):
        return Node(Kind.IF_STMT, tuple(items), {}, **_position(meta))

    def while_stmt(self, meta, items):
        return Node(Kind.WHILE_STMT, tuple(items), {}, **_position(meta))

    def assign_stmt(self, meta, items):
        name, value = items
        target = Node(Kind.VAR_REF_EXPR, (), {"name": str(name)}, **_token_position(name))
        return Node(Kind.ASSIGN_STMT, (target, value), {}, **_position(meta))

    def array_assign_stmt(self, meta, items):
        name, index, value = items
        array = Node(Kind.VAR_REF_EXPR, (), {"name": str(name)}, **_token_position(name))
        return Node(Kind.ARRAY_ASSIGN_STMT, (array, index, value), {}, **_position(meta))

    def return_stmt(self, meta, items):
        return Node(Kind.RETURN_STMT, tuple(items), {}, **_position(meta))

    def expr_stmt(self, meta, items):
        return Node(Kind.EXPR_STMT, tuple(items), {}, **_position(meta))

    # Expressions

    def binary_expr(self, meta, items):
        left, op, right = items
        return Node(Kind.BINARY_EXPR, (left, right), {"op": str(op)}, **_position(meta))

    def not_expr(self, meta, items):
        op, operand = items
        return Node(Kind.UNARY_EXPR, (operand,), {"op": str(op)}, **_position(meta))

    def array_access(self, meta, items):
        return Node(Kind.ARRAY_ACCESS_EXPR, tuple(items), {}, **_position(meta))

    def length_expr(self, meta, items):
        return Node(Kind.LENGTH_EXPR, (items[0],), {}, **_position(meta))

    def call_expr(self, meta, items):
        receiver, name, arguments = items
        return Node(Kind.FUNC_EXPR, (receiver, *arguments), {"name": name}, **_position(meta))

    def method_name(self, meta, items):
        return str(items[0])

    def arguments(self, meta, items):
        return list(items)

    def integer_literal(self, meta, items):
        return Node(Kind.INTEGER_LITERAL, (), {"value": int(items[0])}, **_token_position(items[0]))

    def true_literal(self, meta, items):
        return Node(Kind.BOOLEAN_LITERAL, (), {"value": True}, **_token_position(items[0]))

    def false_literal(self, meta, items):
        return Node(Kind.BOOLEAN_LITERAL, (), {"value": False}, **_token_position(items[0]))

    def this_expr(self, meta, items):
        return Node(Kind.THIS_EXPR, (), {}, **_token_position(items[0]))

    def var_ref(self, meta, items):
        return Node(Kind.VAR_REF_EXPR, (), {"name": str(items[0])}, **_token_position(items[0]))

    def paren_expr(self, meta, items):
        return Node(Kind.PAREN_EXPR, (items[0],), {}, **_position(meta))

    def new_array(self, meta, items):
        _new, element_type, size = items
        return Node(Kind.NEW_ARRAY_EXPR, (size,), {"name": element_type}, **_position(meta))

    def new_object(self, meta, items):
        _new, name = items
        return Node(Kind.NEW_EXPR, (), {"name": str(name)}, **_position(meta))

    def array_literal(self, meta, items):
        return Node(Kind.ARRAY_EXPR, tuple(items[0]), {}, **_position(meta))


class JmmParser:
    """Main parser class for Jmm."""

    def __init__(self):
        with open(GRAMMAR_FILE, "r") as f:
            grammar = f.read()

        self._parser = Lark(
            grammar,
            parser="earley",
            lexer="basic",
            propagate_positions=True,
            maybe_placeholders=False,
        )

    def parse(self, source: str) -> Node:
        """Parse Jmm source code and return the AST."""
        try:
            tree = self._parser.parse(source)
        except UnexpectedInput as e:
            raise ParseError(str(e).strip().splitlines()[0], e.line, e.column) from e
        return JmmTransformer().transform(tree)

    def parse_file(self, path: str) -> Node:
        """Parse a Jmm file and return the AST."""
        with open(path, "r", encoding="utf-8") as f:
            source = f.read()
        return self.parse(source)
