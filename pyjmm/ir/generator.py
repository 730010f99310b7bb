"""
Statement lowering: builds the IR program of a class.
"""

import logging
from typing import Optional

from ..ast import Kind, Node, class_decl, method_statements
from ..reports import CompileError
from ..symboltable import SymbolTable
from ..types import BOOLEAN, COMPARISON_OPERATORS, INT, INT_ARRAY, VOID, Type
from .context import GenerationContext
from .expressions import ExprGenerator
from .model import (
    ArrayOperand,
    Assign,
    BinaryOp,
    CondBranch,
    Goto,
    IRField,
    IRMethod,
    IRProgram,
    Literal,
    Operand,
    PutField,
    Return,
    SingleOp,
    UnaryOp,
)

logger = logging.getLogger(__name__)

SELF_UPDATE_OPERATORS = frozenset({"+", "-", "*", "/", "&&", "||"})


class IRGenerator:
    """Lowers a validated AST to an IR program.

    Statements are lowered here; expressions are delegated to an
    ExprGenerator sharing the same GenerationContext.
    """

    def __init__(self, table: SymbolTable, context: Optional[GenerationContext] = None):
        self.table = table
        self.context = context if context is not None else GenerationContext()
        self.expressions = ExprGenerator(table, self.context)
        self.method: Optional[IRMethod] = None

    def generate(self, root: Node) -> IRProgram:
        cls = class_decl(root)
        program = IRProgram(
            class_name=self.table.class_name,
            super_class=self.table.super_class,
            imports=list(self.table.imports),
            fields=[IRField(f.name, f.type) for f in self.table.fields],
        )
        self.context.reserve(f.name for f in self.table.fields)
        for method_node in cls.children_of(Kind.METHOD_DECL):
            program.methods.append(self.generate_method(method_node))
        logger.debug("Generated IR for %s: %d methods", program.class_name, len(program.methods))
        return program

    def generate_method(self, node: Node) -> IRMethod:
        name = node.get("name")
        info = self.table.method(name)
        self.context.reserve(s.name for s in info.parameters + info.locals)
        self.method = IRMethod(
            name=name,
            return_type=info.return_type,
            params=[Operand(p.name, p.type) for p in info.parameters],
            is_static=info.is_static,
            is_public=info.is_public,
        )
        for statement in method_statements(node):
            self.visit(statement)
        self.method.finish()
        method, self.method = self.method, None
        return method

    @property
    def method_name(self) -> str:
        return self.method.name

    def lower(self, expr: Node, expected: Optional[Type] = None):
        """Lower an expression, emit its computation and return its code."""
        result = self.expressions.visit(expr, self.method_name, expected)
        self.method.extend(result.computation)
        return result.code

    def visit(self, statement: Node):
        kind = statement.kind

        if kind == Kind.BLOCK_STMT:
            for c in statement.children:
                self.visit(c)

        elif kind == Kind.EXPR_STMT:
            self.lower(statement.child(0), VOID)

        elif kind == Kind.ASSIGN_STMT:
            self.visit_assign(statement)

        elif kind == Kind.ARRAY_ASSIGN_STMT:
            array, index, value = statement.children
            self.store_element(array, index, value)

        elif kind == Kind.RETURN_STMT:
            self.visit_return(statement)

        elif kind == Kind.IF_STMT:
            self.visit_if(statement)

        elif kind == Kind.WHILE_STMT:
            self.visit_while(statement)

        else:
            raise CompileError(f"Unsupported statement type: {kind.value}")

    def visit_assign(self, statement: Node):
        target, value = statement.children
        if target.kind == Kind.ARRAY_ACCESS_EXPR:
            self.store_element(target.child(0), target.child(1), value)
            return

        name = target.get("name")
        method = self.method_name
        if self.expressions.is_variable(name, method):
            dest = Operand(name, self.expressions.variable_type(name, method))
            update = self.self_update(dest, value)
            if update is not None:
                self.method.add(Assign(dest, update))
                return
            code = self.lower(value, dest.type)
            self.method.add(Assign(dest, SingleOp(code)))
            return

        field_symbol = self.table.get_field(name)
        if field_symbol is not None:
            code = self.lower(value, field_symbol.type)
            field = Operand(name, field_symbol.type)
            self.method.add(PutField(self.expressions.this_operand(), field, code))
            return

        raise CompileError(f"Cannot assign to '{name}' in method '{method}'")

    def self_update(self, dest: Operand, value: Node) -> Optional[BinaryOp]:
        """``x = x op literal`` as a single binary instruction, if it has that shape."""
        if value.kind != Kind.BINARY_EXPR or value.get("op") not in SELF_UPDATE_OPERATORS:
            return None
        left, right = value.children
        if left.kind != Kind.VAR_REF_EXPR or left.get("name") != dest.name:
            return None
        if right.kind == Kind.INTEGER_LITERAL:
            literal = Literal(int(right.get("value")), INT)
        elif right.kind == Kind.BOOLEAN_LITERAL:
            literal = Literal(1 if right.get("value") else 0, BOOLEAN)
        else:
            return None
        return BinaryOp(value.get("op"), dest, literal, dest.type)

    def store_element(self, array_node: Node, index_node: Node, value_node: Node):
        array = self.lower(array_node, INT_ARRAY)
        index = self.lower(index_node, INT)
        element_type = Type(array.type.name)
        value = self.lower(value_node, element_type)
        self.method.add(Assign(ArrayOperand(array.name, element_type, index), SingleOp(value)))

    def visit_return(self, statement: Node):
        return_type = self.method.return_type
        if not statement.children:
            self.method.add(Return(None, VOID))
            return
        code = self.lower(statement.child(0), return_type)
        self.method.add(Return(code, return_type))

    def branch(self, condition: Node, label: str):
        """Jump to ``label`` when ``condition`` holds."""
        if condition.kind == Kind.BINARY_EXPR and condition.get("op") in COMPARISON_OPERATORS:
            left = self.lower(condition.child(0), INT)
            right = self.lower(condition.child(1), INT)
            test = BinaryOp(condition.get("op"), left, right, BOOLEAN)
        elif condition.kind == Kind.UNARY_EXPR and condition.get("op") == "!":
            test = UnaryOp("!", self.lower(condition.child(0), BOOLEAN), BOOLEAN)
        else:
            test = SingleOp(self.lower(condition, BOOLEAN))
        self.method.add(CondBranch(test, label))

    def visit_if(self, statement: Node):
        label_id = self.context.new_label_id()
        then_label = f"if_then_{label_id}"
        else_label = f"if_else_{label_id}"
        end_label = f"if_end_{label_id}"

        self.branch(statement.child(0), then_label)
        if len(statement.children) == 3:
            self.method.add_label(else_label)
            self.visit(statement.child(2))
        self.method.add(Goto(end_label))

        self.method.add_label(then_label)
        self.visit(statement.child(1))
        self.method.add_label(end_label)

    def visit_while(self, statement: Node):
        label_id = self.context.new_label_id()
        cond_label = f"while_cond_{label_id}"
        body_label = f"while_body_{label_id}"
        end_label = f"while_end_{label_id}"

        self.method.add(Goto(cond_label))
        self.method.add_label(body_label)
        self.visit(statement.child(1))
        self.method.add_label(cond_label)
        self.branch(statement.child(0), body_label)
        self.method.add_label(end_label)
