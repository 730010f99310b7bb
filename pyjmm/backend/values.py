"""
Loading, storing and combining values on the operand stack.
"""

from dataclasses import dataclass

from ..ir.model import (
    ArrayOperand,
    BinaryOp,
    ClassOperand,
    Element,
    IRMethod,
    Literal,
    Operand,
    SingleOp,
    UnaryOp,
)
from ..reports import CompileError
from ..types import COMPARISON_OPERATORS, Type
from .builder import JasminBuilder
from .descriptors import is_int_family

ARITHMETIC_OPCODES = {
    "+": "iadd",
    "-": "isub",
    "*": "imul",
    "/": "idiv",
    "&&": "iand",
    "||": "ior",
}


@dataclass
class MethodContext:
    """State while emitting one method."""
    method: IRMethod
    builder: JasminBuilder


def is_zero(element: Element) -> bool:
    return isinstance(element, Literal) and element.value == 0


class ValueEmitterMixin:
    """Mixin providing operand loads and stores and operator lowering."""

    def emit_load(self, element: Element, ctx: MethodContext):
        builder = ctx.builder
        if isinstance(element, Literal):
            builder.iconst(int(element.value))
        elif isinstance(element, ArrayOperand):
            builder.aload(ctx.method.register(element.name))
            self.emit_load(element.index, ctx)
            self._emit_array_load(element.type, builder)
        elif isinstance(element, ClassOperand):
            raise CompileError(f"Class '{element.name}' cannot be loaded as a value")
        elif isinstance(element, Operand):
            self._load_variable(element.name, element.type, ctx)
        else:
            raise CompileError(f"Unsupported element: {element!r}")

    def _load_variable(self, name: str, t: Type, ctx: MethodContext):
        register = ctx.method.register(name)
        if is_int_family(t):
            ctx.builder.iload(register)
        else:
            ctx.builder.aload(register)

    def emit_store(self, dest: Operand, ctx: MethodContext):
        register = ctx.method.register(dest.name)
        if is_int_family(dest.type):
            ctx.builder.istore(register)
        else:
            ctx.builder.astore(register)

    def _emit_array_load(self, elem_type: Type, builder: JasminBuilder):
        if elem_type.name == "int":
            builder.emit("iaload")
        elif elem_type.name == "boolean":
            builder.emit("baload")
        else:
            builder.emit("aaload")

    def _emit_array_store(self, elem_type: Type, builder: JasminBuilder):
        if elem_type.name == "int":
            builder.emit("iastore")
        elif elem_type.name == "boolean":
            builder.emit("bastore")
        else:
            builder.emit("aastore")

    def emit_single(self, op: SingleOp, ctx: MethodContext):
        self.emit_load(op.operand, ctx)

    def emit_binary(self, op: BinaryOp, ctx: MethodContext):
        if op.op in COMPARISON_OPERATORS:
            self._emit_comparison(op, ctx)
            return
        opcode = ARITHMETIC_OPCODES.get(op.op)
        if opcode is None:
            raise CompileError(f"Unsupported binary operator: {op.op}")
        self.emit_load(op.left, ctx)
        self.emit_load(op.right, ctx)
        ctx.builder.emit(opcode)

    def emit_compare_jump(self, op: BinaryOp, label: str, ctx: MethodContext):
        """Jump to ``label`` when the comparison holds, comparing with zero directly if possible."""
        self.emit_load(op.left, ctx)
        if not is_int_family(op.left.type):
            self.emit_load(op.right, ctx)
            ctx.builder.if_acmp(op.op, label)
        elif is_zero(op.right):
            ctx.builder.if_zero(op.op, label)
        else:
            self.emit_load(op.right, ctx)
            ctx.builder.if_icmp(op.op, label)

    def _emit_boolean_result(self, ctx: MethodContext, true_label: str):
        """Finish a conditional jump to ``true_label`` by pushing 0 or 1."""
        builder = ctx.builder
        end_label = builder.new_label("j_end")
        builder.iconst(0)
        builder.goto(end_label)
        builder.label(true_label)
        builder.iconst(1)
        builder.label(end_label)

    def _emit_comparison(self, op: BinaryOp, ctx: MethodContext):
        true_label = ctx.builder.new_label("j_true")
        self.emit_compare_jump(op, true_label, ctx)
        self._emit_boolean_result(ctx, true_label)

    def emit_unary(self, op: UnaryOp, ctx: MethodContext):
        if op.op != "!":
            raise CompileError(f"Unsupported unary operator: {op.op}")
        true_label = ctx.builder.new_label("j_true")
        self.emit_load(op.operand, ctx)
        ctx.builder.ifeq(true_label)
        self._emit_boolean_result(ctx, true_label)
