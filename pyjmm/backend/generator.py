"""
Jasmin generator: turns an IR program into Jasmin assembly text.
"""

import logging
from typing import Optional, Sequence

from ..ir.model import (
    ArrayOperand,
    Assign,
    BinaryOp,
    Call,
    CondBranch,
    GetField,
    Goto,
    Instruction,
    IRMethod,
    IRProgram,
    Literal,
    NoOp,
    Operand,
    PutField,
    Return,
    SingleOp,
    UnaryOp,
)
from ..reports import CompileError
from ..types import COMPARISON_OPERATORS, VOID, Type
from .builder import JasminBuilder
from .calls import CallEmitterMixin, operand_count
from .descriptors import descriptor, internal_name, is_int_family, method_descriptor
from .values import MethodContext, ValueEmitterMixin

logger = logging.getLogger(__name__)

IINC_OPERATORS = frozenset({"+", "-"})


def value_depth(instruction: Instruction) -> int:
    """Operand stack slots needed to compute the value of ``instruction``."""
    if isinstance(instruction, SingleOp):
        return 2 if isinstance(instruction.operand, ArrayOperand) else 1
    if isinstance(instruction, BinaryOp):
        right_depth = 2 if isinstance(instruction.right, ArrayOperand) else 1
        left_depth = 2 if isinstance(instruction.left, ArrayOperand) else 1
        return max(left_depth, 1 + right_depth)
    if isinstance(instruction, UnaryOp):
        return 2 if isinstance(instruction.operand, ArrayOperand) else 1
    if isinstance(instruction, Call):
        return max(operand_count(instruction), 1) + 1
    if isinstance(instruction, GetField):
        return 1
    return 0


def estimate_stack(method: IRMethod) -> int:
    """Conservative operand stack limit for ``method``.

    At least 2, at least one more than any call's operands, 2 for any binary
    operation and 3 for any indexed store.
    """
    limit = 2
    for instruction in method.instructions:
        if isinstance(instruction, Assign):
            depth = value_depth(instruction.rhs)
            if isinstance(instruction.dest, ArrayOperand):
                depth = max(3, 2 + depth)
        elif isinstance(instruction, CondBranch):
            depth = value_depth(instruction.condition)
        elif isinstance(instruction, PutField):
            depth = 3 if isinstance(instruction.value, ArrayOperand) else 2
        elif isinstance(instruction, Return) and instruction.operand is not None:
            depth = 2 if isinstance(instruction.operand, ArrayOperand) else 1
        else:
            depth = value_depth(instruction)
        limit = max(limit, depth)
    return limit


def locals_limit(method: IRMethod) -> int:
    """Locals needed: ``this`` and the parameters, widened to the highest register used."""
    return max(method.reserved_slots, method.max_register() + 1)


class JasminGenerator(ValueEmitterMixin, CallEmitterMixin):
    """Generates Jasmin assembly from an IR program."""

    def __init__(self, program: IRProgram):
        self.program = program

    # Names and descriptors

    def internal_name(self, name: str) -> str:
        return internal_name(name, self.program.imports)

    def type_descriptor(self, t: Type) -> str:
        return descriptor(t, self.program.imports)

    def method_descriptor(self, params: Sequence[Type], return_type: Type) -> str:
        return method_descriptor(params, return_type, self.program.imports)

    @property
    def super_name(self) -> str:
        if self.program.super_class:
            return self.internal_name(self.program.super_class)
        return "java/lang/Object"

    # Class structure

    def generate(self) -> str:
        lines = [
            f".class public {self.program.class_name}",
            f".super {self.super_name}",
            "",
        ]
        for fld in self.program.fields:
            lines.append(f".field public {fld.name} {self.type_descriptor(fld.type)}")
        if self.program.fields:
            lines.append("")
        lines.extend(self.default_constructor())
        for method in self.program.methods:
            lines.append("")
            lines.extend(self.generate_method(method))
        logger.debug("Emitted Jasmin for %s", self.program.class_name)
        return "\n".join(lines) + "\n"

    def default_constructor(self) -> list[str]:
        return [
            ".method public <init>()V",
            "    aload_0",
            f"    invokespecial {self.super_name}/<init>()V",
            "    return",
            ".end method",
        ]

    def method_header(self, method: IRMethod) -> str:
        parts = [".method"]
        if method.is_public:
            parts.append("public")
        if method.is_static:
            parts.append("static")
        desc = self.method_descriptor([p.type for p in method.params], method.return_type)
        parts.append(f"{method.name}{desc}")
        return " ".join(parts)

    def generate_method(self, method: IRMethod) -> list[str]:
        ctx = MethodContext(method, JasminBuilder())
        for i, instruction in enumerate(method.instructions):
            for label in method.labels_at(i):
                ctx.builder.label(label)
            self.emit_instruction(instruction, ctx)

        last: Optional[Instruction] = method.instructions[-1] if method.instructions else None
        if method.return_type == VOID and not isinstance(last, Return):
            ctx.builder.emit("return")

        lines = [
            self.method_header(method),
            f"    .limit stack {estimate_stack(method)}",
            f"    .limit locals {locals_limit(method)}",
        ]
        lines.extend(ctx.builder.build())
        lines.append(".end method")
        return lines

    # Instructions

    def emit_instruction(self, instruction: Instruction, ctx: MethodContext):
        if isinstance(instruction, Assign):
            self.emit_assign(instruction, ctx)

        elif isinstance(instruction, Call):
            self.emit_call(instruction, ctx)
            if instruction.type != VOID:
                ctx.builder.emit("pop")

        elif isinstance(instruction, PutField):
            self.emit_putfield(instruction, ctx)

        elif isinstance(instruction, Return):
            self.emit_return(instruction, ctx)

        elif isinstance(instruction, CondBranch):
            self.emit_branch(instruction, ctx)

        elif isinstance(instruction, Goto):
            ctx.builder.goto(instruction.label)

        elif isinstance(instruction, NoOp):
            ctx.builder.emit("nop")

        elif isinstance(instruction, (SingleOp, BinaryOp, UnaryOp, GetField)):
            # Value computed for its side effects only.
            self.emit_value(instruction, ctx)
            ctx.builder.emit("pop")

        else:
            raise CompileError(f"Unsupported instruction: {type(instruction).__name__}")

    def emit_value(self, instruction: Instruction, ctx: MethodContext):
        """Push the value of a right-hand-side instruction."""
        if isinstance(instruction, SingleOp):
            self.emit_single(instruction, ctx)
        elif isinstance(instruction, BinaryOp):
            self.emit_binary(instruction, ctx)
        elif isinstance(instruction, UnaryOp):
            self.emit_unary(instruction, ctx)
        elif isinstance(instruction, Call):
            self.emit_call(instruction, ctx)
        elif isinstance(instruction, GetField):
            self.emit_getfield(instruction, ctx)
        else:
            raise CompileError(f"Unsupported value instruction: {type(instruction).__name__}")

    def increment(self, assign: Assign) -> Optional[int]:
        """Amount for ``x = x + c`` / ``x = x - c`` when it fits an iinc."""
        dest, rhs = assign.dest, assign.rhs
        if isinstance(dest, ArrayOperand) or not isinstance(rhs, BinaryOp):
            return None
        if rhs.op not in IINC_OPERATORS or dest.type.name != "int" or dest.type.is_array:
            return None
        left, right = rhs.left, rhs.right
        if isinstance(left, ArrayOperand) or not isinstance(right, Literal):
            return None
        if not isinstance(left, Operand) or left.name != dest.name:
            return None
        amount = right.value if rhs.op == "+" else -right.value
        return amount if -128 <= amount <= 127 else None

    def emit_assign(self, assign: Assign, ctx: MethodContext):
        dest = assign.dest
        if isinstance(dest, ArrayOperand):
            ctx.builder.aload(ctx.method.register(dest.name))
            self.emit_load(dest.index, ctx)
            self.emit_value(assign.rhs, ctx)
            self._emit_array_store(dest.type, ctx.builder)
            return

        amount = self.increment(assign)
        if amount is not None:
            ctx.builder.iinc(ctx.method.register(dest.name), amount)
            return

        self.emit_value(assign.rhs, ctx)
        self.emit_store(dest, ctx)

    def emit_return(self, ret: Return, ctx: MethodContext):
        if ret.operand is None or ret.type == VOID:
            ctx.builder.emit("return")
            return
        self.emit_load(ret.operand, ctx)
        ctx.builder.emit("ireturn" if is_int_family(ret.type) else "areturn")

    def emit_branch(self, branch: CondBranch, ctx: MethodContext):
        condition = branch.condition
        if isinstance(condition, BinaryOp) and condition.op in COMPARISON_OPERATORS:
            self.emit_compare_jump(condition, branch.label, ctx)
        elif isinstance(condition, UnaryOp) and condition.op == "!":
            self.emit_load(condition.operand, ctx)
            ctx.builder.ifeq(branch.label)
        else:
            self.emit_value(condition, ctx)
            ctx.builder.ifne(branch.label)


def generate_jasmin(program: IRProgram) -> str:
    return JasminGenerator(program).generate()
