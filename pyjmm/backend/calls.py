"""
Invocations, allocations and field accesses.
"""

from ..ir.model import Call, GetField, Invocation, PutField
from ..reports import CompileError
from ..types import VOID
from .values import MethodContext


class CallEmitterMixin:
    """Mixin lowering Call, GetField and PutField instructions."""

    # Provided by the generator and ValueEmitterMixin
    emit_load: callable
    internal_name: callable
    type_descriptor: callable
    method_descriptor: callable

    def emit_call(self, call: Call, ctx: MethodContext):
        invocation = call.invocation
        builder = ctx.builder

        if invocation is Invocation.NEW:
            if call.type.is_array:
                if len(call.args) != 1:
                    raise CompileError("Array allocation takes exactly one size")
                self.emit_load(call.args[0], ctx)
                element = call.type.name
                builder.newarray(element if element in ("int", "boolean") else self.internal_name(element))
            else:
                builder.new(self.internal_name(call.type.name))

        elif invocation is Invocation.ARRAY_LENGTH:
            self.emit_load(call.receiver, ctx)
            builder.emit("arraylength")

        elif invocation is Invocation.STATIC:
            for arg in call.args:
                self.emit_load(arg, ctx)
            owner = self.internal_name(call.receiver.name)
            builder.invokestatic(owner, call.method, self.call_descriptor(call))

        elif invocation is Invocation.VIRTUAL:
            self.emit_load(call.receiver, ctx)
            for arg in call.args:
                self.emit_load(arg, ctx)
            owner = self.internal_name(call.receiver.type.name)
            builder.invokevirtual(owner, call.method, self.call_descriptor(call))

        elif invocation is Invocation.SPECIAL:
            self.emit_load(call.receiver, ctx)
            for arg in call.args:
                self.emit_load(arg, ctx)
            owner = self.internal_name(call.receiver.type.name)
            builder.invokespecial(owner, call.method, self.call_descriptor(call))

        else:
            raise CompileError(f"Unsupported invocation: {invocation.value}")

    def call_descriptor(self, call: Call) -> str:
        """Descriptor of the invoked method; declared types win for methods of this class."""
        if call.method == "<init>":
            return self.method_descriptor([arg.type for arg in call.args], VOID)
        if call.receiver is not None and call.receiver.type.name == self.program.class_name:
            for method in self.program.methods:
                if method.name == call.method:
                    return self.method_descriptor([p.type for p in method.params], method.return_type)
        return self.method_descriptor([arg.type for arg in call.args], call.type)

    def emit_getfield(self, op: GetField, ctx: MethodContext):
        ctx.builder.aload(0)
        ctx.builder.getfield(self.program.class_name, op.field.name, self.type_descriptor(op.field.type))

    def emit_putfield(self, op: PutField, ctx: MethodContext):
        ctx.builder.aload(0)
        self.emit_load(op.value, ctx)
        ctx.builder.putfield(self.program.class_name, op.field.name, self.type_descriptor(op.field.type))


def operand_count(call: Call) -> int:
    """Values a call pops from the operand stack."""
    count = len(call.args)
    if call.invocation in (Invocation.VIRTUAL, Invocation.SPECIAL, Invocation.ARRAY_LENGTH):
        count += 1
    return count
