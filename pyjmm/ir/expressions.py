"""
Expression lowering for the IR generator.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..ast import Kind, Node
from ..reports import CompileError
from ..symboltable import SymbolTable
from ..typeutils import TypeUtils
from ..types import (
    ANY,
    ARITHMETIC_OPERATORS,
    BOOLEAN,
    INT,
    INT_ARRAY,
    LOGICAL_OPERATORS,
    VOID,
    Type,
    binary_operator_type,
)
from .context import GenerationContext
from .model import (
    ArrayOperand,
    Assign,
    BinaryOp,
    Call,
    ClassOperand,
    CondBranch,
    Element,
    GetField,
    Goto,
    Instruction,
    Invocation,
    Label,
    Literal,
    Operand,
    SingleOp,
    UnaryOp,
)


@dataclass
class ExprResult:
    """Lowered expression: ``code`` names the value, ``computation`` must run first.

    ``code`` is None for calls that produce no value.
    """
    code: Optional[Element]
    computation: list[Instruction] = field(default_factory=list)


class ExprGenerator:
    """Lowers expressions to IR, allocating a temporary per non-trivial node.

    ``expected`` is the type the surrounding construct wants; it types
    calls whose return type cannot be known (imported classes).
    """

    def __init__(self, table: SymbolTable, context: GenerationContext):
        self.table = table
        self.context = context
        self.types = TypeUtils(table)

    def this_operand(self) -> Operand:
        return Operand("this", Type(self.table.class_name))

    def temp(self, t: Type) -> Operand:
        return Operand(self.context.new_temp(), t)

    def is_variable(self, name: str, method: str) -> bool:
        """True if ``name`` is a parameter or local of ``method``."""
        return self.table.get_parameter(method, name) is not None or self.table.get_local(method, name) is not None

    def variable_type(self, name: str, method: str) -> Type:
        symbol = self.table.get_parameter(method, name) or self.table.get_local(method, name)
        return symbol.type

    def visit(self, expr: Node, method: str, expected: Optional[Type] = None) -> ExprResult:
        kind = expr.kind

        if kind == Kind.INTEGER_LITERAL:
            return ExprResult(Literal(int(expr.get("value")), INT))

        elif kind == Kind.BOOLEAN_LITERAL:
            return ExprResult(Literal(1 if expr.get("value") else 0, BOOLEAN))

        elif kind == Kind.PAREN_EXPR:
            return self.visit(expr.child(0), method, expected)

        elif kind == Kind.VAR_REF_EXPR:
            return self.visit_var_ref(expr, method)

        elif kind == Kind.THIS_EXPR:
            return ExprResult(self.this_operand())

        elif kind == Kind.BINARY_EXPR:
            return self.visit_binary(expr, method)

        elif kind == Kind.UNARY_EXPR:
            return self.visit_unary(expr, method)

        elif kind == Kind.NEW_EXPR:
            return self.visit_new(expr)

        elif kind == Kind.NEW_ARRAY_EXPR:
            return self.visit_new_array(expr, method)

        elif kind == Kind.ARRAY_EXPR:
            return self.visit_array_literal(expr, method)

        elif kind == Kind.ARRAY_ACCESS_EXPR:
            return self.visit_array_access(expr, method, expected)

        elif kind == Kind.LENGTH_EXPR:
            return self.visit_length(expr.child(0), method)

        elif kind == Kind.FUNC_EXPR:
            return self.visit_call(expr, method, expected)

        raise CompileError(f"Unsupported expression type: {kind.value}")

    def visit_var_ref(self, expr: Node, method: str) -> ExprResult:
        name = expr.get("name")
        if self.is_variable(name, method):
            return ExprResult(Operand(name, self.variable_type(name, method)))

        field_symbol = self.table.get_field(name)
        if field_symbol is not None:
            tmp = self.temp(field_symbol.type)
            read = GetField(self.this_operand(), Operand(name, field_symbol.type))
            return ExprResult(tmp, [Assign(tmp, read)])

        if self.table.is_imported(name):
            return ExprResult(ClassOperand(name, Type(name)))

        raise CompileError(f"Unresolved variable '{name}' in method '{method}'")

    def _operand_hint(self, op: str, other: Node, method: str) -> Type:
        if op in ARITHMETIC_OPERATORS or op in {"<", "<=", ">", ">="}:
            return INT
        if op in LOGICAL_OPERATORS:
            return BOOLEAN
        other_type = self.types.get_expr_type(other, method)
        return INT if other_type == ANY else other_type

    def visit_binary(self, expr: Node, method: str) -> ExprResult:
        op = expr.get("op")
        if op == "&&":
            return self.visit_and(expr, method)
        result_type = binary_operator_type(op)
        left_node, right_node = expr.child(0), expr.child(1)
        left = self.visit(left_node, method, self._operand_hint(op, right_node, method))
        right = self.visit(right_node, method, self._operand_hint(op, left_node, method))
        tmp = self.temp(result_type)
        computation = left.computation + right.computation
        computation.append(Assign(tmp, BinaryOp(op, left.code, right.code, result_type)))
        return ExprResult(tmp, computation)

    def visit_and(self, expr: Node, method: str) -> ExprResult:
        """Short-circuit ``&&``: the right operand only runs when the left one holds."""
        label_id = self.context.new_label_id()
        false_label = f"and_false_{label_id}"
        end_label = f"and_end_{label_id}"

        left = self.visit(expr.child(0), method, BOOLEAN)
        right = self.visit(expr.child(1), method, BOOLEAN)
        tmp = self.temp(BOOLEAN)

        computation = left.computation
        computation.append(CondBranch(UnaryOp("!", left.code, BOOLEAN), false_label))
        computation.extend(right.computation)
        computation.append(Assign(tmp, SingleOp(right.code)))
        computation.append(Goto(end_label))
        computation.append(Label(false_label))
        computation.append(Assign(tmp, SingleOp(Literal(0, BOOLEAN))))
        computation.append(Label(end_label))
        return ExprResult(tmp, computation)

    def visit_unary(self, expr: Node, method: str) -> ExprResult:
        operand = self.visit(expr.child(0), method, BOOLEAN)
        tmp = self.temp(BOOLEAN)
        computation = operand.computation + [Assign(tmp, UnaryOp(expr.get("op"), operand.code, BOOLEAN))]
        return ExprResult(tmp, computation)

    def visit_new(self, expr: Node) -> ExprResult:
        class_type = Type(expr.get("name"))
        tmp = self.temp(class_type)
        allocation = Call(Invocation.NEW, ClassOperand(class_type.name, class_type), type=class_type)
        constructor = Call(Invocation.SPECIAL, tmp, "<init>", type=VOID)
        return ExprResult(tmp, [Assign(tmp, allocation), constructor])

    def _new_array(self, element_name: str, size: ExprResult) -> ExprResult:
        array_type = Type(element_name, True)
        tmp = self.temp(array_type)
        allocation = Call(Invocation.NEW, None, args=(size.code,), type=array_type)
        return ExprResult(tmp, size.computation + [Assign(tmp, allocation)])

    def visit_new_array(self, expr: Node, method: str) -> ExprResult:
        size = self.visit(expr.child(0), method, INT)
        return self._new_array(expr.get("name"), size)

    def visit_array_literal(self, expr: Node, method: str) -> ExprResult:
        element_type = Type(self.types.array_literal_type(expr, method).name)
        result = self._new_array(element_type.name, ExprResult(Literal(len(expr.children), INT)))
        array = result.code
        for i, element in enumerate(expr.children):
            value = self.visit(element, method, element_type)
            result.computation.extend(value.computation)
            slot = ArrayOperand(array.name, element_type, Literal(i, INT))
            result.computation.append(Assign(slot, SingleOp(value.code)))
        return result

    def visit_array_access(self, expr: Node, method: str, expected: Optional[Type] = None) -> ExprResult:
        # the element type wanted by the context types an imported call returning the array
        element = expected if expected not in (None, ANY, VOID) and not expected.is_array else INT
        array = self.visit(expr.child(0), method, Type(element.name, True))
        index = self.visit(expr.child(1), method, INT)
        element_type = Type(array.code.type.name)
        tmp = self.temp(element_type)
        read = SingleOp(ArrayOperand(array.code.name, element_type, index.code))
        return ExprResult(tmp, array.computation + index.computation + [Assign(tmp, read)])

    def visit_length(self, array_node: Node, method: str) -> ExprResult:
        array = self.visit(array_node, method, INT_ARRAY)
        tmp = self.temp(INT)
        length = Call(Invocation.ARRAY_LENGTH, array.code, type=INT)
        return ExprResult(tmp, array.computation + [Assign(tmp, length)])

    def _is_static_receiver(self, receiver: Node, method: str) -> bool:
        # A bare name that is not a variable but matches an import is a class.
        if receiver.kind != Kind.VAR_REF_EXPR:
            return False
        name = receiver.get("name")
        if self.is_variable(name, method) or self.table.get_field(name) is not None:
            return False
        return self.table.is_imported(name)

    def visit_call(self, expr: Node, method: str, expected: Optional[Type]) -> ExprResult:
        name = expr.get("name")
        receiver_node = expr.child(0)
        arg_nodes = expr.children[1:]
        is_local = self.table.has_method(name) and self.types.is_local_receiver(receiver_node, method)

        if not is_local and name == "length" and not arg_nodes:
            if self.types.get_expr_type(receiver_node, method).is_array:
                return self.visit_length(receiver_node, method)

        computation: list[Instruction] = []
        if is_local and self.table.is_static(name):
            invocation = Invocation.STATIC
            receiver = ClassOperand(self.table.class_name, Type(self.table.class_name))
        elif self._is_static_receiver(receiver_node, method):
            invocation = Invocation.STATIC
            receiver_name = receiver_node.get("name")
            receiver = ClassOperand(receiver_name, Type(receiver_name))
        else:
            invocation = Invocation.VIRTUAL
            lowered = self.visit(receiver_node, method)
            computation.extend(lowered.computation)
            receiver = lowered.code

        if is_local:
            info = self.table.method(name)
            return_type = info.return_type
            param_types = [p.type for p in info.parameters]
        else:
            return_type = expected if expected not in (None, ANY) else INT
            param_types = []

        args = []
        for i, arg_node in enumerate(arg_nodes):
            hint = param_types[i] if i < len(param_types) else None
            lowered = self.visit(arg_node, method, hint)
            computation.extend(lowered.computation)
            args.append(lowered.code)

        call = Call(invocation, receiver, name, tuple(args), return_type)
        if return_type == VOID:
            computation.append(call)
            return ExprResult(None, computation)

        tmp = self.temp(return_type)
        computation.append(Assign(tmp, call))
        return ExprResult(tmp, computation)
