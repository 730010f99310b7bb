"""
Reference checks: variables must be declared and call targets must exist.
"""

from ..ast import Kind, Node
from ..types import Type
from .visitor import AnalysisPass


class UndeclaredVariables(AnalysisPass):
    """Every variable reference must resolve to a declaration or an import."""

    def build(self):
        self.add_visit(Kind.VAR_REF_EXPR, self.visit_var_ref)
        self.add_visit(Kind.THIS_EXPR, self.visit_this)

    def visit_var_ref(self, node: Node):
        name = node.get("name")
        method = self.method_name

        if self.table.get_parameter(method, name) or self.table.get_local(method, name):
            return

        if self.table.get_field(name) is not None:
            if self.in_static_method:
                self.error(node, f"Cannot access field '{name}' from static method '{method}'")
            return

        if self.table.is_imported(name):
            return

        self.error(node, f"Variable '{name}' is not declared")

    def visit_this(self, node: Node):
        if self.in_static_method:
            self.error(node, f"Cannot use 'this' in static method '{self.method_name}'")


class UndefinedMethods(AnalysisPass):
    """Calls must target a known method, an array length, or an imported class.

    Calls to methods of the class are also checked for argument count and
    argument types; a varargs parameter accepts any number of trailing
    elements or a single array.
    """

    def build(self):
        self.add_visit(Kind.FUNC_EXPR, self.visit_call)

    def visit_call(self, node: Node):
        name = node.get("name")
        receiver = node.child(0)
        receiver_type = self.type_of(receiver)

        if self.table.has_method(name) and self.types.is_local_receiver(receiver, self.method_name):
            self._check_arguments(node, name)
            return

        if name == "length" and len(node.children) == 1 and receiver_type.is_array:
            return

        if self._is_imported_receiver(receiver, receiver_type):
            return

        if self._is_inherited(receiver_type):
            return

        self.error(node, f"Method '{name}' is not defined")

    def _is_imported_receiver(self, receiver: Node, receiver_type: Type) -> bool:
        if not receiver_type.is_array and self.table.is_imported(receiver_type.name):
            return True
        return receiver.kind == Kind.VAR_REF_EXPR and self.table.is_imported(receiver.get("name"))

    def _is_inherited(self, receiver_type: Type) -> bool:
        super_class = self.table.super_class
        return (
            super_class is not None
            and receiver_type == Type(self.table.class_name)
            and self.table.is_imported(super_class)
        )

    def _check_arguments(self, node: Node, name: str):
        info = self.table.method(name)
        params = info.parameters
        args = node.children[1:]
        fixed = params[:-1] if info.is_varargs else params

        if info.is_varargs:
            if len(args) < len(fixed):
                self.error(node, f"Method '{name}' expects at least {len(fixed)} arguments, got {len(args)}")
                return
        elif len(args) != len(params):
            self.error(node, f"Method '{name}' expects {len(params)} arguments, got {len(args)}")
            return

        for param, arg in zip(fixed, args):
            arg_type = self.type_of(arg)
            if not self.types.is_assignable(param.type, arg_type):
                self.error(arg, f"Argument of type '{arg_type}' is not compatible with parameter "
                                f"'{param.name}' of type '{param.type}'")

        if not info.is_varargs:
            return

        varargs_type = params[-1].type
        rest = args[len(fixed):]
        if len(rest) == 1 and self.type_of(rest[0]).is_array:
            if not self.types.is_assignable(varargs_type, self.type_of(rest[0])):
                self.error(rest[0], f"Array argument is not compatible with varargs parameter of type '{varargs_type}'")
            return
        element_type = varargs_type.element_type()
        for arg in rest:
            arg_type = self.type_of(arg)
            if not self.types.is_assignable(element_type, arg_type):
                self.error(arg, f"Varargs element of type '{arg_type}' is not compatible with '{element_type}'")
