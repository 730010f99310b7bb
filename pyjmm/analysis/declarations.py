"""
Declaration checks: unique names and varargs placement.
"""

from ..ast import Kind, Node, method_locals, method_params, method_return_type_node
from .visitor import AnalysisPass


def _is_varargs(declaration: Node) -> bool:
    type_node = declaration if declaration.kind == Kind.TYPE else declaration.child(0)
    return bool(type_node.get_optional("is_varargs"))


class DuplicateDeclarations(AnalysisPass):
    """Imports, fields, methods and per-method variables must be unique."""

    def build(self):
        self.add_visit(Kind.PROGRAM, self.visit_program)
        self.add_visit(Kind.CLASS_DECL, self.visit_class)
        self.add_visit(Kind.METHOD_DECL, self.visit_method)

    def _check_unique(self, nodes: list[Node], name_of, what: str):
        seen = set()
        for node in nodes:
            name = name_of(node)
            if name in seen:
                self.error(node, f"Duplicate {what}: '{name}'")
            seen.add(name)

    def visit_program(self, node: Node):
        imports = node.children_of(Kind.IMPORT_DECL)
        self._check_unique(imports, lambda n: n.get("name").split(".")[-1], "import")

    def visit_class(self, node: Node):
        self._check_unique(node.children_of(Kind.VAR_DECL), lambda n: n.get("name"), "field")
        self._check_unique(node.children_of(Kind.METHOD_DECL), lambda n: n.get("name"), "method")

    def visit_method(self, node: Node):
        # parameters and locals share one namespace
        variables = method_params(node) + method_locals(node)
        self._check_unique(variables, lambda n: n.get("name"), "variable")


class VarargsDeclarations(AnalysisPass):
    """Varargs is allowed once per parameter list, only in last position."""

    def build(self):
        self.add_visit(Kind.CLASS_DECL, self.visit_class)
        self.add_visit(Kind.METHOD_DECL, self.visit_method)

    def visit_class(self, node: Node):
        for field_decl in node.children_of(Kind.VAR_DECL):
            if _is_varargs(field_decl):
                self.error(field_decl, f"Field '{field_decl.get('name')}' cannot be varargs")

    def visit_method(self, node: Node):
        name = node.get("name")
        params = method_params(node)
        varargs = [p for p in params if _is_varargs(p)]
        if len(varargs) > 1:
            self.error(varargs[1], f"Method '{name}' declares more than one varargs parameter")
        elif varargs and params[-1] is not varargs[0]:
            self.error(varargs[0], f"Varargs parameter '{varargs[0].get('name')}' must be the last parameter")

        return_type = method_return_type_node(node)
        if _is_varargs(return_type):
            self.error(return_type, f"Return type of method '{name}' cannot be varargs")

        for local in method_locals(node):
            if _is_varargs(local):
                self.error(local, f"Local variable '{local.get('name')}' cannot be varargs")
