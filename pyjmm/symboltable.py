"""
Symbol table: per-class metadata collected from the AST.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .ast import Kind, Node, class_decl, method_locals, method_params, method_return_type_node
from .reports import CompileError
from .types import Symbol, Type, type_from_node

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodInfo:
    """Signature and locals of a declared method."""
    name: str
    return_type: Type
    parameters: tuple[Symbol, ...]
    locals: tuple[Symbol, ...]
    is_static: bool = False
    is_public: bool = False
    is_varargs: bool = False


@dataclass(frozen=True)
class SymbolTable:
    """Read-only view of a class: imports, superclass, fields and methods."""
    class_name: str
    super_class: Optional[str]
    imports: tuple[str, ...]
    fields: tuple[Symbol, ...]
    method_infos: tuple[MethodInfo, ...]

    @property
    def methods(self) -> list[str]:
        return [m.name for m in self.method_infos]

    @property
    def import_names(self) -> set[str]:
        """Simple (last segment) names of the imports."""
        return {imp.split(".")[-1] for imp in self.imports}

    def is_imported(self, name: str) -> bool:
        return name in self.imports or name in self.import_names

    def has_method(self, name: str) -> bool:
        return any(m.name == name for m in self.method_infos)

    def method(self, name: str) -> MethodInfo:
        for info in self.method_infos:
            if info.name == name:
                return info
        raise CompileError(f"Unknown method: {name}")

    def get_return_type(self, name: str) -> Type:
        return self.method(name).return_type

    def get_parameters(self, name: str) -> tuple[Symbol, ...]:
        return self.method(name).parameters

    def get_local_variables(self, name: str) -> tuple[Symbol, ...]:
        return self.method(name).locals

    def get_field(self, name: str) -> Optional[Symbol]:
        for symbol in self.fields:
            if symbol.name == name:
                return symbol
        return None

    def get_parameter(self, method: Optional[str], name: str) -> Optional[Symbol]:
        if method is None or not self.has_method(method):
            return None
        for symbol in self.get_parameters(method):
            if symbol.name == name:
                return symbol
        return None

    def get_local(self, method: Optional[str], name: str) -> Optional[Symbol]:
        if method is None or not self.has_method(method):
            return None
        for symbol in self.get_local_variables(method):
            if symbol.name == name:
                return symbol
        return None

    def is_static(self, method: Optional[str]) -> bool:
        return method is not None and self.has_method(method) and self.method(method).is_static

    def __str__(self) -> str:
        lines = [f"Class: {self.class_name}"]
        if self.super_class:
            lines.append(f"Super: {self.super_class}")
        for imp in self.imports:
            lines.append(f"Import: {imp}")
        for symbol in self.fields:
            lines.append(f"Field: {symbol.type} {symbol.name}")
        for info in self.method_infos:
            params = ", ".join(f"{p.type} {p.name}" for p in info.parameters)
            lines.append(f"Method: {info.return_type} {info.name}({params})")
        return "\n".join(lines)


def _symbol(node: Node) -> Symbol:
    return Symbol(node.get("name"), type_from_node(node.child(0)))


def _method_info(method: Node) -> MethodInfo:
    params = method_params(method)
    is_varargs = bool(params) and bool(params[-1].child(0).get_optional("is_varargs"))
    return MethodInfo(
        name=method.get("name"),
        return_type=type_from_node(method_return_type_node(method)),
        parameters=tuple(_symbol(p) for p in params),
        locals=tuple(_symbol(v) for v in method_locals(method)),
        is_static=bool(method.get_optional("is_static")),
        is_public=bool(method.get_optional("is_public")),
        is_varargs=is_varargs,
    )


def build_symbol_table(root: Node) -> SymbolTable:
    """Collect the symbol table of the (single) class in a program."""
    cls = class_decl(root)
    imports = tuple(
        node.get("name") for node in root.children if node.kind == Kind.IMPORT_DECL
    )
    table = SymbolTable(
        class_name=cls.get("name"),
        super_class=cls.get_optional("superclass"),
        imports=imports,
        fields=tuple(_symbol(f) for f in cls.children_of(Kind.VAR_DECL)),
        method_infos=tuple(_method_info(m) for m in cls.children_of(Kind.METHOD_DECL)),
    )
    logger.debug("Built symbol table for %s: %d fields, %d methods",
                 table.class_name, len(table.fields), len(table.method_infos))
    return table
