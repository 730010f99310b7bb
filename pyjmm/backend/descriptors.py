"""
JVM names and descriptors for Jmm types.
"""

from typing import Sequence

from ..types import Type

PRIMITIVE_DESCRIPTORS = {
    "int": "I",
    "boolean": "Z",
    "void": "V",
}

KNOWN_CLASSES = {
    "String": "java/lang/String",
    "Object": "java/lang/Object",
    "any": "java/lang/Object",
}


def internal_name(class_name: str, imports: Sequence[str]) -> str:
    """Internal name of a class, resolved against the imports by equality or suffix."""
    for imp in imports:
        if imp == class_name or imp.endswith("." + class_name):
            return imp.replace(".", "/")
    return KNOWN_CLASSES.get(class_name, class_name)


def descriptor(t: Type, imports: Sequence[str]) -> str:
    if t.is_array:
        return "[" + descriptor(Type(t.name), imports)
    primitive = PRIMITIVE_DESCRIPTORS.get(t.name)
    if primitive is not None:
        return primitive
    return f"L{internal_name(t.name, imports)};"


def method_descriptor(params: Sequence[Type], return_type: Type, imports: Sequence[str]) -> str:
    args = "".join(descriptor(p, imports) for p in params)
    return f"({args}){descriptor(return_type, imports)}"


def is_int_family(t: Type) -> bool:
    """int and boolean values use the i-prefixed load/store/return opcodes."""
    return not t.is_array and t.name in ("int", "boolean")
