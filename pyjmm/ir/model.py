"""
Three-address intermediate representation: elements, instructions,
methods and the program, with OLLIR-style text rendering.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..reports import CompileError
from ..types import BOOLEAN, INT, VOID, Type

IR_TYPE_NAMES = {
    "int": "i32",
    "boolean": "bool",
    "void": "V",
}


def ir_type(t: Type) -> str:
    """IR type suffix: i32, bool, V, array.<elem> or the class name."""
    base = IR_TYPE_NAMES.get(t.name, t.name)
    return f"array.{base}" if t.is_array else base


# Elements

class Element:
    """Value referenced by an instruction."""
    type: Type

    def names(self) -> list[str]:
        """Names of the local slots this element reads."""
        return []


@dataclass(frozen=True)
class Literal(Element):
    value: int
    type: Type

    def __str__(self) -> str:
        return f"{int(self.value)}.{ir_type(self.type)}"


@dataclass(frozen=True)
class Operand(Element):
    name: str
    type: Type

    def names(self) -> list[str]:
        return [self.name]

    def __str__(self) -> str:
        if self.name == "this":
            return "this"
        return f"{self.name}.{ir_type(self.type)}"


@dataclass(frozen=True)
class ClassOperand(Operand):
    """A class name used as a static receiver or allocation target."""

    def names(self) -> list[str]:
        return []

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayOperand(Operand):
    """Element ``index`` of array variable ``name``; ``type`` is the element type."""
    index: Element

    @property
    def array_type(self) -> Type:
        return Type(self.type.name, True)

    def names(self) -> list[str]:
        return [self.name] + self.index.names()

    def __str__(self) -> str:
        return f"{self.name}[{self.index}].{ir_type(self.type)}"


# Instructions

class Instruction:
    """Base class of IR instructions."""
    type: Type = VOID

    def defs(self) -> list[str]:
        return []

    def uses(self) -> list[str]:
        return []


@dataclass(frozen=True)
class SingleOp(Instruction):
    operand: Element

    @property
    def type(self) -> Type:
        return self.operand.type

    def uses(self) -> list[str]:
        return self.operand.names()

    def __str__(self) -> str:
        return str(self.operand)


@dataclass(frozen=True)
class BinaryOp(Instruction):
    op: str
    left: Element
    right: Element
    type: Type = INT

    def uses(self) -> list[str]:
        return self.left.names() + self.right.names()

    def __str__(self) -> str:
        return f"{self.left} {self.op}.{ir_type(self.type)} {self.right}"


@dataclass(frozen=True)
class UnaryOp(Instruction):
    op: str
    operand: Element
    type: Type = BOOLEAN

    def uses(self) -> list[str]:
        return self.operand.names()

    def __str__(self) -> str:
        return f"{self.op}.{ir_type(self.type)} {self.operand}"


class Invocation(Enum):
    VIRTUAL = "invokevirtual"
    STATIC = "invokestatic"
    SPECIAL = "invokespecial"
    NEW = "new"
    ARRAY_LENGTH = "arraylength"


@dataclass(frozen=True)
class Call(Instruction):
    invocation: Invocation
    receiver: Optional[Element]
    method: Optional[str] = None
    args: tuple[Element, ...] = ()
    type: Type = VOID

    def uses(self) -> list[str]:
        names = self.receiver.names() if self.receiver is not None else []
        for arg in self.args:
            names.extend(arg.names())
        return names

    def __str__(self) -> str:
        parts = []
        if self.invocation is Invocation.NEW and self.type.is_array:
            parts.append("array")
        elif self.receiver is not None:
            parts.append(str(self.receiver))
        if self.method is not None:
            parts.append(f'"{self.method}"')
        parts.extend(str(arg) for arg in self.args)
        return f"{self.invocation.value}({', '.join(parts)}).{ir_type(self.type)}"


@dataclass(frozen=True)
class GetField(Instruction):
    obj: Operand
    field: Operand

    @property
    def type(self) -> Type:
        return self.field.type

    def __str__(self) -> str:
        return f"getfield({self.obj}, {self.field}).{ir_type(self.type)}"


@dataclass(frozen=True)
class PutField(Instruction):
    obj: Operand
    field: Operand
    value: Element

    def uses(self) -> list[str]:
        return self.value.names()

    def __str__(self) -> str:
        return f"putfield({self.obj}, {self.field}, {self.value}).V"


@dataclass(frozen=True)
class Assign(Instruction):
    dest: Operand
    rhs: Instruction

    @property
    def type(self) -> Type:
        return self.dest.type

    def defs(self) -> list[str]:
        if isinstance(self.dest, ArrayOperand):
            return []
        return [self.dest.name]

    def uses(self) -> list[str]:
        names = self.rhs.uses()
        if isinstance(self.dest, ArrayOperand):
            names = self.dest.names() + names
        return names

    def __str__(self) -> str:
        return f"{self.dest} :=.{ir_type(self.type)} {self.rhs}"


@dataclass(frozen=True)
class Return(Instruction):
    operand: Optional[Element] = None
    type: Type = VOID

    def uses(self) -> list[str]:
        return self.operand.names() if self.operand is not None else []

    def __str__(self) -> str:
        if self.operand is None:
            return "ret.V"
        return f"ret.{ir_type(self.type)} {self.operand}"


@dataclass(frozen=True)
class CondBranch(Instruction):
    condition: Instruction
    label: str

    def uses(self) -> list[str]:
        return self.condition.uses()

    def __str__(self) -> str:
        return f"if ({self.condition}) goto {self.label}"


@dataclass(frozen=True)
class Goto(Instruction):
    label: str

    def __str__(self) -> str:
        return f"goto {self.label}"


@dataclass(frozen=True)
class NoOp(Instruction):
    def __str__(self) -> str:
        return ""


@dataclass(frozen=True)
class Label(Instruction):
    """Marks the position of ``name`` inside an expression's computation.

    IRMethod.add turns it into a label on the next real instruction.
    """
    name: str

    def __str__(self) -> str:
        return f"{self.name}:"


# Methods and program

@dataclass
class IRField:
    name: str
    type: Type

    def to_text(self) -> str:
        return f".field public {self.name}.{ir_type(self.type)};"


@dataclass
class IRMethod:
    """An IR method: instructions, label positions and the register map."""
    name: str
    return_type: Type
    params: list[Operand] = field(default_factory=list)
    is_static: bool = False
    is_public: bool = True
    instructions: list[Instruction] = field(default_factory=list)
    labels: dict[str, int] = field(default_factory=dict)
    var_table: dict[str, int] = field(default_factory=dict)
    _pending_labels: list[str] = field(default_factory=list, repr=False)

    def add(self, instruction: Instruction):
        if isinstance(instruction, Label):
            self.add_label(instruction.name)
            return
        for label in self._pending_labels:
            self.labels[label] = len(self.instructions)
        self._pending_labels.clear()
        self.instructions.append(instruction)

    def extend(self, instructions):
        for instruction in instructions:
            self.add(instruction)

    def add_label(self, label: str):
        if label in self.labels or label in self._pending_labels:
            raise CompileError(f"Duplicate label: {label}")
        self._pending_labels.append(label)

    def finish(self):
        """Anchor trailing labels and assign one register per variable."""
        if self._pending_labels:
            self.add(NoOp())
        self.build_var_table()

    @property
    def reserved_slots(self) -> int:
        """Slots taken by ``this`` (instance methods) and the parameters."""
        return (0 if self.is_static else 1) + len(self.params)

    def build_var_table(self):
        table: dict[str, int] = {}
        if not self.is_static:
            table["this"] = 0
        for param in self.params:
            table[param.name] = len(table)
        for instruction in self.instructions:
            for name in instruction.defs() + instruction.uses():
                if name not in table:
                    table[name] = len(table)
        self.var_table = table

    def register(self, name: str) -> int:
        try:
            return self.var_table[name]
        except KeyError:
            raise CompileError(f"Variable '{name}' has no register in method '{self.name}'") from None

    def max_register(self) -> int:
        return max(self.var_table.values(), default=-1)

    def labels_at(self, index: int) -> list[str]:
        return [label for label, position in self.labels.items() if position == index]

    def label_index(self, label: str) -> int:
        try:
            return self.labels[label]
        except KeyError:
            raise CompileError(f"Unknown label '{label}' in method '{self.name}'") from None

    def successors(self, index: int) -> list[int]:
        """Indices of the instructions that may run after instruction ``index``."""
        instruction = self.instructions[index]
        if isinstance(instruction, Return):
            return []
        if isinstance(instruction, Goto):
            return [self.label_index(instruction.label)]
        following = [index + 1] if index + 1 < len(self.instructions) else []
        if isinstance(instruction, CondBranch):
            return [self.label_index(instruction.label)] + following
        return following

    def to_text(self) -> str:
        modifiers = ["public"] if self.is_public else []
        if self.is_static:
            modifiers.append("static")
        params = ", ".join(str(p) for p in self.params)
        lines = [f".method {' '.join(modifiers)} {self.name}({params}).{ir_type(self.return_type)} {{"]
        for i, instruction in enumerate(self.instructions):
            for label in self.labels_at(i):
                lines.append(f"{label}:")
            text = str(instruction)
            if text:
                lines.append(f"    {text};")
        lines.append("}")
        return "\n".join(lines)


@dataclass
class IRProgram:
    """IR of one class."""
    class_name: str
    super_class: Optional[str] = None
    imports: list[str] = field(default_factory=list)
    fields: list[IRField] = field(default_factory=list)
    methods: list[IRMethod] = field(default_factory=list)

    def method(self, name: str) -> IRMethod:
        for method in self.methods:
            if method.name == name:
                return method
        raise CompileError(f"Unknown IR method: {name}")

    def to_text(self) -> str:
        lines = [f"import {imp};" for imp in self.imports]
        header = self.class_name
        if self.super_class:
            header += f" extends {self.super_class}"
        lines.append(f"{header} {{")
        lines.extend(f.to_text() for f in self.fields)
        lines.append(f".construct {self.class_name}().V {{")
        lines.append('    invokespecial(this, "<init>").V;')
        lines.append("}")
        lines.extend(m.to_text() for m in self.methods)
        lines.append("}")
        return "\n".join(lines) + "\n"
