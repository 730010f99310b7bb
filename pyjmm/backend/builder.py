"""
Jasmin instruction builder for one method body.
"""

from ..reports import CompileError

COMPARISON_SUFFIXES = {
    "<": "lt",
    "<=": "le",
    ">": "gt",
    ">=": "ge",
    "==": "eq",
    "!=": "ne",
}


class JasminBuilder:
    """Helper for building a method body in Jasmin syntax.

    Instructions picking a compact encoding (constants, short load/store
    forms) live here; the label counter is local to the method.
    """

    def __init__(self):
        self.lines: list[str] = []
        self._label_counter = 0

    def _emit(self, text: str):
        self.lines.append(f"    {text}")

    def new_label(self, prefix: str) -> str:
        label = f"{prefix}_{self._label_counter}"
        self._label_counter += 1
        return label

    def label(self, name: str):
        self.lines.append(f"{name}:")

    def iconst(self, value: int):
        if value == -1:
            self._emit("iconst_m1")
        elif 0 <= value <= 5:
            self._emit(f"iconst_{value}")
        elif -128 <= value <= 127:
            self._emit(f"bipush {value}")
        elif -32768 <= value <= 32767:
            self._emit(f"sipush {value}")
        else:
            self._emit(f"ldc {value}")

    def _slot_instruction(self, opcode: str, slot: int):
        if slot < 0:
            raise CompileError(f"Invalid local slot {slot} for {opcode}")
        if slot <= 3:
            self._emit(f"{opcode}_{slot}")
        else:
            self._emit(f"{opcode} {slot}")

    def iload(self, slot: int):
        self._slot_instruction("iload", slot)

    def aload(self, slot: int):
        self._slot_instruction("aload", slot)

    def istore(self, slot: int):
        self._slot_instruction("istore", slot)

    def astore(self, slot: int):
        self._slot_instruction("astore", slot)

    def iinc(self, slot: int, value: int):
        if not -128 <= value <= 127:
            raise CompileError(f"iinc increment out of range: {value}")
        self._emit(f"iinc {slot} {value}")

    def emit(self, mnemonic: str):
        """Emit an instruction without operands (iadd, arraylength, pop, ...)."""
        self._emit(mnemonic)

    def goto(self, label: str):
        self._emit(f"goto {label}")

    def if_zero(self, op: str, label: str):
        """Branch comparing the top of stack with zero."""
        self._emit(f"if{COMPARISON_SUFFIXES[op]} {label}")

    def if_icmp(self, op: str, label: str):
        self._emit(f"if_icmp{COMPARISON_SUFFIXES[op]} {label}")

    def if_acmp(self, op: str, label: str):
        if op not in ("==", "!="):
            raise CompileError(f"References cannot be compared with '{op}'")
        self._emit(f"if_acmp{COMPARISON_SUFFIXES[op]} {label}")

    def ifeq(self, label: str):
        self._emit(f"ifeq {label}")

    def ifne(self, label: str):
        self._emit(f"ifne {label}")

    def new(self, class_name: str):
        self._emit(f"new {class_name}")

    def newarray(self, element: str):
        if element in ("int", "boolean"):
            self._emit(f"newarray {element}")
        else:
            self._emit(f"anewarray {element}")

    def getfield(self, owner: str, name: str, desc: str):
        self._emit(f"getfield {owner}/{name} {desc}")

    def putfield(self, owner: str, name: str, desc: str):
        self._emit(f"putfield {owner}/{name} {desc}")

    def invokevirtual(self, owner: str, name: str, desc: str):
        self._emit(f"invokevirtual {owner}/{name}{desc}")

    def invokespecial(self, owner: str, name: str, desc: str):
        self._emit(f"invokespecial {owner}/{name}{desc}")

    def invokestatic(self, owner: str, name: str, desc: str):
        self._emit(f"invokestatic {owner}/{name}{desc}")

    def build(self) -> list[str]:
        return list(self.lines)
