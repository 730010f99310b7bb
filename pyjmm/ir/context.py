"""
Per-compilation state for IR generation.
"""

from dataclasses import dataclass, field


@dataclass
class GenerationContext:
    """Temporary and label counters for one compilation.

    A fresh context must be created for every compilation unit so that
    independent compilations never share numbering.
    """
    temp_prefix: str = "tmp"
    _temp_counter: int = 0
    _label_counter: int = 0
    _reserved: set[str] = field(default_factory=set)

    def reserve(self, names):
        """Mark source variable names so temporaries never collide with them."""
        self._reserved.update(names)

    def new_temp(self) -> str:
        while True:
            name = f"{self.temp_prefix}{self._temp_counter}"
            self._temp_counter += 1
            if name not in self._reserved:
                return name

    def new_label_id(self) -> int:
        """Number shared by the labels of one if, while or && construct."""
        label_id = self._label_counter
        self._label_counter += 1
        return label_id
