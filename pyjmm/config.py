"""
Compiler configuration.
"""

from dataclasses import dataclass
from typing import Mapping

UNCONSTRAINED = -1


@dataclass(frozen=True)
class CompilerConfig:
    """Options controlling optional pipeline stages.

    ``optimize`` enables AST constant propagation and folding.
    ``register_budget`` is the maximum number of local slots a method may
    use after register allocation; -1 leaves the registers unallocated.
    """
    optimize: bool = False
    register_budget: int = UNCONSTRAINED

    def __post_init__(self):
        if self.register_budget < UNCONSTRAINED:
            raise ValueError(f"Invalid register budget: {self.register_budget}")

    @property
    def allocate_registers(self) -> bool:
        return self.register_budget != UNCONSTRAINED

    @classmethod
    def from_mapping(cls, options: Mapping[str, str]) -> "CompilerConfig":
        """Build a config from string options (``optimize``, ``registerAllocation``)."""
        optimize = str(options.get("optimize", "false")).strip().lower() == "true"
        raw_budget = str(options.get("registerAllocation", UNCONSTRAINED)).strip()
        try:
            budget = int(raw_budget)
        except ValueError:
            raise ValueError(f"Invalid register budget: {raw_budget}") from None
        return cls(optimize=optimize, register_budget=budget)
