"""
Backward liveness analysis over an IR method.
"""

from dataclasses import dataclass

from ..ir.model import IRMethod


@dataclass(frozen=True)
class Liveness:
    """Per-instruction DEF, USE, IN and OUT sets."""
    defs: tuple[frozenset[str], ...]
    uses: tuple[frozenset[str], ...]
    live_in: tuple[frozenset[str], ...]
    live_out: tuple[frozenset[str], ...]

    def names(self) -> set[str]:
        """Every name appearing in an IN, OUT or DEF set."""
        result: set[str] = set()
        for sets in (self.defs, self.live_in, self.live_out):
            for s in sets:
                result |= s
        return result


def analyze_liveness(method: IRMethod) -> Liveness:
    """Iterate ``IN = USE | (OUT - DEF)``, ``OUT = union of successor IN`` to a fixed point."""
    count = len(method.instructions)
    defs = tuple(frozenset(i.defs()) for i in method.instructions)
    uses = tuple(frozenset(i.uses()) for i in method.instructions)
    successors = [method.successors(i) for i in range(count)]

    live_in = [frozenset()] * count
    live_out = [frozenset()] * count
    changed = True
    while changed:
        changed = False
        for i in reversed(range(count)):
            out = frozenset().union(*(live_in[s] for s in successors[i]))
            new_in = uses[i] | (out - defs[i])
            if out != live_out[i] or new_in != live_in[i]:
                live_out[i] = out
                live_in[i] = new_in
                changed = True

    return Liveness(defs, uses, tuple(live_in), tuple(live_out))
