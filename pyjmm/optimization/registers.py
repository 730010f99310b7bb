"""
Register allocation by interference-graph coloring.
"""

import logging
from itertools import combinations

from ..ir.model import IRMethod, IRProgram
from ..reports import Report, Stage
from .liveness import Liveness, analyze_liveness

logger = logging.getLogger(__name__)


class InterferenceGraph:
    """Undirected graph over variable names."""

    def __init__(self):
        self._adjacency: dict[str, set[str]] = {}

    def add_node(self, name: str):
        self._adjacency.setdefault(name, set())

    def add_edge(self, a: str, b: str):
        if a == b:
            return
        self.add_node(a)
        self.add_node(b)
        self._adjacency[a].add(b)
        self._adjacency[b].add(a)

    @property
    def nodes(self) -> list[str]:
        return sorted(self._adjacency)

    def neighbors(self, name: str) -> set[str]:
        return self._adjacency.get(name, set())

    def degree(self, name: str) -> int:
        return len(self.neighbors(name))

    def has_edge(self, a: str, b: str) -> bool:
        return b in self.neighbors(a)

    def edges(self) -> list[tuple[str, str]]:
        return [(a, b) for a in self.nodes for b in sorted(self._adjacency[a]) if a < b]


def build_interference_graph(method: IRMethod, liveness: Liveness) -> InterferenceGraph:
    """Connect variables live at the same time; ``this`` and parameters are left out."""
    fixed = {"this"} | {p.name for p in method.params}
    graph = InterferenceGraph()
    for name in liveness.names() - fixed:
        graph.add_node(name)

    for i in range(len(method.instructions)):
        for live in (liveness.live_in[i], liveness.live_out[i]):
            for a, b in combinations(sorted(live - fixed), 2):
                graph.add_edge(a, b)
        for defined in liveness.defs[i] - fixed:
            for live in liveness.live_out[i] - fixed:
                graph.add_edge(defined, live)
    return graph


def color_graph(graph: InterferenceGraph, first_register: int) -> dict[str, int]:
    """Greedy coloring in decreasing-degree order, lowest free register first."""
    order = sorted(graph.nodes, key=lambda name: -graph.degree(name))
    colors: dict[str, int] = {}
    for name in order:
        taken = {colors[n] for n in graph.neighbors(name) if n in colors}
        register = first_register
        while register in taken:
            register += 1
        colors[name] = register
    return colors


def allocate_method(method: IRMethod) -> InterferenceGraph:
    """Replace the method's register map with a colored one."""
    graph = build_interference_graph(method, analyze_liveness(method))
    colors = color_graph(graph, method.reserved_slots)

    table: dict[str, int] = {}
    if not method.is_static:
        table["this"] = 0
    for param in method.params:
        table[param.name] = len(table)
    table.update(colors)
    for name in method.var_table:
        if name not in table:
            table[name] = max(table.values(), default=-1) + 1
    method.var_table = table
    return graph


def allocate_registers(program: IRProgram, budget: int) -> list[Report]:
    """Allocate registers for every method; report methods over ``budget``."""
    reports = []
    for method in program.methods:
        allocate_method(method)
        needed = method.max_register() + 1
        logger.debug("Method %s uses %d register(s)", method.name, needed)
        if budget >= 0 and needed > budget:
            reports.append(Report.error(
                Stage.OPTIMIZATION, 0, 0,
                f"Method '{method.name}' needs {needed} registers, more than the allowed {budget}",
            ))
    return reports
