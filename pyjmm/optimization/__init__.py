"""
AST and IR optimizations.
"""

from .constants import ConstantPropagator, evaluate_binary, fold, fold_constants, propagate_constants
from .liveness import Liveness, analyze_liveness
from .registers import (
    InterferenceGraph,
    allocate_method,
    allocate_registers,
    build_interference_graph,
    color_graph,
)
from .varargs import VarargsNormalizer, normalize_varargs

__all__ = [
    'ConstantPropagator',
    'InterferenceGraph',
    'Liveness',
    'VarargsNormalizer',
    'allocate_method',
    'allocate_registers',
    'analyze_liveness',
    'build_interference_graph',
    'color_graph',
    'evaluate_binary',
    'fold',
    'fold_constants',
    'normalize_varargs',
    'propagate_constants',
]
