"""
Jasmin assembly backend.
"""

from .builder import JasminBuilder
from .descriptors import descriptor, internal_name, method_descriptor
from .generator import JasminGenerator, estimate_stack, generate_jasmin, locals_limit

__all__ = [
    'JasminBuilder',
    'JasminGenerator',
    'descriptor',
    'estimate_stack',
    'generate_jasmin',
    'internal_name',
    'locals_limit',
    'method_descriptor',
]
