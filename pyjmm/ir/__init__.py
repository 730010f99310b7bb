"""
Intermediate representation package.
"""

from .context import GenerationContext
from .expressions import ExprGenerator, ExprResult
from .generator import IRGenerator
from .model import (
    ArrayOperand,
    Assign,
    BinaryOp,
    Call,
    ClassOperand,
    CondBranch,
    Element,
    GetField,
    Goto,
    Instruction,
    Invocation,
    IRField,
    IRMethod,
    IRProgram,
    Label,
    Literal,
    NoOp,
    Operand,
    PutField,
    Return,
    SingleOp,
    UnaryOp,
    ir_type,
)

__all__ = [
    'ArrayOperand',
    'Assign',
    'BinaryOp',
    'Call',
    'ClassOperand',
    'CondBranch',
    'Element',
    'ExprGenerator',
    'ExprResult',
    'GenerationContext',
    'GetField',
    'Goto',
    'IRField',
    'IRGenerator',
    'IRMethod',
    'IRProgram',
    'Instruction',
    'Invocation',
    'Label',
    'Literal',
    'NoOp',
    'Operand',
    'PutField',
    'Return',
    'SingleOp',
    'UnaryOp',
    'ir_type',
]
