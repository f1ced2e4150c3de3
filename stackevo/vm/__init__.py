"""
Stack machine for StackEvo: the program language and fitness evaluation.
"""

from .lang import (
    Command,
    Prog,
    Stack,
    ProgramParseError,
    render_program,
    parse_program
)

from .fitness import (
    FitnessEvaluator,
    create_evaluator
)

from .targets import TARGETS

__all__ = [
    "Command",
    "Prog",
    "Stack",
    "ProgramParseError",
    "render_program",
    "parse_program",
    "FitnessEvaluator",
    "create_evaluator",
    "TARGETS"
]
