"""
Entity definitions for the StackEvo evolutionary system.

This module contains the small data structures passed between the pool,
the evolution strategies and the fitness evaluator.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class EvaluationResult:
    """Outcome of scoring one program against a reference function"""
    correct: int
    total: int
    length: int
    fitness: float

    @property
    def accuracy(self) -> float:
        if self.total == 0:
            return 0.0
        return self.correct / self.total


@dataclass(eq=False)
class GenePair:
    """A gene paired with its fitness score.

    Equality and hashing consider only the gene, so two pairs wrapping equal
    genes compare equal whatever their scores.
    """
    gene: Any
    fitness: float
    selected: bool = False  # Carried over by selection in the current generation

    def __eq__(self, other):
        if not isinstance(other, GenePair):
            return NotImplemented
        return self.gene == other.gene

    def __hash__(self):
        return hash(self.gene)
