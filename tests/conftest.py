"""
Shared fixtures for the StackEvo test suite.
"""

import random
from dataclasses import dataclass

import pytest

from stackevo.core.gene import Gene


@dataclass(frozen=True)
class CounterGene(Gene):
    """Gene whose fitness is its id; records how it was produced."""
    id: int
    kind: str = "generated"

    next_id = 1

    @classmethod
    def generate(cls, rng):
        gene = cls(cls.next_id)
        cls.next_id += 1
        return gene

    def mutate(self, rng):
        return CounterGene(self.id, "mutated")

    def cross(self, other, rng):
        return CounterGene(self.id, "crossed")


@pytest.fixture
def counter_gene():
    """CounterGene with its id counter reset to 1."""
    CounterGene.next_id = 1
    return CounterGene


@pytest.fixture
def rng():
    """A deterministic random source."""
    return random.Random(123)
