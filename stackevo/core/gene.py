"""
The gene capability consumed by the evolution engine.

Any candidate-solution encoding can be evolved by a Pool as long as it can be
randomly generated, mutated and crossed with another gene of the same type.
"""

import random
from abc import ABC, abstractmethod
from typing import TypeVar


G = TypeVar("G", bound="Gene")


class Gene(ABC):
    """Abstract base class for values that can live in a Pool.

    Subclasses must also define equality and hashing over their encoded
    content; the pool uses them only for identity bookkeeping.
    """

    @classmethod
    @abstractmethod
    def generate(cls, rng: random.Random) -> "Gene":
        """Generate a new random gene. This is initially used to fill the pool."""
        pass

    @abstractmethod
    def mutate(self: G, rng: random.Random) -> G:
        """Generate a new gene that is a mutation of this gene."""
        pass

    @abstractmethod
    def cross(self: G, other: G, rng: random.Random) -> G:
        """Generate a new gene recombining material from this gene and other."""
        pass
