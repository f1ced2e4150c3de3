"""
Program representations for the StackEvo evolutionary system.

Fits stack-machine programs into the Gene interface so they can be generated,
mutated and crossed by the evolution engine.
"""

import random
from dataclasses import dataclass
from typing import Iterable, Tuple

from .gene import Gene
from ..vm.lang import COMMANDS, Prog, parse_program, render_program


LITERAL_MIN = -10
LITERAL_MAX = 10
MIN_LENGTH = 1
MAX_LENGTH = 10


def random_prog(rng: random.Random) -> Prog:
    """Generate a random number or command."""
    if rng.random() < 0.5:
        # 50% chance of number
        return rng.randrange(LITERAL_MIN, LITERAL_MAX + 1)
    # 50% chance of command
    return COMMANDS[rng.randrange(len(COMMANDS))]


@dataclass(frozen=True)
class ProgramGene(Gene):
    """A program as a gene. Immutable; every operator returns a new program."""
    progs: Tuple[Prog, ...] = ()

    def __post_init__(self):
        # Accept any iterable of progs but always store a hashable tuple
        object.__setattr__(self, "progs", tuple(self.progs))

    def __len__(self) -> int:
        return len(self.progs)

    def __iter__(self):
        return iter(self.progs)

    def __str__(self) -> str:
        return render_program(self.progs)

    @classmethod
    def from_progs(cls, progs: Iterable[Prog]) -> "ProgramGene":
        return cls(tuple(progs))

    @classmethod
    def from_text(cls, text: str) -> "ProgramGene":
        return cls(tuple(parse_program(text)))

    @classmethod
    def generate(cls, rng: random.Random) -> "ProgramGene":
        length = rng.randrange(MIN_LENGTH, MAX_LENGTH + 1)
        return cls(tuple(random_prog(rng) for _ in range(length)))

    def mutate(self, rng: random.Random) -> "ProgramGene":
        """Insert, delete, or replace a random prog."""
        result = list(self.progs)
        choice = rng.randrange(3)
        if choice == 0:
            prog = random_prog(rng)
            result.insert(rng.randrange(len(result) + 1), prog)
        elif choice == 1:
            if result:
                del result[rng.randrange(len(result))]
        else:
            if result:
                prog = random_prog(rng)
                result[rng.randrange(len(result))] = prog
        return ProgramGene(tuple(result))

    def cross(self, other: "ProgramGene", rng: random.Random) -> "ProgramGene":
        """Join a prefix of this program to a suffix of other.

        Either cut may fall at the very start or end, so empty programs give
        empty slices rather than errors.
        """
        head = rng.randrange(len(self.progs) + 1)
        tail = rng.randrange(len(other.progs) + 1)
        return ProgramGene(self.progs[:head] + other.progs[tail:])
