"""
Evolution strategies used by the Pool to build each new generation.

Each strategy receives a pool whose previous generation has been moved into
``pool.back_genes`` and must refill ``pool.genes`` to exactly ``pool.size``
individuals. All randomness comes from the ``rng`` passed in, and draws are
made in a fixed order so runs are reproducible from a seed.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

from ..entities import GenePair

if TYPE_CHECKING:
    from .pool import Pool


logger = logging.getLogger(__name__)


def roulette_select(candidates: List[GenePair], total_fitness: float,
                    rng: random.Random) -> int:
    """
    Pick an index with probability proportional to fitness.

    Args:
        candidates: Non-empty list of scored genes
        total_fitness: Sum of the candidates' fitness values
        rng: Random source

    Returns:
        Index into candidates of the selected gene
    """
    if not candidates:
        raise ValueError("Cannot select from empty candidate list")

    # Pick a number within total fitness
    f = rng.random() * max(0.0, total_fitness)
    # Walk until the remainder goes non-positive
    for i, pair in enumerate(candidates):
        f -= pair.fitness
        if f <= 0:
            return i
    # Only reachable through float drift in the running total
    return len(candidates) - 1


class EvolutionStrategy(ABC):
    """Abstract base class for the ways a generation can be assembled."""

    @abstractmethod
    def populate(self, pool: "Pool", rng: random.Random) -> None:
        """Refill pool.genes from pool.back_genes up to pool.size."""
        pass


class RouletteCrossoverStrategy(EvolutionStrategy):
    """
    Roulette selection of a quarter, then crossover, mutation and fresh genes.

    1. Up to a quarter of the pool is selected without replacement, with
       probability proportional to fitness, and carried over unchanged.
    2. Each selected gene is crossed with a random partner among the selected.
    3. Each selected gene is mutated.
    4. The rest of the pool is filled with newly generated genes.

    Every phase stops early once the pool is full, which only happens for
    pools smaller than four.
    """

    def populate(self, pool: "Pool", rng: random.Random) -> None:
        genes = pool.genes
        back_genes = pool.back_genes
        quarter = max(1, pool.size // 4)

        total_fitness = sum(pair.fitness for pair in back_genes)

        # Selection
        while len(genes) < quarter and back_genes:
            i = roulette_select(back_genes, total_fitness, rng)
            pair = back_genes.pop(i)
            pair.selected = True
            total_fitness -= pair.fitness
            genes.append(pair)
        num_selected = len(genes)

        # Crossover
        for i in range(num_selected):
            if len(genes) >= pool.size:
                break
            partner = genes[rng.randrange(num_selected)]
            genes.append(pool.score(genes[i].gene.cross(partner.gene, rng)))

        # Mutation
        for i in range(num_selected):
            if len(genes) >= pool.size:
                break
            genes.append(pool.score(genes[i].gene.mutate(rng)))

        logger.debug(f"Selected {num_selected} genes, "
                     f"generating {pool.size - len(genes)} new ones")

        # Replenishment
        while len(genes) < pool.size:
            genes.append(pool.spawn(rng))


class TruncationStrategy(EvolutionStrategy):
    """Keep the fitter half and replace the rest with mutations of it."""

    def populate(self, pool: "Pool", rng: random.Random) -> None:
        genes = pool.genes
        # Stable sort keeps ties in their previous order
        ranked = sorted(pool.back_genes, key=lambda x: x.fitness, reverse=True)
        keep = ranked[:(pool.size + 1) // 2]
        for pair in keep:
            pair.selected = True
            genes.append(pair)

        i = 0
        while len(genes) < pool.size:
            genes.append(pool.score(keep[i % len(keep)].gene.mutate(rng)))
            i += 1


class ThirdsStrategy(EvolutionStrategy):
    """
    Roulette-select genes to fill two thirds of the pool, each selection
    contributing a mutation of itself followed by itself; generate the rest.
    """

    def populate(self, pool: "Pool", rng: random.Random) -> None:
        genes = pool.genes
        back_genes = pool.back_genes
        total_fitness = sum(pair.fitness for pair in back_genes)

        while len(genes) < pool.size * 2 // 3 and back_genes:
            i = roulette_select(back_genes, total_fitness, rng)
            total_fitness -= back_genes[i].fitness
            genes.append(pool.score(back_genes[i].gene.mutate(rng)))
            pair = back_genes.pop(i)
            pair.selected = True
            genes.append(pair)

        while len(genes) < pool.size:
            genes.append(pool.spawn(rng))


STRATEGIES = {
    "roulette": RouletteCrossoverStrategy,
    "truncation": TruncationStrategy,
    "thirds": ThirdsStrategy
}
