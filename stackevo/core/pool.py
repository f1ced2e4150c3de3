"""
Gene pool for the StackEvo evolutionary system.

The Pool holds a fixed-size population of genes paired with their fitness and
advances it one generation at a time. It is generic over any Gene type and
never looks inside the genes: it only calls their operators and the fitness
function it was constructed with.
"""

import logging
import math
import numbers
import random
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar, TYPE_CHECKING

from ..entities import GenePair
from .gene import Gene

if TYPE_CHECKING:
    from .sampling import EvolutionStrategy


logger = logging.getLogger(__name__)

G = TypeVar("G", bound=Gene)


class InvalidFitnessError(ValueError):
    """Exception raised when a fitness function returns an unusable score."""
    pass


class Pool(Generic[G]):
    """
    A population of genes evolved together.

    ``genes`` is in no particular order. Fitness values are only guaranteed
    to be up to date right after construction and right after ``evolve``.
    ``back_genes`` is the buffer the previous generation is moved into while
    the next one is assembled; the two lists are swapped every generation.
    """

    def __init__(self, gene_type: Type[G], size: int,
                 fitness: Callable[[G], float], rng: random.Random,
                 strategy: Optional["EvolutionStrategy"] = None):
        if size < 1:
            raise ValueError(f"Pool size must be at least 1, got {size}")

        self.gene_type = gene_type
        self.size = size
        self.fitness = fitness
        # Import here to avoid circular imports
        if strategy is None:
            from .sampling import RouletteCrossoverStrategy
            strategy = RouletteCrossoverStrategy()
        self.strategy = strategy
        self.generation = 0

        self.genes: List[GenePair] = []
        self.back_genes: List[GenePair] = []
        for _ in range(size):
            self.genes.append(self.spawn(rng))

    def score(self, gene: G) -> GenePair:
        """Evaluate a gene and pair it with its fitness."""
        fit = self.fitness(gene)
        if isinstance(fit, bool) or not isinstance(fit, numbers.Real):
            raise InvalidFitnessError(f"Fitness must be a number; got {fit!r} for {gene}")
        fit = float(fit)
        if not math.isfinite(fit) or fit < 0:
            raise InvalidFitnessError(
                f"Fitness must be finite and non-negative; got {fit!r} for {gene}"
            )
        return GenePair(gene=gene, fitness=fit)

    def spawn(self, rng: random.Random) -> GenePair:
        """Generate a new random gene and score it."""
        return self.score(self.gene_type.generate(rng))

    def evolve(self, rng: random.Random):
        """
        Evolve one generation.

        The current population is moved into the back buffer and the
        strategy assembles a new population of the same size from it. If
        anything raises while the new population is assembled, the previous
        population is restored before the exception propagates.
        """
        previous = [(pair, pair.selected) for pair in self.genes]

        # Swap into the back buffer so we can assemble a new pool of genes
        self.genes, self.back_genes = self.back_genes, self.genes
        self.genes.clear()
        for pair in self.back_genes:
            pair.selected = False

        try:
            self.strategy.populate(self, rng)
            if len(self.genes) != self.size:
                raise RuntimeError(
                    f"{type(self.strategy).__name__} produced {len(self.genes)} genes, "
                    f"expected {self.size}"
                )
        except BaseException:
            logger.warning(f"Generation {self.generation + 1} aborted, keeping previous population")
            self._restore(previous)
            raise

        # Whatever is left in the back buffer has been evicted
        self.back_genes.clear()
        self.generation += 1

    def _restore(self, previous):
        self.genes.clear()
        self.back_genes.clear()
        for pair, selected in previous:
            pair.selected = selected
            self.genes.append(pair)

    def get_best_pair(self) -> GenePair:
        """Get the pair with the strictly greatest fitness (first one on ties)."""
        best = self.genes[0]
        for pair in self.genes:
            if pair.fitness > best.fitness:
                best = pair
        return best

    def get_best(self) -> G:
        """Get the current best gene."""
        return self.get_best_pair().gene

    def get_statistics(self) -> Dict[str, Any]:
        """Get pool statistics."""
        scores = [pair.fitness for pair in self.genes]
        return {
            "size": self.size,
            "generation": self.generation,
            "best_fitness": max(scores),
            "avg_fitness": sum(scores) / len(scores),
            "worst_fitness": min(scores),
            "selected": sum(1 for pair in self.genes if pair.selected)
        }


# Convenience function for quick pool creation with different strategies
def create_pool(gene_type: Type[G], size: int, fitness: Callable[[G], float],
                rng: random.Random, strategy_name: str = "roulette",
                **kwargs) -> Pool[G]:
    """
    Create a Pool with a specific evolution strategy.

    Args:
        gene_type: The Gene subclass to evolve
        size: Number of individuals in the pool
        fitness: Function scoring a gene; higher is better
        rng: Random source used to fill the pool
        strategy_name: One of "roulette", "truncation", "thirds"
        **kwargs: Additional arguments for the strategy

    Returns:
        Configured and fully scored Pool
    """
    from .sampling import STRATEGIES

    if strategy_name not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy_name}. Available: {list(STRATEGIES.keys())}")

    strategy = STRATEGIES[strategy_name](**kwargs)

    return Pool(gene_type, size, fitness, rng, strategy=strategy)
