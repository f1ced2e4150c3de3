"""
Core components for StackEvo - evolution of stack-machine programs.
"""

from .gene import Gene
from .programs import ProgramGene
from .pool import (
    Pool,
    InvalidFitnessError,
    create_pool
)

from .sampling import (
    EvolutionStrategy,
    RouletteCrossoverStrategy,
    TruncationStrategy,
    ThirdsStrategy,
    roulette_select
)

from .controller import (
    EvolutionController,
    EvolutionConfig,
    create_evolution_controller
)

__all__ = [
    "Gene",
    "ProgramGene",
    "Pool",
    "InvalidFitnessError",
    "create_pool",
    "EvolutionStrategy",
    "RouletteCrossoverStrategy",
    "TruncationStrategy",
    "ThirdsStrategy",
    "roulette_select",
    "EvolutionController",
    "EvolutionConfig",
    "create_evolution_controller"
]
