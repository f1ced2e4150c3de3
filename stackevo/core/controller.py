"""
Controller for StackEvo - drives a gene pool through generations.

This module implements the evolutionary loop that coordinates:
- Advancing the pool one generation at a time
- Tracking the best individual seen and stopping criteria
- Progress reporting
- MLflow tracking of per-generation metrics and the final best program
"""

import logging
import random
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

import mlflow

from .pool import Pool, create_pool
from .programs import ProgramGene
from ..entities import GenePair


logger = logging.getLogger(__name__)


@dataclass
class EvolutionConfig:
    """Configuration for the evolutionary process."""
    max_generations: int = 1000
    target_fitness: Optional[float] = None  # Stop once the best reaches this
    early_stopping_generations: int = 0  # Stop if no improvement for N generations, 0 disables
    report_interval: int = 10
    verbose: bool = True

    # MLflow configuration
    experiment_name: str = "stackevo_evolution"
    log_artifacts: bool = True
    tracking_uri: Optional[str] = None  # Use default local tracking if None


class EvolutionController:
    """
    Main controller for the evolutionary search.

    Each generation:
    1. pool.evolve(rng)
    2. read pool statistics and the current best individual
    3. update improvement tracking and log metrics
    """

    def __init__(self,
                 pool: Pool,
                 rng: random.Random,
                 config: Optional[EvolutionConfig] = None):
        self.pool = pool
        self.rng = rng
        self.config = config or EvolutionConfig()

        # Track evolution statistics
        self.stats = {
            'generations_run': 0,
            'best_fitness_seen': 0.0,
            'generations_without_improvement': 0,
            'target_reached': False
        }

        # Initialize MLflow tracking
        self._setup_mlflow()

    def _setup_mlflow(self):
        """Set up MLflow experiment."""
        if self.config.tracking_uri:
            mlflow.set_tracking_uri(self.config.tracking_uri)

        experiment = mlflow.get_experiment_by_name(self.config.experiment_name)
        if experiment is None:
            experiment_id = mlflow.create_experiment(self.config.experiment_name)
            logger.info(f"Created new MLflow experiment: {self.config.experiment_name}")
        else:
            experiment_id = experiment.experiment_id
            logger.info(f"Using existing MLflow experiment: {self.config.experiment_name}")

        mlflow.set_experiment(experiment_id=experiment_id)

    def run_evolution(self) -> Dict[str, Any]:
        """
        Run the complete evolutionary search.

        Returns:
            Dictionary containing evolution results and statistics
        """
        logger.info(f"Starting evolution for up to {self.config.max_generations} generations")

        with mlflow.start_run():
            return self._run_evolution_loop()

    def _run_evolution_loop(self) -> Dict[str, Any]:
        """Run evolution loop with MLflow tracking."""
        config_dict = asdict(self.config)
        for key, value in config_dict.items():
            if value is not None:
                mlflow.log_param(key, value)
        mlflow.log_param("pool_size", self.pool.size)
        mlflow.log_param("strategy", type(self.pool.strategy).__name__)

        initial_stats = self.pool.get_statistics()
        self.stats['best_fitness_seen'] = initial_stats['best_fitness']
        mlflow.log_metric("initial_best_fitness", initial_stats['best_fitness'])
        mlflow.log_metric("initial_avg_fitness", initial_stats['avg_fitness'])

        if self.config.verbose:
            self._print_initial_stats(initial_stats)

        if self._target_reached(initial_stats['best_fitness']):
            logger.info("Target fitness reached by the initial pool")
            self.stats['target_reached'] = True

        generation = 0
        while not self.stats['target_reached'] and generation < self.config.max_generations:
            try:
                result = self.run_single_generation()
            except Exception as e:
                logger.error(f"Error in generation {generation}: {e}")
                raise

            generation += 1
            self.stats['generations_run'] = generation

            if result['best_fitness'] > self.stats['best_fitness_seen']:
                self.stats['best_fitness_seen'] = result['best_fitness']
                self.stats['generations_without_improvement'] = 0
            else:
                self.stats['generations_without_improvement'] += 1

            mlflow.log_metrics({
                "best_fitness": result['best_fitness'],
                "avg_fitness": result['avg_fitness'],
                "worst_fitness": result['worst_fitness'],
                "generations_without_improvement": self.stats['generations_without_improvement']
            }, step=generation)

            if self.config.verbose and self._should_report(generation):
                self._print_generation_results(generation, result)

            if self._target_reached(result['best_fitness']):
                logger.info(f"Target fitness {self.config.target_fitness} reached "
                            f"after {generation} generations")
                self.stats['target_reached'] = True
                if self.config.verbose and not self._should_report(generation):
                    self._print_generation_results(generation, result)
                break

            if (self.config.early_stopping_generations > 0 and
                    self.stats['generations_without_improvement'] >=
                    self.config.early_stopping_generations):
                logger.info(f"Early stopping after {generation} generations "
                            f"(no improvement for {self.config.early_stopping_generations})")
                mlflow.log_param("early_stopped", True)
                mlflow.log_param("early_stop_generation", generation)
                break

        final_results = self._get_final_results()
        self._log_final_results(final_results)

        return final_results

    def run_single_generation(self) -> Dict[str, Any]:
        """
        Run a single generation of the evolutionary algorithm.

        Returns:
            Dictionary containing generation results
        """
        self.pool.evolve(self.rng)

        stats = self.pool.get_statistics()
        best = self.pool.get_best_pair()

        return {
            'generation': stats['generation'],
            'best_fitness': stats['best_fitness'],
            'avg_fitness': stats['avg_fitness'],
            'worst_fitness': stats['worst_fitness'],
            'selected': stats['selected'],
            'best_program': str(best.gene)
        }

    def get_best_program(self) -> GenePair:
        """
        Get the best individual currently in the pool.

        Returns:
            The GenePair holding the best gene and its fitness
        """
        return self.pool.get_best_pair()

    def _target_reached(self, best_fitness: float) -> bool:
        return (self.config.target_fitness is not None and
                best_fitness >= self.config.target_fitness)

    def _should_report(self, generation: int) -> bool:
        interval = max(1, self.config.report_interval)
        return generation % interval == 0

    def _print_initial_stats(self, stats: Dict[str, Any]):
        """Print initial pool statistics."""
        print(f"\n=== Initial Pool Stats ===")
        print(f"Genes: {stats['size']}")
        print(f"Best fitness: {stats['best_fitness']:.4f}")
        print(f"Average fitness: {stats['avg_fitness']:.4f}")
        print()

    def _print_generation_results(self, generation: int, result: Dict[str, Any]):
        """Print results for a single generation."""
        print(f"Gen {generation:5d}: "
              f"best {result['best_fitness']:.4f} "
              f"avg {result['avg_fitness']:.4f} "
              f"| {result['best_program']}")

    def _get_final_results(self) -> Dict[str, Any]:
        """Get final evolution results and statistics."""
        best = self.get_best_program()
        return {
            'evolution_stats': dict(self.stats),
            'pool_stats': self.pool.get_statistics(),
            'best_program': str(best.gene),
            'best_fitness': best.fitness
        }

    def _log_final_results(self, results: Dict[str, Any]):
        """Log final evolution results to MLflow."""
        evolution_stats = results['evolution_stats']
        pool_stats = results['pool_stats']

        mlflow.log_metrics({
            "final_generations_run": evolution_stats['generations_run'],
            "final_best_fitness": results['best_fitness'],
            "final_avg_fitness": pool_stats['avg_fitness'],
            "final_best_fitness_seen": evolution_stats['best_fitness_seen']
        })

        if self.config.log_artifacts:
            try:
                mlflow.log_text(results['best_program'] + "\n", "best_program.txt")
            except Exception as e:
                logger.warning(f"Failed to log best program artifact: {e}")

    def cleanup(self):
        """End the MLflow run if one is still active."""
        try:
            if mlflow.active_run():
                mlflow.end_run()
        except Exception as e:
            logger.warning(f"Error ending MLflow run: {e}")


# Factory function for easy controller creation
def create_evolution_controller(fitness,
                                pool_size: int = 100,
                                seed: Optional[int] = None,
                                strategy_name: str = "roulette",
                                config: Optional[EvolutionConfig] = None,
                                gene_type=ProgramGene) -> EvolutionController:
    """
    Factory function to create a controller around a freshly filled pool.

    Args:
        fitness: Function scoring a gene; higher is better
        pool_size: Number of individuals in the pool
        seed: Seed for the random source (None for a nondeterministic run)
        strategy_name: Evolution strategy name, see create_pool
        config: Evolution configuration
        gene_type: The Gene subclass to evolve

    Returns:
        Configured EvolutionController ready to run
    """
    rng = random.Random(seed)
    pool = create_pool(gene_type, pool_size, fitness, rng, strategy_name=strategy_name)

    return EvolutionController(pool=pool, rng=rng, config=config)
