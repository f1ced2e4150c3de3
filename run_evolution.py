#!/usr/bin/env python3
"""
StackEvo Entrypoint - Evolve stack programs from a YAML configuration.

The configuration names the reference function to learn, the pool size and
strategy, the random seed and the MLflow settings.

Usage:
    python run_evolution.py config.yaml
    python run_evolution.py --config config.yaml
    python run_evolution.py --config config.yaml --dry-run
    python run_evolution.py --config config.yaml --score "+ dup *"
"""

import argparse
import logging
import random
import sys
import yaml
from pathlib import Path
from typing import Dict, Any

from stackevo.core import (
    EvolutionController,
    EvolutionConfig,
    Pool,
    ProgramGene,
    create_pool,
)
from stackevo.core.sampling import STRATEGIES
from stackevo.vm import FitnessEvaluator, ProgramParseError, TARGETS, create_evaluator


EXAMPLE_CONFIG_PATH = Path(__file__).parent / "config" / "example_config.yaml"


def setup_logging():
    """Setup basic logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def create_evolution_config(config_dict: Dict[str, Any]) -> EvolutionConfig:
    """Create EvolutionConfig from configuration dictionary."""
    evolution_config = config_dict.get('evolution') or {}
    mlflow_config = config_dict.get('mlflow') or {}

    return EvolutionConfig(
        max_generations=evolution_config.get('max_generations', 1000),
        target_fitness=evolution_config.get('target_fitness'),
        early_stopping_generations=evolution_config.get('early_stopping_generations', 0),
        report_interval=evolution_config.get('report_interval', 10),
        verbose=evolution_config.get('verbose', True),
        experiment_name=mlflow_config.get('experiment_name', 'stackevo_evolution'),
        log_artifacts=mlflow_config.get('log_artifacts', True),
        tracking_uri=mlflow_config.get('tracking_uri')
    )


def create_evaluator_from_config(config_dict: Dict[str, Any]) -> FitnessEvaluator:
    """Create FitnessEvaluator from configuration dictionary."""
    fitness_config = config_dict.get('fitness') or {}

    return create_evaluator(
        target_name=fitness_config['target'],
        input_range=fitness_config.get('input_range', 10),
        step_limit=fitness_config.get('step_limit', 100),
        length_weight=fitness_config.get('length_weight', 0.01)
    )


def create_pool_from_config(config_dict: Dict[str, Any], evaluator: FitnessEvaluator,
                            rng: random.Random) -> Pool:
    """Create and fill a Pool from configuration dictionary."""
    pool_config = config_dict.get('pool') or {}

    return create_pool(
        ProgramGene,
        pool_config.get('size', 100),
        evaluator,
        rng,
        strategy_name=pool_config.get('strategy', 'roulette')
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate the configuration dictionary."""
    if not isinstance(config, dict):
        raise ValueError("Configuration must be a mapping")

    required_sections = ['fitness']
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required configuration section: {section}")

    fitness = config['fitness'] or {}
    if 'target' not in fitness:
        raise ValueError("Fitness configuration must specify a 'target'")
    if fitness['target'] not in TARGETS:
        raise ValueError(f"Unknown target: {fitness['target']}. Available: {list(TARGETS.keys())}")
    input_range = fitness.get('input_range', 10)
    if not _is_int(input_range) or input_range < 1:
        raise ValueError(f"Fitness input_range must be an integer of at least 1, got {input_range!r}")
    step_limit = fitness.get('step_limit', 100)
    if not _is_int(step_limit) or step_limit < 0:
        raise ValueError(f"Fitness step_limit must be a non-negative integer, got {step_limit!r}")
    length_weight = fitness.get('length_weight', 0.01)
    if (isinstance(length_weight, bool) or not isinstance(length_weight, (int, float))
            or not 0.0 <= length_weight <= 1.0):
        raise ValueError(f"Fitness length_weight must be a number within [0, 1], got {length_weight!r}")

    pool = config.get('pool') or {}
    size = pool.get('size', 100)
    if not _is_int(size) or size < 1:
        raise ValueError(f"Pool size must be an integer of at least 1, got {size!r}")
    strategy = pool.get('strategy', 'roulette')
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown strategy: {strategy}. Available: {list(STRATEGIES.keys())}")


def load_config(config_file: Path) -> Dict[str, Any]:
    """Load and validate a configuration file, exiting on errors."""
    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"Error loading configuration file: {e}")
        sys.exit(1)

    try:
        validate_config(config)
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    return config


def score_program(config: Dict[str, Any], program_text: str) -> None:
    """Evaluate a single program against the configured target and print it."""
    try:
        gene = ProgramGene.from_text(program_text)
    except ProgramParseError as e:
        print(f"Program error: {e}")
        sys.exit(1)

    evaluator = create_evaluator_from_config(config)
    result = evaluator.evaluate_program(gene.progs)

    print(f"Program: {gene}")
    print(f"Correct: {result.correct}/{result.total}")
    print(f"Fitness: {result.fitness:.4f}")


def run_evolution(config_file: Path, dry_run: bool = False) -> None:
    """Run the evolutionary search from configuration file."""
    config = load_config(config_file)

    setup_logging()
    logger = logging.getLogger(__name__)

    if dry_run:
        print("Dry run mode - configuration validated successfully!")
        return

    controller = None
    try:
        logger.info("Creating evolution components...")

        seed = (config.get('pool') or {}).get('seed')
        rng = random.Random(seed)
        evolution_config = create_evolution_config(config)
        evaluator = create_evaluator_from_config(config)
        pool = create_pool_from_config(config, evaluator, rng)

        controller = EvolutionController(pool=pool, rng=rng, config=evolution_config)

        logger.info("Starting evolutionary search...")
        results = controller.run_evolution()

        print("\n" + "=" * 60)
        print("Evolution Complete!")
        print("=" * 60)

        evolution_stats = results['evolution_stats']
        print(f"Generations run: {evolution_stats['generations_run']}")
        print(f"Target reached: {evolution_stats['target_reached']}")
        print(f"Best fitness: {results['best_fitness']:.4f}")
        print(f"Best program: {results['best_program']}")

    except KeyboardInterrupt:
        logger.info("Evolution interrupted by user")
        print("\nEvolution interrupted!")
        if controller is not None:
            best = controller.get_best_program()
            print(f"Best so far ({best.fitness:.4f}): {best.gene}")
    except Exception as e:
        logger.error(f"Evolution failed: {e}", exc_info=True)
        print(f"Evolution failed: {e}")
        sys.exit(1)
    finally:
        if controller is not None:
            controller.cleanup()


def main():
    """Main entrypoint."""
    parser = argparse.ArgumentParser(
        description="Run StackEvo evolutionary program search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_evolution.py config.yaml
  python run_evolution.py --config my_config.yaml
  python run_evolution.py --config config.yaml --dry-run
  python run_evolution.py --config config.yaml --score "+ dup *"
  python run_evolution.py --example-config > example.yaml
        """
    )

    parser.add_argument(
        'config_file',
        nargs='?',
        type=Path,
        help='Path to YAML configuration file'
    )

    parser.add_argument(
        '--config', '-c',
        type=Path,
        help='Path to YAML configuration file (alternative to positional argument)'
    )

    parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Validate configuration without running evolution'
    )

    parser.add_argument(
        '--score',
        metavar='PROGRAM',
        help='Score a single program (e.g. "1 - -30 dup") against the configured target and exit'
    )

    parser.add_argument(
        '--example-config',
        action='store_true',
        help='Print an example configuration file and exit'
    )

    args = parser.parse_args()

    if args.example_config:
        try:
            print(EXAMPLE_CONFIG_PATH.read_text())
        except FileNotFoundError:
            print("Error: Example configuration file not found.")
            sys.exit(1)
        return

    config_file = args.config or args.config_file
    if not config_file:
        parser.error("Configuration file is required (provide as positional argument or with --config)")

    if not config_file.exists():
        print(f"Error: Configuration file not found: {config_file}")
        sys.exit(1)

    if args.score is not None:
        score_program(load_config(config_file), args.score)
        return

    run_evolution(config_file, dry_run=args.dry_run)


if __name__ == "__main__":
    main()
