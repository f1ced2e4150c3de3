"""
Tests for roulette selection and the evolution strategies.
"""

import random
from unittest.mock import Mock

import pytest

from stackevo.core.pool import Pool
from stackevo.core.sampling import (
    RouletteCrossoverStrategy,
    ThirdsStrategy,
    TruncationStrategy,
    roulette_select,
)
from stackevo.entities import GenePair


def pairs(*scores):
    return [GenePair(gene=f"g{i}", fitness=s) for i, s in enumerate(scores)]


def fixed_rng(value):
    rng = Mock(spec=random.Random)
    rng.random.return_value = value
    return rng


def id_fitness(gene) -> float:
    return float(gene.id)


class TestRouletteSelect:
    """Test fitness-proportionate selection of a single index."""

    @pytest.mark.parametrize("draw,expected", [
        (0.0, 0),
        (0.1, 0),
        (0.5, 1),
        (0.6, 2),
        (0.99, 2),
    ])
    def test_walks_the_wheel(self, draw, expected):
        candidates = pairs(1.0, 2.0, 3.0)
        assert roulette_select(candidates, 6.0, fixed_rng(draw)) == expected

    def test_zero_fitness_picks_first(self):
        candidates = pairs(0.0, 0.0, 0.0)
        assert roulette_select(candidates, 0.0, fixed_rng(0.7)) == 0

    def test_zero_fitness_candidates_skipped(self):
        """A gene with no fitness is never chosen over one that has some."""
        candidates = pairs(0.0, 1.0)
        rng = random.Random(5)
        picks = [roulette_select(candidates, 1.0, rng) for _ in range(1000)]
        assert picks.count(1) >= 999

    def test_total_drift_falls_back_to_last(self):
        """A running total larger than the real sum still returns a valid index."""
        candidates = pairs(0.0, 0.0)
        assert roulette_select(candidates, 1e-12, fixed_rng(0.9)) == 1

    def test_proportional(self):
        candidates = pairs(1.0, 3.0)
        rng = random.Random(11)
        picks = [roulette_select(candidates, 4.0, rng) for _ in range(4000)]
        assert 0.7 < picks.count(1) / len(picks) < 0.8

    def test_empty_candidates(self):
        with pytest.raises(ValueError, match="empty candidate list"):
            roulette_select([], 0.0, random.Random(1))


class TestRouletteCrossoverStrategy:
    """Test the default strategy in isolation from the pool."""

    def test_fitter_genes_selected_more_often(self, counter_gene):
        """Over many generations the fittest starting gene is the most often selected."""
        counts = {}
        for seed in range(200):
            counter_gene.next_id = 1
            rng = random.Random(seed)
            pool = Pool(counter_gene, 4, id_fitness, rng,
                        strategy=RouletteCrossoverStrategy())
            pool.evolve(rng)
            chosen = pool.genes[0].gene.id
            counts[chosen] = counts.get(chosen, 0) + 1

        # Selection weights are 1:2:3:4
        assert counts.get(4, 0) > counts.get(1, 0)

    def test_crossover_partner_among_selected(self, counter_gene, rng):
        crossed_with = []

        class RecordingGene(counter_gene):
            def cross(self, other, rng):
                crossed_with.append(other)
                return super().cross(other, rng)

        pool = Pool(RecordingGene, 16, id_fitness, rng)
        pool.evolve(rng)

        selected = [p.gene for p in pool.genes[:4]]
        assert len(crossed_with) == 4
        assert all(partner in selected for partner in crossed_with)


class TestTruncationStrategy:
    """Test the keep-top-half strategy."""

    def test_keeps_top_half(self, counter_gene, rng):
        pool = Pool(counter_gene, 6, id_fitness, rng, strategy=TruncationStrategy())
        pool.evolve(rng)

        genes = [p.gene for p in pool.genes]
        assert [g.id for g in genes[:3]] == [6, 5, 4]
        assert all(g.kind == "generated" for g in genes[:3])
        assert [g.kind for g in genes[3:]] == ["mutated"] * 3
        assert [g.id for g in genes[3:]] == [6, 5, 4]
        # Nothing new is generated
        assert counter_gene.next_id == 7

    def test_odd_size(self, counter_gene, rng):
        pool = Pool(counter_gene, 5, id_fitness, rng, strategy=TruncationStrategy())
        pool.evolve(rng)
        assert [p.gene.id for p in pool.genes] == [5, 4, 3, 5, 4]
        assert [p.selected for p in pool.genes] == [True] * 3 + [False] * 2

    def test_size_one(self, counter_gene, rng):
        pool = Pool(counter_gene, 1, id_fitness, rng, strategy=TruncationStrategy())
        pool.evolve(rng)
        assert [p.gene for p in pool.genes] == [counter_gene(1)]


class TestThirdsStrategy:
    """Test the select-and-mutate two thirds, generate one third strategy."""

    def test_gen_pool(self, counter_gene, rng):
        pool = Pool(counter_gene, 10, id_fitness, rng, strategy=ThirdsStrategy())
        pool.evolve(rng)

        # Make sure 4 new genes were generated
        assert counter_gene.next_id == 15

        genes = [p.gene for p in pool.genes]
        # First the mutation, then the original
        for i in range(0, 6, 2):
            assert genes[i].kind == "mutated"
            assert genes[i + 1].kind == "generated"
            assert genes[i].id == genes[i + 1].id
            assert pool.genes[i + 1].selected
        assert len({genes[i].id for i in range(0, 6, 2)}) == 3

        # Remaining third is newly generated genes
        assert [g.id for g in genes[6:]] == [11, 12, 13, 14]

        # Also ensure the genes all have up-to-date fitness values
        for pair in pool.genes:
            assert pair.fitness == float(pair.gene.id)

    @pytest.mark.parametrize("size", [1, 2, 3, 4, 5, 7])
    def test_small_sizes(self, counter_gene, size):
        rng = random.Random(size)
        pool = Pool(counter_gene, size, id_fitness, rng, strategy=ThirdsStrategy())
        for _ in range(5):
            pool.evolve(rng)
            assert len(pool.genes) == size
