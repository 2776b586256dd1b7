#!/usr/bin/env python3
"""
PopulationOptimizer tests.

Small populations and a short horizon keep each run fast.
"""

import logging

import numpy as np
import pandas as pd
import pytest

from portfolio_mcmc.config import SystemConfig
from portfolio_mcmc.data import TimeSeries
from portfolio_mcmc.engine import Portfolio, PopulationOptimizer, Individual, Population
from portfolio_mcmc.montecarlo import (
    BlockBootstrap, DataNotFoundError, IndexOutOfRangeError, ScenarioError, generate_scenario,
)


def small_config(**overrides):
    settings = dict(horizon_years=2, population_size=6, generations=3, seed=11)
    settings.update(overrides)
    return SystemConfig(**settings)


def shifted_collection():
    """B starts eleven years after A, so no month of A is covered by B."""
    return {
        'A': TimeSeries.from_values('A', [0.02, -0.01, 0.03, 0.00] * 12),
        'B': TimeSeries.from_values('B', [0.01, 0.01, -0.02, 0.02] * 12, start='2010-01-31'),
    }


def run(config, collection, callback=None):
    optimizer = PopulationOptimizer(config, progress_callback=callback)
    best = optimizer.run(config.population_size, config.generations, collection)
    return optimizer, best


# ============================================================================
# Individuals and populations
# ============================================================================

def test_failed_individual_ranks_lowest():
    good = Individual(Portfolio.from_weights({'A': 1}), sharpe_ratio=-5.0)
    nan = Individual(Portfolio.from_weights({'A': 1}))
    failed = Individual(Portfolio.from_weights({'A': 1}), sharpe_ratio=9.0)
    failed.record_failure(IndexOutOfRangeError("boom"))

    population = Population([failed, good, nan])
    population.sort()
    assert population.individuals[-1] is good
    assert population.best() is good
    assert failed.error == "boom"
    assert np.isnan(failed.sharpe_ratio)


def test_individual_string():
    individual = Individual(Portfolio.from_weights({'A': 1, 'B': 3}),
                            returns=7.5, volatility=10.0, sharpe_ratio=0.75)
    assert str(individual) == "25% A, 75% B ( 7.5/10.0/0.75)"


# ============================================================================
# Runs
# ============================================================================

def test_run_returns_portfolio_over_all_assets(cyclic_collection):
    optimizer, best = run(small_config(), cyclic_collection)

    assert isinstance(best, Portfolio)
    assert best.names == ['A', 'B', 'C']
    assert len(optimizer.population) == 6

    history = optimizer.history_frame()
    assert list(history.index) == [0, 1, 2]
    assert list(history.columns) == ['returns', 'volatility', 'sharpe_ratio', 'portfolio']


def test_progress_callback_once_per_generation(cyclic_collection):
    calls = []
    run(small_config(), cyclic_collection, callback=lambda gen, best: calls.append((gen, best)))

    assert [gen for gen, _ in calls] == [0, 1, 2]
    assert all(isinstance(best, Individual) for _, best in calls)


def test_seeded_runs_are_reproducible(cyclic_collection):
    first, best_first = run(small_config(), cyclic_collection)
    second, best_second = run(small_config(), cyclic_collection)

    assert best_first == best_second
    pd.testing.assert_frame_equal(first.history_frame(), second.history_frame())


def test_thread_pool_matches_sequential(cyclic_collection):
    sequential, best_sequential = run(small_config(), cyclic_collection)
    threaded, best_threaded = run(small_config(max_workers=3), cyclic_collection)

    assert best_sequential == best_threaded
    pd.testing.assert_frame_equal(sequential.history_frame(), threaded.history_frame())


def test_single_factor_mode_runs(cyclic_collection):
    optimizer, best = run(small_config(markov_asset_mode='single_factor'), cyclic_collection)
    # one shared return for every asset: all allocations score alike
    assert optimizer.history_frame()['sharpe_ratio'].notna().all()


def test_reference_weights(cyclic_collection):
    optimizer, _ = run(small_config(reference_weights={'A': 1, 'B': 1, 'C': 2}), cyclic_collection)
    assert optimizer.reference.name == 'Simulated Portfolio'
    assert len(optimizer.reference) == 47


@pytest.mark.parametrize("seed", range(5))
def test_single_increment_portfolios_keep_breeding(cyclic_collection, seed):
    # random portfolios hold one asset, so parents often share no weights
    config = small_config(initial_increments=1, population_size=10, generations=10, seed=seed)
    optimizer, best = run(config, cyclic_collection)

    assert len(optimizer.history_frame()) == 10
    assert best.total_weight > 0


def test_run_validates_sizes(cyclic_collection):
    optimizer = PopulationOptimizer(small_config())
    with pytest.raises(ValueError, match="population_size"):
        optimizer.run(1, 3, cyclic_collection)
    with pytest.raises(ValueError, match="generation_count"):
        optimizer.run(4, 0, cyclic_collection)


# ============================================================================
# Error isolation
# ============================================================================

@pytest.fixture
def flaky_evaluate(monkeypatch):
    """Make the third Portfolio.evaluate call fail (call 1 is the reference replay)."""
    real_evaluate = Portfolio.evaluate
    calls = {'count': 0}

    def evaluate(self, provider):
        calls['count'] += 1
        if calls['count'] == 3:
            raise IndexOutOfRangeError("injected failure")
        return real_evaluate(self, provider)

    monkeypatch.setattr(Portfolio, 'evaluate', evaluate)
    return calls


def test_evaluation_failure_is_isolated(cyclic_collection, flaky_evaluate, caplog):
    caplog.set_level(logging.WARNING)
    optimizer, best = run(small_config(generations=1), cyclic_collection)

    assert best is not None
    assert "injected failure" in caplog.text
    assert np.isfinite(optimizer.history_frame()['sharpe_ratio'].iloc[0])


def test_evaluation_failure_propagates_when_not_isolated(cyclic_collection, flaky_evaluate):
    with pytest.raises(IndexOutOfRangeError, match="injected failure"):
        run(small_config(generations=1, isolate_evaluation_errors=False), cyclic_collection)


def test_scenario_failure_skips_generation(cyclic_collection, monkeypatch, caplog):
    real_generate = PopulationOptimizer._generate_scenario
    calls = {'count': 0}

    def generate(self, names, collection):
        calls['count'] += 1
        if calls['count'] == 2:
            raise DataNotFoundError("no data for 'B' on 1999-02-28")
        return real_generate(self, names, collection)

    monkeypatch.setattr(PopulationOptimizer, '_generate_scenario', generate)
    caplog.set_level(logging.WARNING)
    optimizer, best = run(small_config(), cyclic_collection)

    assert isinstance(best, Portfolio)
    assert list(optimizer.history_frame().index) == [0, 2]
    assert "Generation 1 skipped" in caplog.text


def test_misaligned_assets_fail_every_generation(caplog):
    config = small_config(reference_weights={'A': 1})
    caplog.set_level(logging.WARNING)
    with pytest.raises(ScenarioError, match="no scenario could be generated"):
        run(config, shifted_collection())
    assert caplog.text.count("skipped") == 3


def test_misaligned_assets_propagate_when_not_isolated():
    config = small_config(reference_weights={'A': 1}, isolate_evaluation_errors=False)
    with pytest.raises(DataNotFoundError, match="'B'"):
        run(config, shifted_collection())


# ============================================================================
# Selection and breeding
# ============================================================================

def ranked_population():
    """Seven individuals sorted ascending: three weak holders of A, four strong B/C mixes."""
    weak = [Individual(Portfolio.from_weights({'A': 1}), sharpe_ratio=s) for s in (-3.0, -2.0, -1.0)]
    strong = [Individual(Portfolio.from_weights({'B': b, 'C': 1}), sharpe_ratio=float(b))
              for b in (1, 2, 3, 4)]
    return Population(weak + strong)


def test_breeding_keeps_upper_half(rng):
    optimizer = PopulationOptimizer(small_config(), rng=rng)
    optimizer.population = ranked_population()
    individuals = optimizer.population.individuals
    weak, strong = individuals[:3], individuals[3:]

    optimizer._select_and_breed()

    assert optimizer.population.individuals is individuals
    assert len(individuals) == 7
    assert all(a is b for a, b in zip(individuals[3:], strong))
    assert not any(child is old for child, old in zip(individuals[:3], weak))


def test_offspring_come_from_upper_half(rng):
    optimizer = PopulationOptimizer(small_config(), rng=rng)

    for _ in range(10):
        optimizer.population = ranked_population()
        optimizer._select_and_breed()
        for child in optimizer.population.individuals[:3]:
            assert child.portfolio.names == ['B', 'C']
            assert child.portfolio.total_weight == pytest.approx(optimizer.config.notional_total)
            assert np.isnan(child.sharpe_ratio)


@pytest.mark.parametrize("workers", [None, 3])
def test_generation_shares_one_scenario(cyclic_collection, fixed_now, workers):
    optimizer = PopulationOptimizer(small_config(max_workers=workers))
    scenario = generate_scenario(['A', 'B', 'C'], BlockBootstrap(
        cyclic_collection, np.random.default_rng(5), horizon_years=2, now=fixed_now))

    twins = [Individual(Portfolio.from_weights({'A': 1, 'B': 2, 'C': 1})) for _ in range(4)]
    other = Individual(Portfolio.from_weights({'C': 1}))
    optimizer.population = Population(twins + [other])
    optimizer._evaluate(scenario)

    first = twins[0]
    assert np.isfinite(first.sharpe_ratio)
    for twin in twins[1:]:
        assert (twin.returns, twin.volatility, twin.sharpe_ratio) == \
            (first.returns, first.volatility, first.sharpe_ratio)
    assert other.error is None
