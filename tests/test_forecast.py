#!/usr/bin/env python3
"""
Forecast runner tests.
"""

import numpy as np
import pytest

from portfolio_mcmc.config import SystemConfig
from portfolio_mcmc.data import TimeSeries
from portfolio_mcmc.engine import Portfolio, run_forecast, percentile_result, summarize


@pytest.fixture
def portfolio():
    return Portfolio.from_weights({'A': 50, 'B': 30, 'C': 20})


@pytest.mark.parametrize("method", ["block", "markov"])
def test_results_sorted_by_sharpe(portfolio, cyclic_collection, rng, method):
    config = SystemConfig(horizon_years=2)
    results = run_forecast(portfolio, cyclic_collection, method, 25, rng, config)

    assert len(results) == 25
    assert all(len(r) == 24 for r in results)
    sharpe = [r.sharpe_ratio() for r in results]
    assert sharpe == sorted(sharpe)


def test_percentile_indexing():
    results = [TimeSeries.from_values(str(i), [0.01 * i]) for i in range(200)]
    assert percentile_result(results, 50) is results[100]
    assert percentile_result(results, 99) is results[2]
    assert percentile_result(results, 100) is results[0]

    with pytest.raises(ValueError):
        percentile_result(results, 0)
    with pytest.raises(ValueError, match="no forecast results"):
        percentile_result([], 50)


def test_summarize(portfolio, cyclic_collection, rng):
    results = run_forecast(portfolio, cyclic_collection, 'block', 20, rng,
                           SystemConfig(horizon_years=1))
    table = summarize(results, [50, 80, 90, 95, 99])

    assert list(table.index) == ['P50', 'P80', 'P90', 'P95', 'P99']
    assert list(table.columns) == ['Returns', 'Volatility', 'Sharpe Ratio']
    assert table.loc['P50', 'Sharpe Ratio'] >= table.loc['P99', 'Sharpe Ratio']


def test_seeded_forecast_reproducible(portfolio, cyclic_collection):
    config = SystemConfig(horizon_years=1)
    first = run_forecast(portfolio, cyclic_collection, 'markov', 10, np.random.default_rng(5), config)
    second = run_forecast(portfolio, cyclic_collection, 'markov', 10, np.random.default_rng(5), config)
    assert [r.sharpe_ratio() for r in first] == [r.sharpe_ratio() for r in second]


def test_invalid_arguments(portfolio, cyclic_collection, rng):
    with pytest.raises(ValueError, match="method"):
        run_forecast(portfolio, cyclic_collection, 'gaussian', 10, rng)
    with pytest.raises(ValueError, match="iterations"):
        run_forecast(portfolio, cyclic_collection, 'block', 0, rng)
