#!/usr/bin/env python3
"""
Chart smoke tests (Agg backend, see conftest).
"""

import pandas as pd
import pytest

from portfolio_mcmc.config import SystemConfig
from portfolio_mcmc.engine import Portfolio, PopulationOptimizer, run_forecast
from portfolio_mcmc.visualization import plot_optimizer_history, plot_forecast_distribution


def test_optimizer_history_chart(cyclic_collection, tmp_path):
    config = SystemConfig(horizon_years=1, population_size=4, generations=3, seed=2)
    optimizer = PopulationOptimizer(config)
    optimizer.run(config.population_size, config.generations, cyclic_collection)

    path = tmp_path / 'plots' / 'history.png'
    fig, axes = plot_optimizer_history(optimizer.history_frame(), save_path=str(path))
    assert path.exists()
    assert len(axes) == 2


def test_optimizer_history_chart_needs_data():
    empty = pd.DataFrame(columns=['returns', 'volatility', 'sharpe_ratio', 'portfolio'])
    with pytest.raises(ValueError, match="empty"):
        plot_optimizer_history(empty)


def test_forecast_chart(cyclic_collection, rng, tmp_path):
    results = run_forecast(Portfolio.from_weights({'A': 1, 'B': 1}), cyclic_collection,
                           'block', 30, rng, SystemConfig(horizon_years=1))

    path = tmp_path / 'forecast.png'
    plot_forecast_distribution(results, [50, 90], title='Monte Carlo', save_path=str(path))
    assert path.exists()
