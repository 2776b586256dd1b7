#!/usr/bin/env python3
"""
Forecast - distribution of a portfolio's outcomes over many synthetic futures.

Results are sorted ascending by Sharpe ratio. Percentile P means "P% of the
outcomes are at least this good": P50 is the median, P99 a bad case.
"""

import logging
import numpy as np
import pandas as pd
from typing import Dict, List, Optional

from portfolio_mcmc.config import SystemConfig
from portfolio_mcmc.data.timeseries import TimeSeries
from portfolio_mcmc.montecarlo import BlockBootstrap, HistoricalReplay, MarkovBootstrap
from .portfolio import Portfolio

FORECAST_METHODS = ('block', 'markov')


def run_forecast(portfolio: Portfolio,
                 collection: Dict[str, TimeSeries],
                 method: str,
                 iterations: int,
                 rng: np.random.Generator,
                 config: Optional[SystemConfig] = None) -> List[TimeSeries]:
    """
    Evaluate `portfolio` against `iterations` fresh synthetic scenarios.

    Parameters:
    -----------
    portfolio : Portfolio
        Allocation to forecast
    collection : Dict[str, TimeSeries]
        Historical monthly returns
    method : str
        'block'  - BlockBootstrap over the collection
        'markov' - MarkovBootstrap seeded with the portfolio's historical replay
    iterations : int
        Number of scenarios
    rng : np.random.Generator
        Random source
    config : SystemConfig, optional
        Horizon and regime length settings

    Returns:
    --------
    List[TimeSeries]: one result per scenario, ascending by Sharpe ratio
    """
    if method not in FORECAST_METHODS:
        raise ValueError(f"method must be one of {FORECAST_METHODS}, got '{method}'")
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations}")
    config = config if config is not None else SystemConfig()

    reference = None
    if method == 'markov':
        reference = portfolio.evaluate(HistoricalReplay(collection))

    logging.info(f"Forecast ({method}): {iterations} scenarios for {portfolio}")

    results = []
    for _ in range(iterations):
        if method == 'block':
            provider = BlockBootstrap(collection, rng,
                                      horizon_years=config.horizon_years,
                                      expected_regime_length=config.expected_regime_length)
        else:
            provider = MarkovBootstrap(reference, rng, horizon_years=config.horizon_years)
        results.append(portfolio.evaluate(provider))

    results.sort(key=_ranking_key)
    return results


def _ranking_key(result: TimeSeries) -> float:
    sharpe = result.sharpe_ratio()
    return -np.inf if np.isnan(sharpe) else sharpe


def percentile_result(results: List[TimeSeries], p: int) -> TimeSeries:
    """Result at index len * (100 - p) // 100 of the ascending list."""
    if not results:
        raise ValueError("no forecast results")
    if not (0 < p <= 100):
        raise ValueError(f"percentile must be in (0, 100], got {p}")
    return results[len(results) * (100 - p) // 100]


def summarize(results: List[TimeSeries], percentiles: List[int]) -> pd.DataFrame:
    """
    Returns, volatility and Sharpe ratio at each percentile.

    Returns:
    --------
    pd.DataFrame indexed by 'P50', 'P80', ... with columns
    'Returns', 'Volatility', 'Sharpe Ratio'
    """
    rows = {}
    for p in percentiles:
        result = percentile_result(results, p)
        rows[f"P{p}"] = {
            'Returns': result.returns(),
            'Volatility': result.volatility(),
            'Sharpe Ratio': result.sharpe_ratio(),
        }
    return pd.DataFrame.from_dict(rows, orient='index')
