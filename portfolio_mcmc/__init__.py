# Portfolio MCMC
"""
Monthly-return portfolio analysis: historical backtests, block-bootstrap and
Markov chain scenario generation, forecasts and a genetic allocation search.

Packages:
- data: TimeSeries store and CSV loading
- metrics: annualized returns, volatility and Sharpe ratio
- montecarlo: scenario providers (historical, block bootstrap, Markov chain)
- engine: Portfolio, PopulationOptimizer, forecasts
- config: SystemConfig
- visualization: optimizer and forecast charts
"""

__version__ = "0.1.0"

from .data import TimeSeries, load_returns_csv
from .montecarlo import HistoricalReplay, BlockBootstrap, MarkovBootstrap, generate_scenario
from .engine import Portfolio, PopulationOptimizer, evaluate, recombine, run_forecast
from .config import SystemConfig

__all__ = [
    'TimeSeries',
    'load_returns_csv',
    'HistoricalReplay',
    'BlockBootstrap',
    'MarkovBootstrap',
    'generate_scenario',
    'Portfolio',
    'PopulationOptimizer',
    'evaluate',
    'recombine',
    'run_forecast',
    'SystemConfig',
]
