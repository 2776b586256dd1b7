# Engine package - core orchestration classes
"""
Portfolio evaluation and search.

Modules:
- portfolio: Portfolio / Position, evaluate(), recombine()
- optimizer: PopulationOptimizer (genetic search over allocations)
- forecast: outcome distribution of one portfolio over synthetic scenarios
"""

from .portfolio import Portfolio, Position, evaluate, recombine, parse_position
from .optimizer import PopulationOptimizer, Individual, Population
from .forecast import run_forecast, percentile_result, summarize

__all__ = [
    'Portfolio',
    'Position',
    'evaluate',
    'recombine',
    'parse_position',
    'PopulationOptimizer',
    'Individual',
    'Population',
    'run_forecast',
    'percentile_result',
    'summarize',
]
