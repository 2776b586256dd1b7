# Performance metrics package
"""
Performance measurement utilities.

Modules:
- performance: annualized return, volatility, Sharpe ratio and descriptive statistics
"""

from .performance import (
    average,
    variance,
    std_dev,
    minimum,
    maximum,
    last,
    annualized_return,
    annualized_volatility,
    sharpe_ratio,
    summary,
)

__all__ = [
    'average',
    'variance',
    'std_dev',
    'minimum',
    'maximum',
    'last',
    'annualized_return',
    'annualized_volatility',
    'sharpe_ratio',
    'summary',
]
