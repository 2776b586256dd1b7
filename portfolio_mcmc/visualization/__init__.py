# Visualization package
"""
Plotting utilities for optimizer and forecast runs.

Modules:
- progress: optimizer history and forecast distribution charts
"""

from .progress import save_figure, plot_optimizer_history, plot_forecast_distribution

__all__ = [
    'save_figure',
    'plot_optimizer_history',
    'plot_forecast_distribution',
]
