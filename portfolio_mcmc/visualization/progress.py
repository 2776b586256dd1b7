#!/usr/bin/env python3
"""
Progress and forecast charts.

Each function creates ONE figure and returns (fig, axes). Figures are saved
when a path is given and closed afterwards unless `show` is set.
"""

import logging
import os
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from typing import List, Optional

from portfolio_mcmc.data.timeseries import TimeSeries
from portfolio_mcmc.engine.forecast import percentile_result


def save_figure(fig: plt.Figure, path: str, dpi: int = 150):
    """Save figure to `path`, creating the parent directory if needed."""
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    fig.savefig(path, dpi=dpi, bbox_inches='tight')
    logging.info(f"Saved: {path}")


def _finish(fig: plt.Figure, save_path: Optional[str], show: bool):
    fig.tight_layout()
    if save_path:
        save_figure(fig, save_path)
    if show:
        plt.show()
    else:
        plt.close(fig)


def plot_optimizer_history(history: pd.DataFrame,
                           save_path: Optional[str] = None,
                           show: bool = False):
    """
    Best individual per generation.

    Top panel: Sharpe ratio. Bottom panel: annualized returns and volatility.

    Parameters:
    -----------
    history : pd.DataFrame
        PopulationOptimizer.history_frame() output
    save_path : str, optional
        If provided, save plot to this path
    show : bool
        If True, display the plot
    """
    if history.empty:
        raise ValueError("history is empty; run the optimizer first")

    fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)

    ax1.plot(history.index, history['sharpe_ratio'], color='#1f77b4', linewidth=1.5)
    ax1.set_ylabel('Sharpe Ratio')
    ax1.set_title(f'Best Portfolio per Generation ({len(history)} generations)',
                  fontsize=14, fontweight='bold')
    ax1.grid(True, alpha=0.3)

    ax2.plot(history.index, history['returns'], color='#2ca02c', label='Returns (%)')
    ax2.plot(history.index, history['volatility'], color='#d62728', label='Volatility (%)')
    ax2.set_xlabel('Generation')
    ax2.set_ylabel('Annualized (%)')
    ax2.legend(loc='best')
    ax2.grid(True, alpha=0.3)

    _finish(fig, save_path, show)
    return fig, (ax1, ax2)


def plot_forecast_distribution(results: List[TimeSeries],
                               percentiles: List[int],
                               title: str = 'Forecast',
                               bins: int = 50,
                               save_path: Optional[str] = None,
                               show: bool = False):
    """
    Histogram of Sharpe ratios over all forecast scenarios, with a marker
    at each reported percentile.

    Parameters:
    -----------
    results : List[TimeSeries]
        run_forecast() output (ascending by Sharpe ratio)
    percentiles : List[int]
        Percentiles to mark, e.g. [50, 80, 90, 95, 99]
    """
    sharpe = np.array([r.sharpe_ratio() for r in results], dtype=float)
    finite = sharpe[np.isfinite(sharpe)]
    if finite.size == 0:
        raise ValueError("no finite Sharpe ratios to plot")

    fig, ax = plt.subplots(figsize=(12, 6))
    ax.hist(finite, bins=bins, color='skyblue', edgecolor='steelblue', alpha=0.8)

    for p in percentiles:
        value = percentile_result(results, p).sharpe_ratio()
        if np.isfinite(value):
            ax.axvline(value, color='gray', linestyle='--', linewidth=1)
            ax.annotate(f'P{p}', xy=(value, ax.get_ylim()[1] * 0.95),
                        ha='center', fontsize=9)

    ax.set_xlabel('Sharpe Ratio')
    ax.set_ylabel('Scenarios')
    ax.set_title(f'{title} - {len(results):,} Scenarios', fontsize=14, fontweight='bold')
    ax.grid(True, alpha=0.3)

    _finish(fig, save_path, show)
    return fig, ax
