#!/usr/bin/env python3
"""
Shared fixtures: small deterministic collections and a seeded generator.
"""

from datetime import datetime

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for chart tests

import numpy as np
import pytest

from portfolio_mcmc.data import TimeSeries

# Four-month cycles keep the Markov chain small and closed
CYCLE_A = [0.02, -0.01, 0.03, 0.00]
CYCLE_B = [0.01, 0.01, -0.02, 0.02]
CYCLE_C = [-0.01, 0.02, 0.01, 0.00]

FIXED_NOW = datetime(2024, 1, 15)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def cyclic_collection():
    """Three assets, 48 months each, repeating four-month patterns."""
    return {
        'A': TimeSeries.from_values('A', CYCLE_A * 12),
        'B': TimeSeries.from_values('B', CYCLE_B * 12),
        'C': TimeSeries.from_values('C', CYCLE_C * 12),
    }


@pytest.fixture
def two_row_collection():
    """Two assets with two months of known returns."""
    return {
        'X': TimeSeries.from_values('X', [0.10, 0.05]),
        'Y': TimeSeries.from_values('Y', [-0.02, 0.04]),
    }


@pytest.fixture
def history_csv(tmp_path):
    """Percent-valued history file with comma decimals, 24 months."""
    dates = TimeSeries.from_values('dates', [0.0] * 24).dates
    lines = ['Date,A,B']
    for i, date in enumerate(dates):
        a = f"{CYCLE_A[i % 4] * 100:.3f}".replace('.', ',')
        b = f"{CYCLE_B[i % 4] * 100:.3f}".replace('.', ',')
        lines.append(f'{date:%Y-%m-%d},"{a}","{b}"')
    path = tmp_path / 'history.csv'
    path.write_text('\n'.join(lines) + '\n')
    return path
