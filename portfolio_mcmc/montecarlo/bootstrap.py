#!/usr/bin/env python3
"""
Block Bootstrap Module.

Regime-persistence resampling of historical months: the next month is
usually the one that followed historically, occasionally a random jump.
Block lengths are therefore geometric (stationary bootstrap).
"""

import numpy as np
import pandas as pd
from datetime import datetime
from typing import Dict, Optional, Tuple

from portfolio_mcmc.data.timeseries import TimeSeries, shortest_series
from .provider import (
    ScenarioProvider, MonthlyClock, DataNotFoundError, IndexOutOfRangeError
)

# Expected length of a run of consecutive historical months
EXPECTED_REGIME_LENGTH = 12  # [months]


class BlockBootstrap(ScenarioProvider):
    """
    Stationary block bootstrap over the collection.

    Rows are drawn from [1, n-1] of the shortest series; the first row is
    never used. Each step continues with the following row, except with
    probability 1 / expected_regime_length, or when the last row has been
    reached, where it jumps to a uniformly random row.

    The horizon is calendar driven (MonthlyClock), independent of the
    length of the history.
    """

    def __init__(self,
                 collection: Dict[str, TimeSeries],
                 rng: np.random.Generator,
                 horizon_years: int = 30,
                 expected_regime_length: int = EXPECTED_REGIME_LENGTH,
                 now: Optional[datetime] = None):
        """
        Parameters:
        -----------
        collection : Dict[str, TimeSeries]
            Historical monthly returns per asset
        rng : np.random.Generator
            Random source
        horizon_years : int
            Length of the generated scenario, measured from now
        expected_regime_length : int
            Mean block length in months
        now : datetime, optional
            Reference time for the synthetic calendar (default: current time)
        """
        if expected_regime_length < 1:
            raise ValueError(f"expected_regime_length must be at least 1, got {expected_regime_length}")

        self.collection = collection
        self.rng = rng
        self.expected_regime_length = expected_regime_length
        self.num_rows = len(shortest_series(collection))
        if self.num_rows < 2:
            raise ValueError(f"block bootstrap needs at least 2 rows of history, got {self.num_rows}")

        self._values = {name: series.values for name, series in collection.items()}
        self.clock = MonthlyClock(horizon_years, now)
        self.index: Optional[int] = None

    def _random_index(self) -> int:
        return int(self.rng.integers(1, self.num_rows))

    def advance(self) -> Tuple[Optional[pd.Timestamp], bool]:
        date = self.clock.tick()
        if date is None:
            return None, False

        if self.index is None:
            self.index = self._random_index()
        elif (self.index >= self.num_rows - 1
              or self.rng.integers(self.expected_regime_length) == 0):
            self.index = self._random_index()
        else:
            self.index += 1

        return date, True

    def relative_return(self, asset_name: str) -> float:
        values = self._values.get(asset_name)
        if values is None:
            raise DataNotFoundError(f"no such data: {asset_name!r}")

        if self.index is None:
            raise IndexOutOfRangeError("advance() must be called before relative_return()")
        if self.index >= len(values):
            raise IndexOutOfRangeError(
                f"index out of bounds: have {self.index}, size {len(values)}"
            )

        return 1 + float(values[self.index])
