#!/usr/bin/env python3
"""
Time Series Store.

Immutable per-asset monthly return series plus helpers for working with a
collection (asset name -> TimeSeries).

Values are always fractional monthly returns (0.05 = +5%).
"""

import numpy as np
import pandas as pd
from typing import Dict, Iterable, Iterator, List, NamedTuple, Tuple, Union

from portfolio_mcmc.metrics import performance


class Datum(NamedTuple):
    """One observation: month end date and fractional return."""
    date: pd.Timestamp
    value: float


class TimeSeries:
    """
    Named, date-ordered sequence of monthly returns.

    Backed by a float pandas Series with a DatetimeIndex. The series is
    private to the instance; accessors hand out copies.

    The metric methods (returns, volatility, sharpe_ratio, ...) delegate to
    portfolio_mcmc.metrics.performance. Note that sharpe_ratio() is
    returns / volatility with no risk-free rate subtracted.
    """

    def __init__(self, name: str, values: Union[pd.Series, None] = None):
        """
        Parameters:
        -----------
        name : str
            Series name (asset name or "Simulated Portfolio")
        values : pd.Series, optional
            Fractional returns indexed by date. Sorted by date on ingest.
        """
        self.name = name

        if values is None:
            values = pd.Series(dtype=float)
        series = pd.Series(values, dtype=float, copy=True)
        series.index = pd.DatetimeIndex(series.index)
        series = series.sort_index(kind='mergesort')
        series.name = name
        self._series = series

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_pairs(cls, name: str, pairs: Iterable[Tuple]) -> 'TimeSeries':
        """
        Build a series from (date, value) pairs.

        Example:
        --------
        >>> ts = TimeSeries.from_pairs('SPY', [('1999-01-29', 0.05), ('1999-02-26', -0.01)])
        >>> len(ts)
        2
        """
        pairs = list(pairs)
        if not pairs:
            return cls(name)
        dates, values = zip(*pairs)
        return cls(name, pd.Series(list(values), index=pd.to_datetime(list(dates))))

    @classmethod
    def from_values(cls, name: str, values: Iterable[float],
                    start: str = '1999-01-31') -> 'TimeSeries':
        """Build a series with consecutive month end dates starting at `start`."""
        values = list(values)
        dates = pd.date_range(start=start, periods=len(values), freq='ME')
        return cls(name, pd.Series(values, index=dates))

    # =========================================================================
    # ACCESS
    # =========================================================================

    @property
    def series(self) -> pd.Series:
        """Copy of the underlying pandas Series."""
        return self._series.copy()

    @property
    def values(self) -> np.ndarray:
        return self._series.to_numpy(copy=True)

    @property
    def dates(self) -> pd.DatetimeIndex:
        return self._series.index

    @property
    def data(self) -> List[Datum]:
        return list(iter(self))

    def __len__(self) -> int:
        return len(self._series)

    def __iter__(self) -> Iterator[Datum]:
        for date, value in self._series.items():
            yield Datum(date, float(value))

    def __getitem__(self, index: int) -> Datum:
        return Datum(self._series.index[index], float(self._series.iloc[index]))

    def value_at(self, date) -> float:
        """Return the value stored for `date`; raises KeyError if absent."""
        return float(self._series.loc[pd.Timestamp(date)])

    def __eq__(self, other) -> bool:
        if not isinstance(other, TimeSeries):
            return NotImplemented
        return self.name == other.name and self._series.equals(other._series)

    def __repr__(self) -> str:
        return f"TimeSeries({self.name!r}, {len(self)} values)"

    def __str__(self) -> str:
        return self.name

    # =========================================================================
    # METRICS
    # =========================================================================

    def average(self) -> float:
        return performance.average(self._series)

    def variance(self) -> float:
        return performance.variance(self._series)

    def std_dev(self) -> float:
        return performance.std_dev(self._series)

    def volatility(self) -> float:
        return performance.annualized_volatility(self._series)

    def returns(self) -> float:
        return performance.annualized_return(self._series)

    def sharpe_ratio(self) -> float:
        return performance.sharpe_ratio(self._series)

    def min(self) -> float:
        return performance.minimum(self._series)

    def max(self) -> float:
        return performance.maximum(self._series)

    def last(self) -> float:
        return performance.last(self._series)


# ============================================================================
# Collection helpers
# ============================================================================

def shortest_series(collection: Dict[str, TimeSeries]) -> TimeSeries:
    """
    Return the shortest series in a collection.

    Ties are broken by the lexicographically smallest asset name so the
    choice does not depend on dict ordering.
    """
    if not collection:
        raise ValueError("TimeSeries collection is empty")

    name = min(sorted(collection), key=lambda n: len(collection[n]))
    return collection[name]


def collection_to_frame(collection: Dict[str, TimeSeries]) -> pd.DataFrame:
    """Combine a collection into one DataFrame (dates x assets), sorted by asset name."""
    return pd.DataFrame({name: collection[name].series for name in sorted(collection)})


def collection_from_frame(frame: pd.DataFrame) -> Dict[str, TimeSeries]:
    """Split a returns DataFrame (dates x assets) into a collection, dropping NaN rows per asset."""
    return {
        str(column): TimeSeries(str(column), frame[column].dropna())
        for column in frame.columns
    }
