# Market data package
"""
Time series store and loaders.

Modules:
- timeseries: Datum, TimeSeries and collection helpers
- loader: monthly history CSV loading
"""

from .timeseries import (
    Datum,
    TimeSeries,
    shortest_series,
    collection_to_frame,
    collection_from_frame,
)
from .loader import load_returns_csv

__all__ = [
    'Datum',
    'TimeSeries',
    'shortest_series',
    'collection_to_frame',
    'collection_from_frame',
    'load_returns_csv',
]
