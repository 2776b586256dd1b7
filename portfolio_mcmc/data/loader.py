#!/usr/bin/env python3
"""
Historical Returns Loader.

Reads a monthly history CSV into a TimeSeries collection:

    Date,FONDS 0,FONDS 1
    1999-01-29,"5,648","4,161"
    1999-02-26,"0,686","2,190"

The first column holds ISO dates, every other column one asset. A comma is
accepted as decimal separator. Values are converted once, here, to
fractional monthly returns.
"""

import logging
import pandas as pd
from typing import Dict, Union, IO

from .timeseries import TimeSeries, collection_from_frame

# How values in the file are expressed
VALUE_KINDS = ('percent', 'fraction', 'level')


def load_returns_csv(source: Union[str, IO],
                     kind: str = 'percent') -> Dict[str, TimeSeries]:
    """
    Load a monthly history CSV.

    Parameters:
    -----------
    source : str or file-like
        Path or open text stream
    kind : str
        'percent'  - monthly returns in percent (5,648 -> 0.05648)
        'fraction' - monthly returns already fractional
        'level'    - index levels; converted with pct_change, first row dropped

    Returns:
    --------
    Dict[str, TimeSeries]: asset name -> fractional monthly returns
    """
    if kind not in VALUE_KINDS:
        raise ValueError(f"kind must be one of {VALUE_KINDS}, got '{kind}'")

    raw = pd.read_csv(source, dtype=str, skipinitialspace=True)
    if raw.shape[1] < 2:
        raise ValueError("history CSV needs a date column and at least one asset column")
    if raw.empty:
        raise ValueError("history CSV has no data rows")

    date_column = raw.columns[0]
    try:
        dates = pd.to_datetime(raw[date_column], format='%Y-%m-%d')
    except ValueError as e:
        raise ValueError(f"Dates must be in YYYY-MM-DD format: {e}")

    values = raw.drop(columns=[date_column])
    values.columns = [str(c).strip() for c in values.columns]
    values = values.apply(lambda col: col.str.strip().str.replace(',', '.', regex=False))
    try:
        values = values.apply(pd.to_numeric)
    except ValueError as e:
        raise ValueError(f"Could not parse history values: {e}")
    values.index = pd.DatetimeIndex(dates)
    values = values.sort_index()

    if kind == 'percent':
        values = values / 100
    elif kind == 'level':
        values = values.pct_change().iloc[1:]

    collection = collection_from_frame(values)
    logging.info(f"Loaded {len(collection)} series, {len(values)} rows "
                 f"({values.index.min().date()} to {values.index.max().date()})")
    return collection
