#!/usr/bin/env python3
"""
Historical Replay.

Deterministic single pass over the stored history, one month per step.
"""

import pandas as pd
from typing import Dict, Optional, Tuple

from portfolio_mcmc.data.timeseries import TimeSeries, shortest_series
from .provider import ScenarioProvider, DataNotFoundError, IndexOutOfRangeError


class HistoricalReplay(ScenarioProvider):
    """
    Replay the collection month by month.

    The horizon is the shortest series (ties -> smallest asset name). The
    first row only anchors the replay, so a history of N rows yields N - 1
    steps.
    """

    def __init__(self, collection: Dict[str, TimeSeries]):
        self.collection = collection
        self._timeline = shortest_series(collection).dates
        self._values = {name: series.values for name, series in collection.items()}
        self.index = 0

    def advance(self) -> Tuple[Optional[pd.Timestamp], bool]:
        if self.index >= len(self._timeline) - 1:
            return None, False

        self.index += 1
        return self._timeline[self.index], True

    def relative_return(self, asset_name: str) -> float:
        values = self._values.get(asset_name)
        if values is None:
            raise DataNotFoundError(f"no such data: {asset_name!r}")

        if self.index < 1 or self.index >= len(values):
            raise IndexOutOfRangeError(
                f"index out of bounds: have {self.index}, size {len(values)}"
            )

        return 1 + float(values[self.index])
