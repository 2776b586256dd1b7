#!/usr/bin/env python3
"""
Scenario materialisation.

Providers are single-use, so sharing one synthetic future between many
portfolios means recording it first and replaying the record.
"""

import pandas as pd
from typing import Dict, List

from portfolio_mcmc.data.timeseries import TimeSeries
from .provider import ScenarioProvider


def generate_scenario(names: List[str], provider: ScenarioProvider) -> Dict[str, TimeSeries]:
    """
    Drive `provider` to exhaustion and record every asset's monthly return.

    Each series starts with a seed row (return 0.0, one month before the
    first step) so HistoricalReplay over the result replays every generated
    step.

    Parameters:
    -----------
    names : List[str]
        Assets to record
    provider : ScenarioProvider
        Fresh provider; consumed by this call

    Returns:
    --------
    Dict[str, TimeSeries]: asset name -> generated monthly returns

    Example:
    --------
    >>> scenario = generate_scenario(['SPY', 'AGG'], MarkovBootstrap(reference, rng))
    >>> len(scenario['SPY'])  # 360 generated months + seed row
    361
    """
    dates: List[pd.Timestamp] = []
    returns: Dict[str, List[float]] = {name: [] for name in names}

    while True:
        date, has_more = provider.advance()
        if not has_more:
            break

        dates.append(date)
        for name in names:
            returns[name].append(provider.relative_return(name) - 1)

    if dates:
        seed_date = dates[0] - pd.DateOffset(months=1)
        index = pd.DatetimeIndex([seed_date] + dates)
        return {
            name: TimeSeries(name, pd.Series([0.0] + values, index=index))
            for name, values in returns.items()
        }
    return {name: TimeSeries(name) for name in names}
