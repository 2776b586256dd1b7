#!/usr/bin/env python3
"""
Scenario Provider Interface.

A scenario provider produces a sequence of monthly steps. Each step is
opened with advance(); relative_return(name) then reports the growth factor
(1 + r) of one asset for that step.

Providers are single-use: construct, drive to exhaustion with one
evaluation, discard.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, Tuple

import pandas as pd
from dateutil.relativedelta import relativedelta


# ============================================================================
# Errors
# ============================================================================

class ScenarioError(Exception):
    """Per-step provider failure; aborts the evaluation that hit it."""


class DataNotFoundError(ScenarioError, KeyError):
    """Asset name unknown to the provider."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ''


class IndexOutOfRangeError(ScenarioError, IndexError):
    """Provider cursor outside its backing data."""


class InvariantViolationError(RuntimeError):
    """
    Internal model invariant broken (e.g. a transition distribution that
    does not sum to 1). Fatal: library code never catches it.
    """


# ============================================================================
# Interface
# ============================================================================

class ScenarioProvider(ABC):
    """
    Abstract base class for scenario providers.

    Implementations: HistoricalReplay, BlockBootstrap, MarkovBootstrap.
    """

    @abstractmethod
    def advance(self) -> Tuple[Optional[pd.Timestamp], bool]:
        """
        Move to the next step.

        Returns:
        --------
        (timestamp, True) while steps remain, (None, False) once exhausted.
        """
        pass

    @abstractmethod
    def relative_return(self, asset_name: str) -> float:
        """
        Growth factor (1 + r) of `asset_name` for the current step.

        Raises:
        -------
        DataNotFoundError
            Unknown asset name
        IndexOutOfRangeError
            Called before advance() or cursor past the backing data
        """
        pass


# ============================================================================
# Calendar horizon shared by the synthetic providers
# ============================================================================

class MonthlyClock:
    """
    Synthetic calendar for generated scenarios.

    Starts on the first day of the current month and moves forward one
    calendar month per tick. Exhausted once the date is strictly after
    now + horizon_years.
    """

    def __init__(self, horizon_years: int = 30, now: Optional[datetime] = None):
        if horizon_years <= 0:
            raise ValueError(f"horizon_years must be positive, got {horizon_years}")

        now = pd.Timestamp(now if now is not None else datetime.now()).to_pydatetime()
        now = now.replace(tzinfo=None)
        self.date = datetime(now.year, now.month, 1)
        self.end = now + relativedelta(years=horizon_years)
        self.exhausted = False

    def tick(self) -> Optional[pd.Timestamp]:
        """Advance one month; None once past the horizon."""
        if self.exhausted:
            return None

        self.date = self.date + relativedelta(months=1)
        if self.date > self.end:
            self.exhausted = True
            return None
        return pd.Timestamp(self.date)
