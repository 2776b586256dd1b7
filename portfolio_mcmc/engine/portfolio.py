#!/usr/bin/env python3
"""
Portfolio Class - named positions with proportional weights.

Provides:
- Portfolio construction (explicit, equal weight, random, "name:weight" specs)
- evaluate(): run a portfolio through a ScenarioProvider
- recombine(): uniform crossover + mutation used by the optimizer
"""

import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from portfolio_mcmc.data.timeseries import TimeSeries
from portfolio_mcmc.montecarlo.provider import ScenarioProvider, ScenarioError

NOTIONAL_TOTAL = 100_000.0     # offspring weights are rescaled to this total
MUTATION_RANGE = (0.95, 1.05)  # multiplicative mutation factor, [low, high)
INITIAL_INCREMENTS = 100       # unit increments for random portfolios
INCREMENT_SIZE = 1000.0


@dataclass(frozen=True)
class Position:
    """One asset holding; weight is an unscaled contribution."""
    name: str
    weight: float


class Portfolio:
    """
    Set of positions with unique asset names.

    Weights are not normalized on construction; evaluation only uses their
    proportions. Positions are kept sorted by name.
    """

    def __init__(self, positions: Iterable[Position] = ()):
        positions = list(positions)
        names = [p.name for p in positions]
        if len(set(names)) != len(names):
            duplicates = sorted({n for n in names if names.count(n) > 1})
            raise ValueError(f"duplicate positions in portfolio: {duplicates}")
        for p in positions:
            if p.weight < 0:
                raise ValueError(f"position '{p.name}' has negative weight {p.weight}")

        self.positions: Tuple[Position, ...] = tuple(sorted(positions, key=lambda p: p.name))

    # =========================================================================
    # FACTORY METHODS
    # =========================================================================

    @classmethod
    def from_weights(cls, weights: Dict[str, float]) -> 'Portfolio':
        """
        Example:
        --------
        >>> Portfolio.from_weights({'SPY': 60, 'AGG': 40})
        """
        return cls(Position(name, float(w)) for name, w in weights.items())

    @classmethod
    def from_specs(cls, specs: Iterable[str]) -> 'Portfolio':
        """Build from "name:weight" strings, e.g. ["WORLD VALUE:40", "WORLD QUALITY:20"]."""
        return cls(parse_position(spec) for spec in specs)

    @classmethod
    def create_equal_weight(cls, asset_names: List[str]) -> 'Portfolio':
        return cls(Position(name, 1.0) for name in asset_names)

    @classmethod
    def create_random(cls,
                      asset_names: List[str],
                      rng: np.random.Generator,
                      increments: int = INITIAL_INCREMENTS) -> 'Portfolio':
        """
        Random allocation over `asset_names`.

        Performs `increments` unit increments, each to a uniformly random
        asset. The resulting allocation is irregular (multinomial), not
        uniform over the simplex, and some assets may end with zero weight.
        """
        if not asset_names:
            raise ValueError("asset_names must not be empty")

        weights = np.zeros(len(asset_names))
        for _ in range(increments):
            weights[rng.integers(len(asset_names))] += INCREMENT_SIZE

        return cls(Position(name, float(w)) for name, w in zip(asset_names, weights))

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.positions]

    @property
    def total_weight(self) -> float:
        return float(sum(p.weight for p in self.positions))

    def weight(self, name: str) -> float:
        """Weight of `name`, 0 if the portfolio does not hold it."""
        for p in self.positions:
            if p.name == name:
                return p.weight
        return 0.0

    def weights(self) -> pd.Series:
        """Weights as fractions of the total, indexed by asset name."""
        total = self.total_weight
        return pd.Series({p.name: p.weight / total for p in self.positions}, dtype=float)

    def to_csv(self) -> str:
        """Percent allocations joined by commas, in name order."""
        total = self.total_weight
        return ",".join(f"{100 * p.weight / total:.1f}" for p in self.positions)

    def __len__(self) -> int:
        return len(self.positions)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Portfolio):
            return NotImplemented
        return self.positions == other.positions

    def __repr__(self) -> str:
        return f"Portfolio({list(self.positions)!r})"

    def __str__(self) -> str:
        total = self.total_weight
        return ", ".join(f"{100 * p.weight / total:2.0f}% {p.name}" for p in self.positions)

    # =========================================================================
    # EVALUATION
    # =========================================================================

    def evaluate(self, provider: ScenarioProvider) -> TimeSeries:
        """
        Run this portfolio through `provider`.

        Each position's value compounds with the provider's growth factors;
        the result holds one portfolio return per step,
        new_total / prev_total - 1. Provider errors propagate; no partial
        result is returned. A step that leaves the portfolio worth nothing
        ends the path: the following step raises ScenarioError.

        Parameters:
        -----------
        provider : ScenarioProvider
            Fresh provider; consumed by this call

        Returns:
        --------
        TimeSeries named "Simulated Portfolio"
        """
        names = self.names
        values = [p.weight for p in self.positions]
        prev_total = sum(values)
        if prev_total <= 0:
            raise ValueError("portfolio has zero total weight")

        dates = []
        returns = []
        while True:
            date, has_more = provider.advance()
            if not has_more:
                break

            if prev_total <= 0:
                raise ScenarioError(f"portfolio value fell to zero before {date.date()}")

            next_total = 0.0
            for i, name in enumerate(names):
                values[i] *= provider.relative_return(name)
                next_total += values[i]

            dates.append(date)
            returns.append(next_total / prev_total - 1)
            prev_total = next_total

        return TimeSeries("Simulated Portfolio",
                          pd.Series(returns, index=pd.DatetimeIndex(dates), dtype=float))


def evaluate(portfolio: Portfolio, provider: ScenarioProvider) -> TimeSeries:
    """Evaluate `portfolio` against `provider` (see Portfolio.evaluate)."""
    return portfolio.evaluate(provider)


def parse_position(spec: str) -> Position:
    """Parse "name:weight". The name may contain spaces; the last colon splits."""
    name, sep, weight = spec.rpartition(':')
    if not sep or not name:
        raise ValueError(f'got "{spec}", want "<name>:<weight>"')
    try:
        value = float(weight.replace(',', '.'))
    except ValueError:
        raise ValueError(f'invalid weight in "{spec}": {weight!r}')
    return Position(name.strip(), value)


def recombine(parent0: Portfolio,
              parent1: Portfolio,
              rng: np.random.Generator,
              notional_total: float = NOTIONAL_TOTAL,
              mutation_range: Tuple[float, float] = MUTATION_RANGE) -> Portfolio:
    """
    Breed a child portfolio from two parents.

    Uniform crossover: for every asset held by either parent the child takes
    parent0's or parent1's weight with equal probability (a missing asset
    counts as weight 0). Every weight is then multiplied by a factor drawn
    from [low, high) and the child is rescaled to `notional_total`.

    When the draw keeps only zero weights (parents holding disjoint assets)
    the child falls back to the mutated weights of a parent with a positive
    total, so the child always sums to `notional_total`.
    """
    names = sorted(set(parent0.names) | set(parent1.names))
    if not names:
        raise ValueError("cannot recombine empty portfolios")

    low, high = mutation_range
    weights = np.empty(len(names))
    for i, name in enumerate(names):
        if rng.random() < 0.5:
            weight = parent0.weight(name)
        else:
            weight = parent1.weight(name)
        weights[i] = weight * rng.uniform(low, high)

    total = weights.sum()
    if total <= 0:
        donor = parent0 if parent0.total_weight > 0 else parent1
        if donor.total_weight <= 0:
            raise ValueError("cannot recombine portfolios with zero total weight")
        weights = np.array([donor.weight(name) * rng.uniform(low, high) for name in names])
        total = weights.sum()

    weights = notional_total * weights / total
    return Portfolio(Position(name, float(w)) for name, w in zip(names, weights))
