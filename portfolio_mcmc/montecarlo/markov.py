#!/usr/bin/env python3
"""
Markov Chain Bootstrap.

Monthly returns of a reference series are quantized to states (0.1
percentage point buckets) and the empirical state-to-state transitions
become a Markov chain. Walking the chain generates synthetic return paths
that keep the month-to-month dependence of the history.

Construction:
    1. Discretize  - state = round(r * 1000), one edge per adjacent pair
    2. Prune       - drop transitions into states with no way out
    3. Normalize   - edge counts -> probabilities
    4. Initialize  - uniform random start state
"""

import logging
import math
import numpy as np
import pandas as pd
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from portfolio_mcmc.data.timeseries import TimeSeries
from .provider import (
    ScenarioProvider, MonthlyClock, DataNotFoundError,
    IndexOutOfRangeError, InvariantViolationError
)

STATES_PER_UNIT = 1000         # state = return in permille
PROBABILITY_TOLERANCE = 1e-9

MARKOV_ASSET_MODES = ('single_factor', 'conditioned')


def to_state(value: float) -> int:
    """Quantize a fractional return to permille, rounding half away from zero."""
    scaled = value * STATES_PER_UNIT
    return int(math.copysign(math.floor(abs(scaled) + 0.5), scaled))


def to_return(state: int) -> float:
    return state / STATES_PER_UNIT


@dataclass
class Edge:
    """Transition to `target`; weight is a count until normalized, then a probability."""
    target: int
    weight: float = 1.0


class TransitionGraph:
    """
    Directed weighted graph over return states.

    After build() the graph is closed (every edge target is a state with
    outgoing edges) and every state's edge weights sum to 1.
    """

    def __init__(self):
        self.edges: Dict[int, List[Edge]] = {}

    @classmethod
    def build(cls, returns: Iterable[float]) -> 'TransitionGraph':
        """Discretize, prune and normalize in one go."""
        graph = cls()
        states = [to_state(r) for r in returns]
        for prev_state, next_state in zip(states[:-1], states[1:]):
            graph.add(prev_state, next_state)

        removed = graph.prune_terminal_states()
        graph.normalize()
        graph.validate()

        logging.debug(f"TransitionGraph: {len(graph)} states from {len(states)} returns "
                      f"({removed} states pruned)")
        return graph

    def add(self, source: int, target: int) -> None:
        """Count one observed transition."""
        edges = self.edges.setdefault(source, [])
        for edge in edges:
            if edge.target == target:
                edge.weight += 1.0
                return
        edges.append(Edge(target))

    def prune_terminal_states(self) -> int:
        """
        Remove edges into states without outgoing edges, deleting sources
        left empty, until the graph is empty or closed.

        Returns:
        --------
        int: number of states deleted
        """
        removed = 0
        changed = True
        while changed and self.edges:
            changed = False
            for source in sorted(self.edges):
                kept = [e for e in self.edges[source] if e.target in self.edges]
                if len(kept) == len(self.edges[source]):
                    continue

                changed = True
                if kept:
                    self.edges[source] = kept
                else:
                    # source is terminal now; rescan from the start
                    del self.edges[source]
                    removed += 1
                    break
        return removed

    def normalize(self) -> None:
        """Convert each state's edge counts into probabilities."""
        for edges in self.edges.values():
            total = sum(e.weight for e in edges)
            for e in edges:
                e.weight = e.weight / total

    def validate(self) -> None:
        """Raise InvariantViolationError unless the graph is closed and normalized."""
        for state, edges in self.edges.items():
            if not edges:
                raise InvariantViolationError(f"state {state} has no outgoing edges")
            total = sum(e.weight for e in edges)
            if abs(total - 1.0) > PROBABILITY_TOLERANCE:
                raise InvariantViolationError(
                    f"state {state}: probabilities sum to {total!r}, want 1"
                )
            for e in edges:
                if e.target not in self.edges:
                    raise InvariantViolationError(
                        f"state {state}: edge to unknown state {e.target}"
                    )

    def next_state(self, state: int, u: float) -> int:
        """
        Pick the successor of `state` for a uniform draw u in [0, 1).

        Walks the cumulative distribution until it exceeds u.
        """
        edges = self.edges.get(state)
        if not edges:
            raise InvariantViolationError(f"state {state} is not part of the transition graph")

        cumulative = 0.0
        for e in edges:
            cumulative += e.weight
            if u < cumulative:
                return e.target

        # rounding can leave the running sum a hair below 1
        if abs(cumulative - 1.0) <= PROBABILITY_TOLERANCE:
            return edges[-1].target
        raise InvariantViolationError(
            f"no transition selected from state {state}: u = {u!r}, edges = {edges!r}"
        )

    @property
    def states(self) -> List[int]:
        return sorted(self.edges)

    def __len__(self) -> int:
        return len(self.edges)

    def __contains__(self, state: int) -> bool:
        return state in self.edges

    def to_frame(self) -> pd.DataFrame:
        """Edge list as a DataFrame with columns source, target, probability (in percent units)."""
        rows = [
            {'source': to_return(s) * 100, 'target': to_return(e.target) * 100, 'probability': e.weight}
            for s in self.states
            for e in sorted(self.edges[s], key=lambda e: e.target)
        ]
        return pd.DataFrame(rows, columns=['source', 'target', 'probability'])

    def __str__(self) -> str:
        lines = []
        for s in self.states:
            edges = ", ".join(
                f"{to_return(e.target) * 100:.1f}% (p {100 * e.weight:.0f}%)"
                for e in sorted(self.edges[s], key=lambda e: e.target)
            )
            lines.append(f"{to_return(s) * 100:.1f}% -> [{edges}]")
        return "\n".join(lines)


class MarkovBootstrap(ScenarioProvider):
    """
    Scenario provider walking a TransitionGraph built from a reference
    return series.

    Asset modes:
    - 'single_factor' (default): every asset gets the return of the current
      state, 1 + state / 1000. One shared market regime.
    - 'conditioned': pass `assets`; each state remembers the historical
      months whose reference return fell into it, one of those months is
      drawn per step and every asset reports its own return for that month.
    """

    def __init__(self,
                 reference: TimeSeries,
                 rng: np.random.Generator,
                 horizon_years: int = 30,
                 now: Optional[datetime] = None,
                 assets: Optional[Dict[str, TimeSeries]] = None):
        """
        Parameters:
        -----------
        reference : TimeSeries
            Representative monthly returns, e.g. a portfolio's historical replay
        rng : np.random.Generator
            Random source
        horizon_years : int
            Length of the generated scenario, measured from now
        now : datetime, optional
            Reference time for the synthetic calendar (default: current time)
        assets : Dict[str, TimeSeries], optional
            Enables the conditioned mode
        """
        self.rng = rng
        self.graph = TransitionGraph.build(reference.values)
        if len(self.graph) == 0:
            raise ValueError(
                f"reference series '{reference.name}' ({len(reference)} values) "
                f"has no recurring return states"
            )

        self.assets = assets
        self.months: Dict[int, List[pd.Timestamp]] = {}
        if assets is not None:
            for datum in reference:
                state = to_state(datum.value)
                if state in self.graph:
                    self.months.setdefault(state, []).append(datum.date)

        self.clock = MonthlyClock(horizon_years, now)
        self.state = self.graph.states[int(rng.integers(len(self.graph)))]
        self.month: Optional[pd.Timestamp] = None
        self.started = False

    @property
    def mode(self) -> str:
        return 'single_factor' if self.assets is None else 'conditioned'

    def advance(self) -> Tuple[Optional[pd.Timestamp], bool]:
        date = self.clock.tick()
        if date is None:
            return None, False

        self.state = self.graph.next_state(self.state, self.rng.random())
        if self.assets is not None:
            candidates = self.months[self.state]
            self.month = candidates[int(self.rng.integers(len(candidates)))]
        self.started = True

        return date, True

    def relative_return(self, asset_name: str) -> float:
        if not self.started:
            raise IndexOutOfRangeError("advance() must be called before relative_return()")

        if self.assets is None:
            return 1 + to_return(self.state)

        series = self.assets.get(asset_name)
        if series is None:
            raise DataNotFoundError(f"no such data: {asset_name!r}")
        try:
            return 1 + series.value_at(self.month)
        except KeyError:
            raise DataNotFoundError(f"no data for {asset_name!r} on {self.month.date()}")
