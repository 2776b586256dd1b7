# Monte Carlo simulation package
"""
Scenario providers and bootstrapping utilities.

Modules:
- provider: ScenarioProvider interface, error types, synthetic calendar
- historical: HistoricalReplay (deterministic pass over the history)
- bootstrap: BlockBootstrap (stationary block resampling)
- markov: TransitionGraph and MarkovBootstrap (Markov chain over return states)
- scenario: record a provider's output for replay
"""

from .provider import (
    ScenarioProvider,
    MonthlyClock,
    ScenarioError,
    DataNotFoundError,
    IndexOutOfRangeError,
    InvariantViolationError,
)
from .historical import HistoricalReplay
from .bootstrap import BlockBootstrap
from .markov import MarkovBootstrap, TransitionGraph, to_state
from .scenario import generate_scenario

__all__ = [
    # Interface
    'ScenarioProvider',
    'MonthlyClock',
    # Errors
    'ScenarioError',
    'DataNotFoundError',
    'IndexOutOfRangeError',
    'InvariantViolationError',
    # Providers
    'HistoricalReplay',
    'BlockBootstrap',
    'MarkovBootstrap',
    'TransitionGraph',
    'to_state',
    # Scenarios
    'generate_scenario',
]
