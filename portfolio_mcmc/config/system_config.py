#!/usr/bin/env python3
"""
System-level configuration for portfolio scenario analysis.

This contains settings shared by all commands:
- Data input (history file and value format)
- Scenario generation (horizon, regime length)
- Genetic search (population, generations, mutation, parallelism)
- Forecast reporting and output
"""

import json
from dataclasses import dataclass, field, fields, asdict
from typing import List, Dict, Any, Optional, Tuple
from pathlib import Path


@dataclass
class SystemConfig:
    """
    Global configuration for backtest, forecast and optimize runs.

    Command line flags override the matching fields.
    """

    # ============================================================================
    # Data Settings
    # ============================================================================
    input_file: str = 'history.csv'         # Monthly history CSV (date column + one column per asset)
    value_kind: str = 'percent'             # How the CSV stores values: 'percent', 'fraction' or 'level'

    # ============================================================================
    # Scenario Generation
    # ============================================================================
    horizon_years: int = 30                 # Synthetic scenarios run from now until now + horizon
    expected_regime_length: int = 12        # Mean run of consecutive months in the block bootstrap [months]
    markov_asset_mode: str = 'conditioned'  # 'single_factor' (one shared return) or 'conditioned' (per-asset month draws)

    # ============================================================================
    # Genetic Search
    # ============================================================================
    population_size: int = 100
    generations: int = 2000
    initial_increments: int = 100           # Unit increments when building random initial portfolios
    notional_total: float = 100_000         # Offspring weights are rescaled to this total
    mutation_low: float = 0.95              # Mutation factor drawn from [mutation_low, mutation_high)
    mutation_high: float = 1.05
    reference_weights: Optional[Dict[str, float]] = None  # Portfolio seeding the Markov chain (None = equal weight)
    max_workers: Optional[int] = None       # >1 evaluates individuals on a thread pool
    isolate_evaluation_errors: bool = True  # Failed evaluations rank last instead of aborting the run

    # ============================================================================
    # Forecast
    # ============================================================================
    forecast_iterations: int = 10_000
    forecast_percentiles: List[int] = field(default_factory=lambda: [50, 80, 90, 95, 99])

    # ============================================================================
    # Reproducibility & Output
    # ============================================================================
    seed: Optional[int] = None              # Seed for numpy.random.default_rng (None = fresh entropy)
    save_plots: bool = False
    plots_directory: str = 'plots'

    # ============================================================================
    # Validation
    # ============================================================================

    def __post_init__(self):
        """Validate configuration parameters."""
        valid_kinds = ['percent', 'fraction', 'level']
        if self.value_kind not in valid_kinds:
            raise ValueError(f"value_kind must be one of {valid_kinds}, got '{self.value_kind}'")

        if self.horizon_years <= 0:
            raise ValueError(f"horizon_years must be positive, got {self.horizon_years}")

        if self.expected_regime_length < 1:
            raise ValueError(f"expected_regime_length must be at least 1, got {self.expected_regime_length}")

        valid_modes = ['single_factor', 'conditioned']
        if self.markov_asset_mode not in valid_modes:
            raise ValueError(f"markov_asset_mode must be one of {valid_modes}, got '{self.markov_asset_mode}'")

        if self.population_size < 2:
            raise ValueError(f"population_size must be at least 2, got {self.population_size}")

        if self.generations < 1:
            raise ValueError(f"generations must be at least 1, got {self.generations}")

        if self.initial_increments < 1:
            raise ValueError(f"initial_increments must be at least 1, got {self.initial_increments}")

        if self.notional_total <= 0:
            raise ValueError(f"notional_total must be positive, got {self.notional_total}")

        if not (0 < self.mutation_low <= self.mutation_high):
            raise ValueError(
                f"mutation range must satisfy 0 < mutation_low <= mutation_high, "
                f"got [{self.mutation_low}, {self.mutation_high})"
            )

        if self.reference_weights is not None:
            if not self.reference_weights:
                raise ValueError("reference_weights must not be empty (use None for equal weight)")
            if any(w < 0 for w in self.reference_weights.values()):
                raise ValueError(f"reference_weights cannot be negative, got {self.reference_weights}")

        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")

        if self.forecast_iterations < 1:
            raise ValueError(f"forecast_iterations must be at least 1, got {self.forecast_iterations}")

        for p in self.forecast_percentiles:
            if not (0 < p <= 100):
                raise ValueError(f"forecast_percentiles must be in (0, 100], got {p}")

    # ============================================================================
    # Settings Files
    # ============================================================================

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, settings: Dict[str, Any]) -> 'SystemConfig':
        """
        Build a config from plain settings.

        Keys starting with '_' are notes for readers and are skipped; every
        other key must name a field.
        """
        if not isinstance(settings, dict):
            raise ValueError(f"config settings must be a JSON object, got {type(settings).__name__}")

        settings = {k: v for k, v in settings.items() if not k.startswith('_')}
        unknown = sorted(set(settings) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"unknown config settings: {', '.join(unknown)}")
        return cls(**settings)

    @classmethod
    def from_json(cls, path) -> 'SystemConfig':
        return cls.from_dict(json.loads(Path(path).read_text()))

    def to_json(self, path, indent: int = 2) -> None:
        Path(path).write_text(json.dumps(self.to_dict(), indent=indent) + '\n')

    # ============================================================================
    # Utility Methods
    # ============================================================================

    def mutation_range(self) -> Tuple[float, float]:
        return (self.mutation_low, self.mutation_high)

    def get_plots_path(self) -> Path:
        return Path(self.plots_directory)

    def create_output_directories(self) -> None:
        """Create the plots directory if it doesn't exist."""
        self.get_plots_path().mkdir(parents=True, exist_ok=True)


# ============================================================================
# Default Configuration
# ============================================================================

DEFAULT_SYSTEM_CONFIG = SystemConfig()


# ============================================================================
# Convenience Functions
# ============================================================================

def load_system_config(path: Optional[str] = None) -> SystemConfig:
    """Settings from a JSON file, or the shared defaults when `path` is None."""
    return DEFAULT_SYSTEM_CONFIG if path is None else SystemConfig.from_json(path)
