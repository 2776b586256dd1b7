#!/usr/bin/env python3
"""
Population Optimizer - genetic search for the allocation with the best
Sharpe ratio over synthetic futures.

Each generation:
    1. Generate ONE synthetic scenario with MarkovBootstrap
    2. Evaluate every individual against that same scenario
    3. Sort by Sharpe ratio, replace the weaker half with offspring of the
       stronger half

Sharing one scenario per generation keeps comparisons inside a generation
fair; drawing a new one each generation makes the whole run an outer Monte
Carlo loop around the evolutionary search.
"""

import logging
import numpy as np
import pandas as pd
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from portfolio_mcmc.config import SystemConfig
from portfolio_mcmc.data.timeseries import TimeSeries
from portfolio_mcmc.montecarlo import (
    HistoricalReplay, MarkovBootstrap, ScenarioError, generate_scenario
)
from .portfolio import Portfolio, recombine


@dataclass
class Individual:
    """Portfolio plus the statistics of its latest evaluation."""
    portfolio: Portfolio
    returns: float = np.nan
    volatility: float = np.nan
    sharpe_ratio: float = np.nan
    error: Optional[str] = None

    def record(self, result: TimeSeries) -> None:
        self.returns = result.returns()
        self.volatility = result.volatility()
        self.sharpe_ratio = result.sharpe_ratio()
        self.error = None

    def record_failure(self, error: Exception) -> None:
        self.returns = np.nan
        self.volatility = np.nan
        self.sharpe_ratio = np.nan
        self.error = str(error)

    @property
    def fitness(self) -> float:
        """Sharpe ratio for ranking; failed or NaN evaluations rank lowest."""
        if self.error is not None or np.isnan(self.sharpe_ratio):
            return -np.inf
        return self.sharpe_ratio

    def __str__(self) -> str:
        return (f"{self.portfolio} ({self.returns:4.1f}/{self.volatility:4.1f}/"
                f"{self.sharpe_ratio:4.2f})")


class Population:
    """Ordered individuals; slots are replaced, the list itself is kept."""

    def __init__(self, individuals: List[Individual]):
        self.individuals = individuals

    def __len__(self) -> int:
        return len(self.individuals)

    def sort(self) -> None:
        """Ascending by fitness; the best individual ends up last."""
        self.individuals.sort(key=lambda ind: ind.fitness)

    def best(self) -> Individual:
        return max(self.individuals, key=lambda ind: ind.fitness)


ProgressCallback = Callable[[int, Individual], None]


class PopulationOptimizer:
    """
    Genetic search over portfolio allocations.

    Randomness comes only from the injected generator; evaluations draw no
    random numbers, so they can run on worker threads.
    """

    def __init__(self,
                 config: Optional[SystemConfig] = None,
                 rng: Optional[np.random.Generator] = None,
                 progress_callback: Optional[ProgressCallback] = None):
        """
        Parameters:
        -----------
        config : SystemConfig, optional
            Search settings (horizon, mutation range, workers, ...)
        rng : np.random.Generator, optional
            Random source; defaults to default_rng(config.seed)
        progress_callback : callable, optional
            Called as progress_callback(generation, best_individual) after
            every generation's evaluation
        """
        self.config = config if config is not None else SystemConfig()
        self.rng = rng if rng is not None else np.random.default_rng(self.config.seed)
        self.progress_callback = progress_callback

        self.population: Optional[Population] = None
        self.reference: Optional[TimeSeries] = None
        self.history: List[Dict] = []

        logging.info("PopulationOptimizer initialized")

    # =========================================================================
    # PUBLIC
    # =========================================================================

    def run(self,
            population_size: int,
            generation_count: int,
            collection: Dict[str, TimeSeries]) -> Portfolio:
        """
        Run the search and return the best portfolio of the final generation.

        A generation whose scenario cannot be generated (conditioned mode with
        asset dates that miss a reference month) is skipped with a warning
        when errors are isolated; it neither reports nor breeds.

        Parameters:
        -----------
        population_size : int
            Number of individuals (at least 2)
        generation_count : int
            Number of evaluate/select/breed cycles (at least 1)
        collection : Dict[str, TimeSeries]
            Historical monthly returns; the asset universe is its keys
        """
        if population_size < 2:
            raise ValueError(f"population_size must be at least 2, got {population_size}")
        if generation_count < 1:
            raise ValueError(f"generation_count must be at least 1, got {generation_count}")

        names = sorted(collection)
        logging.info(f"PopulationOptimizer: {population_size} individuals, "
                     f"{generation_count} generations, assets: {', '.join(names)}")

        self.population = self._initialize(names, population_size)
        self.reference = self._reference_series(names, collection)
        self.history = []

        best = None
        for generation in range(generation_count):
            try:
                scenario = self._generate_scenario(names, collection)
            except ScenarioError as e:
                if not self.config.isolate_evaluation_errors:
                    raise
                logging.warning(f"Generation {generation} skipped, scenario generation failed: {e}")
                continue

            self._evaluate(scenario)

            self.population.sort()
            best = self.population.best()
            self._report(generation, best)

            self._select_and_breed()

        if best is None:
            raise ScenarioError(f"no scenario could be generated in {generation_count} generations")
        return best.portfolio

    def history_frame(self) -> pd.DataFrame:
        """Best individual per generation: returns, volatility, sharpe_ratio, portfolio."""
        return pd.DataFrame(self.history,
                            columns=['generation', 'returns', 'volatility', 'sharpe_ratio', 'portfolio']
                            ).set_index('generation')

    # =========================================================================
    # STEPS
    # =========================================================================

    def _initialize(self, names: List[str], population_size: int) -> Population:
        return Population([
            Individual(Portfolio.create_random(names, self.rng, self.config.initial_increments))
            for _ in range(population_size)
        ])

    def _reference_portfolio(self, names: List[str]) -> Portfolio:
        if self.config.reference_weights:
            return Portfolio.from_weights(self.config.reference_weights)
        return Portfolio.create_equal_weight(names)

    def _reference_series(self, names: List[str], collection: Dict[str, TimeSeries]) -> TimeSeries:
        """Historical replay of the reference portfolio; seeds every MarkovBootstrap."""
        reference = self._reference_portfolio(names)
        series = reference.evaluate(HistoricalReplay(collection))
        logging.info(f"Reference portfolio: {reference} "
                     f"(returns: {series.returns():.1f}%; volatility: {series.volatility():.1f}%)")
        return series

    def _generate_scenario(self, names: List[str],
                           collection: Dict[str, TimeSeries]) -> Dict[str, TimeSeries]:
        assets = collection if self.config.markov_asset_mode == 'conditioned' else None
        provider = MarkovBootstrap(self.reference, self.rng,
                                   horizon_years=self.config.horizon_years,
                                   assets=assets)
        return generate_scenario(names, provider)

    def _evaluate_one(self, individual: Individual, scenario: Dict[str, TimeSeries]) -> None:
        try:
            result = individual.portfolio.evaluate(HistoricalReplay(scenario))
        except ScenarioError as e:
            if not self.config.isolate_evaluation_errors:
                raise
            logging.warning(f"Evaluation failed for {individual.portfolio}: {e}")
            individual.record_failure(e)
            return
        individual.record(result)

    def _evaluate(self, scenario: Dict[str, TimeSeries]) -> None:
        """Evaluate every individual; returns only when all are done."""
        individuals = self.population.individuals
        workers = self.config.max_workers

        if workers is None or workers <= 1:
            for individual in individuals:
                self._evaluate_one(individual, scenario)
            return

        with ThreadPoolExecutor(max_workers=workers) as pool:
            # list() waits for every result and re-raises the first failure
            list(pool.map(lambda ind: self._evaluate_one(ind, scenario), individuals))

    def _select_and_breed(self) -> None:
        """Replace the lower half (population sorted ascending) with offspring of the upper half."""
        individuals = self.population.individuals
        num = len(individuals) // 2
        upper = len(individuals) - num

        for i in range(num):
            parent0 = individuals[num + int(self.rng.integers(upper))]
            parent1 = individuals[num + int(self.rng.integers(upper))]
            child = recombine(parent0.portfolio, parent1.portfolio, self.rng,
                              notional_total=self.config.notional_total,
                              mutation_range=self.config.mutation_range())
            individuals[i] = Individual(child)

    def _report(self, generation: int, best: Individual) -> None:
        self.history.append({
            'generation': generation,
            'returns': best.returns,
            'volatility': best.volatility,
            'sharpe_ratio': best.sharpe_ratio,
            'portfolio': str(best.portfolio),
        })
        logging.info(f"Generation {generation}: {best}")

        if self.progress_callback is not None:
            self.progress_callback(generation, best)
