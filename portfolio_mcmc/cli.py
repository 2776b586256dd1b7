#!/usr/bin/env python3
"""
Command line entry point.

    portfolio-mcmc backtest --pos SPY:60 --pos AGG:40
    portfolio-mcmc forecast --pos SPY:60 --pos AGG:40 --method block
    portfolio-mcmc optimize --size 100 --iterations 2000
"""

import sys
import argparse
import logging
import dataclasses
import numpy as np
from typing import Dict, List, Optional

from portfolio_mcmc.config import SystemConfig, load_system_config
from portfolio_mcmc.data import TimeSeries, load_returns_csv
from portfolio_mcmc.engine import Portfolio, PopulationOptimizer, run_forecast, summarize
from portfolio_mcmc.engine.forecast import FORECAST_METHODS
from portfolio_mcmc.montecarlo import HistoricalReplay, ScenarioError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--input', dest='input_file',
                        help='CSV file containing historic returns (default: history.csv)')
    common.add_argument('--kind', dest='value_kind', choices=['percent', 'fraction', 'level'],
                        help='How the CSV stores values (default: percent)')
    common.add_argument('--config', dest='config_file',
                        help='JSON file with SystemConfig fields')
    common.add_argument('--seed', type=int,
                        help='Seed for the random generator')
    common.add_argument('--horizon', dest='horizon_years', type=int,
                        help='Synthetic scenario length in years')
    common.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    common.add_argument('--log-file',
                        help='Also append log output to this file')
    common.add_argument('--plot', action='store_true',
                        help='Save charts to the plots directory')

    positions = argparse.ArgumentParser(add_help=False)
    positions.add_argument('--pos', dest='positions', action='append', default=[],
                           metavar='NAME:WEIGHT',
                           help='Position as "name:weight" (repeatable)')

    parser = argparse.ArgumentParser(
        prog='portfolio-mcmc',
        description='Portfolio backtesting, forecasting and allocation search')
    commands = parser.add_subparsers(dest='command', required=True)

    commands.add_parser('backtest', parents=[common, positions],
                        help='Evaluate a portfolio against the historical data')

    forecast = commands.add_parser('forecast', parents=[common, positions],
                                   help='Outcome percentiles over synthetic scenarios')
    forecast.add_argument('--method', choices=list(FORECAST_METHODS) + ['both'], default='both',
                          help='Scenario generator (default: both)')
    forecast.add_argument('--iterations', dest='forecast_iterations', type=int,
                          help='Number of scenarios per method (default: 10000)')

    optimize = commands.add_parser('optimize', parents=[common],
                                   help='Genetic search for the best Sharpe ratio allocation')
    optimize.add_argument('--size', dest='population_size', type=int,
                          help='Population size (default: 100)')
    optimize.add_argument('--iterations', dest='generations', type=int,
                          help='Number of generations (default: 2000)')
    optimize.add_argument('--workers', dest='max_workers', type=int,
                          help='Evaluate individuals on this many threads')
    optimize.add_argument('--markov-mode', dest='markov_asset_mode',
                          choices=['single_factor', 'conditioned'],
                          help='How synthetic states map to asset returns')
    return parser


def setup_logging(level: str, log_file: Optional[str] = None) -> None:
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, 'a'))
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT,
                        handlers=handlers, force=True)


def resolve_config(args: argparse.Namespace) -> SystemConfig:
    """Config file (or defaults) with command line overrides applied."""
    config = load_system_config(args.config_file)
    overrides = {}
    for field in dataclasses.fields(SystemConfig):
        value = getattr(args, field.name, None)
        if value is not None:
            overrides[field.name] = value
    if args.plot:
        overrides['save_plots'] = True
    # replace() re-runs __post_init__ validation
    return dataclasses.replace(config, **overrides)


def print_available(collection: Dict[str, TimeSeries]) -> None:
    print("ERROR: specify one or more --pos arguments.")
    print()
    print("Available time series:")
    print()
    for name in sorted(collection):
        print("  *", name)


def print_result(label: str, result: TimeSeries) -> None:
    print(f"{label} returns: {result.returns():.1f}%; "
          f"volatility: {result.volatility():.1f}%; "
          f"sharpe ratio: {result.sharpe_ratio():.2f}")


# ============================================================================
# Commands
# ============================================================================

def cmd_backtest(portfolio: Portfolio, collection: Dict[str, TimeSeries]) -> int:
    result = portfolio.evaluate(HistoricalReplay(collection))
    print("=== Backtest ===")
    print_result(f'"{portfolio}"', result)
    return 0


def cmd_forecast(portfolio: Portfolio, collection: Dict[str, TimeSeries],
                 config: SystemConfig, method: str) -> int:
    rng = np.random.default_rng(config.seed)
    methods = FORECAST_METHODS if method == 'both' else (method,)
    titles = {'block': 'Monte Carlo', 'markov': 'Markov Chain'}

    print(f"Portfolio: {portfolio}")
    for name in methods:
        results = run_forecast(portfolio, collection, name,
                               config.forecast_iterations, rng, config)
        print(f"=== {titles[name]} ===")
        table = summarize(results, config.forecast_percentiles)
        for label, row in table.iterrows():
            print(f"[{label}] returns: {row['Returns']:.1f}%; "
                  f"volatility: {row['Volatility']:.1f}%; "
                  f"sharpe ratio: {row['Sharpe Ratio']:.2f}")

        if config.save_plots:
            from portfolio_mcmc.visualization import plot_forecast_distribution
            config.create_output_directories()
            plot_forecast_distribution(
                results, config.forecast_percentiles, title=titles[name],
                save_path=str(config.get_plots_path() / f'forecast_{name}.png'))
    return 0


def cmd_optimize(collection: Dict[str, TimeSeries], config: SystemConfig) -> int:
    print(",".join(sorted(collection)))

    def report(generation, best):
        print(best)

    optimizer = PopulationOptimizer(config, progress_callback=report)
    best = optimizer.run(config.population_size, config.generations, collection)

    print("=== Best Portfolio ===")
    print(best)
    print(best.to_csv())

    if config.save_plots:
        from portfolio_mcmc.visualization import plot_optimizer_history
        config.create_output_directories()
        plot_optimizer_history(optimizer.history_frame(),
                               save_path=str(config.get_plots_path() / 'optimizer_history.png'))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level, args.log_file)

    if args.plot:
        import matplotlib
        matplotlib.use('Agg')  # Non-interactive backend for saving charts

    try:
        config = resolve_config(args)
        collection = load_returns_csv(config.input_file, kind=config.value_kind)

        if args.command == 'optimize':
            return cmd_optimize(collection, config)

        if not args.positions:
            print_available(collection)
            return 1
        portfolio = Portfolio.from_specs(args.positions)

        if args.command == 'backtest':
            return cmd_backtest(portfolio, collection)
        return cmd_forecast(portfolio, collection, config, args.method)

    except (ValueError, ScenarioError, FileNotFoundError) as e:
        logging.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
