"""
cli.py

Command-line entry point:

    joker-odds --cards 7 --decks 2 --jokers 4 --hand-size 6
"""
import argparse
import sys
from typing import List, Optional

from joker_odds.config import read_config_file, SimulationConfig
from joker_odds.logging_config import get_logger, setup_logging
from joker_odds.report import print_report, progress_line
from joker_odds.simulation import MonteCarloEstimator

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_INVALID_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="joker-odds",
        description="Estimate hand category probabilities for decks with jokers by Monte Carlo sampling.",
    )
    parser.add_argument('--cards', type=int, default=None,
                        help="Items drawn per hand, at most 12 (default: 7)")
    parser.add_argument('--decks', type=int, default=None,
                        help="Number of full 52-card decks (default: 1)")
    parser.add_argument('--jokers', type=int, default=None,
                        help="Jokers added to the deck (default: 0)")
    parser.add_argument('--hand-size', type=int, default=None,
                        help="Category set to evaluate: 5 or 6 (default: 5)")
    parser.add_argument('--seed', type=int, default=None,
                        help="Random seed for a reproducible run")
    parser.add_argument('--batch-size', type=int, default=None,
                        help="Hands sampled between convergence checks")
    parser.add_argument('--max-iterations', type=int, default=None,
                        help="Stop after this many hands even if intervals still overlap")
    parser.add_argument('--config', type=str, default=None,
                        help="YAML config file (default: the packaged config.yaml)")
    parser.add_argument('--log-level', type=str, default=None,
                        help="Logging level for stderr diagnostics (default: INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        file_config = read_config_file(args.config)
        log_cfg = file_config.get('logging') or {}
        setup_logging(args.log_level or log_cfg.get('level', 'INFO'), log_cfg.get('log_dir'))

        config = SimulationConfig.from_dict(file_config.get('simulation')).with_overrides(
            cards=args.cards,
            decks=args.decks,
            jokers=args.jokers,
            hand_size=args.hand_size,
            seed=args.seed,
            batch_size=args.batch_size,
            max_iterations=args.max_iterations,
        ).validate()
        logger.debug(f"Resolved configuration: {config}")
    except (ValueError, FileNotFoundError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_INVALID_CONFIG

    estimator = MonteCarloEstimator(config)
    result = estimator.run(on_batch=lambda n: print(progress_line(n), flush=True))
    print_report(result)
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
