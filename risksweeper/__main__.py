"""Command-line entry point: python -m risksweeper"""

import argparse
import logging
from typing import List, Optional

from .analysis import play_until_win, run_solver_many_tests, run_solver_single_test
from .generator import MINES_GENERATION_ALGORITHMS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="risksweeper",
        description="Play Minesweeper games with the risk-score solver.",
    )
    parser.add_argument('--height', type=int, default=13)
    parser.add_argument('--width', type=int, default=15)
    parser.add_argument('--mines', type=int, default=40)
    parser.add_argument('--runs', type=int, default=1, help='Number of independent games to play')
    parser.add_argument('--seed', type=int, default=-1, help='Base RNG seed; <0 uses OS entropy (random every run)')
    parser.add_argument('--workers', type=int, default=1, help='Worker processes for batch runs')
    parser.add_argument('--algorithm', type=str, default='safe_first_action_rule',
                        choices=list(MINES_GENERATION_ALGORITHMS))
    parser.add_argument('--skip-safe-cells', action='store_true',
                        help='Stop propagating into cells already scored Val(0)')
    parser.add_argument('--until-win', action='store_true',
                        help='Start fresh games until one is won and report the failures')
    parser.add_argument('--show-board', action='store_true')
    parser.add_argument('-v', '--verbose', action='store_true')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    seed = None if args.seed < 0 else args.seed

    if args.until_win:
        failed, _ = play_until_win(
            args.height,
            args.width,
            args.mines,
            args.algorithm,
            seed=seed,
            skip_safe_cells=args.skip_safe_cells,
            show_boards=args.show_board,
        )
        print(f"FAILED : {failed}")
        return 0

    if args.runs == 1:
        result = run_solver_single_test(
            args.height,
            args.width,
            args.mines,
            args.algorithm,
            seed=seed,
            skip_safe_cells=args.skip_safe_cells,
            show_boards=args.show_board,
        )
        print('WIN' if result["status"] == 1 else 'LOSE')
        return 0

    stats = run_solver_many_tests(
        args.height,
        args.width,
        args.mines,
        args.runs,
        args.algorithm,
        seed=seed,
        skip_safe_cells=args.skip_safe_cells,
        workers=args.workers,
    )
    print(f"Win rate: {stats['win_rate']*100:.1f}%")
    print(f"Average turns per game: {stats['avg_turns']:.1f}")
    print(f"Average risky opens per game: {stats['avg_guesses_count']:.1f}")
    print(f"Average reseeds per game: {stats['avg_reseeds_count']:.1f}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
