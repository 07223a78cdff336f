"""Game driver, batch benchmarking and plots for the risk-score solver."""

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Dict, Iterable, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .cell import Score
from .environment import MineDetonation, SolverEnvironment
from .generator import FixedMineGenerator, RandomMineGenerator
from .utils import Coordinate

logger = logging.getLogger(__name__)

SAFE = Score.val(0)

LEVELS: Dict[str, Tuple[int, int, int]] = {
    "beginner": (9, 9, 10),
    "intermediate": (16, 16, 40),
    "expert": (16, 30, 99),
}


def play_game(env: SolverEnvironment) -> Tuple[int, Dict[str, Any]]:
    """
    Play one game to completion on a fresh environment.

    Each turn pops the safest frontier cell, opens it and drains every cell
    that became a certain mine. An exhausted frontier is reseeded from the
    undecided cells; the game is won once none remain.

    Args:
        env: Environment that has not been played yet.

    Returns:
        Tuple of (status, payload) where status is -1 (loss) or 1 (win).
        The payload holds the game counters; on loss it also holds
        "failed_turn" and "detonated_at".
    """
    turns = 0
    reseeds_count = 0
    guesses_count = 0
    markings_count = 0

    while True:
        coord = env.pop()
        if coord is None:
            if env.reseed() is None:
                break
            reseeds_count += 1
            continue

        turns += 1
        # any open beyond the first that is not provably safe
        if turns > 1 and env.score(coord) != SAFE:
            guesses_count += 1

        try:
            env.open(coord)
        except MineDetonation as exc:
            logger.debug("Lost at turn %d on %s", turns, exc.coord)
            payload = _game_payload(env, turns, reseeds_count, guesses_count, markings_count)
            payload["failed_turn"] = turns
            payload["detonated_at"] = exc.coord
            return -1, payload

        markings_count += env.resolve_obvious()

    if not env.is_won():
        raise RuntimeError("Frontier exhausted with undecided cells left.")

    logger.debug("Won after %d turns", turns)
    return 1, _game_payload(env, turns, reseeds_count, guesses_count, markings_count)


def _game_payload(
    env: SolverEnvironment,
    turns: int,
    reseeds_count: int,
    guesses_count: int,
    markings_count: int,
) -> Dict[str, Any]:
    return {
        "turns": turns,
        "revealed_cells_count": len(env.opened),
        "markings_count": markings_count,
        "reseeds_count": reseeds_count,
        "guesses_count": guesses_count,
        "left_count": len(env.left),
    }


def _make_environment(
    height: int,
    width: int,
    mines_count: int,
    mines_generation_algorithm: str,
    seed: Optional[int],
    mines: Optional[Iterable[Coordinate]],
    skip_safe_cells: bool,
) -> SolverEnvironment:
    if mines is not None:
        generator = FixedMineGenerator(mines)
    else:
        generator = RandomMineGenerator(mines_generation_algorithm, seed=seed)
    return SolverEnvironment(
        height,
        width,
        mines_count,
        generator=generator,
        skip_safe_cells=skip_safe_cells,
    )


def run_solver_single_test(
    height: int,
    width: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_first_action_rule",
    *,
    seed: Optional[int] = None,
    mines: Optional[Iterable[Coordinate]] = None,
    skip_safe_cells: bool = False,
    show_boards: bool = False,
) -> Dict[str, Any]:
    """
    Run one end-to-end game on a fresh environment.

    Args:
        height: Board height.
        width: Board width.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule
            ("safe_first_action_rule" or "safe_neighborhood_rule").
        seed: Seed for the random mine placement.
        mines: Fixed mine layout; overrides random placement when given.
        skip_safe_cells: Stop propagating into cells already scored Val(0).
        show_boards: If True, print the solver's final view of the board.

    Returns:
        The game payload augmented with "status" (-1 loss, 1 win).
    """
    env = _make_environment(
        height, width, mines_count, mines_generation_algorithm, seed, mines, skip_safe_cells
    )
    status, payload = play_game(env)

    if show_boards:
        print(f"Generation mode: {mines_generation_algorithm}")
        print("Solver view (covered mines suffixed with 'x'):")
        print(env.format_board(reveal_all=True))
        print()
        print(f"Frontier: {env.format_frontier()}")
        print(f"Finished with status {status}.")

    out = dict(payload)
    out["status"] = status
    return out


def _run_one(args: Tuple[Any, ...]) -> Dict[str, Any]:
    height, width, mines_count, algorithm, seed, mines, skip_safe_cells = args
    return run_solver_single_test(
        height,
        width,
        mines_count,
        algorithm,
        seed=seed,
        mines=mines,
        skip_safe_cells=skip_safe_cells,
    )


def run_solver_many_tests(
    height: int,
    width: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_first_action_rule",
    *,
    seed: Optional[int] = None,
    mines: Optional[Iterable[Coordinate]] = None,
    skip_safe_cells: bool = False,
    workers: int = 1,
) -> Dict[str, float]:
    """
    Run many independent games and return averaged counters plus win rate.

    Args:
        height: Board height.
        width: Board width.
        mines_count: Total number of mines on the board.
        runs: Number of independent games to run.
        mines_generation_algorithm: Mine placement rule
            ("safe_first_action_rule" or "safe_neighborhood_rule").
        seed: Base seed; game i uses seed + i so the batch is reproducible.
        mines: Fixed mine layout shared by every game.
        skip_safe_cells: Stop propagating into cells already scored Val(0).
        workers: Number of worker processes; games share no state.

    Returns:
        "win_rate", "wins", "runs", plus "avg_<counter>" and "std_<counter>"
        for turns, revealed cells, markings, reseeds and guesses, and
        "avg_failed_turn" over lost games.

    Raises:
        ValueError: If runs or workers is not positive.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")
    if workers <= 0:
        raise ValueError("workers must be positive.")

    fixed = tuple(sorted(mines)) if mines is not None else None
    jobs = [
        (
            height,
            width,
            mines_count,
            mines_generation_algorithm,
            None if seed is None else seed + i,
            fixed,
            skip_safe_cells,
        )
        for i in range(runs)
    ]

    if workers == 1:
        results: List[Dict[str, Any]] = [_run_one(job) for job in jobs]
    else:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(_run_one, jobs))

    statuses = np.array([r["status"] for r in results])
    unexpected = set(statuses.tolist()) - {-1, 1}
    if unexpected:
        raise RuntimeError(f"Unexpected solver status: {sorted(unexpected)}")

    wins = int(np.count_nonzero(statuses == 1))
    out: Dict[str, float] = {
        "runs": float(runs),
        "wins": float(wins),
        "win_rate": wins / runs,
    }

    for key in ("turns", "revealed_cells_count", "markings_count", "reseeds_count", "guesses_count"):
        values = np.array([r[key] for r in results], dtype=float)
        out[f"avg_{key}"] = float(values.mean())
        out[f"std_{key}"] = float(values.std())

    failed = np.array([r["failed_turn"] for r in results if r["status"] == -1], dtype=float)
    out["avg_failed_turn"] = float(failed.mean()) if failed.size else 0.0

    logger.info(
        "%dx%d with %d mines: %d/%d games won (%.1f%%)",
        height,
        width,
        mines_count,
        wins,
        runs,
        100.0 * out["win_rate"],
    )
    return out


def run_solver_level_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_first_action_rule",
    *,
    seed: Optional[int] = None,
    skip_safe_cells: bool = False,
    workers: int = 1,
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run batches on the standard difficulty levels and plot summaries.

    Args:
        runs: Number of independent games per difficulty level.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed forwarded to every batch.
        skip_safe_cells: Stop propagating into cells already scored Val(0).
        workers: Worker processes per batch.
        show_plots: If False, figures are built and closed without showing.

    Returns:
        Mapping from level name to statistics from run_solver_many_tests().

    Standard difficulty levels (height x width, mines):
        - Beginner: 9x9, 10 mines
        - Intermediate: 16x16, 40 mines
        - Expert: 16x30, 99 mines
    """
    results: Dict[str, Dict[str, float]] = {}
    for level, (h, w, m) in LEVELS.items():
        results[level] = run_solver_many_tests(
            h,
            w,
            m,
            runs,
            mines_generation_algorithm,
            seed=seed,
            skip_safe_cells=skip_safe_cells,
            workers=workers,
        )

    level_names = list(LEVELS.keys())
    x = np.arange(len(level_names))

    # 1) Win rate by level
    win_rates = [results[n]["win_rate"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x, win_rates)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Win rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Win rate by difficulty level")  # type: ignore[misc]
    plt.tight_layout()

    # 2) Turns and guesses per game
    bar_w = 0.35
    turns = [results[n]["avg_turns"] for n in level_names]
    guesses = [results[n]["avg_guesses_count"] for n in level_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w / 2, turns, width=bar_w, label="turns")  # type: ignore[misc]
    plt.bar(x + bar_w / 2, guesses, width=bar_w, label="risky opens")  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average count")  # type: ignore[misc]
    plt.title("Average turns and risky opens (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    if show_plots:
        plt.show()  # type: ignore[misc]
    else:
        plt.close("all")

    return results


def play_until_win(
    height: int,
    width: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_first_action_rule",
    *,
    seed: Optional[int] = None,
    skip_safe_cells: bool = False,
    max_games: Optional[int] = None,
    show_boards: bool = False,
) -> Tuple[int, Dict[str, Any]]:
    """
    Keep starting fresh games until one is won.

    Args:
        height: Board height.
        width: Board width.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule.
        seed: Base seed; game i uses seed + i.
        skip_safe_cells: Stop propagating into cells already scored Val(0).
        max_games: Give up after this many games (None = no limit).
        show_boards: If True, print the board of the winning game.

    Returns:
        Tuple of (failed_games, payload of the last game played).
    """
    failed_games = 0
    while True:
        game_seed = None if seed is None else seed + failed_games
        env = _make_environment(
            height, width, mines_count, mines_generation_algorithm, game_seed, None, skip_safe_cells
        )
        status, payload = play_game(env)
        if status == 1:
            if show_boards:
                print(f"Solved: mines: {len(env.marked)}\n")
                print(env.format_board())
            return failed_games, payload

        failed_games += 1
        logger.info("FAIL: after %d turns. Trying another game.", payload["failed_turn"])
        if max_games is not None and failed_games >= max_games:
            return failed_games, payload
