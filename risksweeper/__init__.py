"""
Minesweeper risk-score solver

A local constraint-propagation Minesweeper player:
- Score propagation: each opened cell pushes a risk contribution into its
  covered neighbors (1000 = certain mine, 0 = certain safe, otherwise an
  approximate percentage)
- Frontier: a sorted stack that always opens the safest known cell next
- Flood fill: iterative reveal of connected zero regions
- Auto-resolution: cells whose score is certain-mine are flagged in batches
"""

from .cell import Cell, Score
from .environment import MineDetonation, SolverEnvironment
from .generator import FixedMineGenerator, RandomMineGenerator, build_board
from .utils import get_neighborhoods, neighbors
from .analysis import (
    play_game,
    play_until_win,
    run_solver_single_test,
    run_solver_many_tests,
    run_solver_level_analysis,
)

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Cell",
    "Score",
    "SolverEnvironment",
    "MineDetonation",
    # Board construction
    "FixedMineGenerator",
    "RandomMineGenerator",
    "build_board",
    "get_neighborhoods",
    "neighbors",
    # Driver and analysis functions
    "play_game",
    "play_until_win",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
]
