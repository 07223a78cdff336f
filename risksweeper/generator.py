"""Board construction with replaceable mine placement."""

import random
from typing import AbstractSet, Iterable, List, Optional, Set

from .cell import Cell
from .utils import Coordinate, all_coordinates, get_neighborhoods

MINES_GENERATION_ALGORITHMS = ("safe_first_action_rule", "safe_neighborhood_rule")


def safe_zone(
    height: int, width: int, start: Coordinate, mines_generation_algorithm: str
) -> Set[Coordinate]:
    """
    Return the cells that must stay mine-free for the given placement rule.

    Args:
        height: Board height.
        width: Board width.
        start: The first coordinate the solver opens.
        mines_generation_algorithm: "safe_first_action_rule" keeps only the
            start safe, "safe_neighborhood_rule" also keeps its neighbors safe.

    Raises:
        ValueError: If the algorithm is unrecognized.
    """
    if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
        raise ValueError(
            'mines_generation_algorithm must be "safe_first_action_rule" '
            'or "safe_neighborhood_rule".'
        )
    safe: Set[Coordinate] = {start}
    if mines_generation_algorithm == "safe_neighborhood_rule":
        safe |= set(get_neighborhoods(height, width)[start])
    return safe


class RandomMineGenerator:
    """Uniform mine placement outside the safe starting zone."""

    def __init__(
        self,
        mines_generation_algorithm: str = "safe_first_action_rule",
        seed: Optional[int] = None,
    ) -> None:
        if mines_generation_algorithm not in MINES_GENERATION_ALGORITHMS:
            raise ValueError(
                'mines_generation_algorithm must be "safe_first_action_rule" '
                'or "safe_neighborhood_rule".'
            )
        self.mines_generation_algorithm: str = mines_generation_algorithm
        self.rng = random.Random(seed) if seed is not None else random.Random()

    def __call__(
        self, height: int, width: int, mines_count: int, start: Coordinate
    ) -> Set[Coordinate]:
        safe = safe_zone(height, width, start, self.mines_generation_algorithm)

        if mines_count > height * width - len(safe):
            raise ValueError(
                f"Cannot place enough safe cells to satisfy {self.mines_generation_algorithm}."
            )

        eligible: List[Coordinate] = [
            coord for coord in all_coordinates(height, width) if coord not in safe
        ]
        # Sample mines uniformly without replacement.
        return set(self.rng.sample(eligible, mines_count))


class FixedMineGenerator:
    """Injects a predetermined mine layout, for reproducible games and tests."""

    def __init__(self, mines: Iterable[Coordinate]) -> None:
        self.mines: Set[Coordinate] = set(mines)

    def __call__(
        self, height: int, width: int, mines_count: int, start: Coordinate
    ) -> Set[Coordinate]:
        if len(self.mines) != mines_count:
            raise ValueError(
                f"Fixed layout has {len(self.mines)} mines, expected {mines_count}."
            )
        for row, col in self.mines:
            if not (0 <= row < height and 0 <= col < width):
                raise ValueError(f"Mine {(row, col)} is outside the board.")
        if start in self.mines:
            raise ValueError("The starting cell cannot hold a mine.")
        return set(self.mines)


def build_board(
    height: int, width: int, mines: AbstractSet[Coordinate]
) -> List[List[Cell]]:
    """Create the grid of cells and populate every adjacent mine count."""
    neighborhoods = get_neighborhoods(height, width)
    board: List[List[Cell]] = [
        [Cell(is_mine=(row, col) in mines) for col in range(width)]
        for row in range(height)
    ]
    for mr, mc in mines:
        for nr, nc in neighborhoods[(mr, mc)]:
            board[nr][nc].incr()
    return board
