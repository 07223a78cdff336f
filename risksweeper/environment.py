"""Solver environment: risk propagation, flood-fill reveal, flagging and the frontier stack."""

import itertools
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .cell import MINE_SCORE, SAFE_SCORE, SCORE_NOT_ENOUGH, Cell, Score
from .generator import RandomMineGenerator, build_board
from .utils import Coordinate, all_coordinates, get_neighborhoods

logger = logging.getLogger(__name__)

MineGenerator = Callable[[int, int, int, Coordinate], Set[Coordinate]]


class MineDetonation(Exception):
    """Raised by SolverEnvironment.open() when the target cell holds a mine."""

    def __init__(self, coord: Coordinate) -> None:
        super().__init__(f"Mine detonated at {coord}.")
        self.coord: Coordinate = coord


class SolverEnvironment:
    """
    One game of the risk-score solver.

    The environment owns the board and four coordinate collections:
        - opened: revealed cells.
        - marked: cells flagged as mines.
        - left: cells neither opened nor marked yet.
        - stack / stacked: the frontier, a list kept sorted by descending
          priority (Mine-scored cells at the head, safest cell at the tail)
          plus its membership set.

    Opening a cell flood-fills zero regions and lets every opened cell push a
    risk contribution into its covered neighbors; those neighbors join the
    frontier. The caller repeatedly pops the tail, opens it and drains certain
    mines with mark_obvious()/resolve_obvious().
    """

    def __init__(
        self,
        height: int,
        width: int,
        mines_count: int,
        *,
        generator: Optional[MineGenerator] = None,
        start: Optional[Coordinate] = None,
        skip_safe_cells: bool = False,
    ) -> None:
        """
        Build the board and seed the frontier with the safe starting cell.

        Args:
            height: Board height (number of rows), must be > 0.
            width: Board width (number of columns), must be > 0.
            mines_count: Total number of mines to place, must be >= 0.
            generator: Callable (height, width, mines_count, start) -> mine
                coordinates. Defaults to a RandomMineGenerator that keeps only
                the starting cell safe.
            start: First cell to open; defaults to the bottom-right corner.
            skip_safe_cells: If True, covered cells already scored Val(0) stop
                receiving contribution writes during propagation.

        Raises:
            ValueError: If dimensions, mine count or start are invalid, or the
                generator cannot place the mines.
        """
        if height <= 0 or width <= 0:
            raise ValueError("Height and width must be positive.")
        if mines_count < 0:
            raise ValueError("mines_count must be non-negative.")

        if start is None:
            start = (height - 1, width - 1)
        if not (0 <= start[0] < height and 0 <= start[1] < width):
            raise ValueError(f"Start {start} is outside the board.")

        self.height: int = height
        self.width: int = width
        self.mines_count: int = mines_count
        self.start: Coordinate = start
        self.skip_safe_cells: bool = skip_safe_cells

        if generator is None:
            generator = RandomMineGenerator()
        mines = generator(height, width, mines_count, start)

        self._neighborhoods: Dict[
            Coordinate, Tuple[Coordinate, ...]
        ] = get_neighborhoods(height, width)
        self.board: List[List[Cell]] = build_board(height, width, mines)

        self.opened: Set[Coordinate] = set()
        self.marked: Set[Coordinate] = set()
        self.left: Set[Coordinate] = set(all_coordinates(height, width))

        # Frontier: tail is the access end
        self.stack: List[Coordinate] = [start]
        self.stacked: Set[Coordinate] = {start}

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def neighbors(self, coord: Coordinate) -> Tuple[Coordinate, ...]:
        """Return precomputed neighbor coordinates for a cell."""
        return self._neighborhoods[coord]

    def cell(self, coord: Coordinate) -> Cell:
        return self.board[coord[0]][coord[1]]

    def score(self, coord: Coordinate) -> Score:
        return self.board[coord[0]][coord[1]].score

    @property
    def frontier(self) -> List[Coordinate]:
        """Copy of the frontier, head (highest priority) first."""
        return list(self.stack)

    def is_won(self) -> bool:
        return not self.left

    # -------------------------------------------------------------------------
    # Score propagation
    # -------------------------------------------------------------------------

    def update_neighbours_score(self, coord: Coordinate) -> None:
        """
        Push the opened cell's risk contribution into its covered neighbors.

        The contribution is 1000 when every covered neighbor must be a mine,
        0 when none can be, and otherwise (100 // covered) * remaining mines.
        Newly scored neighbors are appended to the frontier; the caller sorts.
        """
        nbrs = self._neighborhoods[coord]
        cell = self.board[coord[0]][coord[1]]

        nb_marked = sum(1 for n in nbrs if n in self.marked)
        remaining = 0 if cell.is_mine else cell.adjacent_mines - nb_marked

        covered = [
            n for n in nbrs if n not in self.marked and n not in self.opened
        ]
        nb_covered = len(covered)

        if nb_covered <= remaining:
            contribution = MINE_SCORE
        elif remaining == 0:
            contribution = SAFE_SCORE
        else:
            contribution = 100 // nb_covered * remaining

        safe = Score.val(0)
        for n in covered:
            target = self.board[n[0]][n[1]]
            if self.skip_safe_cells and target.score == safe:
                continue
            target.insert(coord, contribution)
            if n not in self.stacked:
                self.stacked.add(n)
                self.stack.append(n)

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def open(self, coord: Coordinate) -> List[Coordinate]:
        """
        Reveal a cell, flood-filling through zero cells, then refresh scores.

        Args:
            coord: Cell to reveal.

        Returns:
            Newly opened coordinates, the target first.

        Raises:
            MineDetonation: If the cell is a mine. Nothing is mutated then.
        """
        if self.cell(coord).is_mine:
            raise MineDetonation(coord)
        if coord in self.opened:
            return []

        work: List[Coordinate] = [coord]
        newly_opened: List[Coordinate] = [coord]
        self.opened.add(coord)

        seen: Set[Coordinate] = {coord}
        seen_order: List[Coordinate] = [coord]

        while work:
            cur = work.pop()
            is_zero = self.board[cur[0]][cur[1]].adjacent_mines == 0
            for nbr in self._neighborhoods[cur]:
                if nbr not in seen:
                    seen.add(nbr)
                    seen_order.append(nbr)
                if is_zero and nbr not in self.opened and nbr not in self.marked:
                    self.opened.add(nbr)
                    newly_opened.append(nbr)
                    work.append(nbr)

        self.left.difference_update(newly_opened)
        if not self.stacked.isdisjoint(newly_opened):
            self.stacked.difference_update(newly_opened)
            self.stack = [c for c in self.stack if c not in self.opened]

        for c in seen_order:
            if c in self.opened:
                self.update_neighbours_score(c)

        self.sort()
        logger.debug(
            "Opened %s: %d cells revealed, frontier size %d",
            coord,
            len(newly_opened),
            len(self.stack),
        )
        return newly_opened

    def _mark_batch(self, coords: Iterable[Coordinate]) -> None:
        """Flag cells as mines and re-propagate from their opened neighbors."""
        coords = list(coords)
        for c in coords:
            self.marked.add(c)
            self.left.discard(c)
            self.stacked.discard(c)

        affected: List[Coordinate] = []
        affected_set: Set[Coordinate] = set()
        for c in coords:
            for nbr in self._neighborhoods[c]:
                if nbr in self.opened and nbr not in affected_set:
                    affected_set.add(nbr)
                    affected.append(nbr)

        for nbr in affected:
            self.update_neighbours_score(nbr)

        logger.debug("Marked %s", coords)

    def mark(self, coord: Coordinate) -> None:
        """
        Flag a cell as a mine.

        No check is made against the real content: marking a safe cell is a
        caller error.
        """
        if coord in self.stacked:
            self.stack.remove(coord)
        self._mark_batch([coord])
        self.sort()

    def mark_obvious(self) -> int:
        """
        Mark the leading run of frontier cells whose score is Mine.

        Returns:
            Number of cells marked by this call (0 when none).
        """
        drained = list(
            itertools.takewhile(
                lambda c: self.board[c[0]][c[1]].score.is_mine, self.stack
            )
        )
        if not drained:
            return 0

        del self.stack[: len(drained)]
        self._mark_batch(drained)
        self.sort()
        return len(drained)

    def resolve_obvious(self) -> int:
        """Call mark_obvious() until it marks nothing; return the total marked."""
        total = 0
        while True:
            count = self.mark_obvious()
            if count == 0:
                return total
            total += count

    def sort(self) -> None:
        """Order the frontier by descending priority; pop() takes the tail."""
        board = self.board
        self.stack.sort(
            key=lambda c: board[c[0]][c[1]].score.sort_key(), reverse=True
        )

    def pop(self) -> Optional[Coordinate]:
        """
        Remove and return the safest frontier cell, or None if the frontier is empty.

        The returned cell also leaves the undecided set; the caller is
        expected to open it next.
        """
        if not self.stack:
            return None
        coord = self.stack.pop()
        self.stacked.discard(coord)
        self.left.discard(coord)
        return coord

    def reseed(self) -> Optional[Coordinate]:
        """
        Push one undecided cell onto an exhausted frontier.

        Returns:
            The pushed coordinate, or None when no undecided cell is left.
        """
        candidates = [c for c in self.left if c not in self.stacked]
        if not candidates:
            return None
        coord = min(candidates)
        self.stack.append(coord)
        self.stacked.add(coord)
        self.sort()
        logger.debug("Reseeded frontier with %s", coord)
        return coord

    # -------------------------------------------------------------------------
    # Display methods
    # -------------------------------------------------------------------------

    _ANSI_RESET = "\033[0m"
    _ANSI_COORD = "\033[96m"
    _ANSI_MINE = "\033[91m"

    def _c(self, s: str, color: bool) -> str:
        """Wrap string in coordinate color."""
        return f"{self._ANSI_COORD}{s}{self._ANSI_RESET}" if color else s

    def _m(self, s: str, color: bool) -> str:
        """Wrap string in mine color (red)."""
        return f"{self._ANSI_MINE}{s}{self._ANSI_RESET}" if color else s

    def format_board(self, reveal_all: bool = False, color: bool = True) -> str:
        """
        Render the solver's view of the board for debugging.

        Opened cells show their count in parentheses, marked cells show <M>,
        and covered cells show a score hint: "SU" for a certain mine, the
        value for Val, "~value" for NotEnough and "-" when nothing is known.

        Args:
            reveal_all: If True, covered mines are suffixed with "x".
            color: If False, omit ANSI escape codes.

        Returns:
            A formatted multi-line string with coordinate labels.
        """

        def cell_str(row: int, col: int) -> str:
            coord = (row, col)
            cell = self.board[row][col]
            if coord in self.marked:
                return self._m("<M> ", color)
            if coord in self.opened:
                return f"({cell.adjacent_mines})"

            score = cell.score
            if score.is_mine:
                hint = "SU"
            elif not cell.scores:
                hint = "-"
            elif score.kind == SCORE_NOT_ENOUGH:
                hint = f"~{score.value}"
            else:
                hint = str(score.value)
            text = f"{hint:>3}"
            if reveal_all and cell.is_mine:
                return self._m(text + "x", color)
            return text + " "

        header = " ".join(f"{col:3d}" for col in range(self.width))
        out = [self._c("    " + header, color)]
        out.append(self._c("    " + "-" * (4 * self.width - 1), color))

        for row in range(self.height):
            row_cells = " ".join(f"{cell_str(row, col):4}" for col in range(self.width))
            out.append(self._c(f"{row:2d} |", color) + row_cells)

        return "\n".join(out)

    def format_frontier(self) -> str:
        """Render the frontier head-first as "(row, col)=Score" entries."""
        return "; ".join(f"{c}={self.score(c)!r}" for c in self.stack)

    def print_board(self) -> None:
        """Print the current solver view to stdout."""
        print(self.format_board(reveal_all=False))
