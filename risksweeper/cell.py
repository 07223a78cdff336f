"""Cell model: content, per-neighbor risk contributions and the derived score."""

from typing import Dict, Tuple

from .utils import Coordinate

# Contribution sentinels written by score propagation
MINE_SCORE = 1000
SAFE_SCORE = 0

# Score kinds
SCORE_MINE = "mine"
SCORE_NOT_ENOUGH = "not_enough"
SCORE_VAL = "val"

_KIND_RANK: Dict[str, int] = {
    SCORE_VAL: 0,
    SCORE_NOT_ENOUGH: 1,
    SCORE_MINE: 2,
}


class Score:
    """
    Aggregated risk classification of a covered cell.

    A score is one of:
        - Mine: every contributor agrees the cell must be a mine.
        - NotEnough(v): a single contributor has an opinion so far.
        - Val(v): averaged risk from several contributors (0 = safe).

    Ordering ranks Mine above everything, then every NotEnough above every
    Val regardless of magnitude; within a kind values compare numerically.
    """

    __slots__ = ("kind", "value")

    def __init__(self, kind: str, value: int = 0) -> None:
        if kind not in _KIND_RANK:
            raise ValueError(f"Unknown score kind: {kind!r}")
        self.kind: str = kind
        self.value: int = 0 if kind == SCORE_MINE else value

    @classmethod
    def mine(cls) -> "Score":
        return cls(SCORE_MINE)

    @classmethod
    def not_enough(cls, value: int) -> "Score":
        return cls(SCORE_NOT_ENOUGH, value)

    @classmethod
    def val(cls, value: int) -> "Score":
        return cls(SCORE_VAL, value)

    @property
    def is_mine(self) -> bool:
        return self.kind == SCORE_MINE

    def sort_key(self) -> Tuple[int, int]:
        """Key such that a larger key means a higher priority to resolve."""
        return _KIND_RANK[self.kind], self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Score):
            return NotImplemented
        return self.kind == other.kind and self.value == other.value

    def __lt__(self, other: "Score") -> bool:
        return self.sort_key() < other.sort_key()

    def __le__(self, other: "Score") -> bool:
        return self.sort_key() <= other.sort_key()

    def __gt__(self, other: "Score") -> bool:
        return self.sort_key() > other.sort_key()

    def __ge__(self, other: "Score") -> bool:
        return self.sort_key() >= other.sort_key()

    def __hash__(self) -> int:
        return hash((self.kind, self.value))

    def __repr__(self) -> str:
        if self.kind == SCORE_MINE:
            return "Mine"
        if self.kind == SCORE_NOT_ENOUGH:
            return f"NotEnough({self.value})"
        return f"Val({self.value})"


def aggregate_score(scores: Dict[Coordinate, int]) -> Score:
    """
    Fold a contribution map into a Score.

    Both sentinels are sticky: a single 1000 makes the cell a Mine, otherwise a
    single 0 pins the sum to 0. Remaining values are summed (a running sum that
    hits exactly 1000 also pins) and averaged with integer division.
    """
    nb = len(scores)
    if nb == 0:
        return Score.not_enough(0)

    values = scores.values()
    if MINE_SCORE in values:
        total = MINE_SCORE
    elif SAFE_SCORE in values:
        total = SAFE_SCORE
    else:
        total = 0
        for s in values:
            total += s
            if total == MINE_SCORE:
                break

    if total == MINE_SCORE:
        return Score.mine()

    average = total // nb
    if nb == 1 and total not in (SAFE_SCORE, MINE_SCORE):
        return Score.not_enough(average)
    return Score.val(average)


class Cell:
    """One grid position: mine/empty content plus the solver's risk bookkeeping."""

    __slots__ = ("is_mine", "adjacent_mines", "scores", "score")

    def __init__(self, is_mine: bool = False) -> None:
        self.is_mine: bool = is_mine
        self.adjacent_mines: int = 0
        # contributor (row, col) -> contribution in [0, 1000]
        self.scores: Dict[Coordinate, int] = {}
        self.score: Score = Score.not_enough(0)

    @property
    def content(self) -> str:
        """Board symbol: "M" for a mine, otherwise the adjacent mine count."""
        if self.is_mine:
            return "M"
        return str(self.adjacent_mines)

    def incr(self) -> None:
        """Count one more adjacent mine; only used while building the board."""
        if not self.is_mine:
            self.adjacent_mines += 1

    def insert(self, contributor: Coordinate, value: int) -> None:
        """Store a neighbor's contribution and refresh the aggregate score."""
        self.scores[contributor] = value
        self.refresh_score()

    def refresh_score(self) -> None:
        self.score = aggregate_score(self.scores)

    def __repr__(self) -> str:
        return f"Cell({self.content}, score={self.score!r})"
