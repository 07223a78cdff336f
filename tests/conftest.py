"""
Pytest configuration and shared fixtures.
"""
import matplotlib

matplotlib.use("Agg")

import pytest

from risksweeper import FixedMineGenerator, SolverEnvironment
from risksweeper.utils import all_coordinates


# ============================================================================
# Environment Fixtures
# ============================================================================

@pytest.fixture
def corner_mine_env() -> SolverEnvironment:
    """3x3 board, single mine at (0,0), start at (2,2)."""
    return SolverEnvironment(3, 3, 1, generator=FixedMineGenerator([(0, 0)]))


@pytest.fixture
def strip_env() -> SolverEnvironment:
    """Mine-free 1x3 strip opened from its right end."""
    return SolverEnvironment(1, 3, 0, generator=FixedMineGenerator([]))


@pytest.fixture
def two_row_env() -> SolverEnvironment:
    """2x3 board with a mine at (0,0); the two left cells stay ambiguous."""
    return SolverEnvironment(2, 3, 1, generator=FixedMineGenerator([(0, 0)]))


@pytest.fixture
def losing_env() -> SolverEnvironment:
    """2x2 board with a mine at (0,1); the solver has to guess and loses."""
    return SolverEnvironment(2, 2, 1, generator=FixedMineGenerator([(0, 1)]))


@pytest.fixture
def empty_env() -> SolverEnvironment:
    """3x3 board without mines, nothing opened yet."""
    return SolverEnvironment(3, 3, 0, generator=FixedMineGenerator([]))


# ============================================================================
# Helpers
# ============================================================================

def assert_partition(env: SolverEnvironment) -> None:
    """Opened, marked and left are disjoint and cover the board."""
    assert env.opened.isdisjoint(env.marked)
    assert env.opened.isdisjoint(env.left)
    assert env.marked.isdisjoint(env.left)
    assert env.opened | env.marked | env.left | set(env.stack) == set(
        all_coordinates(env.height, env.width)
    )
    assert len(env.stack) == len(set(env.stack))
    assert set(env.stack) == env.stacked
    assert env.stacked.isdisjoint(env.opened)
    assert env.stacked.isdisjoint(env.marked)
