"""
Shared pytest fixtures for OpenCSP tests.
"""

from typing import List, Sequence, Tuple

import pytest

from opencsp.core.instance import Instance


def pytest_configure(config):
    """Add custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")


@pytest.fixture
def small_instance():
    """L=10, lengths [3, 4], demands [5, 3]."""
    return Instance(10, (3, 4), (5, 3), name="small")


@pytest.fixture
def single_item_instance():
    """L=10, one item of length 5 with demand 7."""
    return Instance(10, (5,), (7,), name="single")


@pytest.fixture
def classic_instance():
    """Six item types on a stock length of 40."""
    return Instance(40, (4, 2, 6, 7, 8, 12), (20, 41, 23, 12, 9, 34), name="classic")


@pytest.fixture
def csv_instance_path(tmp_path):
    """A small instance CSV on disk."""
    path = tmp_path / "small.csv"
    path.write_text(
        "Item,StockLength,Length,Demand\n"
        "1,10,3,5\n"
        "2,10,4,3\n"
    )
    return path


def enumerate_feasible_patterns(
    item_lengths: Sequence[int], capacity: int
) -> List[Tuple[int, ...]]:
    """All count vectors a >= 0 with sum a_i * l_i <= capacity (brute force)."""
    patterns: List[Tuple[int, ...]] = []

    def extend(prefix: List[int], remaining: int) -> None:
        i = len(prefix)
        if i == len(item_lengths):
            patterns.append(tuple(prefix))
            return
        for count in range(remaining // item_lengths[i] + 1):
            extend(prefix + [count], remaining - count * item_lengths[i])

    extend([], capacity)
    return patterns


@pytest.fixture
def feasible_patterns():
    """Brute-force pattern enumerator, for checking solver results."""
    return enumerate_feasible_patterns
