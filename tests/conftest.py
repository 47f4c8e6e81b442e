import numpy as np
import pytest

from engine import INFINITY


@pytest.fixture
def example_matrix():
    return np.array([
        [0, 1, 2, 3],
        [4, 0, 5, 6],
        [7, 8, 0, 9],
        [8, 7, 6, 0],
    ], dtype=np.int64)


@pytest.fixture
def tied_matrix():
    """Vertices 1 and 2 are both 5 away from 0; both reach 3 with weight 1."""
    I = INFINITY
    return np.array([
        [0, 5, 5, I],
        [I, 0, I, 1],
        [I, I, 0, 1],
        [I, I, I, 0],
    ], dtype=np.int64)


@pytest.fixture
def disconnected_matrix():
    """Vertices 4 and 5 cannot be reached from 0."""
    I = INFINITY
    return np.array([
        [0, 2, I, I, I, I],
        [I, 0, 3, I, I, I],
        [I, I, 0, 1, I, I],
        [4, I, I, 0, I, I],
        [1, I, I, I, 0, 2],
        [I, I, I, 7, I, 0],
    ], dtype=np.int64)
