"""Pytest fixtures for TopoMap tests."""

import tempfile

import numpy as np
import pytest


def _mask_from_rows(rows):
    """Build a bool mask from strings, '#' = skeleton, anything else = background."""
    return np.array([[c == "#" for c in row] for row in rows], dtype=bool)


@pytest.fixture
def make_mask():
    """Factory turning a list of '#'/'.' strings into a mask indexed [y, x]."""
    return _mask_from_rows


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def line_mask():
    """A 5-pixel horizontal line from (2, 2) to (6, 2)."""
    return _mask_from_rows([
        ".........",
        ".........",
        "..#####..",
        ".........",
        ".........",
    ])


@pytest.fixture
def plus_mask():
    """A '+' centered on (4, 4) with three-pixel arms."""
    return _mask_from_rows([
        ".........",
        "....#....",
        "....#....",
        "....#....",
        ".#######.",
        "....#....",
        "....#....",
        "....#....",
        ".........",
    ])


@pytest.fixture
def square_loop_mask():
    """A closed 3x3 square ring from (2, 2) to (4, 4) with an empty center."""
    return _mask_from_rows([
        ".......",
        ".......",
        "..###..",
        "..#.#..",
        "..###..",
        ".......",
        ".......",
    ])


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from topomap.config import PipelineConfig
    return PipelineConfig()
