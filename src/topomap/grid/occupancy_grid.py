"""
Occupancy grid adapter for TopoMap.

Exposes the per-cell state accessor and dimensions the extractor reads, plus
conversions from grayscale map images and boolean masks.
"""

from enum import IntEnum

import numpy as np


class CellState(IntEnum):
    """State of a single grid cell."""
    VACANT = 0
    OCCUPIED = 1
    UNKNOWN = 2


class OccupancyGrid:
    """
    Read-only grid of cell states, indexed [y, x] internally.

    Accessors take (x, y) to match pixel coordinates everywhere else.
    """

    def __init__(self, states):
        states = np.asarray(states)
        if states.ndim != 2:
            raise ValueError(f"Occupancy grid must be 2D, got shape {states.shape}")
        self._states = states.astype(np.int8, copy=True)
        self._states.setflags(write=False)

    @classmethod
    def from_mask(cls, vacant_mask):
        """Grid with True cells vacant and everything else occupied."""
        vacant_mask = np.asarray(vacant_mask, dtype=bool)
        states = np.where(vacant_mask, CellState.VACANT, CellState.OCCUPIED)
        return cls(states)

    @classmethod
    def from_image(cls, gray, free_thresh=0.196, occupied_thresh=0.65, negate=False):
        """
        Grid from a grayscale map image, map_server style.

        Occupancy probability is (255 - value) / 255 (value / 255 when
        `negate`). Above `occupied_thresh` is occupied, below `free_thresh` is
        vacant, anything between is unknown.
        """
        gray = np.asarray(gray)
        if gray.ndim != 2:
            raise ValueError(f"Map image must be single channel, got shape {gray.shape}")

        values = gray.astype(np.float64)
        occupancy = values / 255.0 if negate else (255.0 - values) / 255.0

        states = np.full(gray.shape, CellState.UNKNOWN, dtype=np.int8)
        states[occupancy > occupied_thresh] = CellState.OCCUPIED
        states[occupancy < free_thresh] = CellState.VACANT
        return cls(states)

    @property
    def width(self):
        return self._states.shape[1]

    @property
    def height(self):
        return self._states.shape[0]

    @property
    def dimensions(self):
        """(width, height)"""
        return self.width, self.height

    def cell_state(self, x, y):
        return CellState(int(self._states[y, x]))

    def vacancy_mask(self):
        """Boolean mask, True where the cell is vacant."""
        return self._states == CellState.VACANT

    def count(self, state):
        return int(np.count_nonzero(self._states == state))


def occupancy_mask(grid):
    """
    Vacancy mask of any grid exposing `cell_state(x, y)` and `dimensions`.

    Uses the grid's own `vacancy_mask()` when it has one.
    """
    fast_path = getattr(grid, "vacancy_mask", None)
    if fast_path is not None:
        return np.asarray(fast_path(), dtype=bool)

    width, height = grid.dimensions
    mask = np.zeros((height, width), dtype=bool)
    for y in range(height):
        for x in range(width):
            mask[y, x] = grid.cell_state(x, y) == CellState.VACANT
    return mask
