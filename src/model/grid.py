"""Builds the two-dimensional cell arena and wires each cell to its neighbors."""

from __future__ import annotations

from typing import Any, Iterator, TYPE_CHECKING

import numpy as np

from enums import Direction
from model.cell import Cell
from model.errors import ConfigurationError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.cell import CellContext


class Grid:
    """A fixed width x height arena of cells.

    Cells are addressed by (x, y) coordinates and refer to their neighbors by coordinates as well, so the arena is the
    only owner of the cells. The topology is built once and never changed afterwards; a new run builds a new grid.

    Attributes:
        width: The number of columns (in cells).
        height: The number of rows (in cells).
        cells: 2D array of 'Cell' objects indexed [x, y].
    """

    width: int
    height: int
    cells: NDArray[Any]

    def __init__(self, width: int, height: int, context: CellContext) -> None:
        """Creates all cells and their neighbor links.

        Args:
            width: The number of columns (in cells).
            height: The number of rows (in cells).
            context: The run the cells belong to.

        Raises:
            ConfigurationError: If a dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Impossible grid dimensions {width}x{height}")

        self.width = width
        self.height = height
        self.cells = np.empty((width, height), dtype=object)

        for x in range(width):
            for y in range(height):
                self.cells[x, y] = Cell((x, y), self._get_neighbor_coords((x, y)), context)

    def __len__(self) -> int:
        return self.width * self.height

    def __iter__(self) -> Iterator[Cell]:
        """Iterates over all cells, column by column."""
        for x in range(self.width):
            for y in range(self.height):
                yield self.cells[x, y]

    def __getitem__(self, coords: tuple[int, int]) -> Cell:
        return self.cells[coords]

    def contains(self, coords: tuple[int, int]) -> bool:
        """Checks if the coordinates lie inside the grid."""
        return 0 <= coords[0] < self.width and 0 <= coords[1] < self.height

    def rim_cells(self, direction: Direction) -> list[Cell]:
        """Returns the cells that have no neighbor in the given direction."""
        match direction:
            case Direction.BOTTOM:
                return [self.cells[x, self.height - 1] for x in range(self.width)]
            case Direction.RIGHT:
                return [self.cells[self.width - 1, y] for y in range(self.height)]
            case Direction.TOP:
                return [self.cells[x, 0] for x in range(self.width)]
            case Direction.LEFT:
                return [self.cells[0, y] for y in range(self.height)]

    def _get_neighbor_coords(self, coords: tuple[int, int]) -> list[tuple[int, int] | None]:
        """Calculates the neighbor coordinates of a cell, ordered by 'Direction.value'."""
        neighbor_coords: list[tuple[int, int] | None] = []
        for direction in Direction:
            dx, dy = direction.to_vector()
            candidate = (coords[0] + dx, coords[1] + dy)
            neighbor_coords.append(candidate if self.contains(candidate) else None)
        return neighbor_coords
