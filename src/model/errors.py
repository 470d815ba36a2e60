"""Contains the exceptions raised while configuring and running the level generator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from enums import Direction


class LevelGenerationError(Exception):
    """Base class of all level generation errors."""


class ConfigurationError(LevelGenerationError):
    """Raised for invalid grid dimensions or module catalogs, before anything is built."""


class ContradictionError(LevelGenerationError):
    """Raised when the possibility space of a cell becomes empty.

    Attributes:
        coords: The (x, y) coordinates of the cell without any possible module left.
    """

    coords: tuple[int, int]

    def __init__(self, coords: tuple[int, int]) -> None:
        super().__init__(f"No possible module left for cell {coords}")
        self.coords = coords


class NeighborMismatchError(LevelGenerationError):
    """Raised when a module is assigned next to an already final neighbor whose facing edge does not fit.

    Attributes:
        coords: The (x, y) coordinates of the cell that was assigned the module.
        neighbor_coords: The (x, y) coordinates of the already final neighbor.
        direction: The direction in which the neighbor lies, seen from the cell.
        module_id: The ID of the module that was assigned.
        neighbor_module_id: The ID of the neighbor's final module.
    """

    coords: tuple[int, int]
    neighbor_coords: tuple[int, int]
    direction: Direction
    module_id: str
    neighbor_module_id: str

    def __init__(
        self,
        coords: tuple[int, int],
        neighbor_coords: tuple[int, int],
        direction: Direction,
        module_id: str,
        neighbor_module_id: str,
    ) -> None:
        super().__init__(
            f"Module '{module_id}' at {coords} does not fit final neighbor '{neighbor_module_id}' at "
            f"{neighbor_coords} ({direction.name.lower()} edge)"
        )
        self.coords = coords
        self.neighbor_coords = neighbor_coords
        self.direction = direction
        self.module_id = module_id
        self.neighbor_module_id = neighbor_module_id
