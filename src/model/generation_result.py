"""Contains the result variants a generation run can end with."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, TYPE_CHECKING

import numpy as np

from enums import GenerationStatus

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from enums import Direction
    from model.module import Module
    from model.module_catalog import ModuleCatalog


@dataclass(frozen=True)
class NeighborMismatch:
    """A module assignment next to an already final neighbor whose facing edge does not fit."""

    # The (x, y) coordinates of the cell that was assigned the module.
    coords: tuple[int, int]
    # The (x, y) coordinates of the already final neighbor.
    neighbor_coords: tuple[int, int]
    # The direction in which the neighbor lies, seen from the cell.
    direction: Direction
    # The ID of the module that was assigned.
    module_id: str
    # The ID of the neighbor's final module.
    neighbor_module_id: str


@dataclass(frozen=True, kw_only=True)
class GenerationResult:
    """Base class of all generation results.

    Attributes:
        status: The outcome of the run (fixed per result class).
        seed: The seed the run's random number generator was initialized with.
        width: The grid width (in cells).
        height: The grid height (in cells).
        elapsed_ms: The wall clock duration of the run in milliseconds.
    """

    status: ClassVar[GenerationStatus]

    seed: int
    width: int
    height: int
    elapsed_ms: float = field(default=0.0, compare=False)

    @property
    def succeeded(self) -> bool:
        """True if the run produced a consistent, fully resolved grid."""
        return self.status == GenerationStatus.RESOLVED


@dataclass(frozen=True, kw_only=True)
class _ModuleGridResult(GenerationResult):
    """Base class of results holding a fully collapsed grid.

    Attributes:
        module_grid: 2D array of catalog indices indexed [x, y].
        catalog: The catalog the indices refer to.
        start_coords: The (x, y) coordinates of the start module.
        goal_coords: The (x, y) coordinates of the goal module.
        neighbor_mismatches: Mismatches that were recorded (and tolerated) during the run.
    """

    module_grid: NDArray[np.int_] = field(compare=False, repr=False)
    catalog: ModuleCatalog = field(compare=False, repr=False)
    start_coords: tuple[int, int]
    goal_coords: tuple[int, int]
    neighbor_mismatches: tuple[NeighborMismatch, ...] = ()

    def module_at(self, x: int, y: int) -> Module:
        """Returns the module the cell at (x, y) was resolved to."""
        return self.catalog.modules[int(self.module_grid[x, y])]

    def module_ids(self) -> list[list[str]]:
        """Returns the resolved module IDs as a list of rows (indexed [y][x])."""
        return [[self.module_at(x, y).module_id for x in range(self.width)] for y in range(self.height)]

    def same_layout(self, other: _ModuleGridResult) -> bool:
        """Checks if another result resolved every cell to the same module."""
        return self.module_grid.shape == other.module_grid.shape and bool(np.all(self.module_grid == other.module_grid))

    def format_grid(self) -> str:
        """Returns the module IDs as an aligned text table, one grid row per line."""
        rows = self.module_ids()
        column_width = max(len(module_id) for row in rows for module_id in row)
        return "\n".join(" ".join(module_id.ljust(column_width) for module_id in row).rstrip() for row in rows)


@dataclass(frozen=True, kw_only=True)
class ResolvedGrid(_ModuleGridResult):
    """Every cell holds exactly one module and all neighbors fit each other."""

    status: ClassVar[GenerationStatus] = GenerationStatus.RESOLVED


@dataclass(frozen=True, kw_only=True)
class InconsistencyReport(_ModuleGridResult):
    """Every cell was resolved, but the post-solve verification found mismatching neighbors or exposed rim edges.

    Attributes:
        mismatched_pairs: The ((x, y), (neighbor_x, neighbor_y)) coordinate pairs whose modules do not fit.
        exposed_edges: The ((x, y), direction) pairs of rim cells exposing a non-boundary edge towards the outside.
    """

    status: ClassVar[GenerationStatus] = GenerationStatus.INCONSISTENT

    mismatched_pairs: tuple[tuple[tuple[int, int], tuple[int, int]], ...] = ()
    exposed_edges: tuple[tuple[tuple[int, int], Direction], ...] = ()


@dataclass(frozen=True, kw_only=True)
class ContradictionReport(GenerationResult):
    """A cell ran out of possible modules; the run was aborted.

    Attributes:
        coords: The (x, y) coordinates of the cell without any possible module left.
        propagation_chain: The coordinates of the cells whose changes led to the contradiction, oldest first, ending
            with the cell that issued the final filter (if the contradiction was caused by propagation).
    """

    status: ClassVar[GenerationStatus] = GenerationStatus.CONTRADICTION

    coords: tuple[int, int]
    propagation_chain: tuple[tuple[int, int], ...] = ()


@dataclass(frozen=True, kw_only=True)
class NeighborMismatchReport(GenerationResult):
    """A module was assigned next to a final neighbor it does not fit; the run was aborted.

    Attributes:
        mismatch: The details of the offending assignment.
    """

    status: ClassVar[GenerationStatus] = GenerationStatus.NEIGHBOR_MISMATCH

    mismatch: NeighborMismatch
