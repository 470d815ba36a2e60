"""Contains the grid cell holding a possibility space of modules."""

from __future__ import annotations

from typing import Iterable, Protocol, TYPE_CHECKING

from enums import Direction
from model.errors import ContradictionError
from model.module import EdgeFilter

if TYPE_CHECKING:
    from model.module import Module


class CellContext(Protocol):
    """The services a cell needs from the run it belongs to."""

    def get_cell(self, coords: tuple[int, int]) -> Cell:
        """Returns the cell at the given coordinates."""
        ...

    def on_possibility_space_changed(self, cell: Cell) -> None:
        """Called after the possibility space of a cell has shrunk."""
        ...

    def schedule_filter(self, coords: tuple[int, int], edge_filter: EdgeFilter, origin: Cell) -> None:
        """Queues an edge filter for the cell at the given coordinates, issued by 'origin'."""
        ...

    def on_neighbor_mismatch(self, cell: Cell, direction: Direction, module: Module, neighbor: Cell) -> None:
        """Called when 'module' is about to be assigned next to a final neighbor it does not fit."""
        ...


class Cell:
    """A single grid position and the modules that are still possible for it.

    The possibility space only ever shrinks during a run. A cell becomes final once it has been assigned a single
    module and that assignment has been propagated to its neighbors. This is not the same as holding exactly one
    module: a possibility space can shrink to a single module through filtering while the consequences of that module
    have not been propagated yet.

    Attributes:
        coords: The (x, y) coordinates of the cell.
        neighbors: The coordinates of the adjacent cells, indexed by 'Direction.value' (None at the grid's edge).
        possible_modules: The modules still considered valid for the cell (possibility space).
        is_final: True once a single module has been assigned and propagated.
        heap_index: The cell's current position in the priority queue (maintained by the queue).
    """

    coords: tuple[int, int]
    neighbors: tuple[tuple[int, int] | None, ...]
    possible_modules: list[Module]
    is_final: bool
    heap_index: int

    # The run this cell belongs to.
    _context: CellContext

    def __init__(
        self, coords: tuple[int, int], neighbors: Iterable[tuple[int, int] | None], context: CellContext
    ) -> None:
        """Creates an empty cell.

        Args:
            coords: The (x, y) coordinates of the cell.
            neighbors: The coordinates of the adjacent cells ordered bottom, right, top, left (None at the grid's
                edge).
            context: The run this cell belongs to.
        """
        self.coords = coords
        self.neighbors = tuple(neighbors)
        self.possible_modules = []
        self.is_final = False
        self.heap_index = -1
        self._context = context

    def __repr__(self) -> str:
        return f"Cell({self.coords}, possible={len(self.possible_modules)}, final={self.is_final})"

    @property
    def entropy(self) -> int:
        """The size of the possibility space (the priority queue key)."""
        return len(self.possible_modules)

    def initialize(self, modules: Iterable[Module]) -> None:
        """Makes every given module possible for the cell."""
        self.possible_modules = list(modules)
        self.is_final = False

    def filter(self, edge_filter: EdgeFilter) -> None:
        """Removes every possible module that does not pass the edge filter.

        A cell with a single possible module is never filtered, neither its queue position nor its neighbors are
        touched in that case.
        """
        if len(self.possible_modules) == 1:
            return

        removing_modules = [module for module in self.possible_modules if not edge_filter.matches(module)]

        for module in removing_modules:
            self.remove_module(module)

    def remove_module(self, module: Module) -> None:
        """Removes a module from the possibility space and propagates the change to the neighbors.

        A neighbor only gets filtered if the removed module was the last possible module with its edge connection type
        on the side facing that neighbor. Removing a module that is not possible (anymore) does nothing.

        Raises:
            ContradictionError: If the possibility space is empty afterwards.
        """
        if module not in self.possible_modules:
            return

        self.possible_modules.remove(module)
        self._context.on_possibility_space_changed(self)

        if not self.possible_modules:
            raise ContradictionError(self.coords)

        for direction in Direction:
            neighbor_coords = self.neighbors[direction.value]
            if neighbor_coords is None:
                continue

            edge_type = module.edge(direction)
            if any(other.edge(direction) == edge_type for other in self.possible_modules):
                continue

            self._context.schedule_filter(neighbor_coords, EdgeFilter(direction, edge_type, inclusive=False), self)

    def set_module(self, module: Module) -> None:
        """Assigns the cell a single module and propagates it to all neighbors, finalizing the cell.

        Already final neighbors whose facing edge does not fit the module are reported to the context before anything
        is changed.
        """
        for direction in Direction:
            neighbor_coords = self.neighbors[direction.value]
            if neighbor_coords is None:
                continue

            neighbor = self._context.get_cell(neighbor_coords)
            if neighbor.is_final and not module.fits(neighbor.possible_modules[0], direction):
                self._context.on_neighbor_mismatch(self, direction, module, neighbor)

        self.possible_modules = [module]
        self._context.on_possibility_space_changed(self)

        for direction in Direction:
            neighbor_coords = self.neighbors[direction.value]
            if neighbor_coords is None:
                continue

            self._context.schedule_filter(neighbor_coords, EdgeFilter(direction, module.edge(direction), True), self)

        self.is_final = True
