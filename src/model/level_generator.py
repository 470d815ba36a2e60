"""Implements the level generator that collapses a grid of cells into a consistent tiling of modules."""

from __future__ import annotations

import random
import time
from typing import Any, Protocol, TYPE_CHECKING

import numpy as np

import constants
from enums import (
    Direction,
    EdgeConnectionType,
    NeighborMismatchPolicy,
    SolverState,
    TieBreakMode,
    WFCUpdateMode,
    WFCUpdateType,
)
from logging_config import get_logger
from model.errors import ConfigurationError, ContradictionError, NeighborMismatchError
from model.generation_result import (
    ContradictionReport,
    InconsistencyReport,
    NeighborMismatch,
    NeighborMismatchReport,
    ResolvedGrid,
)
from model.grid import Grid
from model.heap import IndexedHeap, RandomTieBreaker, StableTieBreaker
from model.module import EdgeFilter

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from model.cell import Cell
    from model.generation_result import GenerationResult
    from model.module import Module
    from model.module_catalog import ModuleCatalog

logger = get_logger(__name__)


class UpdateQueue(Protocol):
    """Anything progress updates can be put into (e.g. 'multiprocessing.Queue' or 'queue.SimpleQueue')."""

    def put(self, item: Any) -> None: ...


def resolve_seed(seed: int) -> int:
    """Returns the seed itself, or a time-derived seed if the sentinel value was given."""
    if seed == constants.RANDOM_SEED_SENTINEL:
        return time.time_ns() % (constants.RANDOM_SEED_MAX + 1)
    return seed


def validate_dimensions(width: int, height: int) -> None:
    """Rejects grids that are empty or cannot host distinct start and goal cells.

    Raises:
        ConfigurationError: If a dimension is not positive or the grid has fewer rows than needed to place the start
            module below and the goal module above another row.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"Impossible grid dimensions {width}x{height}")
    if height < constants.GRID_HEIGHT_MIN_FOR_PLACEMENTS:
        raise ConfigurationError(
            f"A grid needs at least {constants.GRID_HEIGHT_MIN_FOR_PLACEMENTS} rows to place the start and goal "
            f"modules (got {width}x{height})"
        )


class LevelGenerator:
    """Generates a level by collapsing a grid of cells into one module each.

    One call of 'generate()' is one run: the grid is built, rim cells are restricted to modules that only expose the
    boundary edge type towards the outside, the start and goal modules are placed, and then the cell with the
    smallest possibility space is repeatedly assigned a random module of its possibility space until every cell is
    final. Every assignment and removal is propagated to the neighbors through an explicit worklist of edge filters.
    There is no backtracking: a contradiction ends the run and the caller may retry with another seed (see
    'model.generation_manager.GenerationManager').

    All randomness of a run (placements, module choices, tie breaking in the priority queue) is drawn from a single
    random number generator, so runs with the same explicit seed, dimensions and catalog produce the same result.

    Attributes:
        state: The stage of the current (or last) run.
        seed: The seed of the current (or last) run (None before the first run).
    """

    state: SolverState
    seed: int | None

    # === CONSTRUCTOR PARAMETERS (initialized in __init__()) ===

    # The modules available to every cell, including the start and goal module.
    _catalog: ModuleCatalog
    # The seed passed by the caller (may be the sentinel value requesting a time-derived seed).
    _requested_seed: int
    # The only edge type a rim cell may expose towards the outside of the grid.
    _boundary_edge_type: EdgeConnectionType
    # How the priority queue orders cells with equally sized possibility spaces.
    _tie_break_mode: TieBreakMode
    # How an assignment that does not fit an already final neighbor is handled.
    _neighbor_mismatch_policy: NeighborMismatchPolicy
    # Queue receiving progress updates (optional).
    _update_queue: UpdateQueue | None
    # Granularity of the progress updates.
    _update_mode: WFCUpdateMode

    # === RUNTIME STATE (initialized in _initialize()) ===

    # The random number generator all randomness of a run is drawn from.
    _rng: random.Random
    # The cell arena of the current run.
    _grid: Grid
    # Priority queue of the cells that still need to be finalized, smallest possibility space first.
    _ordered_cells: IndexedHeap[Cell]
    # Stack of edge filters waiting to be applied (the propagation worklist).
    _pending_filters: list[_FilterUpdate]
    # Coordinates of the cells whose changes led to the filter currently being applied.
    _active_trace: tuple[tuple[int, int], ...]
    # Mismatches tolerated under NeighborMismatchPolicy.RECORD.
    _neighbor_mismatches: list[NeighborMismatch]
    # Coordinates of the placed start and goal modules.
    _start_coords: tuple[int, int]
    _goal_coords: tuple[int, int]

    def __init__(
        self,
        catalog: ModuleCatalog,
        seed: int = constants.RANDOM_SEED_SENTINEL,
        boundary_edge_type: EdgeConnectionType = constants.BOUNDARY_EDGE_TYPE_DEFAULT,
        tie_break_mode: TieBreakMode = constants.TIE_BREAK_MODE_DEFAULT,
        neighbor_mismatch_policy: NeighborMismatchPolicy = constants.NEIGHBOR_MISMATCH_POLICY_DEFAULT,
        update_queue: UpdateQueue | None = None,
        update_mode: WFCUpdateMode = constants.UPDATE_MODE_DEFAULT,
    ) -> None:
        """Initializes the level generator with all necessary config data.

        Args:
            catalog: The modules available to every cell, including the start and goal module.
            seed: Seed for the run's random number generator. constants.RANDOM_SEED_SENTINEL (-1) requests a
                time-derived seed; every other value is used verbatim.
            boundary_edge_type: The only edge type a rim cell may expose towards the outside of the grid.
            tie_break_mode: How the priority queue orders cells with equally sized possibility spaces.
            neighbor_mismatch_policy: How an assignment that does not fit an already final neighbor is handled.
            update_queue: Queue receiving progress updates (optional).
            update_mode: Granularity of the progress updates.
        """
        self._catalog = catalog
        self._requested_seed = seed
        self._boundary_edge_type = boundary_edge_type
        self._tie_break_mode = tie_break_mode
        self._neighbor_mismatch_policy = neighbor_mismatch_policy
        self._update_queue = update_queue
        self._update_mode = update_mode

        self.state = SolverState.UNINITIALIZED
        self.seed = None

    def generate(self, width: int, height: int) -> GenerationResult:
        """Runs the algorithm on a new width x height grid.

        Args:
            width: The number of columns (in cells).
            height: The number of rows (in cells).

        Returns:
            A 'ResolvedGrid' on success, otherwise a 'ContradictionReport', 'NeighborMismatchReport' or
                'InconsistencyReport' describing the failure.

        Raises:
            ConfigurationError: If the grid dimensions are invalid or too small to place distinct start and goal
                modules.
        """
        validate_dimensions(width, height)

        start_time = time.perf_counter()
        self._initialize(width, height)
        logger.info(f"Starting level generation ({width}x{height}, {len(self._catalog)} modules, seed {self.seed})")

        result: GenerationResult
        try:
            self._apply_initial_constraints()
            self._set_state(SolverState.CONSTRAINTS_APPLIED)

            self._collapse()
        except ContradictionError as e:
            self._set_state(SolverState.CONTRADICTION)
            logger.error(f"Contradiction at {e.coords} (seed {self.seed}, propagation chain {self._active_trace})")
            result = ContradictionReport(
                seed=self.seed,
                width=width,
                height=height,
                elapsed_ms=self._elapsed_ms(start_time),
                coords=e.coords,
                propagation_chain=self._active_trace,
            )
        except NeighborMismatchError as e:
            self._set_state(SolverState.CONTRADICTION)
            logger.error(f"{e} (seed {self.seed})")
            result = NeighborMismatchReport(
                seed=self.seed,
                width=width,
                height=height,
                elapsed_ms=self._elapsed_ms(start_time),
                mismatch=NeighborMismatch(e.coords, e.neighbor_coords, e.direction, e.module_id, e.neighbor_module_id),
            )
        else:
            self._set_state(SolverState.RESOLVED)
            result = self._verify_result(start_time)

        logger.info(f"Level generation finished in {result.elapsed_ms:.1f}ms: {result.status.value} (seed {self.seed})")
        self._send_update(WFCUpdateType.FINISHED, result.status)
        return result

    def check_generated_level(self) -> list[tuple[tuple[int, int], tuple[int, int]]]:
        """Checks if the modules of the generated level fit each other.

        Every cell is compared with its bottom and right neighbor, so every adjacent pair is checked exactly once.

        Returns:
            The ((x, y), (neighbor_x, neighbor_y)) coordinate pairs whose modules do not fit.
        """
        mismatched_pairs = []
        for cell in self._grid:
            for direction in (Direction.BOTTOM, Direction.RIGHT):
                neighbor_coords = cell.neighbors[direction.value]
                if neighbor_coords is None:
                    continue

                neighbor = self._grid[neighbor_coords]
                if not cell.possible_modules[0].fits(neighbor.possible_modules[0], direction):
                    logger.warning(f"Cell {cell.coords} not matching with {neighbor_coords}")
                    mismatched_pairs.append((cell.coords, neighbor_coords))
        return mismatched_pairs

    def check_border_containment(self) -> list[tuple[tuple[int, int], Direction]]:
        """Checks if the rim cells of the generated level only expose the boundary edge type towards the outside.

        Returns:
            The ((x, y), direction) pairs of rim cells whose module exposes another edge type in that direction.
        """
        exposed_edges = []
        for outward_direction in Direction:
            for cell in self._grid.rim_cells(outward_direction):
                edge_type = cell.possible_modules[0].edge(outward_direction)
                if edge_type != self._boundary_edge_type:
                    logger.warning(
                        f"Cell {cell.coords} exposes a '{edge_type.value}' edge towards the outside "
                        f"({outward_direction.name.lower()})"
                    )
                    exposed_edges.append((cell.coords, outward_direction))
        return exposed_edges

    # === CellContext ===

    def get_cell(self, coords: tuple[int, int]) -> Cell:
        """Returns the cell at the given coordinates."""
        return self._grid[coords]

    def on_possibility_space_changed(self, cell: Cell) -> None:
        """Moves the cell to its new position in the priority queue."""
        self._ordered_cells.reorder(cell)
        if self._update_mode == WFCUpdateMode.ON_MODULE_REMOVED:
            self._send_update(WFCUpdateType.MODULE_REMOVED, cell.coords, len(cell.possible_modules))

    def schedule_filter(self, coords: tuple[int, int], edge_filter: EdgeFilter, origin: Cell) -> None:
        """Pushes an edge filter onto the propagation worklist."""
        trace = (self._active_trace + (origin.coords,))[-constants.CONTRADICTION_TRACE_MAX_LENGTH :]
        self._pending_filters.append(_FilterUpdate(coords, edge_filter, trace))

    def on_neighbor_mismatch(self, cell: Cell, direction: Direction, module: Module, neighbor: Cell) -> None:
        """Applies the neighbor mismatch policy.

        Raises:
            NeighborMismatchError: Under NeighborMismatchPolicy.HALT.
        """
        neighbor_module_id = neighbor.possible_modules[0].module_id
        if self._neighbor_mismatch_policy == NeighborMismatchPolicy.HALT:
            raise NeighborMismatchError(cell.coords, neighbor.coords, direction, module.module_id, neighbor_module_id)

        logger.warning(
            f"Setting module '{module.module_id}' at {cell.coords} would not fit already set neighbor "
            f"'{neighbor_module_id}' at {neighbor.coords}"
        )
        self._neighbor_mismatches.append(
            NeighborMismatch(cell.coords, neighbor.coords, direction, module.module_id, neighbor_module_id)
        )

    # === Run stages ===

    def _initialize(self, width: int, height: int) -> None:
        """Seeds the random number generator and builds the grid and the priority queue."""
        self.state = SolverState.UNINITIALIZED
        self.seed = resolve_seed(self._requested_seed)
        self._rng = random.Random(self.seed)

        self._pending_filters = []
        self._active_trace = ()
        self._neighbor_mismatches = []

        self._grid = Grid(width, height, self)
        for cell in self._grid:
            cell.initialize(self._catalog)

        tie_breaker: RandomTieBreaker | StableTieBreaker
        match self._tie_break_mode:
            case TieBreakMode.RANDOM:
                tie_breaker = RandomTieBreaker(self._rng)
            case TieBreakMode.STABLE:
                tie_breaker = StableTieBreaker(lambda cell: cell.coords)

        self._ordered_cells = IndexedHeap(len(self._grid), lambda cell: cell.entropy, tie_breaker)
        for cell in self._grid:
            self._ordered_cells.insert(cell)

    def _apply_initial_constraints(self) -> None:
        """Resolves all initial constraints."""
        logger.debug("Applying initial constraints")
        # The border has to be applied while no cell is narrowed down to a single module yet (those are never filtered).
        self._apply_border_constraint()
        self._place_start_and_goal()

    def _place_start_and_goal(self) -> None:
        """Initial constraint: place the start and goal module exactly once each.

        The start cell is never placed in the top row and the goal cell never in the bottom row, so both always have a
        neighbor on the side their module opens towards.
        """
        width, height = self._grid.width, self._grid.height
        self._start_coords = (self._rng.randrange(width), self._rng.randrange(1, height))
        while True:
            self._goal_coords = (self._rng.randrange(width), self._rng.randrange(height - 1))
            if self._goal_coords != self._start_coords:
                break

        logger.debug(f"Placing start module at {self._start_coords} and goal module at {self._goal_coords}")
        self._assign(self._grid[self._start_coords], self._catalog.start_module)
        self._assign(self._grid[self._goal_coords], self._catalog.goal_module)

        # Remove the start and goal module from all other cells.
        for cell in self._grid:
            if cell.coords in (self._start_coords, self._goal_coords):
                continue
            for module in (self._catalog.start_module, self._catalog.goal_module):
                self._active_trace = ()
                cell.remove_module(module)
                self._propagate()

    def _apply_border_constraint(self) -> None:
        """Initial constraint: rim cells may only expose the boundary edge type towards the outside."""
        logger.debug(f"Restricting rim cells to '{self._boundary_edge_type.value}' edges towards the outside")
        for outward_direction in Direction:
            # The filter acts as if it was issued by a cell outside of the grid, so it points back inwards.
            filter_direction = outward_direction.reverse()
            for cell in self._grid.rim_cells(outward_direction):
                for edge_type in EdgeConnectionType:
                    if edge_type == self._boundary_edge_type:
                        continue
                    self._active_trace = ()
                    cell.filter(EdgeFilter(filter_direction, edge_type, inclusive=False))
                    self._propagate()

    def _collapse(self) -> None:
        """Finalizes the cell with the smallest possibility space until every cell is final."""
        self._set_state(SolverState.COLLAPSING)
        while self._ordered_cells:
            cell = self._ordered_cells.peek_top()

            # Remove finished cells from the priority queue.
            if cell.is_final:
                self._ordered_cells.pop_top()
                continue

            # A single remaining module still needs to be propagated before the cell counts as final.
            if len(cell.possible_modules) == 1:
                module = cell.possible_modules[0]
            else:
                module = self._rng.choice(cell.possible_modules)

            self._assign(cell, module)

    def _assign(self, cell: Cell, module: Module) -> None:
        """Sets the module of a cell and propagates all consequences."""
        self._active_trace = ()
        cell.set_module(module)
        if self._update_mode in (WFCUpdateMode.ON_MODULE_REMOVED, WFCUpdateMode.ON_COLLAPSED_CELL):
            self._send_update(WFCUpdateType.CELL_COLLAPSED, cell.coords, module.module_id)
        self._propagate()

    def _propagate(self) -> None:
        """Applies pending edge filters until the worklist is empty.

        Raises:
            ContradictionError: If a possibility space becomes empty. The worklist is left as is.
        """
        while self._pending_filters:
            update = self._pending_filters.pop()
            self._active_trace = update.trace
            self._grid[update.coords].filter(update.edge_filter)

    def _verify_result(self, start_time: float) -> GenerationResult:
        """Runs the post-solve verification and builds the result of a completed run."""
        mismatched_pairs = self.check_generated_level()
        exposed_edges = self.check_border_containment()
        module_grid = self._build_module_grid()

        if mismatched_pairs or exposed_edges:
            logger.error(
                f"Post-solve verification found {len(mismatched_pairs)} mismatching neighbor pairs and "
                f"{len(exposed_edges)} exposed rim edges"
            )
            return InconsistencyReport(
                seed=self.seed,
                width=self._grid.width,
                height=self._grid.height,
                elapsed_ms=self._elapsed_ms(start_time),
                module_grid=module_grid,
                catalog=self._catalog,
                start_coords=self._start_coords,
                goal_coords=self._goal_coords,
                neighbor_mismatches=tuple(self._neighbor_mismatches),
                mismatched_pairs=tuple(mismatched_pairs),
                exposed_edges=tuple(exposed_edges),
            )

        return ResolvedGrid(
            seed=self.seed,
            width=self._grid.width,
            height=self._grid.height,
            elapsed_ms=self._elapsed_ms(start_time),
            module_grid=module_grid,
            catalog=self._catalog,
            start_coords=self._start_coords,
            goal_coords=self._goal_coords,
            neighbor_mismatches=tuple(self._neighbor_mismatches),
        )

    def _build_module_grid(self) -> NDArray[np.int_]:
        """Converts the final cells into a grid of catalog indices."""
        module_grid = np.full((self._grid.width, self._grid.height), -1, dtype=np.int_)
        for cell in self._grid:
            module_grid[cell.coords] = self._catalog.index_of(cell.possible_modules[0])
        return module_grid

    def _set_state(self, state: SolverState) -> None:
        logger.debug(f"Solver state: {self.state.value} -> {state.value}")
        self.state = state

    def _send_update(self, update_type: WFCUpdateType, *payload: Any) -> None:
        if self._update_queue is not None:
            self._update_queue.put([update_type, *payload])

    @staticmethod
    def _elapsed_ms(start_time: float) -> float:
        return (time.perf_counter() - start_time) * 1000


def generate(
    width: int,
    height: int,
    catalog: ModuleCatalog,
    seed: int = constants.RANDOM_SEED_SENTINEL,
    **settings: Any,
) -> GenerationResult:
    """Runs a single level generation.

    Args:
        width: The number of columns (in cells).
        height: The number of rows (in cells).
        catalog: The modules available to every cell, including the start and goal module.
        seed: Seed for the run's random number generator (-1 requests a time-derived seed).
        **settings: Further keyword arguments for 'LevelGenerator'.

    Returns:
        The result of the run (see 'LevelGenerator.generate()').
    """
    return LevelGenerator(catalog, seed, **settings).generate(width, height)


class _FilterUpdate:
    """Container tracking an edge filter waiting to be applied to a cell."""

    # The coords of the cell the filter applies to.
    coords: tuple[int, int]
    # The filter to apply.
    edge_filter: EdgeFilter
    # The coords of the cells whose changes led to this filter, oldest first.
    trace: tuple[tuple[int, int], ...]

    def __init__(self, coords: tuple[int, int], edge_filter: EdgeFilter, trace: tuple[tuple[int, int], ...]) -> None:
        """Creates a new filter update instance and initializes it."""
        self.coords = coords
        self.edge_filter = edge_filter
        self.trace = trace
