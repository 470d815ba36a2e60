"""Shared pytest fixtures for level generator tests."""

from __future__ import annotations

import pytest

from enums import EdgeConnectionType, ExampleCatalog
from model.cell import Cell
from model.module import Module
from model.module_catalog import ModuleCatalog

BLOCK = EdgeConnectionType.BLOCK
OPEN = EdgeConnectionType.OPEN


# =============================================================================
# Modules and Catalogs
# =============================================================================


@pytest.fixture
def open_module() -> Module:
    """A module open on every edge."""
    return Module("A", (OPEN, OPEN, OPEN, OPEN))


@pytest.fixture
def block_module() -> Module:
    """A module blocked on every edge."""
    return Module("B", (BLOCK, BLOCK, BLOCK, BLOCK))


@pytest.fixture
def open_block_catalog(open_module: Module, block_module: Module) -> ModuleCatalog:
    """The open/block catalog with fully blocked start and goal modules."""
    return ModuleCatalog(
        [
            open_module,
            block_module,
            Module("start", (BLOCK, BLOCK, BLOCK, BLOCK)),
            Module("goal", (BLOCK, BLOCK, BLOCK, BLOCK)),
        ]
    )


@pytest.fixture
def dead_end_catalog() -> ModuleCatalog:
    """A catalog whose start module opens upwards while no module opens downwards, so every run contradicts."""
    return ModuleCatalog(
        [
            Module("wall", (BLOCK, BLOCK, BLOCK, BLOCK)),
            Module("start", (BLOCK, BLOCK, OPEN, BLOCK)),
            Module("goal", (BLOCK, BLOCK, BLOCK, BLOCK)),
        ]
    )


@pytest.fixture
def corridor_catalog() -> ModuleCatalog:
    """The corridor example catalog (every open/block edge combination)."""
    return ModuleCatalog.from_example(ExampleCatalog.CORRIDORS)


@pytest.fixture
def rooms_catalog() -> ModuleCatalog:
    """The rooms example catalog."""
    return ModuleCatalog.from_example(ExampleCatalog.ROOMS)


# =============================================================================
# Cell Context
# =============================================================================


class RecordingContext:
    """A cell context that records every notification instead of running a solver."""

    def __init__(self) -> None:
        self.cells: dict[tuple[int, int], Cell] = {}
        self.changed: list[tuple[tuple[int, int], int]] = []
        self.scheduled: list[tuple[tuple[int, int], object, tuple[int, int]]] = []
        self.mismatches: list[tuple[tuple[int, int], object, str, tuple[int, int]]] = []

    def add_cell(self, coords: tuple[int, int], neighbors: list[tuple[int, int] | None]) -> Cell:
        cell = Cell(coords, neighbors, self)
        self.cells[coords] = cell
        return cell

    def get_cell(self, coords):
        return self.cells[coords]

    def on_possibility_space_changed(self, cell):
        self.changed.append((cell.coords, len(cell.possible_modules)))

    def schedule_filter(self, coords, edge_filter, origin):
        self.scheduled.append((coords, edge_filter, origin.coords))

    def on_neighbor_mismatch(self, cell, direction, module, neighbor):
        self.mismatches.append((cell.coords, direction, module.module_id, neighbor.coords))


@pytest.fixture
def context() -> RecordingContext:
    """An empty recording cell context."""
    return RecordingContext()
