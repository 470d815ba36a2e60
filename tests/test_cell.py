"""Tests for model.cell, run against a recording context instead of a level generator."""

import pytest

from enums import Direction, EdgeConnectionType
from model.errors import ContradictionError
from model.module import EdgeFilter, Module

BLOCK = EdgeConnectionType.BLOCK
OPEN = EdgeConnectionType.OPEN

# Cell (0, 0) of a 2x1 grid: the only neighbor lies to the right.
ORIGIN = (0, 0)
RIGHT_NEIGHBOR = (1, 0)
ORIGIN_NEIGHBORS = [None, RIGHT_NEIGHBOR, None, None]
RIGHT_NEIGHBOR_NEIGHBORS = [None, None, None, ORIGIN]


@pytest.fixture
def right_open() -> Module:
    return Module("right_open", (BLOCK, OPEN, BLOCK, BLOCK))


@pytest.fixture
def left_open() -> Module:
    return Module("left_open", (BLOCK, BLOCK, BLOCK, OPEN))


class TestCellFilter:
    """Tests for Cell.filter()."""

    def test_removes_modules_failing_the_filter(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module, block_module])

        cell.filter(EdgeFilter(Direction.LEFT, OPEN, inclusive=True))

        assert cell.possible_modules == [open_module]
        assert context.changed == [(ORIGIN, 1)]

    def test_singleton_is_never_filtered(self, context, open_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module])

        cell.filter(EdgeFilter(Direction.LEFT, OPEN, inclusive=False))

        assert cell.possible_modules == [open_module]
        assert context.changed == []
        assert context.scheduled == []

    def test_filtering_everything_raises_contradiction(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module, block_module])

        with pytest.raises(ContradictionError) as excinfo:
            cell.filter(EdgeFilter(Direction.LEFT, EdgeConnectionType.NONE, inclusive=True))

        assert excinfo.value.coords == ORIGIN
        assert cell.possible_modules == []


class TestCellRemoveModule:
    """Tests for Cell.remove_module()."""

    def test_absent_module_is_ignored(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module])

        cell.remove_module(block_module)

        assert cell.possible_modules == [open_module]
        assert context.changed == []

    def test_propagates_when_edge_type_disappears(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module, block_module])

        cell.remove_module(open_module)

        # Only the right side has a neighbor, and no remaining module is open there.
        assert context.scheduled == [(RIGHT_NEIGHBOR, EdgeFilter(Direction.RIGHT, OPEN, inclusive=False), ORIGIN)]

    def test_no_propagation_while_edge_type_remains(self, context, open_module, block_module, right_open):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module, right_open, block_module])

        cell.remove_module(open_module)

        assert context.scheduled == []
        assert context.changed == [(ORIGIN, 2)]

    def test_removing_last_module_raises_contradiction(self, context, open_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        cell.initialize([open_module])

        with pytest.raises(ContradictionError):
            cell.remove_module(open_module)
        assert context.scheduled == []


class TestCellSetModule:
    """Tests for Cell.set_module()."""

    def test_schedules_inclusive_filters_and_finalizes(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        context.add_cell(RIGHT_NEIGHBOR, RIGHT_NEIGHBOR_NEIGHBORS).initialize([open_module, block_module])
        cell.initialize([open_module, block_module])

        cell.set_module(block_module)

        assert cell.is_final
        assert cell.possible_modules == [block_module]
        assert context.scheduled == [(RIGHT_NEIGHBOR, EdgeFilter(Direction.RIGHT, BLOCK, inclusive=True), ORIGIN)]
        assert context.mismatches == []

    def test_fitting_final_neighbor_is_accepted(self, context, right_open, left_open):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        neighbor = context.add_cell(RIGHT_NEIGHBOR, RIGHT_NEIGHBOR_NEIGHBORS)
        neighbor.initialize([left_open])
        neighbor.is_final = True
        cell.initialize([right_open])

        cell.set_module(right_open)

        assert context.mismatches == []

    def test_reports_mismatching_final_neighbor(self, context, block_module, left_open):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        neighbor = context.add_cell(RIGHT_NEIGHBOR, RIGHT_NEIGHBOR_NEIGHBORS)
        neighbor.initialize([left_open])
        neighbor.is_final = True
        cell.initialize([block_module])

        cell.set_module(block_module)

        assert context.mismatches == [(ORIGIN, Direction.RIGHT, "B", RIGHT_NEIGHBOR)]

    def test_non_final_neighbor_is_not_checked(self, context, block_module, left_open):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        context.add_cell(RIGHT_NEIGHBOR, RIGHT_NEIGHBOR_NEIGHBORS).initialize([left_open])
        cell.initialize([block_module])

        cell.set_module(block_module)

        assert context.mismatches == []

    def test_entropy_tracks_possibility_space(self, context, open_module, block_module):
        cell = context.add_cell(ORIGIN, ORIGIN_NEIGHBORS)
        context.add_cell(RIGHT_NEIGHBOR, RIGHT_NEIGHBOR_NEIGHBORS).initialize([open_module])
        cell.initialize([open_module, block_module])
        assert cell.entropy == 2

        cell.set_module(open_module)
        assert cell.entropy == 1
