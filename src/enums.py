"""Contains all global enumeration classes used throughout the project."""

from __future__ import annotations

from enum import Enum


class Direction(Enum):
    """Defines the four edges of a cell, in the order modules list their edge connections."""

    BOTTOM = 0
    """Bottom edge (towards increasing y)."""
    RIGHT = 1
    """Right edge (towards increasing x)."""
    TOP = 2
    """Top edge (towards decreasing y)."""
    LEFT = 3
    """Left edge (towards decreasing x)."""

    def reverse(self) -> Direction:
        """Returns the opposite direction of the current direction."""
        return Direction((self.value + 2) % 4)

    def to_vector(self) -> tuple[int, int]:
        """Returns the (dx, dy) vector representation for the direction."""
        match self:
            case Direction.BOTTOM:
                return (0, 1)
            case Direction.RIGHT:
                return (1, 0)
            case Direction.TOP:
                return (0, -1)
            case Direction.LEFT:
                return (-1, 0)


class EdgeConnectionType(Enum):
    """Defines the kinds of boundary a module can present on one of its edges."""

    NONE = "None"
    BLOCK = "Block"
    OPEN = "Open"
    BORDER_LEFT = "BorderLeft"
    BORDER_RIGHT = "BorderRight"
    BORDER_BOTH = "BorderBoth"

    @classmethod
    def from_name(cls, name: str) -> EdgeConnectionType:
        """Looks up an edge connection type by member name or value, ignoring case and underscores.

        Raises:
            KeyError: If no edge connection type matches the given name.
        """
        normalized = name.replace("_", "").lower()
        for edge_type in cls:
            if normalized in (edge_type.name.replace("_", "").lower(), edge_type.value.lower()):
                return edge_type
        raise KeyError(name)


class SolverState(Enum):
    """Defines the stages a level generator passes through during one run."""

    UNINITIALIZED = "Uninitialized"
    """No run has been started yet."""
    CONSTRAINTS_APPLIED = "Constraints Applied"
    """Start/goal placement and border containment have been applied."""
    COLLAPSING = "Collapsing"
    """The collapse loop is running."""
    RESOLVED = "Resolved"
    """Every cell holds exactly one module and has been finalized (terminal)."""
    CONTRADICTION = "Contradiction"
    """The run stopped because of a conflict (terminal)."""


class GenerationStatus(Enum):
    """Defines the possible outcomes of a generation run."""

    RESOLVED = "Resolved"
    """Every cell was resolved and the post-solve verification found no mismatches."""
    CONTRADICTION = "Contradiction"
    """A cell ran out of possible modules."""
    NEIGHBOR_MISMATCH = "Neighbor Mismatch"
    """A module was assigned next to an already final neighbor whose edge does not fit."""
    INCONSISTENT = "Inconsistent"
    """The run finished but the post-solve verification found mismatching neighbors."""


class TieBreakMode(Enum):
    """Defines how the cell priority queue orders cells with equally sized possibility spaces."""

    RANDOM = "Random (Default)"
    """Flips a coin drawn from the run's random number generator for every comparison."""
    STABLE = "Stable"
    """Orders cells by their coordinates. Deterministic regardless of the random number generator."""


class NeighborMismatchPolicy(Enum):
    """Defines how a module assignment that contradicts an already final neighbor is handled."""

    HALT = "Halt (Default)"
    """Stops the run and reports the mismatch."""
    RECORD = "Record"
    """Logs and records the mismatch, then continues the run."""


class WFCUpdateType(Enum):
    """Defines the types of update messages a level generator sends."""

    MODULE_REMOVED = 0
    """Used when the possibility space of a cell has shrunk."""
    CELL_COLLAPSED = 1
    """Used when a cell has been assigned its final module."""
    FINISHED = 2
    """Used when a generation run has ended (successfully or not)."""


class WFCUpdateMode(Enum):
    """Defines the frequency at which progress updates are sent."""

    ON_MODULE_REMOVED = "On Each Removed Module"
    """Sends an update whenever a possibility space shrinks. Considerably slows down generation."""
    ON_COLLAPSED_CELL = "On Each Collapsed Cell"
    """Sends an update whenever a cell gets collapsed."""
    ONLY_WHEN_DONE = "Only When Done"
    """Sends a single update once the run has ended."""


class ExampleCatalog(Enum):
    """Defines predefined module catalogs for quick testing."""

    CORRIDORS = "Corridors"
    """Every combination of open and blocked edges, plus dedicated start and goal rooms."""
    ROOMS = "Rooms"
    """Open floor tiles, solid walls and bordered room edges."""
