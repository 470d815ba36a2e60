"""Contains the immutable module templates and the edge filters used to narrow down possibility spaces."""

from __future__ import annotations

from dataclasses import dataclass

from constants import EDGE_COUNT
from enums import Direction, EdgeConnectionType
from model.errors import ConfigurationError


@dataclass(frozen=True)
class Module:
    """A tile template with one edge connection type per direction.

    Modules are created once when the catalog is loaded and never mutated. Two cells holding the same module hold the
    very same object.

    Attributes:
        module_id: The unique identifier of the module within its catalog.
        edge_connections: The edge connection types ordered bottom, right, top, left (see 'enums.Direction').
    """

    module_id: str
    edge_connections: tuple[EdgeConnectionType, ...]

    def __post_init__(self) -> None:
        """Validates the number of edge connections."""
        # Frozen dataclass, so the tuple conversion has to bypass __setattr__.
        object.__setattr__(self, "edge_connections", tuple(self.edge_connections))
        if len(self.edge_connections) != EDGE_COUNT:
            raise ConfigurationError(
                f"Module '{self.module_id}' has {len(self.edge_connections)} edge connections, expected {EDGE_COUNT}"
            )

    def edge(self, direction: Direction) -> EdgeConnectionType:
        """Returns the edge connection type the module presents in the given direction."""
        return self.edge_connections[direction.value]

    def fits(self, other: Module, direction: Direction) -> bool:
        """Checks if 'other' can be placed next to this module in the given direction."""
        return self.edge(direction) == other.edge(direction.reverse())


@dataclass(frozen=True)
class EdgeFilter:
    """A compatibility test against the edge of a module that faces the cell issuing the filter.

    The direction is the one in which the filtered cell lies, seen from the issuing cell, so the edge that is checked
    is the one at the opposite direction. An inclusive filter keeps only modules whose checked edge equals the edge
    type, an exclusive filter keeps only modules whose checked edge differs from it.

    Attributes:
        direction: The direction from the issuing cell towards the filtered cell.
        edge_type: The edge connection type that is required (inclusive) or forbidden (exclusive).
        inclusive: Whether the filter is inclusive or exclusive.
    """

    direction: Direction
    edge_type: EdgeConnectionType
    inclusive: bool = False

    def matches(self, module: Module) -> bool:
        """Returns True if the module passes this filter (i.e. may stay in the possibility space)."""
        match = module.edge(self.direction.reverse()) == self.edge_type
        return match if self.inclusive else not match
