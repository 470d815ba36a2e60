"""Manages the set of module templates a level is generated from."""

from __future__ import annotations

from itertools import product
from typing import Any, Iterable, Iterator, Mapping

import constants
from enums import EdgeConnectionType, ExampleCatalog
from model.errors import ConfigurationError
from model.module import Module


# Short codes used to derive readable IDs for the modules of the example catalogs.
_EDGE_CODES: dict[EdgeConnectionType, str] = {
    EdgeConnectionType.NONE: "n",
    EdgeConnectionType.BLOCK: "x",
    EdgeConnectionType.OPEN: "o",
    EdgeConnectionType.BORDER_LEFT: "l",
    EdgeConnectionType.BORDER_RIGHT: "r",
    EdgeConnectionType.BORDER_BOTH: "b",
}


class ModuleCatalog:
    """An immutable, validated collection of modules with a designated start and goal module.

    The catalog order is significant: every cell starts with the modules in this order, which keeps seeded runs
    reproducible, and resolved grids refer to modules by their index in this order.

    Attributes:
        modules: All modules of the catalog, including the start and goal module.
        start_module: The module placed exactly once as the level's start.
        goal_module: The module placed exactly once as the level's goal.
    """

    modules: tuple[Module, ...]
    start_module: Module
    goal_module: Module

    # Maps each module ID to the module's index in 'modules'.
    _indices_by_id: dict[str, int]

    def __init__(
        self,
        modules: Iterable[Module],
        start_module_id: str = constants.START_MODULE_ID_DEFAULT,
        goal_module_id: str = constants.GOAL_MODULE_ID_DEFAULT,
    ) -> None:
        """Validates and stores the modules.

        Args:
            modules: The modules of the catalog, including the start and goal module.
            start_module_id: The ID of the start module.
            goal_module_id: The ID of the goal module.

        Raises:
            ConfigurationError: If the catalog is empty, contains duplicate module IDs, or lacks a distinct start and
                goal module.
        """
        self.modules = tuple(modules)

        if not self.modules:
            raise ConfigurationError("The module catalog is empty")

        self._indices_by_id = {}
        for index, module in enumerate(self.modules):
            if module.module_id in self._indices_by_id:
                raise ConfigurationError(f"Duplicate module ID '{module.module_id}' in module catalog")
            self._indices_by_id[module.module_id] = index

        if start_module_id == goal_module_id:
            raise ConfigurationError(f"Start and goal module must differ (both are '{start_module_id}')")
        for role, module_id in (("start", start_module_id), ("goal", goal_module_id)):
            if module_id not in self._indices_by_id:
                raise ConfigurationError(f"The module catalog lacks the {role} module '{module_id}'")

        self.start_module = self.get(start_module_id)
        self.goal_module = self.get(goal_module_id)

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        start_module_id: str = constants.START_MODULE_ID_DEFAULT,
        goal_module_id: str = constants.GOAL_MODULE_ID_DEFAULT,
    ) -> ModuleCatalog:
        """Creates a catalog from plain module records.

        Each record needs an 'id' and an 'edges' entry; the latter lists four edge connection types (members or
        names, see 'EdgeConnectionType.from_name') ordered bottom, right, top, left.

        Args:
            records: The module records.
            start_module_id: The ID of the start module.
            goal_module_id: The ID of the goal module.

        Returns:
            The validated module catalog.

        Raises:
            ConfigurationError: If a record is incomplete or names an unknown edge connection type, or if the resulting
                catalog is invalid.
        """
        modules = []
        for record in records:
            try:
                module_id = str(record["id"])
                edges = record["edges"]
            except KeyError as e:
                raise ConfigurationError(f"Module record {dict(record)} lacks the field {e}") from e

            edge_connections = []
            for edge in edges:
                if isinstance(edge, EdgeConnectionType):
                    edge_connections.append(edge)
                    continue
                try:
                    edge_connections.append(EdgeConnectionType.from_name(str(edge)))
                except KeyError as e:
                    raise ConfigurationError(f"Module '{module_id}' uses unknown edge connection type {e}") from e

            modules.append(Module(module_id, tuple(edge_connections)))

        return cls(modules, start_module_id, goal_module_id)

    @classmethod
    def from_example(cls, example: ExampleCatalog) -> ModuleCatalog:
        """Creates one of the predefined example catalogs.

        Both examples contain every combination of their allowed edge types, so any set of edge constraints can be
        satisfied and a run never ends in a contradiction. The start module only opens upwards and the goal module
        only opens downwards, matching the rows they can be placed in.
        """
        match example:
            case ExampleCatalog.CORRIDORS:
                prefix = "corridor"
                vertical_edges = horizontal_edges = (EdgeConnectionType.BLOCK, EdgeConnectionType.OPEN)
            case ExampleCatalog.ROOMS:
                prefix = "room"
                vertical_edges = (EdgeConnectionType.BLOCK, EdgeConnectionType.OPEN)
                horizontal_edges = (EdgeConnectionType.BLOCK, EdgeConnectionType.BORDER_BOTH)

        modules = [
            Module(f"{prefix}_{''.join(_EDGE_CODES[edge] for edge in edges)}", edges)
            for edges in product(vertical_edges, horizontal_edges, vertical_edges, horizontal_edges)
        ]
        block, open_ = EdgeConnectionType.BLOCK, EdgeConnectionType.OPEN
        modules.append(Module(constants.START_MODULE_ID_DEFAULT, (block, block, open_, block)))
        modules.append(Module(constants.GOAL_MODULE_ID_DEFAULT, (open_, block, block, block)))
        return cls(modules)

    def __len__(self) -> int:
        return len(self.modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(self.modules)

    def get(self, module_id: str) -> Module:
        """Returns the module with the given ID.

        Raises:
            KeyError: If the catalog holds no module with that ID.
        """
        return self.modules[self._indices_by_id[module_id]]

    def index_of(self, module: Module) -> int:
        """Returns the index of a module within the catalog."""
        return self._indices_by_id[module.module_id]

