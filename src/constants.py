"""Contains global constants and default values used throughout the project."""

from enums import EdgeConnectionType, NeighborMismatchPolicy, TieBreakMode, WFCUpdateMode


# === GRID CONSTANTS ===

GRID_SIZE_DEFAULT: int = 10

# Cells need a neighbor above the start module and below the goal module.
GRID_HEIGHT_MIN_FOR_PLACEMENTS: int = 2

# The only edge type a module may expose towards the outside of the grid.
BOUNDARY_EDGE_TYPE_DEFAULT: EdgeConnectionType = EdgeConnectionType.BLOCK

# === SOLVER CONSTANTS ===

# Passing this seed requests a time-derived, non-reproducible seed.
RANDOM_SEED_SENTINEL: int = -1
RANDOM_SEED_MAX: int = 999999999

TIE_BREAK_MODE_DEFAULT: TieBreakMode = TieBreakMode.RANDOM
NEIGHBOR_MISMATCH_POLICY_DEFAULT: NeighborMismatchPolicy = NeighborMismatchPolicy.HALT
UPDATE_MODE_DEFAULT: WFCUpdateMode = WFCUpdateMode.ONLY_WHEN_DONE

# Maximum number of cell coordinates kept in the propagation chain of a contradiction report.
CONTRADICTION_TRACE_MAX_LENGTH: int = 64

# === GENERATION MANAGER CONSTANTS ===

MAX_ATTEMPTS_DEFAULT: int = 10
MAX_ATTEMPTS_LIMIT: int = 1000

# === MODULE CATALOG CONSTANTS ===

EDGE_COUNT: int = 4

START_MODULE_ID_DEFAULT: str = "start"
GOAL_MODULE_ID_DEFAULT: str = "goal"

# === LOGGING CONSTANTS ===

LOGGER_NAMESPACE: str = "levelgen"
LOG_FILE_NAME: str = "levelgen.log"
MAX_LOG_SIZE: int = 10 * 1024 * 1024
LOG_BACKUP_COUNT: int = 5
