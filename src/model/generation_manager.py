"""Contains the class that retries level generation with different seeds, optionally in worker processes."""

from __future__ import annotations

from multiprocessing import Pool
from typing import Any, TYPE_CHECKING

import psutil

import constants
from logging_config import get_logger
from model.errors import ConfigurationError
from model.level_generator import LevelGenerator, resolve_seed, validate_dimensions

if TYPE_CHECKING:
    from model.generation_result import GenerationResult
    from model.module_catalog import ModuleCatalog

logger = get_logger(__name__)


class GenerationManager:
    """Retries level generation with consecutive seeds until a run succeeds.

    The level generator itself never backtracks; a failed run is simply repeated with the next seed. Attempt i uses
    the seed 'base_seed + i' (stepping over the seed sentinel), and the first successful attempt in attempt order
    wins, so the outcome for an explicit seed does not depend on how many worker processes are used. With more than
    one worker, attempts are distributed over a process pool; attempts share no state.

    Attributes:
        max_attempts: The maximum number of runs before giving up.
        max_workers: The number of worker processes (1 runs all attempts in the calling process).
    """

    max_attempts: int
    max_workers: int

    # The modules available to every cell, including the start and goal module.
    _catalog: ModuleCatalog
    # Further keyword arguments for every 'LevelGenerator'.
    _generator_settings: dict[str, Any]

    def __init__(
        self,
        catalog: ModuleCatalog,
        max_attempts: int = constants.MAX_ATTEMPTS_DEFAULT,
        max_workers: int | None = None,
        **generator_settings: Any,
    ) -> None:
        """Initializes the generation manager.

        Args:
            catalog: The modules available to every cell, including the start and goal module.
            max_attempts: The maximum number of runs before giving up.
            max_workers: The number of worker processes. Defaults to the number of physical CPU cores.
            **generator_settings: Further keyword arguments for every 'LevelGenerator' (except the seed).

        Raises:
            ConfigurationError: If the attempt or worker count is out of range.
        """
        if not 1 <= max_attempts <= constants.MAX_ATTEMPTS_LIMIT:
            raise ConfigurationError(
                f"The number of attempts must lie between 1 and {constants.MAX_ATTEMPTS_LIMIT} (got {max_attempts})"
            )
        if max_workers is None:
            max_workers = psutil.cpu_count(logical=False) or 1
        if max_workers < 1:
            raise ConfigurationError(f"The number of worker processes must be positive (got {max_workers})")
        if generator_settings.get("update_queue") is not None and max_workers > 1:
            raise ConfigurationError("Progress updates are only supported with a single worker")

        self.max_attempts = max_attempts
        self.max_workers = max_workers
        self._catalog = catalog
        self._generator_settings = generator_settings

    def generate(self, width: int, height: int, seed: int = constants.RANDOM_SEED_SENTINEL) -> GenerationResult:
        """Runs attempts until one of them produces a consistent grid.

        Args:
            width: The number of columns (in cells).
            height: The number of rows (in cells).
            seed: The seed of the first attempt (-1 requests a time-derived seed).

        Returns:
            The first successful result, or the result of the last attempt if every attempt failed.

        Raises:
            ConfigurationError: If the grid dimensions are invalid (raised before any attempt is started).
        """
        # Validates the dimensions in the calling process, before any worker is started.
        validate_dimensions(width, height)

        base_seed = resolve_seed(seed)
        seeds = []
        candidate_seed = base_seed
        while len(seeds) < self.max_attempts:
            # The sentinel would make the attempt draw a time-derived seed.
            if candidate_seed != constants.RANDOM_SEED_SENTINEL:
                seeds.append(candidate_seed)
            candidate_seed += 1
        tasks = [(width, height, attempt_seed, self._catalog, self._generator_settings) for attempt_seed in seeds]

        worker_count = min(self.max_workers, len(tasks))
        if worker_count == 1:
            return self._run_sequentially(tasks)

        logger.debug(f"Distributing {len(tasks)} attempts over {worker_count} worker processes")
        result = None
        with Pool(processes=worker_count) as pool:
            # imap() yields in submission order, which keeps the winning attempt independent of the worker count.
            for attempt, result in enumerate(pool.imap(_run_attempt, tasks)):
                if self._is_final_result(attempt, result):
                    break
        assert result is not None
        return result

    def _run_sequentially(self, tasks: list[tuple[Any, ...]]) -> GenerationResult:
        """Runs the attempts one after another in the calling process."""
        result = None
        for attempt, task in enumerate(tasks):
            result = _run_attempt(task)
            if self._is_final_result(attempt, result):
                break
        assert result is not None
        return result

    def _is_final_result(self, attempt: int, result: GenerationResult) -> bool:
        """Logs the outcome of an attempt and checks if no further attempt is needed."""
        if result.succeeded:
            logger.info(f"Attempt {attempt + 1}/{self.max_attempts} succeeded (seed {result.seed})")
            return True

        logger.warning(f"Attempt {attempt + 1}/{self.max_attempts} failed: {result.status.value} (seed {result.seed})")
        return False


def _run_attempt(task: tuple[Any, ...]) -> GenerationResult:
    """Runs one attempt. Defined at module level so it can be sent to worker processes."""
    width, height, seed, catalog, generator_settings = task
    return LevelGenerator(catalog, seed, **generator_settings).generate(width, height)
