"""
Job parameters for the data generator and the top-K job.

Values normally come from the command line (see group_reduce.cli) and are
validated here before any Spark work starts.
"""

import math
from typing import NamedTuple

from group_reduce.errors import InvalidParameterError

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

DEFAULT_NUM_COUNTRIES = 100
DEFAULT_NUM_BOOKS = 1000
DEFAULT_NUM_READS = 100_000
DEFAULT_SKEW = 2.0
DEFAULT_PARALLELISM = 4
DEFAULT_SEED = 42

DEFAULT_K = 5
DEFAULT_COMBINE_PASSES = 1

# Combine passes the pipeline builder knows how to wire
MAX_COMBINE_PASSES = 2

# "hash": explicit per-partition hash aggregation (combiner + aggregator)
# "builtin": Spark's reduceByKey with its own map-side combine
STRATEGIES = ("hash", "builtin")
DEFAULT_STRATEGY = STRATEGIES[0]


# ---------------------------------------------------------------------------
# Config records
# ---------------------------------------------------------------------------


class GeneratorConfig(NamedTuple):
    num_countries: int = DEFAULT_NUM_COUNTRIES
    num_books: int = DEFAULT_NUM_BOOKS
    num_reads: int = DEFAULT_NUM_READS
    skew: float = DEFAULT_SKEW
    parallelism: int = DEFAULT_PARALLELISM
    seed: int = DEFAULT_SEED

    def validate(self) -> "GeneratorConfig":
        """Raise InvalidParameterError for out-of-range values, else return self."""
        if self.num_countries <= 0:
            raise InvalidParameterError(f"num_countries must be > 0, got {self.num_countries}")
        if self.num_books <= 0:
            raise InvalidParameterError(f"num_books must be > 0, got {self.num_books}")
        if self.num_reads < 0:
            raise InvalidParameterError(f"num_reads must be >= 0, got {self.num_reads}")
        if not math.isfinite(self.skew) or self.skew <= 0:
            raise InvalidParameterError(f"skew must be a positive finite number, got {self.skew}")
        _check_parallelism(self.parallelism)
        return self


class TopKConfig(NamedTuple):
    k: int = DEFAULT_K
    parallelism: int = DEFAULT_PARALLELISM
    combine_passes: int = DEFAULT_COMBINE_PASSES
    strategy: str = DEFAULT_STRATEGY
    input_path: str | None = None
    output_path: str | None = None

    def validate(self) -> "TopKConfig":
        """Raise InvalidParameterError for out-of-range values, else return self."""
        validate_k(self.k)
        _check_parallelism(self.parallelism)
        validate_combine_passes(self.combine_passes, self.strategy)
        return self


# ---------------------------------------------------------------------------
# Shared checks
# ---------------------------------------------------------------------------


def validate_k(k: int) -> int:
    if k <= 0:
        raise InvalidParameterError(f"k must be >= 1, got {k}")
    return k


def validate_combine_passes(combine_passes: int, strategy: str = DEFAULT_STRATEGY) -> int:
    if strategy not in STRATEGIES:
        raise InvalidParameterError(f"unknown strategy {strategy!r}, expected one of {STRATEGIES}")
    if not 0 <= combine_passes <= MAX_COMBINE_PASSES:
        raise InvalidParameterError(
            f"combine_passes must be between 0 and {MAX_COMBINE_PASSES}, got {combine_passes}"
        )
    # reduceByKey already combines map-side; extra passes are not wired for it
    if strategy == "builtin" and combine_passes != 0:
        raise InvalidParameterError("the builtin strategy does not take explicit combine passes")
    return combine_passes


def _check_parallelism(parallelism: int) -> None:
    if parallelism <= 0:
        raise InvalidParameterError(f"parallelism must be > 0, got {parallelism}")


def dataset_name(config: GeneratorConfig) -> str:
    """Suffix for generated datasets, e.g. '100-1000-100000-2.0'."""
    return f"{config.num_countries}-{config.num_books}-{config.num_reads}-{config.skew}"
