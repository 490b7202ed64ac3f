"""
Skewed Read Generator

Produces synthetic (country, book) read events. Country ids follow a
Pareto-like transform of a uniform draw so that a few low ids receive most
of the reads; book ids are uniform.

Generation is split across workers. Each worker owns its own random.Random
seeded from the run seed and its worker id, so a run is reproducible for a
given (seed, parallelism) and workers never share random state.
"""

import hashlib
import math
import random
from collections.abc import Iterable, Iterator

from pyspark import SparkContext
from pyspark.rdd import RDD

from group_reduce.config import GeneratorConfig
from group_reduce.records import Event

# Value a float-to-int conversion of +inf saturates to on the JVM
INT_MAX = 2**31 - 1


def skewed_sample(rng: random.Random, skew: float, num_countries: int) -> int:
    """Draw one country id.

    u ~ U[0, 1), v = u ** skew, pareto = 0.2 / v, truncated to int.
    Values past the last country wrap around modulo num_countries.
    Huge or infinite ratios (u at or near 0) saturate at INT_MAX first.
    """
    v = rng.random() ** skew
    pareto = 0.2 / v if v > 0.0 else math.inf
    value = int(min(pareto, INT_MAX))
    if value > num_countries - 1:
        value %= num_countries
    return value


def worker_seed(run_seed: int, worker_id: int) -> int:
    """Derive an independent 64-bit seed for one worker."""
    digest = hashlib.sha256(f"{run_seed}:{worker_id}".encode()).digest()
    return int.from_bytes(digest[:8], "big")


def split_reads(num_reads: int, parallelism: int) -> list[int]:
    """Split num_reads over workers; the first workers take the remainder."""
    base, remainder = divmod(num_reads, parallelism)
    return [base + (1 if i < remainder else 0) for i in range(parallelism)]


def generate_partition(worker_id: int, num_reads: int, config: GeneratorConfig) -> Iterator[Event]:
    """Yield num_reads events from the random stream of one worker."""
    rng = random.Random(worker_seed(config.seed, worker_id))
    for _ in range(num_reads):
        country_id = skewed_sample(rng, config.skew, config.num_countries)
        book_id = rng.randrange(config.num_books)
        yield Event(country_id, book_id)


def generate_events(config: GeneratorConfig) -> Iterator[Event]:
    """Generate all events locally, worker after worker."""
    config.validate()
    for worker_id, share in enumerate(split_reads(config.num_reads, config.parallelism)):
        yield from generate_partition(worker_id, share, config)


def generate_events_rdd(sc: SparkContext, config: GeneratorConfig) -> RDD:
    """Generate events on the cluster, one Spark partition per worker.

    The result holds exactly config.num_reads events and matches
    generate_events(config) partition by partition.
    """
    config.validate()
    shares = split_reads(config.num_reads, config.parallelism)

    def _generate(worker_id: int, _ignored: Iterable[int]) -> Iterator[Event]:
        return generate_partition(worker_id, shares[worker_id], config)

    return sc.parallelize(range(config.parallelism), config.parallelism).mapPartitionsWithIndex(
        _generate
    )


def skew_ratio(events: Iterable[Event], num_countries: int) -> float:
    """Frequency of country 0 relative to a uniform baseline of 1/num_countries.

    A ratio well above 1.0 means reads are concentrated on low country ids.
    """
    total = 0
    zeros = 0
    for event in events:
        total += 1
        if event.country_id == 0:
            zeros += 1
    return share_ratio(zeros, total, num_countries)


def share_ratio(hits: int, total: int, num_countries: int) -> float:
    if total == 0:
        return 0.0
    return (hits / total) * num_countries
