"""
Local engine

Runs the same stage graph as group_reduce.pipeline in plain Python, with
lists standing in for partitions and partitioner.shuffle() standing in for
the engine's shuffles. Meant for small inputs and for checking that the
number of combine passes does not change results.
"""

from collections.abc import Iterable

from group_reduce.aggregation import aggregate_partition, combine_partition
from group_reduce.config import validate_combine_passes, validate_k
from group_reduce.errors import InvalidParameterError
from group_reduce.partitioner import aggregate_key_hash, country_hash, shuffle
from group_reduce.records import CountRecord, Event, TopKResult, to_count_record
from group_reduce.top_k import select_top_k


def partition_events(events: Iterable[Event], num_partitions: int) -> list[list[CountRecord]]:
    """Deal events round-robin into num_partitions input partitions."""
    if num_partitions <= 0:
        raise InvalidParameterError(f"num_partitions must be > 0, got {num_partitions}")
    partitions: list[list[CountRecord]] = [[] for _ in range(num_partitions)]
    for i, event in enumerate(events):
        partitions[i % num_partitions].append(to_count_record(event))
    return partitions


def _merge_pairs(partitions: list[list[CountRecord]]) -> list[list[CountRecord]]:
    """Concatenate neighbouring partitions, like coalesce() without shuffle."""
    return [
        [record for part in partitions[i : i + 2] for record in part]
        for i in range(0, len(partitions), 2)
    ]


def combine_locally(
    partitions: list[list[CountRecord]], combine_passes: int
) -> list[list[CountRecord]]:
    """Apply the combiner combine_passes times; later passes merge pairs first."""
    for pass_number in range(1, combine_passes + 1):
        if pass_number > 1:
            partitions = _merge_pairs(partitions)
        partitions = [list(combine_partition(part)) for part in partitions]
    return partitions


def run_local_aggregation(
    events: Iterable[Event],
    num_partitions: int = 4,
    combine_passes: int = 1,
) -> list[CountRecord]:
    """Final (country, book, count) records, sorted by key."""
    validate_combine_passes(combine_passes)
    partitions = combine_locally(partition_events(events, num_partitions), combine_passes)
    shuffled = shuffle(partitions, num_partitions, lambda r: r.key, aggregate_key_hash)
    final = [record for part in shuffled for record in aggregate_partition(part)]
    return sorted(final)


def run_local_pipeline(
    events: Iterable[Event],
    k: int,
    num_partitions: int = 4,
    combine_passes: int = 1,
) -> list[TopKResult]:
    """Top-k books per country, one result per country, sorted by country."""
    validate_k(k)
    final = run_local_aggregation(events, num_partitions, combine_passes)
    by_country = shuffle([final], num_partitions, lambda r: r.country_id, country_hash)
    results = [result for part in by_country for result in select_top_k(part, k)]
    return sorted(results)
