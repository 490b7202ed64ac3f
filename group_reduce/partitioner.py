"""
Key partitioning for the two shuffles of the pipeline.

  1. aggregation shuffle: by (country, book), feeds the Global Aggregator
  2. top-K shuffle:       by country,         feeds the Top-K Selector

The hash functions are passed to RDD.partitionBy() as partitionFunc; Spark
takes the result modulo the partition count. Keys are ints or tuples of
ints, whose hashes are not salted per process, so every executor and the
local engine route an equal key to the same place.
"""

from collections.abc import Callable, Hashable, Iterable
from typing import Any

from group_reduce.records import AggregateKey, CountRecord


def aggregate_key_hash(key: tuple[int, int]) -> int:
    """Hash of a (country, book) key."""
    return hash((int(key[0]), int(key[1])))


def country_hash(country_id: int) -> int:
    """Hash of a country id alone."""
    return hash(int(country_id))


def key_by_aggregate_key(record: CountRecord) -> tuple[AggregateKey, CountRecord]:
    return (record.key, record)


def key_by_country(record: CountRecord) -> tuple[int, CountRecord]:
    return (record.country_id, record)


def assign_partition(
    key: Hashable,
    num_partitions: int,
    hash_func: Callable[[Any], int] = hash,
) -> int:
    """Pick the target partition for a key, same rule as RDD.partitionBy()."""
    return hash_func(key) % num_partitions


def shuffle(
    partitions: Iterable[Iterable[CountRecord]],
    num_partitions: int,
    key_func: Callable[[CountRecord], Any],
    hash_func: Callable[[Any], int],
) -> list[list[CountRecord]]:
    """Redistribute records so that equal keys end up in the same partition.

    Local stand-in for the engine's shuffle. The returned lists are only
    built after every input partition has been drained, which is the
    barrier downstream stages rely on.
    """
    targets: list[list[CountRecord]] = [[] for _ in range(num_partitions)]
    for partition in partitions:
        for record in partition:
            targets[assign_partition(key_func(record), num_partitions, hash_func)].append(record)
    return targets
