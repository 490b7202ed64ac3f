"""
Local Combiner and Global Aggregator

Both stages sum counts per (country, book) key with a dict that is created
fresh for each partition call and dropped when the call returns:

  - combine_partition   runs before the key shuffle and only sees one
                        partition's worth of records (partial sums)
  - aggregate_partition runs after the key shuffle and sees every
                        contribution for its keys (final sums)

Because the operation is a plain sum, running the combiner zero, one or
two times before the aggregator only changes how many records cross the
shuffle, never the final counts.
"""

from collections.abc import Iterable, Iterator

from group_reduce.errors import AccumulatorOverflowError
from group_reduce.records import MAX_COUNT, AggregateKey, CountRecord, validate_count_record


def add_counts(a: int, b: int) -> int:
    """Sum two counts, failing instead of wrapping past MAX_COUNT."""
    total = a + b
    if total > MAX_COUNT:
        raise AccumulatorOverflowError(f"count {a} + {b} exceeds {MAX_COUNT}")
    return total


def accumulate(records: Iterable[CountRecord]) -> dict[AggregateKey, int]:
    """Sum counts per key into a new dict owned by the caller."""
    totals: dict[AggregateKey, int] = {}
    for raw in records:
        record = validate_count_record(raw)
        key = record.key
        previous = totals.get(key)
        totals[key] = record.count if previous is None else add_counts(previous, record.count)
    return totals


def _emit(totals: dict[AggregateKey, int]) -> Iterator[CountRecord]:
    for key, count in totals.items():
        yield CountRecord(key.country_id, key.book_id, count)


def combine_partition(records: Iterable[CountRecord]) -> Iterator[CountRecord]:
    """
    Pre-aggregate one partition (in-mapper combiner).

    Args:
        records: count records of this partition, in any order

    Yields:
        One record per distinct key seen in the partition
    """
    return _emit(accumulate(records))


def aggregate_partition(records: Iterable[CountRecord]) -> Iterator[CountRecord]:
    """
    Produce final counts for the keys co-located on this partition.

    Must run after a shuffle by aggregate key, otherwise a key may still be
    split across partitions.
    """
    return _emit(accumulate(records))


def total_count(records: Iterable[CountRecord]) -> int:
    """Sum of all counts; equals the number of raw events at every stage."""
    return sum(record.count for record in records)
