"""
Top-K Books per Country: Spark pipeline

Wires the stages into one RDD job:

    events
      → map(to_count_record)                     (country, book, 1)
      → combine_passes × mapPartitions(combine)   local pre-aggregation
      → partitionBy(aggregate key)                shuffle 1
      → mapPartitions(aggregate)                  final counts
      → partitionBy(country)                      shuffle 2
      → mapPartitions(top_k)                      one TopKResult per country

The number of combine passes is a performance knob only: 0, 1 and 2
passes produce identical results. A second pass first coalesces pairs of
partitions (no shuffle) so it pre-aggregates over a larger slice than the
first pass did.

The "builtin" strategy replaces the explicit combiner/aggregator with
reduceByKey(), which combines map-side on its own.
"""

import logging

from pyspark import SparkContext
from pyspark.rdd import RDD

from group_reduce.aggregation import add_counts, aggregate_partition, combine_partition
from group_reduce.common.data_loader import read_events
from group_reduce.config import DEFAULT_STRATEGY, TopKConfig, validate_combine_passes, validate_k
from group_reduce.errors import InvalidParameterError
from group_reduce.formatter import to_output_line
from group_reduce.partitioner import (
    aggregate_key_hash,
    country_hash,
    key_by_aggregate_key,
    key_by_country,
)
from group_reduce.records import CountRecord, TopKResult, to_count_record
from group_reduce.top_k import top_k_selector

logger = logging.getLogger(__name__)

# Suffix appended to the output path, one per execution engine
OUTPUT_SUFFIX = "_spark"


# ---------------------------------------------------------------------------
# Aggregation stages
# ---------------------------------------------------------------------------


def apply_combine_passes(records: RDD, combine_passes: int) -> RDD:
    """Run the local combiner combine_passes times before the key shuffle."""
    for pass_number in range(1, combine_passes + 1):
        if pass_number > 1:
            merged = max(1, records.getNumPartitions() // 2)
            records = records.coalesce(merged, shuffle=False)
        records = records.mapPartitions(combine_partition)
        logger.debug(
            "combine pass %d over %d partitions", pass_number, records.getNumPartitions()
        )
    return records


def shuffle_and_aggregate(records: RDD, num_partitions: int) -> RDD:
    """Shuffle count records by (country, book) and sum them per partition."""
    return (
        records.map(key_by_aggregate_key)
        .partitionBy(num_partitions, aggregate_key_hash)
        .values()
        .mapPartitions(aggregate_partition)
    )


def hash_aggregate(records: RDD, num_partitions: int, combine_passes: int) -> RDD:
    """Combine locally, then shuffle and aggregate."""
    return shuffle_and_aggregate(apply_combine_passes(records, combine_passes), num_partitions)


def builtin_aggregate(records: RDD, num_partitions: int) -> RDD:
    """Sum counts with reduceByKey (Spark's own map-side combine)."""
    return (
        records.map(lambda r: ((r.country_id, r.book_id), r.count))
        .reduceByKey(add_counts, num_partitions, aggregate_key_hash)
        .map(lambda kv: CountRecord(kv[0][0], kv[0][1], kv[1]))
    )


def aggregate_counts(
    events: RDD,
    num_partitions: int,
    combine_passes: int = 1,
    strategy: str = DEFAULT_STRATEGY,
) -> RDD:
    """Turn raw events into one final CountRecord per (country, book)."""
    validate_combine_passes(combine_passes, strategy)
    records = events.map(to_count_record)
    if strategy == "builtin":
        return builtin_aggregate(records, num_partitions)
    return hash_aggregate(records, num_partitions, combine_passes)


# ---------------------------------------------------------------------------
# Pipeline builder
# ---------------------------------------------------------------------------


def build_top_k_pipeline(
    events: RDD,
    k: int,
    num_partitions: int,
    combine_passes: int = 1,
    strategy: str = DEFAULT_STRATEGY,
) -> RDD:
    """
    Build the full top-K job over an RDD of Events.

    Args:
        events: RDD of Event (or any (country, book) pairs)
        k: Number of books to keep per country
        num_partitions: Partition count for both shuffles
        combine_passes: Local combiner passes before the key shuffle (0-2)
        strategy: "hash" or "builtin"

    Returns:
        RDD of TopKResult, one per observed country
    """
    validate_k(k)
    logger.info(
        "building top-%d pipeline: strategy=%s combine_passes=%d partitions=%d",
        k,
        strategy,
        combine_passes,
        num_partitions,
    )
    final_counts = aggregate_counts(events, num_partitions, combine_passes, strategy)
    return (
        final_counts.map(key_by_country)
        .partitionBy(num_partitions, country_hash)
        .values()
        .mapPartitions(top_k_selector(k))
    )


def format_output(results: RDD) -> RDD:
    """Render TopKResults as output lines."""
    return results.map(to_output_line)


# ---------------------------------------------------------------------------
# Job entry
# ---------------------------------------------------------------------------


def run_top_k(sc: SparkContext, config: TopKConfig) -> list[TopKResult] | None:
    """
    Run the top-K job described by config.

    Without an output path the results are collected, printed sorted by
    country and returned. With one they are written as text under
    output_path + OUTPUT_SUFFIX and None is returned.
    """
    config.validate()
    if config.input_path is None:
        raise InvalidParameterError("the top-K job needs an input path")

    events = read_events(sc, config.input_path, config.parallelism)
    results = build_top_k_pipeline(
        events,
        config.k,
        config.parallelism,
        config.combine_passes,
        config.strategy,
    )

    if config.output_path is None:
        collected = sorted(results.collect())
        for result in collected:
            print(to_output_line(result))
        return collected

    target = config.output_path + OUTPUT_SUFFIX
    format_output(results).saveAsTextFile(target)
    logger.info("wrote top-%d results to %s", config.k, target)
    return None
