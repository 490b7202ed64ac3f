"""
Top-K Selector

Groups final count records by country and keeps the k most read books of
each country. Equal counts are ordered by ascending book id so results are
deterministic no matter how records arrived.
"""

import heapq
from collections.abc import Callable, Iterable, Iterator

from group_reduce.config import validate_k
from group_reduce.records import BookCount, CountRecord, TopKResult, validate_count_record


def ranking_key(book: BookCount) -> tuple[int, int]:
    """Sort key: highest count first, then lowest book id."""
    return (-book.count, book.book_id)


def select_top_k(records: Iterable[CountRecord], k: int) -> Iterator[TopKResult]:
    """
    Select the top-k books of every country present in records.

    Records must already be co-located by country (after the country
    shuffle) and hold final counts. A country with fewer than k books
    returns all of them.

    Uses heapq.nsmallest on the ranking key, which is O(n log k) per
    country and equivalent to sorted(...)[:k].

    k is checked on call, before any record is read.

    Returns:
        An iterator of one TopKResult per country, in ascending country order
    """
    validate_k(k)
    return _select_top_k(records, k)


def _select_top_k(records: Iterable[CountRecord], k: int) -> Iterator[TopKResult]:
    groups: dict[int, list[BookCount]] = {}
    for raw in records:
        record = validate_count_record(raw)
        groups.setdefault(record.country_id, []).append(BookCount(record.book_id, record.count))

    for country_id in sorted(groups):
        books = heapq.nsmallest(k, groups[country_id], key=ranking_key)
        yield TopKResult(country_id, tuple(books))


def top_k_selector(k: int) -> Callable[[Iterable[CountRecord]], Iterator[TopKResult]]:
    """Return a mapPartitions function selecting the top-k per country."""
    validate_k(k)

    def _select(partition: Iterable[CountRecord]) -> Iterator[TopKResult]:
        return _select_top_k(partition, k)

    return _select
