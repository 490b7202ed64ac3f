"""
Record types flowing between the pipeline stages.

Raw events enter as (country, book) pairs, become count records with an
initial count of 1, and leave the pipeline as one TopKResult per country.
"""

from typing import Any, NamedTuple

from group_reduce.errors import MalformedRecordError

# Largest count a signed 64-bit accumulator can hold
MAX_COUNT = 2**63 - 1


class Event(NamedTuple):
    country_id: int
    book_id: int


class AggregateKey(NamedTuple):
    country_id: int
    book_id: int


class CountRecord(NamedTuple):
    country_id: int
    book_id: int
    count: int

    @property
    def key(self) -> AggregateKey:
        return AggregateKey(self.country_id, self.book_id)


class BookCount(NamedTuple):
    book_id: int
    count: int


class TopKResult(NamedTuple):
    country_id: int
    books: tuple[BookCount, ...]


def to_count_record(event: Event) -> CountRecord:
    """Map a raw read event to (country, book, 1)."""
    return CountRecord(event[0], event[1], 1)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_count_record(record: Any) -> CountRecord:
    """
    Check that a value is a well-formed count record.

    Plain 3-tuples are accepted and converted, so records coming back from
    a shuffle (where only the tuple shape survives) validate the same way.

    Raises:
        MalformedRecordError: wrong field count, non-integer fields, or a
            count outside 1..MAX_COUNT
    """
    if not isinstance(record, tuple) or len(record) != 3:
        raise MalformedRecordError(f"expected (country, book, count), got {record!r}")

    country_id, book_id, count = record
    if not (_is_int(country_id) and _is_int(book_id) and _is_int(count)):
        raise MalformedRecordError(f"non-integer field in count record {record!r}")
    if count < 1 or count > MAX_COUNT:
        raise MalformedRecordError(f"count out of range in count record {record!r}")

    if isinstance(record, CountRecord):
        return record
    return CountRecord(country_id, book_id, count)
