"""
Result formatting.

A TopKResult becomes one output line:

    <country>,<book>:<count>, <book>:<count>, ...

Books keep the order given by the selector.
"""

from collections.abc import Iterable

from group_reduce.records import BookCount, TopKResult


def format_books(books: Iterable[BookCount]) -> str:
    return ", ".join(f"{book.book_id}:{book.count}" for book in books)


def format_result(result: TopKResult) -> tuple[int, str]:
    """Render a result as (country, "book:count, book:count")."""
    return (result.country_id, format_books(result.books))


def to_output_line(result: TopKResult) -> str:
    country_id, books = format_result(result)
    return f"{country_id},{books}"
