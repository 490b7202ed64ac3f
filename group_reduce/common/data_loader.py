"""
Read and write event files.

Input files are headerless text with one "country,book" record per line.
Any line that is not exactly two integer fields aborts the run with
MalformedRecordError; blank lines carry no record and are ignored.
"""

import csv
import re
from collections.abc import Iterable
from pathlib import Path

from pyspark import SparkContext
from pyspark.rdd import RDD

from group_reduce.errors import MalformedRecordError
from group_reduce.records import Event

# Package directory holding bundled sample data
PACKAGE_ROOT = Path(__file__).parent.parent

# Optional minus sign and ASCII digits only: no "+", "_" or non-ASCII digits
ID_PATTERN = re.compile(r"-?[0-9]+")


def is_blank(line: str) -> bool:
    """A line (or joined CSV row) with nothing but whitespace carries no record."""
    return line.strip() == ""


def _parse_id(field: str, source: str) -> int:
    text = field.strip()
    if ID_PATTERN.fullmatch(text) is None:
        raise MalformedRecordError(f"non-integer field in record: {source!r}")
    return int(text)


def _parse_fields(fields: list[str], source: str) -> Event:
    if len(fields) != 2:
        raise MalformedRecordError(f"expected 2 fields (country,book), got {len(fields)}: {source!r}")
    return Event(_parse_id(fields[0], source), _parse_id(fields[1], source))


def parse_event_line(line: str) -> Event:
    """
    Parse a 'country,book' line into an Event.

    Args:
        line: One input record, with or without the trailing newline

    Returns:
        The parsed Event

    Raises:
        MalformedRecordError: wrong field count or non-integer field
    """
    return _parse_fields(line.rstrip("\r\n").split(","), line)


def format_event_line(event: Event) -> str:
    return f"{event.country_id},{event.book_id}"


def load_events_csv(csv_path: str | Path) -> list[Event]:
    """Load an event file into memory (for small inputs and tests)."""
    path = Path(csv_path)
    events: list[Event] = []

    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        for row in reader:
            source = ",".join(row)
            if not is_blank(source):  # Skip empty and whitespace-only rows
                events.append(_parse_fields(row, source))

    return events


def write_events_csv(csv_path: str | Path, events: Iterable[Event]) -> int:
    """Write events as headerless CSV; returns the number of rows written."""
    path = Path(csv_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    written = 0

    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, lineterminator="\n")
        for event in events:
            writer.writerow((event.country_id, event.book_id))
            written += 1

    return written


def read_events(sc: SparkContext, input_path: str, min_partitions: int | None = None) -> RDD:
    """Read an event file or directory into an RDD of Events."""
    lines = sc.textFile(input_path, minPartitions=min_partitions)
    return lines.filter(lambda line: not is_blank(line)).map(parse_event_line)


def get_data_path(filename: str) -> Path:
    """
    Get the full path to a bundled data file.

    Args:
        filename: Data file name (e.g., "reads_sample.csv")

    Returns:
        Full path to the data file
    """
    return PACKAGE_ROOT / "data" / filename
