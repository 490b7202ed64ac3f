"""
Exceptions raised by the group-reduce pipeline.

Every error is fatal for the run: nothing is retried or skipped, and no
partial results are written.
"""


class GroupReduceError(Exception):
    """Base class for all pipeline errors."""


class MalformedRecordError(GroupReduceError, ValueError):
    """An input line or count record has the wrong shape or field types."""


class InvalidParameterError(GroupReduceError, ValueError):
    """A configuration value is out of range."""


class AccumulatorOverflowError(GroupReduceError, OverflowError):
    """A summed count no longer fits in a signed 64-bit counter."""
