"""
Pytest configuration and shared fixtures for the group-reduce tests.
"""

import pytest
from pyspark.sql import SparkSession

from group_reduce.records import Event


@pytest.fixture(scope="session")
def spark() -> SparkSession:
    """
    Create a SparkSession for testing.

    Uses session scope to reuse the same Spark context across all tests,
    which significantly speeds up test execution.
    """
    spark = (
        SparkSession.builder
        .appName("pytest-group-reduce")
        .master("local[2]")  # Use 2 cores for testing
        .config("spark.sql.shuffle.partitions", "2")  # Reduce partitions for faster tests
        .config("spark.ui.enabled", "false")  # Disable Spark UI for tests
        .config("spark.driver.memory", "1g")
        .getOrCreate()
    )

    # Set log level to reduce noise during tests
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


@pytest.fixture(scope="session")
def sc(spark: SparkSession):
    """
    Get SparkContext from the SparkSession fixture.

    The pipeline is RDD-based, so most Spark tests only need this.
    """
    return spark.sparkContext


@pytest.fixture
def scenario_events() -> list[Event]:
    """Two countries; country 0 reads book 5 twice and book 7 once."""
    return [Event(0, 5), Event(0, 5), Event(0, 7), Event(1, 2)]


@pytest.fixture
def mixed_events() -> list[Event]:
    """A few hundred events with repeated keys spread over 5 countries."""
    return [Event(i % 5, (i * 7) % 11 + (i % 3)) for i in range(300)]
