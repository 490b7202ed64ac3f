"""
Shared SparkSession utilities for the group-reduce jobs.

This module provides a consistent way to create SparkSession instances
for the generator and the top-K job, with sensible defaults for local runs.

Logging is configured via group_reduce/conf/log4j2.properties (shipped
with the package) to:
- Write INFO logs to <log dir>/spark.log, where the log dir is
  $GROUP_REDUCE_LOG_DIR or .logs under the current working directory
- Only show ERROR on console (keeping job output readable)
"""

import os
from pathlib import Path

from py4j.protocol import Py4JJavaError
from pyspark import SparkContext
from pyspark.errors import PythonException
from pyspark.sql import SparkSession

# Import package directory (group_reduce/)
PACKAGE_ROOT = Path(__file__).parent.parent

# Path to log4j2 config, installed as package data
LOG4J2_CONFIG = PACKAGE_ROOT / "conf" / "log4j2.properties"

# Environment variable overriding where spark.log is written
LOG_DIR_ENV = "GROUP_REDUCE_LOG_DIR"

# Base application name prefix for all Spark sessions
# Final app name will be: APP_NAME_PREFIX-<job_name>
APP_NAME_PREFIX = "GroupReduce"

# Exceptions a failing Spark action raises on the driver. Errors from
# executor-side Python code arrive wrapped in one of these.
SPARK_JOB_ERRORS = (Py4JJavaError, PythonException)


def _logs_dir() -> Path:
    """Directory for spark.log: $GROUP_REDUCE_LOG_DIR, else ./.logs."""
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).resolve()
    return Path.cwd() / ".logs"


def _ensure_logs_dir() -> Path:
    """Ensure the logs directory exists and return it."""
    logs_dir = _logs_dir()
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def _snake_to_title(snake_str: str) -> str:
    """
    Convert a snake_case or kebab-case string to TitleCase.

    Examples:
        top_k -> TopK
        generate-reads -> GenerateReads
    """
    return "".join(word.capitalize() for word in snake_str.replace("-", "_").split("_"))


def _parse_job_identifier(job_id: str | None) -> str | None:
    """
    Parse a job identifier, which can be either a file path or a name.

    If it looks like a file path (contains / or ends with .py), extract
    the filename and convert it to TitleCase.
    """
    if job_id is None:
        return None

    if "/" in job_id or job_id.endswith(".py"):
        return _snake_to_title(Path(job_id).stem)

    if "_" in job_id or "-" in job_id:
        return _snake_to_title(job_id)

    return job_id


def _build_app_name(job_name: str | None = None) -> str:
    """Build the full application name, e.g. "GroupReduce-TopK"."""
    if job_name:
        return f"{APP_NAME_PREFIX}-{job_name}"
    return APP_NAME_PREFIX


def _driver_java_options(logs_dir: Path) -> str:
    """JVM flags pointing log4j2 at the packaged config and the log dir."""
    return (
        f"-Dlog4j.configurationFile=file:{LOG4J2_CONFIG} "
        f"-Dgroup_reduce.log.dir={logs_dir}"
    )


def create_spark_session(
    job_name: str | None = None,
    master: str = "local[*]",
    parallelism: int | None = None,
) -> SparkSession:
    """
    Create a SparkSession with common configurations.

    Logging is configured to write detailed logs to <log dir>/spark.log
    while only showing errors on the console.

    Args:
        job_name: Identifier for this job. Either a file path like __file__
                  or a name like "top-k"; results in "GroupReduce-TopK"
        master: Spark master URL (default: local[*] for local runs)
        parallelism: Default partition count for RDD and SQL shuffles

    Returns:
        Configured SparkSession instance
    """
    logs_dir = _ensure_logs_dir()

    app_name = _build_app_name(_parse_job_identifier(job_name))

    builder = SparkSession.builder.appName(app_name).master(master)

    # Configure log4j2 if config exists
    if LOG4J2_CONFIG.exists():
        builder = builder.config("spark.driver.extraJavaOptions", _driver_java_options(logs_dir))

    shuffle_partitions = str(parallelism) if parallelism else "4"
    builder = builder.config("spark.sql.shuffle.partitions", shuffle_partitions)
    if parallelism:
        builder = builder.config("spark.default.parallelism", str(parallelism))

    spark = (
        builder.config("spark.driver.memory", "2g")
        .config("spark.ui.showConsoleProgress", "false")
        .getOrCreate()
    )

    # Set log level for any logs after startup
    spark.sparkContext.setLogLevel("ERROR")

    return spark


def get_spark_context(job_name: str | None = None) -> SparkContext:
    """Get the SparkContext of a (possibly existing) SparkSession."""
    spark = create_spark_session(job_name)
    return spark.sparkContext
