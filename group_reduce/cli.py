"""
Command line entry points.

    group-reduce generate [--num-countries N] [--num-books N] [--num-reads N]
                          [--skew S] [--seed N] [--output PREFIX]
    group-reduce top-k    [--k K] [--combine-passes 0|1|2]
                          [--strategy hash|builtin] [--input PATH] [--output PREFIX]

Both take --parallelism, --master and --verbose. Without --output the
generator prints its events and the top-K job prints its results.
"""

import argparse
import logging
import sys

from group_reduce import config as cfg
from group_reduce.common.data_loader import format_event_line, get_data_path
from group_reduce.common.spark_session import SPARK_JOB_ERRORS, create_spark_session
from group_reduce.errors import GroupReduceError
from group_reduce.generator import generate_events_rdd, share_ratio
from group_reduce.pipeline import run_top_k

logger = logging.getLogger(__name__)

DEFAULT_INPUT = get_data_path("reads_sample.csv")


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="group-reduce",
        description="Top-K books per country with two-phase aggregation on Spark.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--parallelism", type=int, default=cfg.DEFAULT_PARALLELISM)
    common.add_argument("--master", default="local[*]", help="Spark master URL")
    common.add_argument("--verbose", action="store_true", help="log pipeline wiring")

    commands = parser.add_subparsers(dest="command", required=True)

    gen = commands.add_parser("generate", parents=[common], help="generate skewed reads")
    gen.add_argument("--num-countries", type=int, default=cfg.DEFAULT_NUM_COUNTRIES)
    gen.add_argument("--num-books", type=int, default=cfg.DEFAULT_NUM_BOOKS)
    gen.add_argument("--num-reads", type=int, default=cfg.DEFAULT_NUM_READS)
    gen.add_argument("--skew", type=float, default=cfg.DEFAULT_SKEW)
    gen.add_argument("--seed", type=int, default=cfg.DEFAULT_SEED)
    gen.add_argument("--output", help="output path prefix; the dataset name is appended")

    top = commands.add_parser("top-k", parents=[common], help="compute top-K books per country")
    top.add_argument("--k", type=int, default=cfg.DEFAULT_K)
    top.add_argument("--combine-passes", type=int, default=cfg.DEFAULT_COMBINE_PASSES)
    top.add_argument("--strategy", choices=cfg.STRATEGIES, default=cfg.DEFAULT_STRATEGY)
    top.add_argument("--input", default=str(DEFAULT_INPUT))
    top.add_argument("--output", help="output path prefix")

    return parser


def generator_config(args: argparse.Namespace) -> cfg.GeneratorConfig:
    return cfg.GeneratorConfig(
        num_countries=args.num_countries,
        num_books=args.num_books,
        num_reads=args.num_reads,
        skew=args.skew,
        parallelism=args.parallelism,
        seed=args.seed,
    ).validate()


def top_k_config(args: argparse.Namespace) -> cfg.TopKConfig:
    return cfg.TopKConfig(
        k=args.k,
        parallelism=args.parallelism,
        combine_passes=args.combine_passes,
        strategy=args.strategy,
        input_path=args.input,
        output_path=args.output,
    ).validate()


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_generate(args: argparse.Namespace) -> None:
    config = generator_config(args)
    spark = create_spark_session("generate-reads", args.master, config.parallelism)
    try:
        events = generate_events_rdd(spark.sparkContext, config)

        print("=" * 60)
        print("Group Reduce: Skewed Read Generator")
        print("=" * 60)
        print(f"\nCountries: {config.num_countries}  Books: {config.num_books}")
        print(f"Reads: {config.num_reads}  Skew: {config.skew}  Seed: {config.seed}\n")

        if args.output is None:
            for line in events.map(format_event_line).collect():
                print(line)
        else:
            target = args.output + cfg.dataset_name(config)
            events.map(format_event_line).saveAsTextFile(target)
            print(f"Wrote {config.num_reads} reads to {target}")

        zeros = events.filter(lambda e: e.country_id == 0).count()
        ratio = share_ratio(zeros, config.num_reads, config.num_countries)
        print(f"Country 0 share vs uniform baseline: {ratio:.2f}x")
    finally:
        spark.stop()


def run_top_k_command(args: argparse.Namespace) -> None:
    config = top_k_config(args)
    spark = create_spark_session("top-k", args.master, config.parallelism)
    try:
        print("=" * 60)
        print(f"Group Reduce: Top-{config.k} Books per Country")
        print("=" * 60)
        print(f"\nInput: {config.input_path}")
        print(f"Strategy: {config.strategy}  Combine passes: {config.combine_passes}\n")

        results = run_top_k(spark.sparkContext, config)
        if results is not None:
            print(f"\nCountries: {len(results)}")
    finally:
        spark.stop()


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, run the selected command and return an exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.command == "generate":
            run_generate(args)
        else:
            run_top_k_command(args)
    except GroupReduceError as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except SPARK_JOB_ERRORS as exc:
        summary = (str(exc).strip().splitlines() or [type(exc).__name__])[0]
        logger.error("%s failed in a Spark task: %s", args.command, summary)
        print(f"error: Spark job failed: {summary}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
