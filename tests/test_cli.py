"""
Tests for the command line entry points.

Jobs that need Spark reuse the session fixture; its stop() is disabled for
the duration of the test so later tests keep a live context.
"""

from pathlib import Path

import pytest
from pyspark.sql import SparkSession

from group_reduce import cli
from group_reduce.config import DEFAULT_STRATEGY, GeneratorConfig, TopKConfig, dataset_name


@pytest.fixture
def shared_spark(spark: SparkSession, monkeypatch: pytest.MonkeyPatch) -> SparkSession:
    """Hand the test session to the CLI instead of building a new one."""
    monkeypatch.setattr(spark, "stop", lambda: None)
    monkeypatch.setattr(cli, "create_spark_session", lambda *args, **kwargs: spark)
    return spark


class TestParser:
    """Tests for argument parsing."""

    def test_top_k_defaults(self) -> None:
        args = cli.build_parser().parse_args(["top-k"])

        config = cli.top_k_config(args)

        assert config == TopKConfig(
            k=5,
            parallelism=4,
            combine_passes=1,
            strategy="hash",
            input_path=str(cli.DEFAULT_INPUT),
            output_path=None,
        )

    def test_strategy_default_follows_config(self) -> None:
        args = cli.build_parser().parse_args(["top-k"])

        assert args.strategy == DEFAULT_STRATEGY
        assert cli.top_k_config(args).strategy == TopKConfig().strategy

    def test_generate_options(self) -> None:
        args = cli.build_parser().parse_args(
            ["generate", "--num-countries", "7", "--num-reads", "70", "--skew", "1.5", "--seed", "3"]
        )

        config = cli.generator_config(args)

        assert config.num_countries == 7
        assert config.num_reads == 70
        assert config.skew == 1.5
        assert config.seed == 3

    def test_command_required(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])

    def test_unknown_strategy_rejected_by_parser(self) -> None:
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["top-k", "--strategy", "sort"])


class TestMain:
    """Tests for main() exit codes and output."""

    @pytest.mark.parametrize(
        "argv",
        [
            ["top-k", "--k", "0"],
            ["top-k", "--combine-passes", "3"],
            ["top-k", "--strategy", "builtin", "--combine-passes", "1"],
            ["top-k", "--parallelism", "0"],
            ["generate", "--num-countries", "0"],
            ["generate", "--skew", "-1"],
        ],
    )
    def test_invalid_parameters_exit_with_error(self, argv: list[str], capsys) -> None:
        """Parameters are checked before any Spark session is created."""
        assert cli.main(argv) == 1
        assert "error:" in capsys.readouterr().err

    def test_top_k_on_sample(self, shared_spark: SparkSession, capsys) -> None:
        assert cli.main(["top-k", "--k", "1", "--parallelism", "2"]) == 0

        out = capsys.readouterr().out
        assert "Top-1 Books per Country" in out
        assert "0,5:5" in out
        assert "1,2:3" in out
        assert "Countries: 5" in out

    def test_top_k_malformed_input(self, shared_spark: SparkSession, tmp_path: Path, capsys) -> None:
        source = tmp_path / "bad.csv"
        source.write_text("0,1\nnot,a,record\n", encoding="utf-8")

        assert cli.main(["top-k", "--input", str(source), "--parallelism", "1"]) == 1
        assert "Spark job failed" in capsys.readouterr().err

    def test_generate_writes_dataset(self, shared_spark: SparkSession, tmp_path: Path, capsys) -> None:
        prefix = str(tmp_path / "reads-")
        argv = [
            "generate",
            "--num-countries", "10",
            "--num-books", "5",
            "--num-reads", "200",
            "--parallelism", "2",
            "--output", prefix,
        ]

        assert cli.main(argv) == 0

        config = GeneratorConfig(num_countries=10, num_books=5, num_reads=200, parallelism=2)
        out_dir = Path(prefix + dataset_name(config))
        lines = [line for part in out_dir.glob("part-*") for line in part.read_text().splitlines()]
        assert len(lines) == 200
        assert "Country 0 share vs uniform baseline" in capsys.readouterr().out
