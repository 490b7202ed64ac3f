"""
Tests for job configuration and parameter validation.
"""

import math

import pytest

from group_reduce.config import (
    DEFAULT_STRATEGY,
    STRATEGIES,
    GeneratorConfig,
    TopKConfig,
    dataset_name,
    validate_combine_passes,
    validate_k,
)
from group_reduce.errors import InvalidParameterError


class TestGeneratorConfig:
    """Tests for GeneratorConfig.validate()."""

    def test_defaults_are_valid(self) -> None:
        config = GeneratorConfig()
        assert config.validate() is config

    def test_zero_reads_allowed(self) -> None:
        GeneratorConfig(num_reads=0).validate()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"num_countries": 0},
            {"num_books": 0},
            {"num_reads": -1},
            {"skew": 0.0},
            {"skew": -1.5},
            {"skew": math.inf},
            {"skew": math.nan},
            {"parallelism": 0},
        ],
    )
    def test_invalid_values_raise(self, overrides: dict) -> None:
        with pytest.raises(InvalidParameterError):
            GeneratorConfig(**overrides).validate()

    def test_dataset_name(self) -> None:
        config = GeneratorConfig(num_countries=10, num_books=20, num_reads=300, skew=1.5)
        assert dataset_name(config) == "10-20-300-1.5"


class TestTopKConfig:
    """Tests for TopKConfig.validate() and shared checks."""

    def test_defaults_are_valid(self) -> None:
        TopKConfig().validate()

    def test_default_strategy_is_a_known_strategy(self) -> None:
        assert DEFAULT_STRATEGY in STRATEGIES
        assert TopKConfig().strategy == DEFAULT_STRATEGY

    @pytest.mark.parametrize("k", [0, -3])
    def test_k_must_be_positive(self, k: int) -> None:
        with pytest.raises(InvalidParameterError):
            validate_k(k)
        with pytest.raises(InvalidParameterError):
            TopKConfig(k=k).validate()

    @pytest.mark.parametrize("passes", [0, 1, 2])
    def test_supported_combine_passes(self, passes: int) -> None:
        assert validate_combine_passes(passes) == passes

    @pytest.mark.parametrize("passes", [-1, 3])
    def test_unsupported_combine_passes(self, passes: int) -> None:
        with pytest.raises(InvalidParameterError):
            validate_combine_passes(passes)

    def test_unknown_strategy(self) -> None:
        with pytest.raises(InvalidParameterError):
            TopKConfig(strategy="sort").validate()

    def test_builtin_strategy_takes_no_combine_passes(self) -> None:
        TopKConfig(strategy="builtin", combine_passes=0).validate()
        with pytest.raises(InvalidParameterError):
            TopKConfig(strategy="builtin", combine_passes=1).validate()

    def test_parallelism_must_be_positive(self) -> None:
        with pytest.raises(InvalidParameterError):
            TopKConfig(parallelism=0).validate()
