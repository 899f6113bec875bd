"""Tests for heater_link.ranking -- score tier tables."""

from __future__ import annotations

import math

import pytest

from heater_link.ranking import (
    CLASSIC_RANKS,
    DEFAULT_RANKS,
    rank,
    validate_rank_table,
)


class TestDefaultRanks:
    @pytest.mark.parametrize(
        "score, label",
        [
            (-4.0, "Control Master"),
            (13.0, "Control Master"),
            (13.01, "Control Student"),
            (16.0, "Control Student"),
            (16.5, "Learner"),
            (20.0, "Learner"),
            (20.01, "Crash Test Dummy"),
            (50.0, "Crash Test Dummy"),
            (1e9, "Crash Test Dummy"),
            (math.inf, "Crash Test Dummy"),
        ],
    )
    def test_bounds_inclusive(self, score: float, label: str) -> None:
        assert rank(score) == label

    def test_nan_falls_through(self) -> None:
        assert rank(float("nan")) == "Crash Test Dummy"

    def test_default_table_is_valid(self) -> None:
        assert validate_rank_table(DEFAULT_RANKS) == DEFAULT_RANKS


class TestClassicRanks:
    @pytest.mark.parametrize(
        "score, label",
        [
            (12.0, "Control Master"),
            (17.0, "Proud owner of a learners permit"),
            (50.0, "Accident waiting to happen"),
            (50.1, "Professional crash test dummy"),
        ],
    )
    def test_labels(self, score: float, label: str) -> None:
        assert rank(score, CLASSIC_RANKS) == label


class TestValidateRankTable:
    def test_empty(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            validate_rank_table([])

    def test_not_ascending(self) -> None:
        with pytest.raises(ValueError, match="strictly ascending"):
            validate_rank_table([(16.0, "b"), (13.0, "a"), (math.inf, "c")])

    def test_duplicate_bound(self) -> None:
        with pytest.raises(ValueError, match="strictly ascending"):
            validate_rank_table([(13.0, "a"), (13.0, "b"), (math.inf, "c")])

    def test_bounded_last_tier(self) -> None:
        with pytest.raises(ValueError, match="unbounded"):
            validate_rank_table([(13.0, "a"), (50.0, "b")])

    def test_nan_bound(self) -> None:
        with pytest.raises(ValueError, match="NaN"):
            validate_rank_table([(float("nan"), "a"), (math.inf, "b")])

    def test_list_normalised_to_tuple(self) -> None:
        table = validate_rank_table([[10, "a"], [math.inf, "b"]])
        assert table == ((10.0, "a"), (math.inf, "b"))
