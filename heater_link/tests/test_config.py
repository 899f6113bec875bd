"""Tests for heater_link.config -- LinkSettings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from heater_link.config import LinkSettings


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LINE_SOURCE", "SCHEMA_REVISION", "LEGACY_FIELD_DECODE"):
        monkeypatch.delenv(name, raising=False)
    settings = LinkSettings(_env_file=None)
    assert settings.is_simulation
    assert settings.schema_revision == 3
    assert settings.error_display_time == 18.0
    assert settings.score_display_time == 29.0
    assert settings.rank_table == "default"
    assert settings.legacy_field_decode is False


def test_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SCHEMA_REVISION", "1")
    monkeypatch.setenv("LEGACY_FIELD_DECODE", "true")
    monkeypatch.setenv("RANK_TABLE", "classic")
    settings = LinkSettings(_env_file=None)
    assert settings.schema_revision == 1
    assert settings.legacy_field_decode is True
    assert settings.rank_table == "classic"


@pytest.mark.parametrize("source", ["sim", "SIM", " Sim "])
def test_simulation_case_insensitive(source: str) -> None:
    assert LinkSettings(line_source=source).is_simulation


def test_replay_source() -> None:
    assert not LinkSettings(line_source="captures/run1.txt").is_simulation


def test_score_time_below_error_time() -> None:
    with pytest.raises(ValidationError, match="score_display_time"):
        LinkSettings(error_display_time=30.0, score_display_time=20.0)


def test_unknown_rank_table() -> None:
    with pytest.raises(ValidationError):
        LinkSettings(rank_table="olympic")


def test_negative_interval() -> None:
    with pytest.raises(ValidationError):
        LinkSettings(sim_line_interval_seconds=-1.0)
