"""Shared pytest fixtures for heater link tests."""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from heater_link.schemas import TelemetrySchema

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_scenario_cache() -> Generator[None, None, None]:
    """Clear the simulation scenario cache between tests.

    Prevents mutable global state from leaking across tests if any
    test were to mutate the loaded scenario data.
    """
    from heater_link.reader import simulation

    simulation._scenarios_cache = None
    yield
    simulation._scenarios_cache = None


@pytest.fixture()
def three_field_schema() -> TelemetrySchema:
    """Minimal custom schema: percent on, set point and time."""
    return TelemetrySchema(
        revision=99, field_names=("percent_on", "set_point", "time")
    )


@pytest.fixture()
def sample_capture() -> Path:
    """Path of the canonical captured session (ends in a disconnect)."""
    return _FIXTURES_DIR / "session_capture.sample.txt"
