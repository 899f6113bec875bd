"""Link configuration via environment variables.

Uses pydantic-settings so every field can be overridden with an
env var.  Simulation is the zero-hardware default.

Note: ``env_prefix`` is empty, so field names map directly to env vars
(e.g. ``LOG_LEVEL``, ``SCHEMA_REVISION``).
"""

from __future__ import annotations

from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class LinkSettings(BaseSettings):
    """Heater link runtime settings."""

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    # -- line source --------------------------------------------------------
    line_source: str = Field(
        default="sim",
        description="'sim' for simulation, or a path to a captured session log",
    )
    sim_scenario: str = Field(
        default="nominal",
        description="Simulation scenario name (from simulation_scenarios.json)",
    )
    sim_line_interval_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay between simulated lines",
    )

    # -- protocol -----------------------------------------------------------
    schema_revision: int = Field(
        default=3,
        description="Firmware telemetry schema revision (1, 2 or 3)",
    )
    legacy_field_decode: bool = Field(
        default=False,
        description="Decode unparseable fields as 0.0 like historical logs",
    )

    # -- session ------------------------------------------------------------
    error_display_time: float = Field(
        default=18.0,
        description="Time after which average error and input variance are shown",
    )
    score_display_time: float = Field(
        default=29.0,
        description="Time after which the score and rank are shown",
    )
    rank_table: Literal["default", "classic"] = Field(
        default="default",
        description="Score tier table used for rank classification",
    )
    overheat_marker: str = Field(
        default="overheat",
        description="Emergency text fragment that triggers the alarm",
    )

    # -- behaviour ----------------------------------------------------------
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="console",
        description="Log output format: 'console' or 'json'",
    )

    @model_validator(mode="after")
    def _check_display_times(self) -> "LinkSettings":
        if self.score_display_time < self.error_display_time:
            raise ValueError(
                "score_display_time must not be lower than error_display_time"
            )
        return self

    # -- derived ------------------------------------------------------------
    @property
    def is_simulation(self) -> bool:
        """Return ``True`` when lines come from the simulator."""
        return self.line_source.strip().lower() == "sim"
