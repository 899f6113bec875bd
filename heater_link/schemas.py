"""Telemetry schema Pydantic v2 models.

A ``TelemetrySchema`` describes the frame layout of one firmware revision:
how many comma-separated values the controller sends and which semantic
role sits at each wire position.  Schemas are immutable; a misconfigured
schema fails at construction time, never while parsing.
"""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, Field, field_validator

# Semantic roles understood by the session tracker.
KNOWN_ROLES = frozenset(
    {
        "time",
        "percent_on",
        "set_point",
        "temperature",
        "temperature_filtered",
        "fan_speed",
        "input_variance",
        "average_error",
        "score",
    }
)

# The session tracker gates visibility on time.
REQUIRED_ROLES = ("time",)


class TelemetrySchema(BaseModel):
    """Expected telemetry frame for a given firmware revision."""

    model_config = {"frozen": True}

    revision: int = Field(..., ge=1, description="Firmware schema revision")
    field_names: Tuple[str, ...] = Field(
        ...,
        description="Semantic role of each value, index-aligned to wire order",
    )

    @field_validator("field_names")
    @classmethod
    def validate_field_names(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        if not v:
            raise ValueError("field_names must not be empty")
        unknown = [name for name in v if name not in KNOWN_ROLES]
        if unknown:
            raise ValueError(f"Unknown field roles: {', '.join(unknown)}")
        if len(set(v)) != len(v):
            raise ValueError("field_names must be unique")
        missing = [role for role in REQUIRED_ROLES if role not in v]
        if missing:
            raise ValueError(f"Missing required field roles: {', '.join(missing)}")
        return v

    # -- derived ------------------------------------------------------------

    @property
    def field_count(self) -> int:
        return len(self.field_names)

    def has_role(self, role: str) -> bool:
        return role in self.field_names

    def index(self, role: str) -> int:
        """Return the wire position of *role*.

        Raises ``KeyError`` if this revision does not carry the role.
        """
        try:
            return self.field_names.index(role)
        except ValueError:
            raise KeyError(
                f"Schema revision {self.revision} has no '{role}' field"
            ) from None


# ---------------------------------------------------------------------------
# Known firmware revisions
# ---------------------------------------------------------------------------

SCHEMA_V1 = TelemetrySchema(
    revision=1,
    field_names=(
        "percent_on",
        "set_point",
        "temperature",
        "temperature_filtered",
        "time",
    ),
)

SCHEMA_V2 = TelemetrySchema(
    revision=2,
    field_names=SCHEMA_V1.field_names
    + ("input_variance", "average_error", "score"),
)

# Fan speed was added as the third wire value in the last firmware.
SCHEMA_V3 = TelemetrySchema(
    revision=3,
    field_names=(
        "percent_on",
        "set_point",
        "fan_speed",
        "temperature",
        "temperature_filtered",
        "time",
        "input_variance",
        "average_error",
        "score",
    ),
)

SCHEMA_REVISIONS: Dict[int, TelemetrySchema] = {
    s.revision: s for s in (SCHEMA_V1, SCHEMA_V2, SCHEMA_V3)
}


def get_schema(revision: int) -> TelemetrySchema:
    """Return the built-in schema for *revision*.

    Raises ``KeyError`` for an unknown revision.
    """
    try:
        return SCHEMA_REVISIONS[revision]
    except KeyError:
        available = ", ".join(str(r) for r in sorted(SCHEMA_REVISIONS))
        raise KeyError(
            f"Unknown schema revision {revision}. Available: {available}"
        ) from None
