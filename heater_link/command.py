"""Operator command validation and encoding.

The only command the firmware understands is a new heater percent-on
value.  It travels in the same bracket notation as telemetry: the value
in the first slot and empty placeholders for the rest of the schema
width, e.g. ``[55.0,,,,,,,,]`` for a nine-field firmware.
"""

from __future__ import annotations

from heater_link.frame_parser import FLOAT_LITERAL_RE
from heater_link.schemas import TelemetrySchema

PERCENT_ON_MIN = 0.0
PERCENT_ON_MAX = 100.0


class CommandError(ValueError):
    """Raised for an operator command the device must not receive."""


def parse_percent_on(text: str) -> float:
    """Validate operator input for the percent-on command.

    Spaces are ignored.  Raises :class:`CommandError` when the value is
    empty, not a finite number, or outside 0-100.
    """
    cleaned = text.replace(" ", "")
    if not cleaned:
        raise CommandError("The percent on value is empty")
    if FLOAT_LITERAL_RE.fullmatch(cleaned) is None:
        raise CommandError("The percent on value is not numerical")
    value = float(cleaned)
    # NaN fails both comparisons, so test the accepted range directly.
    if not (PERCENT_ON_MIN <= value <= PERCENT_ON_MAX):
        raise CommandError("The percent on value is out of range")
    return value


def encode_command(percent_on: float, schema: TelemetrySchema) -> str:
    """Encode a percent-on command for a device running *schema*."""
    if not (PERCENT_ON_MIN <= percent_on <= PERCENT_ON_MAX):
        raise CommandError("The percent on value is out of range")
    placeholders = "," * (schema.field_count - 1)
    return f"[{float(percent_on)!r}{placeholders}]"
