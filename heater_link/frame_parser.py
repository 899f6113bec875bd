"""Parse bracket-delimited telemetry lines into ``Frame`` values.

The controller firmware writes one frame per line::

    [v0,v1,...,v{N-1}]

where ``N`` is the field count of the active :class:`TelemetrySchema`.
A line containing ``!`` anywhere is an out-of-band emergency message
(e.g. an overheat report) rather than a frame.

Parsing is all-or-nothing and stateless, so :func:`parse_line` is safe to
call from any thread.  :func:`parse_lines` fans a batch out over an
executor and hands the outcomes back in input order.
"""

from __future__ import annotations

import math
import re
from concurrent.futures import Executor
from dataclasses import dataclass
from functools import partial
from typing import Iterable, List, Literal, Optional, Sequence, Tuple, Union

from heater_link.schemas import TelemetrySchema

RejectReason = Literal[
    "malformed_brackets",
    "field_count_mismatch",
    "emergency_message",
    "malformed_field",
]

EMERGENCY_MARKER = "!"

# Locale-independent decimal / nan / inf literal, C ``strtof`` style.
# ASCII digits only; the wire format is plain ASCII.
FLOAT_LITERAL_RE = re.compile(
    r"[+-]?(?:inf(?:inity)?|nan|(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)",
    re.IGNORECASE | re.ASCII,
)
_ASCII_DIGITS = frozenset("0123456789")

# ---------------------------------------------------------------------------
# Output dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Frame:
    """One decoded telemetry sample, values in wire order.

    Values may be ``NaN`` or infinite; the firmware sends ``nan`` while a
    filter has not settled yet.
    """

    values: Tuple[float, ...]

    def get(self, schema: TelemetrySchema, role: str) -> float:
        return self.values[schema.index(role)]


@dataclass(frozen=True)
class FrameAccepted:
    frame: Frame


@dataclass(frozen=True)
class FrameRejected:
    """A line that did not yield a frame.

    ``line`` is the raw input; for emergency messages it is the message
    text to surface verbatim.
    """

    reason: RejectReason
    line: str
    detail: str = ""

    @property
    def is_emergency(self) -> bool:
        return self.reason == "emergency_message"


ParseOutcome = Union[FrameAccepted, FrameRejected]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_line(
    line: str,
    schema: TelemetrySchema,
    *,
    legacy_field_decode: bool = False,
) -> ParseOutcome:
    """Parse one raw telemetry line against *schema*.

    A frame needs exactly one ``[`` and one ``]`` with the ``[`` first;
    any other bracket layout, including ``]...[``, is rejected with
    ``malformed_brackets``.  Text before the ``[`` is ignored.

    Parameters
    ----------
    line:
        Untrusted text as read from the wire.
    schema:
        Expected frame layout.
    legacy_field_decode:
        Reproduce historical logs: each field is read with ``strtof``
        prefix semantics and a field with no numeric prefix becomes
        ``0.0``.  When ``False`` such a field rejects the whole line
        with ``malformed_field``.
    """
    if EMERGENCY_MARKER in line:
        return FrameRejected("emergency_message", line)

    num_open, num_close, num_commas = _scan_structure(line)
    if num_open != 1 or num_close != 1 or line.index("[") > line.index("]"):
        return FrameRejected(
            "malformed_brackets",
            line,
            f"expected one '[' and one ']', got {num_open} and {num_close}",
        )

    # The closing bracket terminates the final value.
    num_values = num_commas + num_close
    if num_values != schema.field_count:
        return FrameRejected(
            "field_count_mismatch",
            line,
            f"expected {schema.field_count} values, got {num_values}",
        )

    values: List[float] = []
    pos = line.index("[") + 1
    for i in range(schema.field_count):
        end = _slot_end(line, pos)
        value = _decode_slot(line[pos:end], legacy=legacy_field_decode)
        if value is None:
            return FrameRejected(
                "malformed_field",
                line,
                f"field {i} ({schema.field_names[i]}) is not numeric: "
                f"{line[pos:end]!r}",
            )
        values.append(value)
        pos = end + 1

    return FrameAccepted(Frame(tuple(values)))


def parse_lines(
    lines: Iterable[str],
    schema: TelemetrySchema,
    *,
    executor: Optional[Executor] = None,
    legacy_field_decode: bool = False,
) -> List[ParseOutcome]:
    """Parse a batch of lines, returning outcomes in input order.

    With an *executor* the lines are parsed concurrently; ordering is
    preserved either way so the result can be fed to a
    ``SessionTracker`` directly.
    """
    parse = partial(
        parse_line, schema=schema, legacy_field_decode=legacy_field_decode
    )
    if executor is None:
        return [parse(line) for line in lines]
    return list(executor.map(parse, lines))


def format_frame(values: Sequence[float]) -> str:
    """Render *values* in canonical wire notation.

    ``repr`` keeps every float exact, so the output parses back to the
    same values.
    """
    return "[" + ",".join(repr(float(v)) for v in values) + "]"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _scan_structure(line: str) -> Tuple[int, int, int]:
    """Count ``[``, ``]`` and ``,`` in a single pass."""
    num_open = num_close = num_commas = 0
    for ch in line:
        if ch == "[":
            num_open += 1
        elif ch == "]":
            num_close += 1
        elif ch == ",":
            num_commas += 1
    return num_open, num_close, num_commas


def _slot_end(line: str, pos: int) -> int:
    """Index of the next ``,`` or ``]`` at or after *pos* (or ``len(line)``)."""
    end = pos
    while end < len(line) and line[end] not in ",]":
        end += 1
    return end


def _decode_slot(raw: str, *, legacy: bool) -> Optional[float]:
    """Decode one field.  Returns ``None`` only for a strict-mode failure."""
    text = raw.strip()
    if not text:
        return 0.0

    looks_numeric = any(ch in _ASCII_DIGITS for ch in text)

    if legacy:
        m = FLOAT_LITERAL_RE.match(text)
    else:
        m = FLOAT_LITERAL_RE.fullmatch(text)
    value = float(m.group(0)) if m else None

    if value is not None and (looks_numeric or not math.isfinite(value)):
        return value
    return 0.0 if legacy else None
