"""Effects returned by ``SessionTracker`` for the presentation layer.

The tracker performs no I/O; it returns a list of these instructions and
the caller (GUI, logger, file writer) acts on them in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import ClassVar, Mapping, Optional, Tuple, Union

WRONG_PROGRAM_MESSAGE = "Possible incorrect device firmware uploaded."
FATAL_DISCONNECT_MESSAGE = (
    "Fatal Error, device disconnected. "
    "Close and restart the application to continue."
)


@dataclass(frozen=True)
class EnableInput:
    """The device speaks the protocol; operator commands may be sent."""

    kind: ClassVar[str] = "enable_input"


@dataclass(frozen=True)
class ClearEmergency:
    kind: ClassVar[str] = "clear_emergency"


@dataclass(frozen=True)
class DisplayRow:
    """Values to show for an accepted frame.

    ``fields`` maps role name to value and only holds the roles that are
    visible at this point of the session (see the time gates on
    ``SessionTracker``).  ``rank`` is set once the score is visible.
    ``fields`` is stored as a read-only copy.
    """

    kind: ClassVar[str] = "display_row"

    fields: Mapping[str, float] = field(default_factory=dict)
    rank: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def __hash__(self) -> int:
        return hash((frozenset(self.fields.items()), self.rank))


@dataclass(frozen=True)
class PersistRow:
    """One storage row: every frame value in wire order, two decimals."""

    kind: ClassVar[str] = "persist_row"

    values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ParseErrorDiagnostic:
    kind: ClassVar[str] = "parse_error"

    reason: str
    line: str
    detail: str = ""


@dataclass(frozen=True)
class WrongProgramWarning:
    kind: ClassVar[str] = "wrong_program_warning"

    message: str = WRONG_PROGRAM_MESSAGE


@dataclass(frozen=True)
class EmergencyText:
    kind: ClassVar[str] = "emergency_text"

    text: str


@dataclass(frozen=True)
class RaiseAlarm:
    kind: ClassVar[str] = "raise_alarm"

    text: str


@dataclass(frozen=True)
class FinalScore:
    """Score at the moment the run ended on an overheat.

    Both fields are ``None`` when no frame carrying a score was seen.
    """

    kind: ClassVar[str] = "final_score"

    score: Optional[float] = None
    rank: Optional[str] = None


@dataclass(frozen=True)
class FatalDisconnect:
    kind: ClassVar[str] = "fatal_disconnect"

    message: str = FATAL_DISCONNECT_MESSAGE


Effect = Union[
    EnableInput,
    ClearEmergency,
    DisplayRow,
    PersistRow,
    ParseErrorDiagnostic,
    WrongProgramWarning,
    EmergencyText,
    RaiseAlarm,
    FinalScore,
    FatalDisconnect,
]
