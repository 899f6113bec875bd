"""Session state machine for a heater controller connection.

Consumes parse outcomes in arrival order and decides what the
presentation layer should do with each of them.  A session starts
unvalidated; the first accepted frame proves the device runs a firmware
that speaks this protocol.  A disconnect is terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import structlog

from heater_link.config import LinkSettings
from heater_link.effects import (
    ClearEmergency,
    DisplayRow,
    Effect,
    EmergencyText,
    EnableInput,
    FatalDisconnect,
    FinalScore,
    ParseErrorDiagnostic,
    PersistRow,
    RaiseAlarm,
    WrongProgramWarning,
)
from heater_link.frame_parser import (
    Frame,
    FrameAccepted,
    FrameRejected,
    ParseOutcome,
)
from heater_link.ranking import (
    DEFAULT_RANKS,
    RANK_TABLES,
    RankTable,
    rank,
    validate_rank_table,
)
from heater_link.schemas import TelemetrySchema, get_schema

logger = structlog.get_logger(__name__)

# Always shown, in display order.
_BASE_DISPLAY_ROLES = (
    "time",
    "percent_on",
    "temperature",
    "temperature_filtered",
    "set_point",
    "fan_speed",
)
# Shown once time passes ``error_display_time``.
_ERROR_DISPLAY_ROLES = ("average_error", "input_variance")


@dataclass
class SessionState:
    """Accumulated connection state.  ``validated`` and ``fatal`` only go up."""

    validated: bool = False
    fatal: bool = False
    last_frame: Optional[Frame] = None
    frames_accepted: int = 0
    frames_rejected: int = 0
    emergency_messages: int = 0


class SessionTracker:
    """Tracks one device session and emits effects for each input.

    Parameters
    ----------
    schema:
        Frame layout of the connected firmware.
    error_display_time:
        Average error and input variance are shown once the frame time
        exceeds this value.
    score_display_time:
        Score and rank are shown once the frame time exceeds this value.
    rank_table:
        Tier table for :func:`heater_link.ranking.rank`.
    overheat_marker:
        Emergency messages containing this text (case-insensitive) raise
        the alarm and report the final score.
    """

    def __init__(
        self,
        schema: TelemetrySchema,
        *,
        error_display_time: float = 18.0,
        score_display_time: float = 29.0,
        rank_table: RankTable = DEFAULT_RANKS,
        overheat_marker: str = "overheat",
    ) -> None:
        if score_display_time < error_display_time:
            raise ValueError(
                "score_display_time must not be lower than error_display_time"
            )
        if not overheat_marker:
            raise ValueError("overheat_marker must not be empty")
        self._schema = schema
        self._error_display_time = error_display_time
        self._score_display_time = score_display_time
        self._rank_table = validate_rank_table(rank_table)
        self._overheat_marker = overheat_marker.lower()
        self._state = SessionState()

    @classmethod
    def from_settings(cls, settings: LinkSettings) -> "SessionTracker":
        return cls(
            get_schema(settings.schema_revision),
            error_display_time=settings.error_display_time,
            score_display_time=settings.score_display_time,
            rank_table=RANK_TABLES[settings.rank_table],
            overheat_marker=settings.overheat_marker,
        )

    # -- read-only views ----------------------------------------------------

    @property
    def schema(self) -> TelemetrySchema:
        return self._schema

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def validated(self) -> bool:
        return self._state.validated

    @property
    def fatal(self) -> bool:
        return self._state.fatal

    # -- transitions --------------------------------------------------------

    def apply(self, outcome: ParseOutcome) -> List[Effect]:
        """Feed one parse outcome.  No-op once the session is fatal."""
        if self._state.fatal:
            return []
        if isinstance(outcome, FrameAccepted):
            return self._accept(outcome.frame)
        if outcome.is_emergency:
            return self._emergency(outcome.line)
        return self._reject(outcome)

    def apply_disconnect(self) -> List[Effect]:
        """Mark the session fatal.  Only the first call emits an effect."""
        if self._state.fatal:
            return []
        self._state.fatal = True
        logger.error(
            "device_disconnected",
            frames_accepted=self._state.frames_accepted,
            frames_rejected=self._state.frames_rejected,
        )
        return [FatalDisconnect()]

    # -- internal -----------------------------------------------------------

    def _accept(self, frame: Frame) -> List[Effect]:
        state = self._state
        effects: List[Effect] = []

        if not state.validated:
            state.validated = True
            logger.info("session_validated", schema_revision=self._schema.revision)
            effects += [EnableInput(), ClearEmergency()]

        time = frame.get(self._schema, "time")
        if state.last_frame is not None:
            previous = state.last_frame.get(self._schema, "time")
            if time < previous:
                logger.warning("frame_time_regressed", time=time, previous=previous)

        state.last_frame = frame
        state.frames_accepted += 1

        effects.append(self._display_row(frame, time))
        effects.append(PersistRow(tuple(f"{v:.2f}" for v in frame.values)))
        return effects

    def _display_row(self, frame: Frame, time: float) -> DisplayRow:
        schema = self._schema
        fields: Dict[str, float] = {
            role: frame.get(schema, role)
            for role in _BASE_DISPLAY_ROLES
            if schema.has_role(role)
        }
        if time > self._error_display_time:
            for role in _ERROR_DISPLAY_ROLES:
                if schema.has_role(role):
                    fields[role] = frame.get(schema, role)

        tier: Optional[str] = None
        if time > self._score_display_time and schema.has_role("score"):
            score = frame.get(schema, "score")
            fields["score"] = score
            tier = rank(score, self._rank_table)
        return DisplayRow(fields=fields, rank=tier)

    def _reject(self, outcome: FrameRejected) -> List[Effect]:
        self._state.frames_rejected += 1
        logger.debug(
            "frame_rejected",
            reason=outcome.reason,
            detail=outcome.detail,
            validated=self._state.validated,
        )
        effects: List[Effect] = [
            ParseErrorDiagnostic(outcome.reason, outcome.line, outcome.detail)
        ]
        if not self._state.validated:
            effects.append(WrongProgramWarning())
        return effects

    def _emergency(self, text: str) -> List[Effect]:
        self._state.emergency_messages += 1
        effects: List[Effect] = [EmergencyText(text)]
        if self._overheat_marker not in text.lower():
            logger.warning("emergency_message", text=text)
            return effects

        score, tier = self._final_score()
        logger.error("overheat_alarm", text=text, score=score, rank=tier)
        effects += [RaiseAlarm(text), FinalScore(score, tier)]
        return effects

    def _final_score(self) -> Tuple[Optional[float], Optional[str]]:
        frame = self._state.last_frame
        if frame is None or not self._schema.has_role("score"):
            return None, None
        score = frame.get(self._schema, "score")
        return score, rank(score, self._rank_table)
