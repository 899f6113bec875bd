"""Consumers for the effects emitted by ``SessionTracker``.

The GUI, plot and spreadsheet writers of a full application plug in
here.  This package ships a structured-logging sink and an in-memory
recorder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import fields as dataclass_fields
from typing import Any, Dict, List, Mapping

import structlog

from heater_link.effects import Effect

logger = structlog.get_logger(__name__)


class EffectSink(ABC):
    """Receives effects one at a time, in the order they were emitted."""

    @abstractmethod
    def handle(self, effect: Effect) -> None:
        """Act on a single effect."""


class LoggingSink(EffectSink):
    """Writes every effect as a structured log event named after its kind."""

    def handle(self, effect: Effect) -> None:
        fields = _event_fields(effect)
        if effect.kind in ("fatal_disconnect", "raise_alarm"):
            logger.error(effect.kind, **fields)
        elif effect.kind in ("parse_error", "persist_row"):
            logger.debug(effect.kind, **fields)
        else:
            logger.info(effect.kind, **fields)


def _event_fields(effect: Effect) -> Dict[str, Any]:
    """Effect attributes as log context; mappings become plain dicts."""
    context: Dict[str, Any] = {}
    for f in dataclass_fields(effect):
        value = getattr(effect, f.name)
        context[f.name] = dict(value) if isinstance(value, Mapping) else value
    return context


class RecordingSink(EffectSink):
    """Keeps effects in memory, e.g. for a headless run or a test."""

    def __init__(self) -> None:
        self.effects: List[Effect] = []

    def handle(self, effect: Effect) -> None:
        self.effects.append(effect)

    def kinds(self) -> List[str]:
        return [effect.kind for effect in self.effects]

    def of_kind(self, kind: str) -> List[Effect]:
        return [effect for effect in self.effects if effect.kind == kind]
