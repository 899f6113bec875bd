"""Main asyncio read loop: line source -> parser -> tracker -> sink."""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import List, Optional

import structlog

from heater_link.command import encode_command
from heater_link.config import LinkSettings
from heater_link.effect_sink import EffectSink, LoggingSink
from heater_link.effects import Effect, EnableInput
from heater_link.frame_parser import parse_line
from heater_link.reader.base import DeviceDisconnected, LineReader
from heater_link.schemas import get_schema
from heater_link.session_tracker import SessionTracker

logger = structlog.get_logger(__name__)


def create_reader(settings: LinkSettings) -> LineReader:
    """Factory: return the right line source for the current config."""
    schema = get_schema(settings.schema_revision)
    if settings.is_simulation:
        from heater_link.reader.simulation import SimulationReader

        return SimulationReader(
            scenario=settings.sim_scenario,
            schema=schema,
            line_interval=settings.sim_line_interval_seconds,
        )

    from heater_link.reader.replay import ReplayReader

    return ReplayReader(settings.line_source)


async def run_session(
    settings: LinkSettings,
    *,
    reader: Optional[LineReader] = None,
    sink: Optional[EffectSink] = None,
    percent_on: Optional[float] = None,
) -> SessionTracker:
    """Run one device session until the source ends, drops, or a signal.

    Parameters
    ----------
    settings:
        Fully-resolved link configuration.
    reader:
        Line source; built from *settings* when omitted.
    sink:
        Effect consumer; defaults to :class:`LoggingSink`.
    percent_on:
        Already validated heater command, sent once the session is
        validated (input is only enabled after the first good frame).

    Returns the tracker so callers can inspect the final session state.
    """
    shutdown_event = asyncio.Event()

    # --- signal handling ---------------------------------------------------
    def _request_shutdown() -> None:
        logger.info("shutdown_requested")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    handled_signals = []
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _request_shutdown)
                handled_signals.append(sig)
            except (RuntimeError, ValueError):
                # Not the main thread: leave default signal behaviour.
                break

    tracker = SessionTracker.from_settings(settings)
    reader = reader if reader is not None else create_reader(settings)
    sink = sink if sink is not None else LoggingSink()

    try:
        await reader.connect()
        logger.info(
            "reader_connected",
            mode="simulation" if settings.is_simulation else "replay",
            source=settings.line_source,
            schema_revision=settings.schema_revision,
        )
        await _loop(reader, tracker, sink, settings, shutdown_event, percent_on)
    finally:
        await reader.disconnect()
        for sig in handled_signals:
            loop.remove_signal_handler(sig)

    state = tracker.state
    logger.info(
        "session_finished",
        validated=state.validated,
        fatal=state.fatal,
        frames_accepted=state.frames_accepted,
        frames_rejected=state.frames_rejected,
        emergency_messages=state.emergency_messages,
    )
    return tracker


async def _loop(
    reader: LineReader,
    tracker: SessionTracker,
    sink: EffectSink,
    settings: LinkSettings,
    shutdown_event: asyncio.Event,
    percent_on: Optional[float],
) -> None:
    """Core read-parse-apply loop.  Lines are applied strictly in order."""
    pending_command = percent_on

    while not shutdown_event.is_set():
        try:
            line = await reader.read_line()
        except DeviceDisconnected as exc:
            logger.warning("link_lost", reason=str(exc))
            _dispatch(sink, tracker.apply_disconnect())
            return

        if line is None:
            logger.info("line_source_exhausted")
            return

        outcome = parse_line(
            line,
            tracker.schema,
            legacy_field_decode=settings.legacy_field_decode,
        )
        effects = tracker.apply(outcome)
        _dispatch(sink, effects)

        if pending_command is not None and any(
            isinstance(effect, EnableInput) for effect in effects
        ):
            command = encode_command(pending_command, tracker.schema)
            try:
                await reader.write_line(command)
                logger.info("command_sent", command=command)
            except Exception:
                logger.exception("command_send_failed", command=command)
            pending_command = None


def _dispatch(sink: EffectSink, effects: List[Effect]) -> None:
    for effect in effects:
        try:
            sink.handle(effect)
        except Exception:
            logger.exception("effect_dispatch_failed", kind=effect.kind)
