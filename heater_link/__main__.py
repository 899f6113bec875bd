"""CLI entry point: ``python -m heater_link [--replay PATH] [--scenario NAME]``."""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog


def _configure_logging(level: str, fmt: str) -> None:
    """Set up structlog with console or JSON rendering."""
    import logging

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
        stream=sys.stderr,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="heater_link",
        description="Telemetry link for the temperature-control lab controller",
    )
    parser.add_argument(
        "--replay",
        metavar="PATH",
        default=None,
        help="Replay a captured session log instead of simulating",
    )
    parser.add_argument(
        "--scenario",
        default=None,
        help="Simulation scenario name",
    )
    parser.add_argument(
        "--revision",
        type=int,
        default=None,
        help="Firmware telemetry schema revision",
    )
    parser.add_argument(
        "--legacy-decode",
        action="store_true",
        default=None,
        help="Decode unparseable fields as 0.0 like historical logs",
    )
    parser.add_argument(
        "--percent-on",
        default=None,
        help="Heater percent-on command to send once the device is validated",
    )
    args = parser.parse_args()

    # Load settings from env / .env file first, then override with CLI flags.
    from heater_link.command import CommandError, parse_percent_on
    from heater_link.config import LinkSettings

    settings = LinkSettings()
    if args.replay is not None:
        settings.line_source = args.replay
    if args.scenario is not None:
        settings.sim_scenario = args.scenario
    if args.revision is not None:
        settings.schema_revision = args.revision
    if args.legacy_decode is True:
        settings.legacy_field_decode = True

    percent_on = None
    if args.percent_on is not None:
        try:
            percent_on = parse_percent_on(args.percent_on)
        except CommandError as exc:
            parser.error(str(exc))

    _configure_logging(settings.log_level, settings.log_format)

    logger = structlog.get_logger("heater_link")
    logger.info(
        "link_starting",
        version=__import__("heater_link").__version__,
        mode="simulation" if settings.is_simulation else "replay",
        source=settings.line_source,
        scenario=settings.sim_scenario,
        schema_revision=settings.schema_revision,
        legacy_field_decode=settings.legacy_field_decode,
    )

    from heater_link.schemas import SCHEMA_REVISIONS
    from heater_link.session_loop import run_session

    if settings.schema_revision not in SCHEMA_REVISIONS:
        parser.error(f"unknown schema revision {settings.schema_revision}")

    try:
        tracker = asyncio.run(run_session(settings, percent_on=percent_on))
    except KeyboardInterrupt:
        logger.info("link_interrupted")
        sys.exit(0)

    if tracker.fatal:
        sys.exit(1)


if __name__ == "__main__":
    main()
