"""Fixture-based simulation reader (no hardware required).

Loads scenarios from ``fixtures/simulation_scenarios.json`` and drives a
small first-order heater model, formatting each step the way the
controller firmware prints it.  Gaussian noise is applied to the
measured temperature so consecutive runs vary realistically.
"""

from __future__ import annotations

import asyncio
import json
import random
import statistics
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import structlog

from heater_link.frame_parser import FrameAccepted, parse_line
from heater_link.reader.base import DeviceDisconnected, LineReader
from heater_link.schemas import SCHEMA_V3, TelemetrySchema

logger = structlog.get_logger(__name__)

_FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"

# Heater model constants (per time unit).
_HEAT_GAIN = 0.08
_LOSS_RATE = 0.05
_FILTER_ALPHA = 0.3
_CONTROLLER_GAIN = 8.0


class SimulationReader(LineReader):
    """Produces synthetic telemetry lines from a JSON fixture scenario."""

    def __init__(
        self,
        scenario: str = "nominal",
        schema: TelemetrySchema = SCHEMA_V3,
        line_interval: float = 0.0,
    ) -> None:
        self._scenario_name = scenario
        self._schema = schema
        self._line_interval = line_interval
        self._scenario: Dict[str, Any] = {}
        self._lines: Optional[Iterator[str]] = None
        self._manual_percent_on: Optional[float] = None
        self._connected = False
        self.commands: List[str] = []

    # -- lifecycle ----------------------------------------------------------

    async def connect(self) -> None:
        scenarios = _load_scenarios()
        if self._scenario_name not in scenarios:
            available = ", ".join(sorted(scenarios))
            raise ValueError(
                f"Unknown simulation scenario '{self._scenario_name}'. "
                f"Available: {available}"
            )
        self._scenario = scenarios[self._scenario_name]
        self._lines = self._generate()
        self._manual_percent_on = None
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False
        self._lines = None

    def is_connected(self) -> bool:
        return self._connected

    # -- line I/O -----------------------------------------------------------

    async def read_line(self) -> Optional[str]:
        self._check_connected()
        if self._line_interval > 0:
            await asyncio.sleep(self._line_interval)
        line = next(self._lines, None)
        if line is not None:
            return line
        if self._scenario.get("end") == "disconnect":
            self._connected = False
            raise DeviceDisconnected(
                f"simulated link loss in scenario '{self._scenario_name}'"
            )
        return None

    async def write_line(self, line: str) -> None:
        self._check_connected()
        self.commands.append(line)
        outcome = parse_line(line, self._schema)
        if isinstance(outcome, FrameAccepted):
            self._manual_percent_on = outcome.frame.values[0]
            logger.info("sim_percent_on_set", percent_on=self._manual_percent_on)
        else:
            logger.warning("sim_command_ignored", line=line, reason=outcome.reason)

    # -- internal -----------------------------------------------------------

    def _check_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("SimulationReader is not connected")

    def _generate(self) -> Iterator[str]:
        sc = self._scenario
        yield from sc.get("prelude", [])

        events = sorted(sc.get("events", []), key=lambda e: e["at_time"])
        set_point = float(sc.get("set_point", 40.0))
        ambient = float(sc.get("ambient", 22.0))
        noise = float(sc.get("noise", 0.0))
        fan_speed = float(sc.get("fan_speed", 50.0))
        step = float(sc.get("time_step", 1.0))
        duration = float(sc.get("duration", 0.0))

        temperature = filtered = ambient
        percent_history: List[float] = []
        abs_errors: List[float] = []
        t = 0.0
        while t <= duration:
            while events and events[0]["at_time"] <= t:
                event = events.pop(0)
                yield event["line"]
                if event.get("stop", False):
                    return

            if self._manual_percent_on is not None:
                percent_on = self._manual_percent_on
            else:
                percent_on = _clamp(_CONTROLLER_GAIN * (set_point - filtered))

            measured = _apply_noise(temperature, noise)
            filtered += _FILTER_ALPHA * (measured - filtered)
            percent_history.append(percent_on)
            abs_errors.append(abs(set_point - filtered))

            average_error = statistics.fmean(abs_errors)
            if len(percent_history) > 1:
                input_variance = statistics.pvariance(percent_history)
                score = average_error + input_variance / 100.0
            else:
                input_variance = score = float("nan")

            yield self._format(
                {
                    "time": t,
                    "percent_on": percent_on,
                    "set_point": set_point,
                    "fan_speed": fan_speed,
                    "temperature": measured,
                    "temperature_filtered": filtered,
                    "input_variance": input_variance,
                    "average_error": average_error,
                    "score": score,
                }
            )

            temperature += step * (
                _HEAT_GAIN * percent_on - _LOSS_RATE * (temperature - ambient)
            )
            t = round(t + step, 6)

        yield from (event["line"] for event in events)

    def _format(self, values: Dict[str, float]) -> str:
        """Print a frame the way the firmware does (two decimals)."""
        return "[" + ",".join(
            f"{values[name]:.2f}" for name in self._schema.field_names
        ) + "]"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_scenarios_cache: Optional[Dict[str, Any]] = None


def _load_scenarios() -> Dict[str, Any]:
    global _scenarios_cache
    if _scenarios_cache is None:
        path = _FIXTURES_DIR / "simulation_scenarios.json"
        with open(path, encoding="utf-8") as fh:
            _scenarios_cache = json.load(fh)
    return _scenarios_cache


def _apply_noise(base: float, noise: float) -> float:
    """Apply Gaussian noise (std-dev = noise) to a base value."""
    if noise <= 0:
        return base
    return base + random.gauss(0, noise)


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))
