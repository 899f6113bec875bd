"""Telemetry line source abstraction layer.

Provides ``LineReader`` ABC with two concrete implementations:

* ``SimulationReader`` -- fixture-driven heater model, no hardware required.
* ``ReplayReader``     -- replays a captured session log line by line.
"""

from heater_link.reader.base import DeviceDisconnected, LineReader

__all__ = ["DeviceDisconnected", "LineReader"]
