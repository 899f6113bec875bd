"""Heater Link -- telemetry line protocol for the temperature-control lab.

Parses the bracket-delimited telemetry frames sent by the heater
controller firmware and tracks the state of a device session (validated,
emergency, fatal disconnect).  Display, plotting and file logging are left
to the caller, which consumes the effects returned by ``SessionTracker``.
"""

__version__ = "0.1.0"
