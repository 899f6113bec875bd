"""Abstract base class for telemetry line readers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional


class DeviceDisconnected(Exception):
    """The link to the controller was lost mid-session."""


class LineReader(ABC):
    """Unified interface for a source of raw telemetry lines.

    Concrete implementations: ``SimulationReader`` (fixture-based) and
    ``ReplayReader`` (captured session log).
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the line source."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the line source."""

    @abstractmethod
    def is_connected(self) -> bool:
        """Return ``True`` if the source is open."""

    @abstractmethod
    async def read_line(self) -> Optional[str]:
        """Return the next raw line without its line terminator.

        Returns ``None`` once the source is cleanly exhausted and raises
        :class:`DeviceDisconnected` if the link drops.
        """

    @abstractmethod
    async def write_line(self, line: str) -> None:
        """Send one command line to the device."""
