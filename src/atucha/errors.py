from __future__ import annotations


class AtuchaError(Exception):
    """Base class for errors raised by the visualization core."""


class ProbeError(AtuchaError):
    """Capability probing failed."""


class UnsupportedRenderingError(ProbeError):
    """No compatible rendering context could be created.

    Fatal to the 3D path only: callers are expected to switch to the non-3D
    presentation rather than crash.
    """


class ConfigurationError(AtuchaError, ValueError):
    """A command was rejected because its arguments are unusable."""


class InvalidWaypointListError(ConfigurationError):
    pass


__all__ = [
    "AtuchaError",
    "ProbeError",
    "UnsupportedRenderingError",
    "ConfigurationError",
    "InvalidWaypointListError",
]
