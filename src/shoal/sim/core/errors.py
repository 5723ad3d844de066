"""Shoal simulator exception hierarchy.

Every failure the simulator surfaces derives from :class:`ShoalError`, so
callers can catch the whole family or a single kind.
"""


class ShoalError(Exception):
    """Root of all shoal simulator exceptions."""


class SimulatorCreateError(ShoalError):
    """The simulator could not be set up (pipeline or initial population)."""


class SimulatorRunError(ShoalError):
    """A tick failed to execute; the simulator instance must not be reused."""


class ChannelClosedError(ShoalError):
    """The counterpart of a handshake channel is gone."""


class ConfigurationError(ShoalError):
    """Invalid or missing configuration."""


class UpdateCheckError(ShoalError):
    """The latest release could not be determined."""
