"""Exception classes raised by telnetlite."""

__all__ = ('TelnetError', 'TransportError', 'ProtocolError', 'ConfigError')


class TelnetError(Exception):
    """Base class of all telnetlite errors."""


class TransportError(TelnetError):
    """
    The connection could not be made, was reset, or refused a write.

    A session never recovers from this error: it is reported once to the
    display and the session is closed.
    """

    def __init__(self, message, exc=None):
        super().__init__(message)
        #: underlying :class:`OSError`, when known.
        self.exc = exc


class ProtocolError(TelnetError, ValueError):
    """A negotiation or subnegotiation sequence could not be understood."""


class ConfigError(TelnetError, ValueError):
    """Invalid host or port, rejected before connecting."""
