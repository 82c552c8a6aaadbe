"""
Error Types
===========

Exception hierarchy shared across the package.

Per-client failures never surface as these types; they are handled where
the client is served. These exceptions are for conditions that stop the
whole server.
"""


class TelecineError(Exception):
    """Base class for all telecine errors."""
    pass


class ConfigError(TelecineError):
    """Raised when configuration is missing or invalid."""
    pass


class PlaylistError(TelecineError):
    """Raised when no playable media can be found."""
    pass


class DecoderError(TelecineError):
    """Raised when the external decoder cannot be spawned or fails."""
    pass
