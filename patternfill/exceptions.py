"""
Exceptions raised by the pattern fill pipeline.
"""


class PatternFillError(Exception):
    """Base class for all pattern fill errors."""


class ConfigurationError(PatternFillError, ValueError):
    """
    Raised when pattern parameters cannot produce a valid tessellation.

    Raised before any geometry work is done, e.g. for a non-positive spacing
    or aspect ratio.
    """


class InvalidGeometryError(PatternFillError):
    """
    Raised when the boundary geometry cannot be clipped.

    Self-intersecting boundaries and failures inside the geometry engine end
    up here, chained from the original exception.
    """
