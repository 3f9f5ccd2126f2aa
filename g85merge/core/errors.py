"""
Error types raised by the parser, the alignment engine and the merge engine.

All of them derive from ValueError so callers that already guard file loading
with `except ValueError` keep working.
"""


class WaferMapError(ValueError):
    """Base class for wafer map processing errors."""


class FormatError(WaferMapError):
    """The input text is not well-formed XML or lacks the root <Map> element."""


class AlignmentError(WaferMapError):
    """No alignment fiducial could be found between two maps."""


class InputError(WaferMapError):
    """A merge was requested with an unusable set of input maps."""
