"""
Public entry points for code outside the merge core (upload handling, storage, UI).

Only WaferMap values and plain text cross this boundary.
"""
from g85merge.core.errors import AlignmentError, FormatError, InputError, WaferMapError
from g85merge.core.models import WaferMap
from g85merge.io.parser import parse
from g85merge.io.serializer import serialize
from g85merge.merge.engine import merge_control_and_scan, merge_sequence, merge_two

__all__ = [
    "WaferMap",
    "WaferMapError",
    "FormatError",
    "AlignmentError",
    "InputError",
    "parse",
    "serialize",
    "merge_two",
    "merge_control_and_scan",
    "merge_sequence",
]
