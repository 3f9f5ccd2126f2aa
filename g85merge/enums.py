"""
Enum Definitions Module.

This module contains Enumeration classes for the fixed die status vocabulary
and the merge modes offered by the UI. Using enums instead of raw strings
improves code readability and reduces the risk of typos.
"""
from enum import Enum

class DieStatus(Enum):
    """Two-character bin codes with a fixed meaning in the merge rules."""
    PASS = "01"
    DEFECT = "EF"
    REFERENCE = "FA"
    NULL = "FF"
    FAIL_CODE = "FC"

    @classmethod
    def values(cls) -> list[str]:
        """Returns the string values of all enum members."""
        return [item.value for item in cls]

class MergeMode(Enum):
    """Enumeration for the merge shapes offered in the UI."""
    PAIRWISE = "Pairwise Merge"
    CONTROL_SCAN = "Control + Scan Overlay"
    SEQUENCE = "Sequential Merge"

    @classmethod
    def values(cls) -> list[str]:
        """Returns the string values of all enum members."""
        return [item.value for item in cls]
