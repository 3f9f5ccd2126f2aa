"""
Domain Models for G85 Wafer Maps.
Encapsulates the die grid, its header metadata and the derived defect index.
"""
from dataclasses import dataclass, field, replace
import logging
from typing import Dict, Iterator, List, NamedTuple, Optional
from g85merge.core.config import (
    NULL_STATUS, INDEXED_STATUSES, DEFECT_DESCRIPTIONS
)
from g85merge.core.errors import FormatError

logger = logging.getLogger(__name__)


class Coord(NamedTuple):
    """Grid position of a die: x is the column, y the row (top-to-bottom)."""
    x: int
    y: int

    def shifted(self, offset: "Offset") -> "Coord":
        return Coord(self.x + offset.dx, self.y + offset.dy)


class Offset(NamedTuple):
    """Integer translation mapping a coordinate of one map onto another."""
    dx: int
    dy: int


@dataclass(frozen=True)
class DefectInfo:
    """Descriptor stored in the defect index for EF and FA dies."""
    type: str
    additional_info: str
    # 1-based index of the map that contributed the defect in a sequence merge
    source: Optional[int] = None

    @classmethod
    def for_status(cls, status: str) -> "DefectInfo":
        return cls(type=status, additional_info=DEFECT_DESCRIPTIONS.get(status, status))


@dataclass(frozen=True)
class BinDefinition:
    code: str
    quality: Optional[str] = None
    description: Optional[str] = None
    count: Optional[str] = None


@dataclass(frozen=True)
class ReferenceDevice:
    """Labelled reference-device position from the <ReferenceDevice> element."""
    x: Optional[str]
    y: Optional[str]


@dataclass(frozen=True)
class ValidationReport:
    """Counts of entries dropped when a merged map is trimmed to its grid."""
    dropped_dies: int = 0
    dropped_defects: int = 0

    @property
    def dropped(self) -> bool:
        return bool(self.dropped_dies or self.dropped_defects)


@dataclass
class WaferMap:
    """
    In-memory representation of one G85 wafer map.

    `dies` is authoritative; `defects` is an index over its EF/FA entries.
    Absent coordinates read as the null bin "FF".
    """
    header: Dict[str, str] = field(default_factory=dict)
    map_attributes: Dict[str, str] = field(default_factory=dict)
    reference_device: Optional[ReferenceDevice] = None
    bins: List[BinDefinition] = field(default_factory=list)
    dies: Dict[Coord, str] = field(default_factory=dict)
    defects: Dict[Coord, DefectInfo] = field(default_factory=dict)
    # Set on merge results only; not part of map equality.
    validation: Optional[ValidationReport] = field(default=None, compare=False, repr=False)

    # --- Grid Extents ---

    def _extent(self, name: str) -> int:
        raw = self.header.get(name)
        if raw is None or not str(raw).strip():
            raise FormatError(f"Header attribute '{name}' is missing.")
        try:
            return int(str(raw).strip())
        except ValueError:
            raise FormatError(f"Header attribute '{name}' is not an integer: {raw!r}")

    @property
    def rows(self) -> int:
        return self._extent("Rows")

    @property
    def columns(self) -> int:
        return self._extent("Columns")

    def in_bounds(self, coord: Coord) -> bool:
        return 0 <= coord.x < self.columns and 0 <= coord.y < self.rows

    # --- Die Access ---

    def status_at(self, coord: Coord) -> str:
        return self.dies.get(coord, NULL_STATUS)

    def coords_with_status(self, status: str) -> List[Coord]:
        return [coord for coord, code in self.dies.items() if code == status]

    def iter_grid(self) -> Iterator[Coord]:
        """Yields every declared grid position row by row."""
        for y in range(self.rows):
            for x in range(self.columns):
                yield Coord(x, y)

    def set_die(self, coord: Coord, status: str, info: Optional[DefectInfo] = None) -> None:
        """Writes a die status and keeps the defect index in step with it."""
        self.dies[coord] = status
        if status in INDEXED_STATUSES:
            self.defects[coord] = info if info is not None else DefectInfo.for_status(status)
        else:
            self.defects.pop(coord, None)

    # --- Copies ---

    def copy(self) -> "WaferMap":
        """Returns a copy whose containers can be edited without touching this map."""
        return WaferMap(
            header=dict(self.header),
            map_attributes=dict(self.map_attributes),
            reference_device=self.reference_device,
            bins=list(self.bins),
            dies=dict(self.dies),
            defects=dict(self.defects),
        )

    def with_metadata(
        self,
        header: Optional[Dict[str, str]] = None,
        map_attributes: Optional[Dict[str, str]] = None
    ) -> "WaferMap":
        """Returns a new map sharing this grid but carrying replacement metadata."""
        return replace(
            self,
            header=dict(header) if header is not None else dict(self.header),
            map_attributes=dict(map_attributes) if map_attributes is not None else dict(self.map_attributes),
            bins=list(self.bins),
            dies=dict(self.dies),
            defects=dict(self.defects),
        )

    def translated(self, offset: Offset) -> "WaferMap":
        """Returns a copy with every die and defect moved by the offset."""
        moved = self.copy()
        moved.dies = {coord.shifted(offset): status for coord, status in self.dies.items()}
        moved.defects = {coord.shifted(offset): info for coord, info in self.defects.items()}
        return moved
