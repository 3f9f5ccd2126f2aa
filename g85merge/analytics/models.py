from dataclasses import dataclass

@dataclass
class MapSummary:
    """Container for the headline die counts of one wafer map."""
    rows: int
    columns: int
    total_dies: int          # Dies present in the grid
    pass_count: int
    defect_count: int
    reference_count: int
    null_count: int
    fail_code_count: int
    other_count: int         # Codes outside the fixed vocabulary
    yield_percent: float     # Pass / (Pass + Defect)

    @property
    def grid_size(self) -> int:
        return self.rows * self.columns
