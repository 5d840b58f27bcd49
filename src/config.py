"""Layout constants and options."""

from dataclasses import dataclass, fields

# Card size (3:4 ratio)
CARD_W = 100.0
CARD_H = 133.33

# Gaps are minimums; placement widens them to avoid overlaps
MIN_H_GAP = 56.0
MIN_COUPLE_GAP = 16.0
MIN_BLOCK_GAP = 120.0
MIN_CHILD_GAP = 36.0
MIN_V_GAP = 160.0
UNION_DY = 24.0

# Union marker (tiny diamond)
UNION_W = 16.0
UNION_H = 16.0

MARGIN = 60.0
EMPTY_WIDTH = 800.0
EMPTY_HEIGHT = 600.0

CROSSING_SWEEPS = 10
UPSTREAM_DEPTH = 3
MAX_OVERLAP_PASSES = 100
MAX_LEVEL_PASSES = 10


@dataclass(frozen=True)
class LayoutConfig:
    card_width: float = CARD_W
    card_height: float = CARD_H
    min_h_gap: float = MIN_H_GAP
    min_couple_gap: float = MIN_COUPLE_GAP
    min_block_gap: float = MIN_BLOCK_GAP
    min_child_gap: float = MIN_CHILD_GAP
    min_v_gap: float = MIN_V_GAP
    union_dy: float = UNION_DY
    union_width: float = UNION_W
    union_height: float = UNION_H
    margin: float = MARGIN
    crossing_sweeps: int = CROSSING_SWEEPS
    upstream_depth: int = UPSTREAM_DEPTH
    max_overlap_passes: int = MAX_OVERLAP_PASSES
    max_level_passes: int = MAX_LEVEL_PASSES

    @property
    def min_gap(self) -> float:
        """Smallest horizontal gap allowed between two cards that are not a couple."""
        return min(self.min_child_gap, self.min_h_gap)

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name: f.type for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                continue
            kwargs[key] = int(value) if known[key] in (int, "int") else float(value)
        return cls(**kwargs)
