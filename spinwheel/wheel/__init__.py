"""Prize table, weighted selector and rotation mapping."""
from .prize_table import PrizeEntry, PrizeTable
from .rotation import final_rotation, map_prize_to_rotation, prize_at_pointer, segment_midpoint
from .selector import cumulative_boundaries, select_prize

__all__ = [
    "PrizeEntry",
    "PrizeTable",
    "cumulative_boundaries",
    "final_rotation",
    "map_prize_to_rotation",
    "prize_at_pointer",
    "segment_midpoint",
    "select_prize",
]
