"""
Layout engine: canvas, initial placement and force-directed layouts.
"""

from .placement import Canvas, random_placement, circular_placement
from .force_directed import (
    LayoutResult,
    spring_embedder,
    fruchterman_reingold,
    kamada_kawai
)

LAYOUT_ALGORITHMS = ["spring", "fruchterman_reingold", "kamada_kawai"]
PLACEMENTS = ["random", "circular", "current"]
