"""
Drawing canvas and initial vertex placement.
"""

from dataclasses import dataclass
import math
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from ..common.exceptions import ConfigurationError

Position = Tuple[float, float]


@dataclass(frozen=True)
class Canvas:
    """
    Rectangular drawing area with an inner margin.

    Every coordinate a layout produces lies within
    ``[margin, width - margin] x [margin, height - margin]``.

    Examples
    --------
    >>> Canvas(100, 100, 10).clamp(-5.0, 200.0)
    (10.0, 90.0)
    """

    width: float = 800.0
    height: float = 600.0
    margin: float = 20.0

    def __post_init__(self) -> None:
        if self.width <= 2 * self.margin or self.height <= 2 * self.margin:
            raise ConfigurationError(
                f"Canvas {self.width}x{self.height} leaves no room inside a margin of {self.margin}",
                parameter="margin",
                value=self.margin
            )

    @property
    def left(self) -> float:
        return self.margin

    @property
    def right(self) -> float:
        return self.width - self.margin

    @property
    def top(self) -> float:
        return self.margin

    @property
    def bottom(self) -> float:
        return self.height - self.margin

    @property
    def center(self) -> Position:
        return self.width / 2.0, self.height / 2.0

    @property
    def scale(self) -> float:
        """Side of the largest square fitting inside the margins."""
        return min(self.width, self.height) - 2 * self.margin

    @property
    def area(self) -> float:
        return (self.right - self.left) * (self.bottom - self.top)

    def clamp(self, x: float, y: float) -> Position:
        return (
            float(min(max(x, self.left), self.right)),
            float(min(max(y, self.top), self.bottom))
        )

    def clamp_array(self, coords: np.ndarray) -> np.ndarray:
        """Clamp an ``(N, 2)`` coordinate array in place and return it."""
        np.clip(coords[:, 0], self.left, self.right, out=coords[:, 0])
        np.clip(coords[:, 1], self.top, self.bottom, out=coords[:, 1])
        return coords

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.top <= y <= self.bottom

    def random_point(self, rng: np.random.Generator) -> Position:
        return (
            float(rng.uniform(self.left, self.right)),
            float(rng.uniform(self.top, self.bottom))
        )


def random_placement(
    names: Sequence[int],
    canvas: Canvas,
    seed: Optional[int] = None
) -> Dict[int, Position]:
    """Uniformly random positions inside the canvas."""
    rng = np.random.default_rng(seed)
    return {name: canvas.random_point(rng) for name in names}


def circular_placement(
    names: Sequence[int],
    canvas: Canvas,
    radius: Optional[float] = None
) -> Dict[int, Position]:
    """
    Evenly spaced positions on a circle around the canvas centre.

    The first vertex sits at the top of the circle; the rest follow
    clockwise in the given order.
    """
    names: List[int] = list(names)
    cx, cy = canvas.center
    radius = canvas.scale / 2.0 if radius is None else radius
    n = len(names)
    positions = {}
    for i, name in enumerate(names):
        angle = 2.0 * math.pi * i / n - math.pi / 2.0
        positions[name] = canvas.clamp(cx + radius * math.cos(angle),
                                       cy + radius * math.sin(angle))
    return positions
