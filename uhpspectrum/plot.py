"""Geometry of the spectrum plot: grid, labels and the spectrum path."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

X_SIZE = 1024
Y_SIZE = 128
GRID_X_QTY = 16
GRID_Y_QTY = 16
GRID_STEP_X = X_SIZE // GRID_X_QTY
GRID_STEP_Y = Y_SIZE // GRID_Y_QTY


def _int_div(numerator: int, denominator: int) -> int:
    """Integer division that truncates toward zero."""
    quotient = abs(numerator) // abs(denominator)
    return quotient if (numerator >= 0) == (denominator > 0) else -quotient


@dataclass(frozen=True)
class GridLine:
    """One grid line with its value label."""

    x1: float
    y1: float
    x2: float
    y2: float
    label: str
    label_x: float
    label_y: float


@dataclass(frozen=True)
class PlotGeometry:
    """Maps spectrum bins and levels onto a view of the given size.

    Bins 0..1024 run along X and levels 0..128 dB along Y, with the top of
    the plot at level 128.
    """

    view_width: int
    view_height: int

    @property
    def width(self) -> int:
        """Width of the plotting area in scene units."""
        return self.view_width - 3 * GRID_STEP_X

    @property
    def height(self) -> int:
        """Height of the plotting area in scene units."""
        return self.view_height - 3 * GRID_STEP_Y

    def x_grid(self) -> list[GridLine]:
        """Vertical grid lines, labelled with their bin number."""
        width, height = self.width, self.height
        lines = []
        for x in range(0, X_SIZE + 1, GRID_STEP_X):
            scaled = float(_int_div(x * width, X_SIZE))
            lines.append(
                GridLine(scaled, 0.0, scaled, float(height), str(x), scaled, height + 2.0)
            )
        return lines

    def y_grid(self) -> list[GridLine]:
        """Horizontal grid lines, labelled with their level."""
        width, height = self.width, self.height
        lines = []
        for y in range(0, Y_SIZE + 1, GRID_STEP_Y):
            scaled = float(_int_div(y * height, Y_SIZE))
            lines.append(
                GridLine(0.0, scaled, float(width), scaled, str(Y_SIZE - y), -30.0, scaled - 10)
            )
        return lines

    def axes(self) -> tuple[tuple[float, float, float, float], ...]:
        """The X axis and the Y axis as line segments."""
        width, height = float(self.width), float(self.height)
        return ((0.0, height, width, height), (0.0, 0.0, 0.0, height))

    def scene_rect(self) -> tuple[float, float, float, float]:
        """Scene rectangle as (x, y, width, height)."""
        return (
            -40.0,
            0.0,
            float(self.width + GRID_STEP_X),
            float(self.height + GRID_STEP_Y),
        )

    def path_points(self, numbers: Sequence[float] | np.ndarray) -> list[tuple[float, float]]:
        """Points of the spectrum path for at most 1024 levels in dB."""
        values = np.asarray(numbers, dtype=np.float64)
        if values.ndim != 1 or values.size == 0:
            raise ValueError("spectrum must be a non-empty sequence of levels")
        width, height = self.width, self.height
        return [
            (index * width / X_SIZE, (Y_SIZE - level) * height / Y_SIZE)
            for index, level in enumerate(values[:X_SIZE].tolist())
        ]