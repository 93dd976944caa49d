"""
Grid Geometry

Pixel <-> cell mapping for the editor surface.

Screen layout:
    x in [0, label_width)          row gutter (labels, strumming)
    x in [label_width, view_width) note area, scrolled by scroll_x
    y in [0, view_height)          rows, scrolled by scroll_y

One GridGeometry is immutable; resize and scroll produce a new one, so
gesture code and the renderer always agree on the dimensions of a frame.
"""

import math
from dataclasses import dataclass, replace

from ..constants import (
    DEFAULT_ROW_HEIGHT, DEFAULT_STEP_WIDTH, LABEL_WIDTH, MIN_ROW_HEIGHT, MIN_STEP_WIDTH,
    STEPS_PER_PATTERN,
)
from .snap import clamp


@dataclass(frozen=True)
class GridGeometry:
    row_height: float = DEFAULT_ROW_HEIGHT
    step_width: float = DEFAULT_STEP_WIDTH
    label_width: float = LABEL_WIDTH
    row_count: int = 0
    steps: int = STEPS_PER_PATTERN
    view_width: float = 0.0
    view_height: float = 0.0
    scroll_x: float = 0.0
    scroll_y: float = 0.0

    def __post_init__(self):
        if self.row_height <= 0 or self.step_width <= 0:
            raise ValueError(
                f"Cell size must be positive (got {self.row_height}x{self.step_width})"
            )

    @classmethod
    def fit(
        cls,
        view_width: float,
        view_height: float,
        row_count: int,
        label_width: float = LABEL_WIDTH,
        min_row_height: float = MIN_ROW_HEIGHT,
        min_step_width: float = MIN_STEP_WIDTH,
        steps: int = STEPS_PER_PATTERN,
    ) -> "GridGeometry":
        """
        Stretch cells to fill the view, never below the minimum cell size.

        Content that no longer fits becomes scrollable.
        """
        step_width = max(min_step_width, (view_width - label_width) / steps)
        row_height = max(min_row_height, view_height / row_count) if row_count else DEFAULT_ROW_HEIGHT
        return cls(
            row_height=row_height,
            step_width=step_width,
            label_width=label_width,
            row_count=row_count,
            steps=steps,
            view_width=view_width,
            view_height=view_height,
        )

    # =========================================================================
    # Screen -> grid
    # =========================================================================

    def in_gutter(self, x: float) -> bool:
        return x < self.label_width

    def column_float(self, x: float) -> float:
        """Fractional column under screen x (unclamped)."""
        return (x - self.label_width + self.scroll_x) / self.step_width

    def column_at(self, x: float) -> int:
        """Column under screen x (unclamped, may be negative or >= steps)."""
        return math.floor(self.column_float(x))

    def row_at(self, y: float) -> int:
        """Row under screen y (unclamped)."""
        return math.floor((y + self.scroll_y) / self.row_height)

    # =========================================================================
    # Grid -> screen
    # =========================================================================

    def cell_x(self, col: float) -> float:
        return self.label_width + col * self.step_width - self.scroll_x

    def row_y(self, row: float) -> float:
        return row * self.row_height - self.scroll_y

    @property
    def content_width(self) -> float:
        return self.steps * self.step_width

    @property
    def content_height(self) -> float:
        return self.row_count * self.row_height

    @property
    def max_scroll_x(self) -> float:
        return max(0.0, self.content_width - (self.view_width - self.label_width))

    @property
    def max_scroll_y(self) -> float:
        return max(0.0, self.content_height - self.view_height)

    def with_scroll(self, scroll_x: float, scroll_y: float) -> "GridGeometry":
        """Copy with the scroll offset clamped to the content."""
        return replace(
            self,
            scroll_x=clamp(scroll_x, 0.0, self.max_scroll_x),
            scroll_y=clamp(scroll_y, 0.0, self.max_scroll_y),
        )

    def resized(self, view_width: float, view_height: float, row_count: int, **limits) -> "GridGeometry":
        """Refit to a new view size, keeping the scroll position where possible."""
        fitted = GridGeometry.fit(
            view_width, view_height, row_count,
            label_width=limits.pop('label_width', self.label_width),
            steps=self.steps,
            **limits,
        )
        return fitted.with_scroll(self.scroll_x, self.scroll_y)
