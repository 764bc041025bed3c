"""
Projection pipeline: data space -> canvas pixels
================================================
Two transforms are composed on every call to ``project``:

1. Fit transform: maps [min_x, max_x] -> [0, width] and
   [min_y, max_y] -> [height, 0] (y grows upwards on screen).
2. View transform: zoom about the canvas center plus a translation by
   ``offset``. The offset is stored in pre-zoom pixels so that a drag of
   d screen pixels always moves the scene by d pixels.

Zoom and offset are plain numbers; nothing is kept in a graphics-context
transform stack, so a redraw after a pan/zoom is a fresh projection of
the same data.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .config import Config

logger = logging.getLogger(__name__)


class InvalidBoundsError(ValueError):
    """Data bounds with an empty or inverted range."""


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class DataBounds:
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        if not self.min_x < self.max_x:
            raise InvalidBoundsError(f"min_x ({self.min_x}) must be < max_x ({self.max_x})")
        if not self.min_y < self.max_y:
            raise InvalidBoundsError(f"min_y ({self.min_y}) must be < max_y ({self.max_y})")

    @property
    def range_x(self) -> float:
        return self.max_x - self.min_x

    @property
    def range_y(self) -> float:
        return self.max_y - self.min_y

    @property
    def aspect_ratio(self) -> float:
        return self.range_x / self.range_y

    def union(self, other: 'DataBounds') -> 'DataBounds':
        return DataBounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )


@dataclass
class ViewTransform:
    zoom: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)


def bounds_from_points(points, margin: float = 0.0) -> DataBounds:
    """
    Extent of a point set, padded on each side by ``margin`` times its
    own range.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    if len(pts) == 0:
        raise InvalidBoundsError("Cannot derive bounds from an empty point set")
    min_x, min_y = pts.min(axis=0)
    max_x, max_y = pts.max(axis=0)
    pad_x = (max_x - min_x) * margin
    pad_y = (max_y - min_y) * margin
    return DataBounds(float(min_x - pad_x), float(min_y - pad_y),
                      float(max_x + pad_x), float(max_y + pad_y))


# =============================================================================
# Projection Pipeline
# =============================================================================

class ProjectionPipeline:
    """Owns the fit transform and the interactive view transform."""

    def __init__(self, canvas, config: Optional[Config] = None):
        self.canvas = canvas
        self.config = config or Config()
        self.bounds = DataBounds(0.0, 0.0, float(canvas.width), float(canvas.height))
        self.view = ViewTransform()
        self._listeners: List[Callable[[], None]] = []

    def add_listener(self, callback: Callable[[], None]):
        """Register a callback invoked after every zoom/offset change."""
        self._listeners.append(callback)

    def set_data_bounds(self, min_x: float, min_y: float, max_x: float, max_y: float):
        self.bounds = DataBounds(float(min_x), float(min_y), float(max_x), float(max_y))
        logger.info(f"Data bounds: x=[{min_x:.2f}, {max_x:.2f}] y=[{min_y:.2f}, {max_y:.2f}]")

    def resize_to_aspect(self):
        """Match the canvas aspect ratio to the data, keeping the height."""
        width = self.canvas.height * self.bounds.aspect_ratio
        self.canvas.width = width
        logger.debug(f"Canvas resized to {width:.0f}x{self.canvas.height:.0f}")

    def reset_view(self):
        self.view = ViewTransform()

    def adjust_zoom(self, wheel_delta: float) -> bool:
        """
        Apply a pointer-wheel delta as a multiplicative zoom step.

        Steps that would leave [ZOOM_MIN, ZOOM_MAX] are dropped.

        Returns:
            True if the zoom changed
        """
        factor = 1 + wheel_delta * self.config.SCROLL_FACTOR
        zoom = self.view.zoom * factor
        if zoom < self.config.ZOOM_MIN or zoom > self.config.ZOOM_MAX:
            logger.debug(f"Zoom step rejected: {self.view.zoom:.3f} x {factor:.3f}")
            return False
        self.view.zoom = zoom
        self._changed()
        return True

    def adjust_offset(self, delta: Sequence[float]):
        """Pan by a screen-space pixel delta."""
        dx, dy = delta
        ox, oy = self.view.offset
        self.view.offset = (ox + dx / self.view.zoom, oy + dy / self.view.zoom)
        self._changed()

    def fit(self, points) -> np.ndarray:
        """Fit transform only."""
        pts = np.asarray(points, dtype=np.float64)
        b = self.bounds
        w = self.canvas.width
        h = self.canvas.height
        out = np.empty_like(pts)
        out[..., 0] = (pts[..., 0] - b.min_x) / b.range_x * w
        out[..., 1] = h - (pts[..., 1] - b.min_y) / b.range_y * h
        return out

    def project(self, points) -> np.ndarray:
        """
        Project one point (shape (2,)) or many (shape (n, 2)) from data
        space to canvas pixels.
        """
        fitted = self.fit(points)
        center = np.array([self.canvas.width / 2, self.canvas.height / 2])
        offset = np.asarray(self.view.offset, dtype=np.float64)
        return center + self.view.zoom * (fitted + offset - center)

    def _changed(self):
        self.canvas.clear()
        for callback in self._listeners:
            callback()
