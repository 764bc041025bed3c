"""
2D geometry helpers for oriented agent boxes.

Corner order is fixed for every box: back-left, front-left, front-right,
back-right. "Front" is the +x side of the unrotated box, i.e. the side the
heading points to after rotation.
"""

import numpy as np
from typing import Sequence

BACK_LEFT, FRONT_LEFT, FRONT_RIGHT, BACK_RIGHT = range(4)


def corners_of(center: Sequence[float], dims: Sequence[float]) -> np.ndarray:
    """
    Corner points of an axis-aligned box.

    Args:
        center: Box center (x, y)
        dims: (length, width); length runs along x

    Returns:
        (4, 2) array of corners in back-left, front-left, front-right,
        back-right order
    """
    cx, cy = center
    half_l = dims[0] / 2
    half_w = dims[1] / 2
    return np.array([
        [cx - half_l, cy + half_w],
        [cx + half_l, cy + half_w],
        [cx + half_l, cy - half_w],
        [cx - half_l, cy - half_w],
    ], dtype=np.float64)


def centroid(points) -> np.ndarray:
    return np.asarray(points, dtype=np.float64).mean(axis=0)


def rotate(points, angle: float, pivot: Sequence[float] = (0.0, 0.0)) -> np.ndarray:
    """
    Rotate one point (shape (2,)) or many points (shape (n, 2))
    counter-clockwise about a pivot.
    """
    pts = np.asarray(points, dtype=np.float64)
    pivot = np.asarray(pivot, dtype=np.float64)
    cos_h = np.cos(angle)
    sin_h = np.sin(angle)
    R = np.array([[cos_h, -sin_h], [sin_h, cos_h]])
    return (pts - pivot) @ R.T + pivot


def rotate_box(box, angle: float) -> np.ndarray:
    """Rotate box corners about their own centroid."""
    return rotate(box, angle, centroid(box))


def oriented_box(center: Sequence[float], dims: Sequence[float], heading: float) -> np.ndarray:
    return rotate_box(corners_of(center, dims), heading)


def front_midpoint(box) -> np.ndarray:
    """Midpoint of the front edge (front-left to front-right)."""
    box = np.asarray(box, dtype=np.float64)
    return (box[FRONT_LEFT] + box[FRONT_RIGHT]) / 2
