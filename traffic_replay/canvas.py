"""
Drawing surfaces
================
``Canvas`` is the minimal 2D surface the renderer draws on: filled and
stroked paths, text with metrics, and a mutable pixel size.
``MatplotlibCanvas`` implements it on an axes whose data coordinates are
canvas pixels (origin top-left, y down).
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import matplotlib.patches as patches
from matplotlib.font_manager import FontProperties
from matplotlib.lines import Line2D
from matplotlib.textpath import TextPath

from .config import Config

_VA = {'top': 'top', 'middle': 'center', 'bottom': 'bottom',
       'baseline': 'baseline', 'alphabetic': 'baseline'}


class Canvas(ABC):
    """Pixel-space drawing surface."""

    @property
    @abstractmethod
    def width(self) -> float:
        ...

    @width.setter
    @abstractmethod
    def width(self, value: float):
        ...

    @property
    @abstractmethod
    def height(self) -> float:
        ...

    @height.setter
    @abstractmethod
    def height(self, value: float):
        ...

    @abstractmethod
    def clear(self):
        ...

    @abstractmethod
    def draw_polygon(self, points, stroke: str, fill: Optional[str], line_width: float):
        """Stroke (and optionally fill) a closed path."""

    @abstractmethod
    def draw_polyline(self, points, color: str, line_width: float):
        """Stroke an open path."""

    @abstractmethod
    def draw_text(self, text: str, position: Sequence[float], color: str, size_px: float,
                  bold: bool = False, align: str = 'left', baseline: str = 'baseline'):
        ...

    @abstractmethod
    def measure_text(self, text: str, size_px: float, bold: bool = False) -> float:
        """Rendered width of ``text`` in pixels."""

    def present(self):
        """Push pending drawing to the screen."""


class MatplotlibCanvas(Canvas):
    """
    Canvas backed by a matplotlib figure.

    The scene axes fill the full figure width; ``controls_height`` pixels
    are left free below it for widgets. One canvas pixel is one figure
    pixel at the configured DPI.
    """

    def __init__(self, width: float, height: float, config: Optional[Config] = None,
                 controls_height: float = 0):
        self.config = config or Config()
        self._width = float(width)
        self._height = float(height)
        self.controls_height = float(controls_height)
        self._artists: List = []

        dpi = self.config.DPI
        self.fig = plt.figure(figsize=(self._width / dpi, self._total_height / dpi), dpi=dpi)
        self.fig.patch.set_facecolor(self.config.BACKGROUND)
        self.ax = self.fig.add_axes(self._scene_rect())
        self.ax.set_facecolor(self.config.BACKGROUND)
        self.ax.set_axis_off()
        self.ax.set_autoscale_on(False)
        self._apply_limits()

    # -------------------------------------------------------------------------
    # Size
    # -------------------------------------------------------------------------

    @property
    def width(self) -> float:
        return self._width

    @width.setter
    def width(self, value: float):
        self._width = float(value)
        self._resize()

    @property
    def height(self) -> float:
        return self._height

    @height.setter
    def height(self, value: float):
        self._height = float(value)
        self._resize()

    @property
    def _total_height(self) -> float:
        return self._height + self.controls_height

    def _scene_rect(self):
        bottom = self.controls_height / self._total_height
        return [0.0, bottom, 1.0, 1.0 - bottom]

    def controls_rect(self, left: float, width: float, row: int = 0, row_height: float = 24):
        """Figure-fraction rect for a widget placed in the controls strip."""
        total = self._total_height
        bottom = self.controls_height - (row + 1) * (row_height + 6)
        return [left, bottom / total, width, row_height / total]

    def _resize(self):
        dpi = self.config.DPI
        self.fig.set_size_inches(self._width / dpi, self._total_height / dpi, forward=True)
        self.ax.set_position(self._scene_rect())
        self._apply_limits()

    def _apply_limits(self):
        self.ax.set_xlim(0, self._width)
        self.ax.set_ylim(self._height, 0)

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def _pt(self, px: float) -> float:
        return px * 72.0 / self.config.DPI

    def clear(self):
        for artist in self._artists:
            artist.remove()
        self._artists.clear()

    def draw_polygon(self, points, stroke: str, fill: Optional[str], line_width: float):
        poly = patches.Polygon(points, closed=True, edgecolor=stroke,
                               facecolor=fill if fill is not None else 'none',
                               linewidth=self._pt(line_width))
        self.ax.add_patch(poly)
        self._artists.append(poly)

    def draw_polyline(self, points, color: str, line_width: float):
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        line = Line2D(xs, ys, color=color, linewidth=self._pt(line_width))
        self.ax.add_line(line)
        self._artists.append(line)

    def draw_text(self, text: str, position: Sequence[float], color: str, size_px: float,
                  bold: bool = False, align: str = 'left', baseline: str = 'baseline'):
        txt = self.ax.text(position[0], position[1], text, color=color,
                           fontsize=self._pt(size_px), fontfamily='monospace',
                           fontweight='bold' if bold else 'normal',
                           ha=align, va=_VA.get(baseline, 'baseline'), clip_on=True)
        self._artists.append(txt)

    def measure_text(self, text: str, size_px: float, bold: bool = False) -> float:
        if not text:
            return 0.0
        prop = FontProperties(family='monospace', weight='bold' if bold else 'normal')
        path = TextPath((0, 0), text, size=self._pt(size_px), prop=prop)
        return path.get_extents().width * self.config.DPI / 72.0

    def present(self):
        self.fig.canvas.draw_idle()

    def close(self):
        plt.close(self.fig)
