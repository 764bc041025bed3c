"""
Scenario player: the control surface over projection, renderer and
playback, plus a drag-to-pan helper for pointer events.
"""

import logging
import numpy as np
from typing import Callable, Optional, Sequence

from .canvas import Canvas
from .config import Config
from .frames import FrameIndex
from .playback import PlaybackScheduler, PlaybackState
from .projection import DataBounds, ProjectionPipeline, bounds_from_points
from .renderer import Renderer

logger = logging.getLogger(__name__)


def scenario_bounds(index: FrameIndex, polylines=None, margin: float = 0.0) -> DataBounds:
    """
    Union of the agent extent and the map extent, each padded by
    ``margin`` times its own range.
    """
    bounds = bounds_from_points(index.positions(), margin)
    if polylines:
        map_points = np.concatenate([np.asarray(line, dtype=np.float64).reshape(-1, 2)
                                     for line in polylines])
        bounds = bounds.union(bounds_from_points(map_points, margin))
    return bounds


class DragHandler:
    """Turns press / move / release pointer positions into pan deltas."""

    def __init__(self, on_delta: Callable[[Sequence[float]], None]):
        self.on_delta = on_delta
        self._last = None

    @property
    def dragging(self) -> bool:
        return self._last is not None

    def on_start(self, x: float, y: float):
        self._last = (x, y)

    def on_drag(self, x: float, y: float):
        if self._last is None:
            return
        dx = x - self._last[0]
        dy = y - self._last[1]
        self._last = (x, y)
        if dx or dy:
            self.on_delta((dx, dy))

    def on_stop(self, x: Optional[float] = None, y: Optional[float] = None):
        if x is not None and y is not None:
            self.on_drag(x, y)
        self._last = None


class ScenarioPlayer:
    """
    Owns one canvas worth of state: the view transform, the render cache
    and the playback state. Every outward control goes through here.
    """

    def __init__(self, canvas: Canvas, config: Optional[Config] = None,
                 on_frame: Optional[Callable[[int, int, int], None]] = None):
        self.config = config or Config()
        self.canvas = canvas
        self.projection = ProjectionPipeline(canvas, self.config)
        self.renderer = Renderer(canvas, self.projection, self.config)
        self.scheduler = PlaybackScheduler(self.renderer, self.config, on_frame=on_frame)
        self.drag = DragHandler(self.adjust_offset)

    @property
    def state(self) -> PlaybackState:
        return self.scheduler.state

    @property
    def n_frames(self) -> int:
        return len(self.scheduler.index) if self.scheduler.loaded else 0

    def load(self, index: FrameIndex, polylines=None, margin: Optional[float] = None):
        """Fit the view to a scenario and stage it for playback."""
        if margin is None:
            margin = self.config.BOUNDS_MARGIN
        bounds = scenario_bounds(index, polylines, margin)
        self.projection.set_data_bounds(bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y)
        self.projection.resize_to_aspect()
        self.projection.reset_view()
        self.renderer.reset()
        self.scheduler.load(index, polylines)
        logger.info(f"Loaded scenario: {len(index)} frames, "
                    f"{len(polylines) if polylines else 0} map polylines")

    async def run(self) -> bool:
        return await self.scheduler.run()

    def set_speed(self, value: float):
        self.scheduler.set_speed(value)

    def toggle(self) -> PlaybackState:
        return self.scheduler.toggle()

    def seek(self, index: int):
        self.scheduler.seek(index)

    def adjust_zoom(self, wheel_delta: float) -> bool:
        return self.projection.adjust_zoom(wheel_delta)

    def adjust_offset(self, delta: Sequence[float]):
        self.projection.adjust_offset(delta)

    def set_show_orientation(self, value: bool):
        self.scheduler.show_orientation = bool(value)
        self.renderer.cache.show_orientation = bool(value)
        self.renderer.redraw()

    def set_show_labels(self, value: bool):
        self.scheduler.show_labels = bool(value)
        self.renderer.cache.show_labels = bool(value)
        self.renderer.redraw()
