"""
Renderer for agent boxes, heading arrows, labels and map polylines.

Geometry is built in data space, rotated there, and only then projected,
so boxes keep their shape under any fit/view transform.
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .canvas import Canvas
from .config import AgentCategory, Config
from .frames import AgentPose
from .geometry import centroid, front_midpoint, oriented_box, rotate
from .projection import ProjectionPipeline

logger = logging.getLogger(__name__)


def category_color(category, config: Optional[Config] = None) -> str:
    """Display color of a category label; unknown labels render white."""
    config = config or Config()
    member = AgentCategory.from_label(category)
    if member is None:
        return config.COLORS['default']
    return config.COLORS.get(member, config.COLORS['default'])


@dataclass
class RenderCache:
    """Arguments of the last draw calls, replayed after a view change."""
    agents: Tuple[AgentPose, ...] = ()
    show_orientation: bool = False
    show_labels: bool = False
    polylines: Optional[Tuple] = None


class Renderer:
    """Draws frames and map polylines through a projection pipeline."""

    def __init__(self, canvas: Canvas, projection: ProjectionPipeline,
                 config: Optional[Config] = None):
        self.canvas = canvas
        self.projection = projection
        self.config = config or Config()
        self.cache = RenderCache()
        projection.add_listener(self.redraw)

    def clear(self):
        self.canvas.clear()

    def draw_frame(self, agents: Sequence[AgentPose], show_orientation: bool = False,
                   show_labels: bool = False):
        """Clear the canvas and draw one frame's agents."""
        self.cache.agents = tuple(agents)
        self.cache.show_orientation = show_orientation
        self.cache.show_labels = show_labels
        self._draw_agents()
        self.canvas.present()

    def draw_map(self, polylines):
        """Stroke map polylines on top of the current frame."""
        self.cache.polylines = tuple(np.asarray(line, dtype=np.float64) for line in polylines)
        self._draw_polylines()
        self.canvas.present()

    def redraw(self):
        """Repeat the cached draw calls under the current transform."""
        self._draw_agents()
        if self.cache.polylines is not None:
            self._draw_polylines()
        self.canvas.present()

    def reset(self):
        self.cache = RenderCache()
        self.clear()

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _draw_agents(self):
        self.clear()
        agents = self.cache.agents
        if not agents:
            return

        for agent in agents:
            color = category_color(agent.category, self.config)
            box = oriented_box(agent.position, agent.dimensions, agent.heading)
            self._draw_box(box, color)
            if self.cache.show_orientation:
                self._draw_arrow(box, color)
            if self.cache.show_labels:
                self._draw_label(str(agent.track_id), agent.position, color)

        self._draw_frame_count(agents[0].frame_id)
        logger.debug(f"Drew frame {agents[0].frame_id} ({len(agents)} agents)")

    def _draw_polylines(self):
        color = self.config.MAP_COLOR + self.config.FILL_ALPHA
        for line in self.cache.polylines:
            if len(line) < 2:
                continue
            self.canvas.draw_polyline(self.projection.project(line), color,
                                      self.config.MAP_LINE_WIDTH)

    def _draw_box(self, box: np.ndarray, color: str):
        self.canvas.draw_polygon(self.projection.project(box), stroke=color,
                                 fill=color + self.config.FILL_ALPHA,
                                 line_width=self.config.BOX_LINE_WIDTH)

    def _draw_arrow(self, box: np.ndarray, color: str):
        """Arrow from the box center to the middle of its front edge."""
        tail = centroid(box)
        tip = front_midpoint(box)
        # Head barbs: a quarter of the shaft, 30 degrees off its axis
        back = (tail - tip) * 0.25
        left = tip + rotate(back, np.pi / 6)
        right = tip + rotate(back, -np.pi / 6)
        pts = self.projection.project(np.array([tail, tip, left, tip, right]))
        self.canvas.draw_polyline(pts, color, self.config.ARROW_LINE_WIDTH)

    def _draw_label(self, text: str, position, color: str):
        cx, cy = self.projection.project(position)
        offset = self.config.LABEL_OFFSET_PX
        self.canvas.draw_text(text, (cx - offset, cy - offset), color,
                              self.config.LABEL_FONT_PX)

    def _draw_frame_count(self, frame_id):
        text = f"t={frame_id}"
        size = self.config.FRAME_COUNT_FONT_PX
        margin = self.config.LABEL_OFFSET_PX
        width = self.canvas.measure_text(text, size, bold=True)
        self.canvas.draw_text(text, (width + margin, self.canvas.height - margin), '#ffffff',
                              size, bold=True, align='right', baseline='bottom')
