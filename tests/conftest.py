"""Shared fixtures for the traffic_replay test suite."""

import matplotlib

matplotlib.use('Agg')

import numpy as np
import pytest

from traffic_replay.canvas import Canvas
from traffic_replay.config import Config
from traffic_replay.frames import AgentPose, FrameIndex
from traffic_replay.projection import ProjectionPipeline
from traffic_replay.renderer import Renderer


class RecordingCanvas(Canvas):
    """Canvas test double that records draw calls instead of painting."""

    def __init__(self, width=400.0, height=200.0):
        self._width = float(width)
        self._height = float(height)
        self.ops = []
        self.clears = 0
        self.presents = 0

    @property
    def width(self):
        return self._width

    @width.setter
    def width(self, value):
        self._width = float(value)

    @property
    def height(self):
        return self._height

    @height.setter
    def height(self, value):
        self._height = float(value)

    def clear(self):
        self.ops.clear()
        self.clears += 1

    def draw_polygon(self, points, stroke, fill, line_width):
        self.ops.append(('polygon', np.array(points), stroke, fill, line_width))

    def draw_polyline(self, points, color, line_width):
        self.ops.append(('polyline', np.array(points), color, line_width))

    def draw_text(self, text, position, color, size_px, bold=False, align='left',
                  baseline='baseline'):
        self.ops.append(('text', text, tuple(position), color, size_px, bold, align, baseline))

    def measure_text(self, text, size_px, bold=False):
        return 0.6 * size_px * len(text)

    def present(self):
        self.presents += 1

    def of_kind(self, kind):
        return [op for op in self.ops if op[0] == kind]


def make_pose(frame_id=1, track_id=1, x=0.0, y=0.0, length=4.0, width=2.0,
              heading=0.0, category='Car', timestamp_ms=None):
    if timestamp_ms is None:
        timestamp_ms = int(frame_id) * 100
    return AgentPose(frame_id=frame_id, track_id=track_id, x=x, y=y, length=length,
                     width=width, heading=heading, category=category,
                     timestamp_ms=timestamp_ms)


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas(400, 200)


@pytest.fixture
def pipeline(canvas, config) -> ProjectionPipeline:
    """Pipeline fitted to x in [0, 100], y in [0, 50] on a 400x200 canvas."""
    p = ProjectionPipeline(canvas, config)
    p.set_data_bounds(0, 0, 100, 50)
    return p


@pytest.fixture
def renderer(canvas, pipeline, config) -> Renderer:
    return Renderer(canvas, pipeline, config)


@pytest.fixture
def two_agents():
    return [
        make_pose(frame_id=1, track_id=7, x=20.0, y=10.0, heading=0.3, category='Car'),
        make_pose(frame_id=1, track_id=8, x=60.0, y=30.0, heading=-1.2, category='Pedestrian',
                  length=1.0, width=1.0),
    ]


@pytest.fixture
def gapped_index():
    """Frames 1 and 3 hold one agent each; frame 2 is empty."""
    return FrameIndex({
        1: [make_pose(frame_id=1, track_id='A', x=10.0, y=10.0, timestamp_ms=1000)],
        2: [],
        3: [make_pose(frame_id=3, track_id='B', x=40.0, y=20.0, timestamp_ms=1200)],
    })
