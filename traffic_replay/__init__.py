"""
Traffic scenario replay: oriented agent boxes and map polylines on a 2D
canvas, with pan/zoom and pausable, seekable, speed-scaled playback.
"""

from .canvas import Canvas, MatplotlibCanvas
from .config import AgentCategory, Columns, Config
from .frames import AgentPose, FrameIndex
from .geometry import centroid, corners_of, oriented_box, rotate, rotate_box
from .playback import PlaybackScheduler, PlaybackState
from .player import DragHandler, ScenarioPlayer, scenario_bounds
from .projection import DataBounds, InvalidBoundsError, ProjectionPipeline, ViewTransform
from .renderer import RenderCache, Renderer, category_color

__version__ = '0.1.0'

__all__ = [
    'AgentCategory', 'AgentPose', 'Canvas', 'Columns', 'Config', 'DataBounds',
    'DragHandler', 'FrameIndex', 'InvalidBoundsError', 'MatplotlibCanvas',
    'PlaybackScheduler', 'PlaybackState', 'ProjectionPipeline', 'RenderCache',
    'Renderer', 'ScenarioPlayer', 'ViewTransform', 'category_color', 'centroid',
    'corners_of', 'oriented_box', 'rotate', 'rotate_box', 'scenario_bounds',
]
