"""
Configuration for the scenario replay
=====================================
Tunables for projection, rendering and playback, the CSV column mapping
and the closed set of agent categories with their display colors.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


# =============================================================================
# Agent categories
# =============================================================================

class AgentCategory(str, Enum):
    CAR = 'Car'
    PEDESTRIAN = 'Pedestrian'
    UNCLASSIFIED = 'Unclassified'
    TRUCK = 'Truck'
    BICYCLE = 'Bicycle'
    MOTORCYCLE = 'Motorcycle'

    @classmethod
    def from_label(cls, label) -> Optional['AgentCategory']:
        """Return the category for a raw label, or None if it is not known."""
        try:
            return cls(label)
        except ValueError:
            return None


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class Config:
    """Configuration parameters for projection, rendering and playback."""
    # View transform
    ZOOM_MIN: float = 0.1
    ZOOM_MAX: float = 3.0
    SCROLL_FACTOR: float = -0.001    # negative: scrolling up zooms in
    WHEEL_DELTA_PER_STEP: float = 100.0

    # Playback
    PAUSE_POLL_MS: int = 100
    FALLBACK_DELAY_MS: int = 100
    DEFAULT_SPEED: float = 1.0
    SPEED_MIN: float = 0.1
    SPEED_MAX: float = 10.0
    UI_POLL_S: float = 0.03
    SKIP_N_FRAMES: int = 10

    # Canvas
    CANVAS_WIDTH: int = 1200
    CANVAS_HEIGHT: int = 800
    CONTROLS_HEIGHT: int = 90
    DPI: int = 100
    BACKGROUND: str = '#0D1117'

    # Drawing
    BOX_LINE_WIDTH: float = 2.0
    ARROW_LINE_WIDTH: float = 1.5
    MAP_LINE_WIDTH: float = 1.0
    FILL_ALPHA: str = '66'
    MAP_COLOR: str = '#ffffff'
    LABEL_FONT_PX: int = 10
    FRAME_COUNT_FONT_PX: int = 12
    LABEL_OFFSET_PX: int = 12

    # Data bounds
    BOUNDS_MARGIN: float = 0.0

    COLORS: Dict[str, str] = field(default_factory=lambda: {
        AgentCategory.CAR: '#4FC3F7',
        AgentCategory.PEDESTRIAN: '#BA68C8',
        AgentCategory.UNCLASSIFIED: '#FF9800',
        AgentCategory.TRUCK: '#E74C3C',
        AgentCategory.BICYCLE: '#1ABC9C',
        AgentCategory.MOTORCYCLE: '#F39C12',
        'default': '#ffffff',
    })


@dataclass
class Columns:
    """CSV column names of the agent record fields."""
    x: str = 'lon'
    y: str = 'lat'
    width: str = 'width'
    length: str = 'length'
    heading: str = 'psi_rad'
    frame_id: str = 'frame_id'
    timestamp: str = 'timestamp_ms'
    category: str = 'agent_type'
    track_id: str = 'track_id'
    case_id: str = 'case_id'

    def required(self):
        return [self.x, self.y, self.width, self.length, self.heading,
                self.frame_id, self.timestamp, self.category, self.track_id]
