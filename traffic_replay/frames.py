"""
Agent poses and the frame index.
"""

import logging
import numpy as np
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AgentPose:
    """One agent at one frame."""
    frame_id: int
    track_id: Hashable
    x: float
    y: float
    length: float
    width: float
    heading: float  # radians
    category: str
    timestamp_ms: int

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @property
    def dimensions(self) -> Tuple[float, float]:
        return (self.length, self.width)


class FrameIndex:
    """
    Frame id -> agent poses, plus the ascending sequence of frame ids.

    Ids are ordered numerically, so frame 10 comes after frame 2.
    """

    def __init__(self, frames: Dict[int, List[AgentPose]]):
        self._frames: Dict[int, Tuple[AgentPose, ...]] = {
            int(fid): tuple(agents) for fid, agents in frames.items()
        }
        self.frame_ids: Tuple[int, ...] = tuple(sorted(self._frames))

    @classmethod
    def build(cls, records: Iterable[AgentPose]) -> 'FrameIndex':
        grouped: Dict[int, List[AgentPose]] = defaultdict(list)
        for record in records:
            grouped[int(record.frame_id)].append(record)
        index = cls(grouped)
        logger.info(f"Frame index: {len(index)} frames, {index.n_agents} agent poses")
        return index

    def __len__(self) -> int:
        return len(self.frame_ids)

    def __getitem__(self, frame_id: int) -> Tuple[AgentPose, ...]:
        return self._frames[int(frame_id)]

    def __contains__(self, frame_id) -> bool:
        return int(frame_id) in self._frames

    @property
    def n_agents(self) -> int:
        return sum(len(agents) for agents in self._frames.values())

    def agents_at(self, index: int) -> Tuple[AgentPose, ...]:
        """Agents of the frame at a position in the frame id sequence."""
        return self._frames[self.frame_ids[index]]

    def timestamp(self, frame_id: int) -> Optional[int]:
        """Timestamp of a frame (taken from its first pose); None if empty."""
        agents = self._frames.get(int(frame_id), ())
        if not agents:
            return None
        return agents[0].timestamp_ms

    def positions(self) -> np.ndarray:
        """(n, 2) array of every agent position."""
        pts = [p.position for agents in self._frames.values() for p in agents]
        return np.array(pts, dtype=np.float64).reshape(-1, 2)
