"""
Playback scheduler
==================
Steps through a FrameIndex in frame-id order, rendering each non-empty
frame and waiting the recorded time gap (scaled by speed) before the next.

States: IDLE -> RUNNING <-> PAUSED -> IDLE. Only one loop may be active.

Both suspension points (the pause poll and the inter-frame delay) wait on
one wake event, so toggle() and seek() take effect immediately and never
later than one poll interval. A pause during an inter-frame delay keeps
the unspent part of it, which is waited out after resume.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Optional

from .config import Config
from .frames import FrameIndex
from .renderer import Renderer

logger = logging.getLogger(__name__)


class PlaybackState(Enum):
    IDLE = 'idle'
    RUNNING = 'running'
    PAUSED = 'paused'


class PlaybackScheduler:
    """Cooperative playback loop over a frame index."""

    def __init__(self, renderer: Renderer, config: Optional[Config] = None,
                 on_frame: Optional[Callable[[int, int, int], None]] = None):
        self.renderer = renderer
        self.config = config or Config()
        self.on_frame = on_frame

        self.index: Optional[FrameIndex] = None
        self.polylines = None
        self.state = PlaybackState.IDLE
        self.speed = self.config.DEFAULT_SPEED
        self.show_orientation = False
        self.show_labels = False
        self.position = 0

        self._pending_seek: Optional[int] = None
        self._active = False
        self._wake: Optional[asyncio.Event] = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @property
    def loaded(self) -> bool:
        return self.index is not None

    @property
    def active(self) -> bool:
        return self._active

    def load(self, index: FrameIndex, polylines=None):
        """Stage a scenario; replaces any previous one."""
        if self._active:
            raise RuntimeError("Cannot load a scenario while playback is active")
        self.index = index
        self.polylines = polylines
        self.position = 0
        self._pending_seek = None
        self.state = PlaybackState.IDLE

    # -------------------------------------------------------------------------
    # Control surface
    # -------------------------------------------------------------------------

    def set_speed(self, value: float):
        value = float(value)
        if value <= 0:
            raise ValueError(f"Playback speed must be positive, got {value}")
        self.speed = value

    def toggle(self) -> PlaybackState:
        """Flip running <-> paused. Does nothing unless a loop is active."""
        if not self.loaded:
            logger.warning("No scenario loaded; toggle ignored")
            return self.state
        if self.state is PlaybackState.RUNNING:
            self.state = PlaybackState.PAUSED
        elif self.state is PlaybackState.PAUSED:
            self.state = PlaybackState.RUNNING
        self._notify()
        return self.state

    def seek(self, index: int):
        """
        Jump to a position in the frame sequence.

        While a loop is active this pauses playback; the loop picks up the
        target on its next wake and stays paused until toggle(). When idle
        the target becomes the start position of the next run().
        """
        if not self.loaded:
            logger.warning("No scenario loaded; seek ignored")
            return
        last = len(self.index) - 1
        target = min(max(int(index), 0), max(last, 0))
        if target != index:
            logger.warning(f"Seek target {index} clamped to {target}")
        self._pending_seek = target
        if self._active:
            self.state = PlaybackState.PAUSED
            self._notify()

    # -------------------------------------------------------------------------
    # Timing
    # -------------------------------------------------------------------------

    def frame_delay(self, i: int) -> float:
        """
        Milliseconds to wait after showing frame ``i``.

        The recorded gap to the next frame divided by speed, or the fixed
        fallback (not scaled) when there is no next frame or it is empty.
        """
        ids = self.index.frame_ids
        if i + 1 >= len(ids):
            return float(self.config.FALLBACK_DELAY_MS)
        t0 = self.index.timestamp(ids[i])
        t1 = self.index.timestamp(ids[i + 1])
        if t0 is None or t1 is None:
            return float(self.config.FALLBACK_DELAY_MS)
        return max(t1 - t0, 0) / self.speed

    # -------------------------------------------------------------------------
    # Loop
    # -------------------------------------------------------------------------

    async def run(self) -> bool:
        """
        Play the loaded scenario to the end.

        Returns:
            False if the call was ignored (a loop is already active or
            nothing is loaded), True once playback has finished
        """
        if self._active:
            logger.warning("Playback already running; run() ignored")
            return False
        if not self.loaded:
            logger.warning("No scenario loaded; run() ignored")
            return False

        self._active = True
        self._wake = asyncio.Event()
        self.state = PlaybackState.RUNNING
        ids = self.index.frame_ids
        logger.info(f"Playback started: {len(ids)} frames at speed {self.speed}")

        try:
            i = 0
            while i < len(ids):
                if self._pending_seek is not None:
                    i = self._pending_seek
                    self._pending_seek = None
                    self.position = i
                    logger.debug(f"Seek to index {i} (frame {ids[i]})")

                if self.state is PlaybackState.PAUSED:
                    await self._wait(self.config.PAUSE_POLL_MS)
                    continue

                self.position = i
                agents = self.index.agents_at(i)
                if not agents:
                    i += 1
                    continue

                self.renderer.draw_frame(agents, self.show_orientation, self.show_labels)
                if self.polylines is not None:
                    self.renderer.draw_map(self.polylines)
                if self.on_frame is not None:
                    self.on_frame(i, ids[i], len(ids))

                if i < len(ids) - 1:
                    await self._hold(self.frame_delay(i))
                i += 1
        finally:
            self._active = False
            self._wake = None
            self.state = PlaybackState.IDLE

        logger.info("Scenario finished")
        return True

    async def _hold(self, ms: float):
        """
        Wait out an inter-frame delay.

        A pause suspends the countdown and the unspent part is waited on
        resume; a seek abandons it.
        """
        remaining = await self._wait(ms)
        while remaining > 0 and self._pending_seek is None:
            if self.state is PlaybackState.PAUSED:
                await self._wait(self.config.PAUSE_POLL_MS)
            else:
                remaining = await self._wait(remaining)

    async def _wait(self, ms: float) -> float:
        """
        Sleep up to ``ms`` milliseconds; toggle() or seek() cut it short.

        Returns:
            Milliseconds left when woken early, 0.0 after a full sleep
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + ms / 1000.0
        self._wake.clear()
        try:
            await asyncio.wait_for(self._wake.wait(), timeout=ms / 1000.0)
        except asyncio.TimeoutError:
            return 0.0
        return max(deadline - loop.time(), 0.0) * 1000.0

    def _notify(self):
        if self._wake is not None:
            self._wake.set()
