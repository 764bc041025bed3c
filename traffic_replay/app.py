"""
Interactive scenario replay
===========================
Plays a recorded traffic scenario (agent CSV, optional GeoJSON map) in a
matplotlib window.

Controls:
    Mouse wheel         Zoom
    Drag (left button)  Pan
    Space / Play        Pause / resume (Play restarts a finished scenario)
    Left / Right        Seek 10 frames back / forward (pauses)
    Up / Down           Double / halve speed
    o / l               Toggle heading arrows / track id labels

Usage:
    python -m traffic_replay.app scenario.csv --map lanes.geojson --speed 2
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

import matplotlib.pyplot as plt
from matplotlib.widgets import Button, Slider

from .canvas import MatplotlibCanvas
from .config import Columns, Config
from .frames import FrameIndex
from .loader import load_agents_csv, load_map_geojson
from .player import ScenarioPlayer
from .projection import InvalidBoundsError

logger = logging.getLogger(__name__)


class ReplayApp:
    """matplotlib front end around a ScenarioPlayer."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.canvas = MatplotlibCanvas(self.config.CANVAS_WIDTH, self.config.CANVAS_HEIGHT,
                                       self.config, controls_height=self.config.CONTROLS_HEIGHT)
        self.fig = self.canvas.fig
        self.player = ScenarioPlayer(self.canvas, self.config, on_frame=self._on_frame)
        self.slider = None
        self.speed_slider = None
        self._replay_requested = False

    def load(self, index: FrameIndex, polylines=None, margin: Optional[float] = None):
        self.player.load(index, polylines, margin)
        self._init_ui()

    # -------------------------------------------------------------------------
    # UI
    # -------------------------------------------------------------------------

    def _init_ui(self):
        """Create widgets in the controls strip and connect events."""
        c = self.canvas
        n_frames = self.player.n_frames

        self.ax_slider = self.fig.add_axes(c.controls_rect(0.10, 0.62, row=0), facecolor='#3A3A5A')
        self.ax_speed = self.fig.add_axes(c.controls_rect(0.10, 0.30, row=1), facecolor='#3A3A5A')
        self.ax_btn_play = self.fig.add_axes(c.controls_rect(0.78, 0.10, row=0))

        self.slider = Slider(self.ax_slider, 'Frame', 0, max(n_frames - 1, 1),
                             valinit=0, valstep=1, color='#E74C3C')
        # a single frame has nothing to seek to
        self.slider.set_active(n_frames > 1)
        self.speed_slider = Slider(self.ax_speed, 'Speed', self.config.SPEED_MIN,
                                   self.config.SPEED_MAX, valinit=self.player.scheduler.speed,
                                   color='#27AE60')
        self.btn_play = Button(self.ax_btn_play, 'Play / Pause', color='#3A3A5A',
                               hovercolor='#5A5A7A')
        for slider in (self.slider, self.speed_slider):
            slider.label.set_color('white')
            slider.valtext.set_color('white')

        self.slider.on_changed(self._on_slider)
        self.speed_slider.on_changed(self._on_speed)
        self.btn_play.on_clicked(self._on_play)

        self.status = self.fig.text(0.78, c.controls_rect(0, 0, row=1)[1], '',
                                    color='white', family='monospace', fontsize=9)

        # matplotlib's default keymap (l: log y, o: zoom mode, arrows: history)
        # would act on the scene axes as well
        manager = self.fig.canvas.manager
        if manager is not None and manager.key_press_handler_id is not None:
            self.fig.canvas.mpl_disconnect(manager.key_press_handler_id)
            manager.key_press_handler_id = None

        self.fig.canvas.mpl_connect('scroll_event', self._on_scroll)
        self.fig.canvas.mpl_connect('button_press_event', self._on_press)
        self.fig.canvas.mpl_connect('motion_notify_event', self._on_motion)
        self.fig.canvas.mpl_connect('button_release_event', self._on_release)
        self.fig.canvas.mpl_connect('key_press_event', self._on_key)

    def _update_slider(self, index: int):
        """Move the frame slider without triggering a seek."""
        self.slider.eventson = False
        self.slider.set_val(index)
        self.slider.eventson = True

    def _pointer(self, event):
        # matplotlib reports y from the bottom edge; the canvas counts from the top
        return event.x, self.fig.bbox.height - event.y

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def _on_frame(self, i: int, frame_id: int, total: int):
        if self.slider is not None:
            self._update_slider(i)
            self.status.set_text(f"t={frame_id} ({round(i / total * 100)} %)")

    def _on_slider(self, val):
        self.player.seek(int(val))

    def _on_speed(self, val):
        self.player.set_speed(val)

    def _on_play(self, event):
        if self.player.scheduler.active:
            self.player.toggle()
        else:
            self._replay_requested = True

    def _on_scroll(self, event):
        if event.inaxes is self.canvas.ax:
            self.player.adjust_zoom(-event.step * self.config.WHEEL_DELTA_PER_STEP)

    def _on_press(self, event):
        if event.inaxes is self.canvas.ax and event.button == 1:
            self.player.drag.on_start(*self._pointer(event))

    def _on_motion(self, event):
        if self.player.drag.dragging:
            self.player.drag.on_drag(*self._pointer(event))

    def _on_release(self, event):
        self.player.drag.on_stop()

    def _on_key(self, event):
        scheduler = self.player.scheduler
        if event.key == ' ':
            self._on_play(None)
        elif event.key == 'right':
            self.player.seek(scheduler.position + self.config.SKIP_N_FRAMES)
        elif event.key == 'left':
            self.player.seek(scheduler.position - self.config.SKIP_N_FRAMES)
        elif event.key in ('up', 'down'):
            factor = 2.0 if event.key == 'up' else 0.5
            speed = min(max(scheduler.speed * factor, self.config.SPEED_MIN), self.config.SPEED_MAX)
            self.speed_slider.set_val(speed)
        elif event.key == 'o':
            self.player.set_show_orientation(not scheduler.show_orientation)
        elif event.key == 'l':
            self.player.set_show_labels(not scheduler.show_labels)

    # -------------------------------------------------------------------------
    # Event loop
    # -------------------------------------------------------------------------

    async def serve(self):
        """
        Play the scenario and keep the window responsive until it is closed.

        GUI events are pumped from the same event loop as playback, so
        handlers only ever run while playback is suspended.
        """
        plt.show(block=False)
        runner = asyncio.ensure_future(self.player.run())
        while plt.fignum_exists(self.fig.number):
            if self._replay_requested and not self.player.scheduler.active:
                self._replay_requested = False
                runner = asyncio.ensure_future(self.player.run())
            self.fig.canvas.flush_events()
            await asyncio.sleep(self.config.UI_POLL_S)
        if not runner.done():
            runner.cancel()


# =============================================================================
# Main
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Interactive traffic scenario replay')
    parser.add_argument('csv', type=str, help='Agent records (CSV)')
    parser.add_argument('--map', type=str, default=None, help='Map polylines (GeoJSON)')
    parser.add_argument('--case_id', type=int, default=None)
    parser.add_argument('--speed', type=float, default=Config.DEFAULT_SPEED)
    parser.add_argument('--height', type=int, default=Config.CANVAS_HEIGHT,
                        help='Canvas height in pixels')
    parser.add_argument('--margin', type=float, default=Config.BOUNDS_MARGIN,
                        help='Bounds padding as a fraction of the data range')
    parser.add_argument('--orientation', action='store_true', help='Show heading arrows')
    parser.add_argument('--labels', action='store_true', help='Show track id labels')
    parser.add_argument('--log_level', type=str, default='INFO')

    columns = Columns()
    for name in ('x', 'y', 'width', 'length', 'heading', 'frame_id',
                 'timestamp', 'category', 'track_id', 'case_id'):
        parser.add_argument(f'--{name}_col', type=str, default=getattr(columns, name),
                            help=f'CSV column for {name}')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.speed <= 0:
        parser.error('--speed must be positive')
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO),
                        format='%(levelname)s: %(message)s')

    logger.info("=" * 60)
    logger.info("Traffic Scenario Replay")
    logger.info("=" * 60)

    config = Config(CANVAS_HEIGHT=args.height, BOUNDS_MARGIN=args.margin)
    columns = Columns(**{name: getattr(args, f'{name}_col') for name in vars(Columns())})

    try:
        polylines = load_map_geojson(args.map) if args.map else None
        poses = load_agents_csv(args.csv, columns, case_id=args.case_id)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to read scenario data: {e}")
        return 1

    if not poses:
        logger.error("Scenario has no agent records")
        return 1

    app = ReplayApp(config)
    try:
        app.load(FrameIndex.build(poses), polylines)
    except InvalidBoundsError as e:
        logger.error(f"Cannot fit scenario to the canvas: {e}")
        return 1

    app.player.set_speed(args.speed)
    app.speed_slider.set_val(args.speed)
    app.player.set_show_orientation(args.orientation)
    app.player.set_show_labels(args.labels)

    logger.info("\nControls:")
    logger.info("  Wheel / drag: zoom / pan")
    logger.info("  Space or Play: pause / resume")
    logger.info("  Left / Right: seek, Up / Down: speed")
    logger.info("  o / l: heading arrows / labels")

    asyncio.run(app.serve())
    return 0


if __name__ == '__main__':
    sys.exit(main())
