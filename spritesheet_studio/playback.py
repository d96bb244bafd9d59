"""
Playback clock for grid sprite sheets.

A :class:`PlaybackClock` owns the animation state of one player: the current
frame index, whether it is running, the frame rate, and the resolved frame
geometry. While running it holds a repeating timer that advances the index
once per tick period.

States
------
* **Stopped** — index frozen, no timer held.
* **Running** — timer held, index advances by one per tick and wraps to 0.

Loading a new sheet always moves the clock to Stopped with index 0 and
cancels the outstanding timer before the new geometry is installed.

Concurrency
-----------
Timer callbacks arrive on a background thread; every transition takes the
clock's lock. Each armed timer carries a generation token, and a callback
whose token no longer matches is dropped, so a cancelled timer can never
advance the index against a newer sheet.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Protocol

from spritesheet_studio.geometry import (
    FrameGeometry,
    FrameOffset,
    GridShape,
    SheetDimensions,
    frame_offset,
    resolve_frame_geometry,
)

logger = logging.getLogger(__name__)

RenderListener = Callable[[FrameOffset, FrameGeometry], None]


# ---------------------------------------------------------------------------
# Timers
# ---------------------------------------------------------------------------

class Timer(Protocol):
    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


class RepeatingTimer:
    """
    Calls ``callback`` every ``interval`` seconds on a daemon thread.

    Deadlines are laid out on ``time.monotonic()`` so a slow callback does
    not shift every later tick.
    """

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name="sprite-playback-timer", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def cancel(self) -> None:
        self._stopped.set()

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()

    def _run(self) -> None:
        next_deadline = time.monotonic() + self.interval
        while not self._stopped.wait(max(0.0, next_deadline - time.monotonic())):
            self.callback()
            next_deadline += self.interval
            # Fell more than a period behind: skip ahead instead of bursting.
            now = time.monotonic()
            if next_deadline < now:
                next_deadline = now + self.interval


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass
class PlaybackState:
    """Mutable animation state owned by a single PlaybackClock."""
    current_frame_index: int = 0
    is_running: bool = False
    frames_per_second: float = 12.0


class PlaybackClock:
    """
    Advances a frame index on a fixed-period timer.

    Args:
        grid:          declared grid shape; ``frame_count`` defaults to
                       ``grid.frame_count``.
        fps:           initial frames per second.
        frame_count:   explicit total frame count, if it differs from the grid.
        timer_factory: ``(interval_seconds, callback) -> Timer``; defaults to
                       :class:`RepeatingTimer`.
        on_render:     called with the current offset and geometry after every
                       tick and every state change.
    """

    def __init__(
        self,
        grid: GridShape,
        fps: float = 12.0,
        frame_count: Optional[int] = None,
        timer_factory: TimerFactory = RepeatingTimer,
        on_render: Optional[RenderListener] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._grid = grid
        self._frame_count = grid.frame_count if frame_count is None else frame_count
        self._state = PlaybackState(frames_per_second=fps)
        self._sheet: Optional[SheetDimensions] = None
        self._geometry = FrameGeometry.unresolved()
        self._timer_factory = timer_factory
        self._timer: Optional[Timer] = None
        self._timer_token = 0
        self._closed = False
        self.on_render = on_render

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> PlaybackState:
        """Snapshot of the playback state."""
        with self._lock:
            return replace(self._state)

    @property
    def geometry(self) -> FrameGeometry:
        return self._geometry

    @property
    def grid(self) -> GridShape:
        return self._grid

    @property
    def sheet(self) -> Optional[SheetDimensions]:
        return self._sheet

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def current_frame_index(self) -> int:
        return self._state.current_frame_index

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def frames_per_second(self) -> float:
        return self._state.frames_per_second

    @property
    def tick_period_ms(self) -> Optional[float]:
        """Milliseconds between ticks, or None when fps is not positive."""
        fps = self._state.frames_per_second
        return 1000.0 / fps if fps > 0 else None

    @property
    def frame_offset(self) -> FrameOffset:
        with self._lock:
            return frame_offset(self._state.current_frame_index, self._geometry)

    @property
    def has_timer(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def play(self) -> None:
        """Stopped → Running. Resumes from the current index."""
        with self._lock:
            self._state.is_running = True
            self._rearm()
        self._render()

    def pause(self) -> None:
        """Running → Stopped. Freezes the current index."""
        with self._lock:
            self._state.is_running = False
            self._disarm()
        self._render()

    def toggle(self) -> bool:
        """Flip between play and pause; returns the new running flag."""
        with self._lock:
            running = not self._state.is_running
        if running:
            self.play()
        else:
            self.pause()
        return running

    def set_fps(self, fps: float) -> None:
        """Change the frame rate; the index is left untouched."""
        with self._lock:
            self._state.frames_per_second = fps
            self._rearm()
        self._render()

    def load_sheet(self, sheet: SheetDimensions) -> FrameGeometry:
        """
        Install a newly loaded sheet.

        The outstanding timer is cancelled first, then geometry is resolved
        and the clock is left Stopped at frame 0. Raises InvalidGeometry if
        the sheet or grid is degenerate; the clock is then left unresolved.
        """
        with self._lock:
            self._disarm()
            self._state.is_running = False
            self._state.current_frame_index = 0
            self._sheet = None
            self._geometry = FrameGeometry.unresolved()
            geometry = resolve_frame_geometry(sheet, self._grid, self._frame_count)
            self._sheet = sheet
            self._geometry = geometry
        logger.info(
            "Loaded sheet %dx%d → frame %.2fx%.2f (%d cols × %d rows)",
            sheet.width, sheet.height,
            geometry.frame_width, geometry.frame_height,
            geometry.columns, geometry.rows,
        )
        self._render()
        return geometry

    def unload(self) -> None:
        """Drop the current sheet (e.g. after a failed load)."""
        with self._lock:
            self._disarm()
            self._state.is_running = False
            self._state.current_frame_index = 0
            self._sheet = None
            self._geometry = FrameGeometry.unresolved()
        self._render()

    def set_grid(self, grid: GridShape, frame_count: Optional[int] = None) -> None:
        """
        Replace the grid shape.

        Geometry is re-resolved against the current sheet and the index
        restarts at 0; the running flag is kept.
        """
        with self._lock:
            self._disarm()
            self._grid = grid
            self._frame_count = grid.frame_count if frame_count is None else frame_count
            self._state.current_frame_index = 0
            self._geometry = FrameGeometry.unresolved()
            if self._sheet is not None:
                self._geometry = resolve_frame_geometry(
                    self._sheet, self._grid, self._frame_count
                )
            self._rearm()
        self._render()

    def tick(self) -> bool:
        """
        Advance one frame if playback can proceed.

        Returns True when the index moved.
        """
        with self._lock:
            moved = self._advance()
        if moved:
            self._render()
        return moved

    def close(self) -> None:
        """Stop playback and release the timer for good."""
        with self._lock:
            self._closed = True
            self._state.is_running = False
            self._disarm()

    def __enter__(self) -> "PlaybackClock":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _can_advance(self) -> bool:
        return (
            self._frame_count > 0
            and self._state.frames_per_second > 0
            and self._geometry.is_resolved
        )

    def _disarm(self) -> None:
        # Bumping the token invalidates callbacks already in flight.
        self._timer_token += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
            logger.debug("Playback timer cancelled")

    def _rearm(self) -> None:
        self._disarm()
        if self._closed or not (self._state.is_running and self._can_advance()):
            return
        token = self._timer_token
        interval = 1.0 / self._state.frames_per_second
        self._timer = self._timer_factory(interval, lambda: self._on_timer(token))
        self._timer.start()
        logger.debug("Playback timer armed at %.1f ms", interval * 1000.0)

    def _advance(self) -> bool:
        if not (self._state.is_running and self._can_advance()):
            return False
        self._state.current_frame_index = (
            self._state.current_frame_index + 1
        ) % self._frame_count
        return True

    def _on_timer(self, token: int) -> None:
        with self._lock:
            moved = token == self._timer_token and self._advance()
        if moved:
            self._render()

    def _render(self) -> None:
        listener = self.on_render
        if listener is None:
            return
        with self._lock:
            offset = frame_offset(self._state.current_frame_index, self._geometry)
            geometry = self._geometry
        listener(offset, geometry)
