"""
Sprite player: image loading wired to a playback clock.

Each load is modelled as a future that settles once, as either loaded
(geometry resolved, clock reset to frame 0) or failed (clock left empty, no
timer held). Starting a new load cancels the previous pending one and stops
playback immediately, so nothing ticks against the outgoing sheet.
"""
from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future
from enum import Enum
from functools import partial
from typing import Optional

from spritesheet_studio.geometry import GridShape, SheetDimensions
from spritesheet_studio.image_source import SheetSource, read_sheet_dimensions
from spritesheet_studio.playback import (
    PlaybackClock,
    RenderListener,
    RepeatingTimer,
    TimerFactory,
)

logger = logging.getLogger(__name__)


class LoadStatus(str, Enum):
    EMPTY = "empty"
    PENDING = "pending"
    LOADED = "loaded"
    FAILED = "failed"


class SpritePlayer:
    """Owns one sheet at a time and the clock that animates it."""

    def __init__(
        self,
        grid: GridShape,
        fps: float = 12.0,
        timer_factory: TimerFactory = RepeatingTimer,
        on_render: Optional[RenderListener] = None,
    ) -> None:
        self.clock = PlaybackClock(
            grid, fps=fps, timer_factory=timer_factory, on_render=on_render
        )
        self.status = LoadStatus.EMPTY
        self.source: Optional[SheetSource] = None
        self.error: Optional[BaseException] = None
        self._lock = threading.RLock()
        self._load_token = 0
        self._pending: Optional[Future] = None

    def load(
        self,
        source: SheetSource,
        executor: Optional[Executor] = None,
    ) -> "Future[SheetDimensions]":
        """
        Start loading ``source`` and return a future for its dimensions.

        Without an executor the image is read inline and the returned future
        is already settled. The future raises ImageLoadError on fetch/decode
        failure and InvalidGeometry if the sheet cannot be sliced; it is
        cancelled if another load starts before it settles.
        """
        result: Future = Future()
        with self._lock:
            self._load_token += 1
            token = self._load_token
            if self._pending is not None:
                self._pending.cancel()
            self._pending = result
            self.source = source
            self.status = LoadStatus.PENDING
            self.error = None
        self.clock.unload()

        if executor is None:
            read: Future = Future()
            try:
                read.set_result(read_sheet_dimensions(source))
            except Exception as exc:  # noqa: BLE001
                read.set_exception(exc)
        else:
            read = executor.submit(read_sheet_dimensions, source)

        read.add_done_callback(partial(self._finish_load, token, result))
        return result

    def _finish_load(self, token: int, result: Future, read: Future) -> None:
        # Re-entrant: clock.load_sheet() runs the render listener, which may
        # call close() or load() on this player.
        with self._lock:
            if token != self._load_token:
                logger.debug("Discarding superseded sheet load")
                return
            if read.cancelled():
                self._pending = None
                self.status = LoadStatus.EMPTY
                result.cancel()
                return

            error = read.exception()
            if error is None:
                try:
                    dims = read.result()
                    self.clock.load_sheet(dims)
                except Exception as exc:  # noqa: BLE001
                    error = exc

            # The listener closed the player or started another load; that
            # call already cancelled ``result``.
            if token != self._load_token:
                return
            self._pending = None

            if error is not None:
                self.status = LoadStatus.FAILED
                self.error = error
                logger.warning("Sheet load failed: %s", error)
                result.set_exception(error)
                return

            self.status = LoadStatus.LOADED
            result.set_result(dims)

    def close(self) -> None:
        """Cancel any pending load and release the clock's timer."""
        with self._lock:
            self._load_token += 1
            if self._pending is not None:
                self._pending.cancel()
                self._pending = None
        self.clock.close()

    def __enter__(self) -> "SpritePlayer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
