"""Shared fixtures for the Sprite Sheet Studio tests."""
import io
from typing import Callable, List

import pytest
from PIL import Image


class ManualTimer:
    """Timer stand-in that only fires when the test calls fire()."""

    def __init__(self, interval: float, callback: Callable[[], None]) -> None:
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            self.callback()


class ManualTimerFactory:
    """Records every timer a clock creates."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def __call__(self, interval: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, callback)
        self.timers.append(timer)
        return timer

    @property
    def active(self) -> List[ManualTimer]:
        return [t for t in self.timers if t.started and not t.cancelled]

    @property
    def current(self) -> ManualTimer:
        (timer,) = self.active
        return timer


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()


def make_png(width: int, height: int) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", (width, height), (255, 0, 0, 128)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_512() -> bytes:
    return make_png(512, 512)
