"""Shared fakes: deterministic timers, gated image and manifest sources."""

import asyncio
import io
from concurrent.futures import Executor
from typing import Callable, Optional

import pytest
from PIL import Image

from bannershow.core.slides import Manifest
from bannershow.webscraping.images import FetchedImage, ImageFetcher


def make_png(color: str = "red", size: tuple[int, int] = (4, 3)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeTimer:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeScheduler:
    """Records every scheduled timer; tests fire them by hand."""

    def __init__(self):
        self.timers: list[FakeTimer] = []

    def call_later(self, delay, callback):
        timer = FakeTimer(delay, callback)
        self.timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def fire(self) -> FakeTimer:
        (timer,) = self.pending
        timer.fired = True
        timer.callback()
        return timer


class FakeImageSource:
    """Serves canned payloads; a URL with a gate waits until the gate is opened."""

    def __init__(self, payloads: dict, gates: Optional[dict] = None):
        self.payloads = payloads
        self.gates = gates if gates is not None else {}
        self.requested: list[str] = []
        self.completed: list[str] = []
        self.cancelled: list[str] = []
        self.executors: list[Executor] = []

    async def retrieve(self, url: str, executor: Optional[Executor] = None) -> FetchedImage:
        self.requested.append(url)
        self.executors.append(executor)
        try:
            if url in self.gates:
                await self.gates[url].wait()
            else:
                await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled.append(url)
            raise
        payload = self.payloads[url]
        if isinstance(payload, BaseException):
            self.completed.append(url)
            raise payload
        image = ImageFetcher.decode(payload, url)
        self.completed.append(url)
        return FetchedImage(data=payload, image=image)


class FakeManifestFetcher:
    def __init__(self, manifests: dict, gates: Optional[dict] = None):
        self.manifests = manifests
        self.gates = gates if gates is not None else {}
        self.requested: list[str] = []

    async def fetch(self, url: str) -> Manifest:
        self.requested.append(url)
        if url in self.gates:
            await self.gates[url].wait()
        result = self.manifests[url]
        if isinstance(result, BaseException):
            raise result
        return result


def manifest(interval: float = 10, slides: Optional[list] = None) -> Manifest:
    return Manifest.model_validate({"config": {"interval": interval}, "slides": slides or []})


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def png() -> bytes:
    return make_png()
