"""Slideshow controller: load, install, and cycle through slides.

All methods must be called from the thread running the event loop. Timer
callbacks and load completions are delivered on that loop too, so state is
never touched concurrently.
"""

import asyncio
import logging
from typing import Callable, Optional

from .errors import InvalidURIError, SlideshowError
from .loader import AssetLoader
from .slides import DEFAULT_INTERVAL, LoadedSlide, ManifestConfig
from .state import PlaybackState
from .timer import LoopScheduler, TimerHandle, TimerScheduler
from ..webscraping.manifest import ManifestFetcher

logger = logging.getLogger("BannerShow.core.controller")

StateListener = Callable[[PlaybackState], None]


class SlideshowController:
    """Owns the loaded slides, the current position and the advance timer."""

    def __init__(self, manifest_url: str = "",
                 manifest_fetcher: Optional[ManifestFetcher] = None,
                 loader: Optional[AssetLoader] = None,
                 scheduler: Optional[TimerScheduler] = None):
        self.manifest_url = manifest_url
        self._manifest_fetcher = manifest_fetcher or ManifestFetcher()
        self._loader = loader or AssetLoader()
        self._scheduler = scheduler or LoopScheduler()

        self._state = PlaybackState.loading()
        self._config = ManifestConfig(interval=DEFAULT_INTERVAL)
        self._timer: Optional[TimerHandle] = None
        self._generation = 0
        self._load_task: Optional[asyncio.Task] = None
        self._last_error: Optional[SlideshowError] = None
        self._listeners: list[StateListener] = []
        self._closed = False

    # ── Observable state ────────────────────────────────────────────────

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def config(self) -> ManifestConfig:
        return self._config

    @property
    def current_slide(self) -> Optional[LoadedSlide]:
        return self._state.current_slide

    @property
    def last_error(self) -> Optional[SlideshowError]:
        """The typed failure behind the current ``error`` phase, if any."""
        return self._last_error if self._state.is_error else None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with every new snapshot. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _publish(self, state: PlaybackState) -> None:
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")

    # ── Loading ─────────────────────────────────────────────────────────

    async def reload(self, url: Optional[str] = None) -> PlaybackState:
        """Discard the current slides and load the manifest at ``url`` again.

        Returns the state this request produced, or the current state when a
        newer reload superseded it.
        """
        if self._closed:
            return self._state

        self._cancel_timer()
        if self._load_task is not None and not self._load_task.done():
            logger.info("Superseding in-flight load")
            self._load_task.cancel()

        self._generation += 1
        generation = self._generation
        self._last_error = None
        self._publish(PlaybackState.loading())

        target = url or self.manifest_url
        task = asyncio.ensure_future(self._load(target, generation))
        self._load_task = task
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled() and generation != self._generation:
                return self._state
            raise

    def request_reload(self, url: Optional[str] = None) -> asyncio.Task:
        """Schedule a reload from synchronous code running on the loop."""
        return asyncio.ensure_future(self.reload(url))

    async def _load(self, url: str, generation: int) -> PlaybackState:
        try:
            if not url:
                raise InvalidURIError(url)
            manifest = await self._manifest_fetcher.fetch(url)
            if generation != self._generation:
                return self._state

            specs = manifest.ordered_slides()
            self._publish(PlaybackState.loading(0, len(specs)))

            def on_progress(count: int) -> None:
                if generation == self._generation and self._state.is_loading:
                    self._publish(self._state.with_progress(count))

            slides = await self._loader.load(specs, on_progress=on_progress)
        except SlideshowError as e:
            return self._fail(generation, e.message, e)
        except Exception as e:
            logger.exception("Unexpected failure while loading slides")
            return self._fail(generation, f"Unexpected error: {e}")

        if generation != self._generation:
            logger.info("Discarding stale load result")
            return self._state

        self._config = manifest.config
        self._publish(PlaybackState.ready(slides))
        logger.info(f"Slideshow ready with {len(slides)} slides")
        self._restart_timer()
        return self._state

    def _fail(self, generation: int, message: str,
              error: Optional[SlideshowError] = None) -> PlaybackState:
        if generation != self._generation:
            return self._state
        self._last_error = error
        logger.warning(f"Load failed: {message}")
        self._cancel_timer()
        self._publish(PlaybackState.error(message))
        return self._state

    # ── Navigation ──────────────────────────────────────────────────────

    def advance(self) -> None:
        """Move to the next slide, wrapping from the last to the first."""
        if self._closed or not self._state.slides:
            return
        self._publish(self._state.with_index(self._state.current_index + 1))
        self._restart_timer()

    def retreat(self) -> None:
        """Move to the previous slide, wrapping from the first to the last."""
        if self._closed or not self._state.slides:
            return
        count = len(self._state.slides)
        self._publish(self._state.with_index((self._state.current_index - 1 + count) % count))
        self._restart_timer()

    def current_interval(self) -> float:
        slide = self._state.current_slide
        if slide is not None and slide.interval_seconds is not None:
            return slide.interval_seconds
        return self._config.interval

    # ── Timer ───────────────────────────────────────────────────────────

    def _restart_timer(self) -> None:
        self._cancel_timer()
        if self._closed or not self._state.is_ready:
            return
        self._timer = self._scheduler.call_later(self.current_interval(), self._on_timer)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        self._timer = None
        self.advance()

    # ── Teardown ────────────────────────────────────────────────────────

    def close(self) -> None:
        """Stop the timer and abandon any in-flight load."""
        if self._closed:
            return
        self._closed = True
        self._cancel_timer()
        self._generation += 1
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._listeners.clear()
        logger.info("Slideshow controller closed")
