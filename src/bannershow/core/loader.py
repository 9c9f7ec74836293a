"""Concurrent download of every slide image, joined by a single barrier."""

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional, Protocol, Sequence

from .errors import EmptyResultError, InvalidImageURIError, InvalidURIError
from .slides import LoadedSlide, SlideSpec
from ..webscraping.images import FetchedImage, ImageFetcher
from ..webscraping.urls import parse_url

logger = logging.getLogger("BannerShow.core.loader")

ProgressCallback = Callable[[int], None]


class ImageSource(Protocol):
    async def retrieve(self, url: str, executor: Optional[Executor] = None) -> FetchedImage: ...


class AssetLoader:
    """Downloads all slide images concurrently and returns them in ``order``.

    Completion order never leaks into the result: each download owns one
    slot, and slots are read in canonical order once every download has
    finished. When several downloads fail, the error of the lowest-``order``
    slide is reported.

    Each batch runs on its own thread pool with one worker per slide (or
    ``max_concurrency`` workers when set), so the blocking downloads of a
    batch all run at once instead of queueing behind the event loop's
    default executor.
    """

    def __init__(self, fetcher: Optional[ImageSource] = None,
                 max_concurrency: Optional[int] = None):
        self._fetcher = fetcher or ImageFetcher()
        self.max_concurrency = max_concurrency or None

    def _pool_size(self, batch_size: int) -> int:
        if self.max_concurrency:
            return min(self.max_concurrency, batch_size)
        return batch_size

    async def load(self, specs: Sequence[SlideSpec],
                   on_progress: Optional[ProgressCallback] = None) -> list[LoadedSlide]:
        ordered = sorted(specs, key=lambda s: s.order)
        if not ordered:
            raise EmptyResultError()

        executor = ThreadPoolExecutor(max_workers=self._pool_size(len(ordered)),
                                      thread_name_prefix="bannershow-image")
        try:
            return await self._load_batch(ordered, executor, on_progress)
        finally:
            # Queued downloads of an abandoned batch never start
            executor.shutdown(wait=False, cancel_futures=True)

    async def _load_batch(self, ordered: list[SlideSpec], executor: Executor,
                          on_progress: Optional[ProgressCallback]) -> list[LoadedSlide]:
        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency else None
        loaded_count = 0

        async def load_one(spec: SlideSpec) -> LoadedSlide:
            nonlocal loaded_count
            if semaphore is None:
                fetched = await self._fetcher.retrieve(spec.image_ref, executor=executor)
            else:
                async with semaphore:
                    fetched = await self._fetcher.retrieve(spec.image_ref, executor=executor)
            slide = LoadedSlide.from_spec(spec, fetched.data, fetched.image)
            loaded_count += 1
            if on_progress is not None:
                on_progress(loaded_count)
            return slide

        tasks: list[asyncio.Task] = []
        for spec in ordered:
            try:
                parse_url(spec.image_ref)
            except InvalidURIError:
                logger.warning(f"Aborting batch on invalid image URL {spec.image_ref!r}")
                await _cancel_all(tasks)
                raise InvalidImageURIError(spec.image_ref)
            tasks.append(asyncio.ensure_future(load_one(spec)))

        logger.info(f"Downloading {len(tasks)} images")
        # Cancelling the caller cancels gather, which cancels every child
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        loaded: list[LoadedSlide] = []
        for spec, outcome in zip(ordered, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(f"Batch failed at slide order={spec.order}: {outcome}")
                raise outcome
            loaded.append(outcome)

        if not loaded:
            raise EmptyResultError()

        logger.info(f"Loaded {len(loaded)} images")
        return sorted(loaded, key=lambda s: s.order_key)


async def _cancel_all(tasks: list[asyncio.Task]) -> None:
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
