"""Image download and decode for slide assets."""

import asyncio
import io
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Optional

import requests
from PIL import Image, UnidentifiedImageError

from ..core.errors import DecodeError, NetworkError
from .urls import parse_url

logger = logging.getLogger("BannerShow.webscraping.images")

DEFAULT_IMAGE_TIMEOUT = 30.0


@dataclass
class FetchedImage:
    """Raw payload plus its decoded handle."""
    data: bytes
    image: Image.Image


class ImageFetcher:
    """Downloads an image over HTTP and decodes it with Pillow."""

    def __init__(self, timeout: float = DEFAULT_IMAGE_TIMEOUT):
        self.timeout = timeout

    def download(self, url: str) -> bytes:
        """GET the image bytes. Raises NetworkError on any transport failure."""
        url = parse_url(url)
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Image download failed for {url}: {e}")
            raise NetworkError(url, e, what="image") from e

        data = response.content
        if not data:
            raise NetworkError(url, ValueError("no data received"), what="image")
        return data

    @staticmethod
    def decode(data: bytes, url: str = "") -> Image.Image:
        """Decode ``data`` fully so a truncated payload fails here, not later."""
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            logger.warning(f"Could not decode image {url}: {e}")
            raise DecodeError(url, e, what="image") from e
        return image

    def get(self, url: str) -> FetchedImage:
        data = self.download(url)
        image = self.decode(data, url)
        logger.info(f"Loaded image {url} ({image.format}, {image.size[0]}x{image.size[1]})")
        return FetchedImage(data=data, image=image)

    async def retrieve(self, url: str, executor: Optional[Executor] = None) -> FetchedImage:
        """Download and decode off the event loop, on ``executor`` when given."""
        if executor is None:
            return await asyncio.to_thread(self.get, url)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self.get, url)
