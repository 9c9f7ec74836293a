"""Remote manifest retrieval."""

import asyncio
import logging

import requests
from pydantic import ValidationError

from ..core.errors import DecodeError, NetworkError
from ..core.slides import Manifest
from .urls import parse_url

logger = logging.getLogger("BannerShow.webscraping.manifest")

DEFAULT_MANIFEST_TIMEOUT = 30.0

# Bypass any intermediate HTTP cache
NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "Accept": "application/json",
}


class ManifestFetcher:
    """Fetches and parses the slideshow manifest, bypassing caches."""

    def __init__(self, timeout: float = DEFAULT_MANIFEST_TIMEOUT):
        self.timeout = timeout

    def get(self, url: str) -> Manifest:
        """Download and parse the manifest at ``url``.

        Raises:
            InvalidURIError: the URL cannot be parsed.
            NetworkError: transport failure, HTTP error status, timeout or empty body.
            DecodeError: the payload is not a conforming manifest.
        """
        url = parse_url(url)
        logger.info(f"Fetching manifest {url}")
        try:
            response = requests.get(url, headers=NO_CACHE_HEADERS, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Manifest download failed: {e}")
            raise NetworkError(url, e) from e

        data = response.content
        if not data:
            raise NetworkError(url, ValueError("no data received"))

        try:
            manifest = Manifest.model_validate_json(data)
        except ValidationError as e:
            logger.warning(f"Manifest at {url} is malformed: {e.error_count()} error(s)")
            raise DecodeError(url, e) from e

        logger.info(
            f"Manifest parsed: {len(manifest.slides)} slides, "
            f"default interval {manifest.config.interval}s"
        )
        return manifest

    async def fetch(self, url: str) -> Manifest:
        return await asyncio.to_thread(self.get, url)
