"""Tests for bannershow.webscraping.images — ImageFetcher download and decode."""

import io
import os
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests
from unittest.mock import patch, MagicMock
from PIL import Image

from bannershow.core.errors import DecodeError, ErrorCode, InvalidURIError, NetworkError
from bannershow.webscraping.images import ImageFetcher, FetchedImage

from conftest import make_png


def _response(content: bytes) -> MagicMock:
    mock_response = MagicMock()
    mock_response.content = content
    mock_response.raise_for_status = MagicMock()
    return mock_response


class TestDecode:
    def test_decodes_png(self):
        image = ImageFetcher.decode(make_png("green", (5, 7)))
        assert image.size == (5, 7)
        assert image.format == "PNG"

    def test_garbage_raises_decode_error(self):
        with pytest.raises(DecodeError) as exc_info:
            ImageFetcher.decode(b"not an image", "https://x/a.png")
        assert exc_info.value.code == ErrorCode.DECODE_ERROR
        assert exc_info.value.message == "Invalid image: https://x/a.png"

    def test_truncated_payload_raises_decode_error(self):
        noise = Image.frombytes("RGB", (64, 64), os.urandom(64 * 64 * 3))
        buf = io.BytesIO()
        noise.save(buf, format="PNG")
        data = buf.getvalue()
        with pytest.raises(DecodeError):
            ImageFetcher.decode(data[: len(data) // 2])


class TestDownload:
    @patch("bannershow.webscraping.images.requests.get")
    def test_get_returns_bytes_and_image(self, mock_get):
        data = make_png()
        mock_get.return_value = _response(data)

        fetched = ImageFetcher(timeout=12).get("https://cdn.example.com/a.png")
        assert isinstance(fetched, FetchedImage)
        assert fetched.data == data
        assert fetched.image.size == (4, 3)
        mock_get.assert_called_once_with("https://cdn.example.com/a.png", timeout=12)

    @patch("bannershow.webscraping.images.requests.get")
    def test_transport_error_raises_network_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkError) as exc_info:
            ImageFetcher().get("https://cdn.example.com/a.png")
        assert isinstance(exc_info.value.cause, requests.ConnectionError)
        assert "refused" in exc_info.value.message
        assert "https://cdn.example.com/a.png" in exc_info.value.message

    @patch("bannershow.webscraping.images.requests.get")
    def test_http_error_raises_network_error(self, mock_get):
        mock_response = _response(b"")
        mock_response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        mock_get.return_value = mock_response

        with pytest.raises(NetworkError):
            ImageFetcher().get("https://cdn.example.com/missing.png")

    @patch("bannershow.webscraping.images.requests.get")
    def test_timeout_raises_network_error(self, mock_get):
        mock_get.side_effect = requests.Timeout("read timed out")

        with pytest.raises(NetworkError):
            ImageFetcher(timeout=0.1).get("https://cdn.example.com/slow.png")

    @patch("bannershow.webscraping.images.requests.get")
    def test_empty_body_raises_network_error(self, mock_get):
        mock_get.return_value = _response(b"")

        with pytest.raises(NetworkError) as exc_info:
            ImageFetcher().get("https://cdn.example.com/a.png")
        assert "no data" in exc_info.value.message

    @patch("bannershow.webscraping.images.requests.get")
    def test_undecodable_body_raises_decode_error(self, mock_get):
        mock_get.return_value = _response(b"<html>oops</html>")

        with pytest.raises(DecodeError):
            ImageFetcher().get("https://cdn.example.com/a.png")

    @patch("bannershow.webscraping.images.requests.get")
    def test_invalid_url_never_hits_network(self, mock_get):
        with pytest.raises(InvalidURIError):
            ImageFetcher().get("not a url")
        mock_get.assert_not_called()


class TestRetrieve:
    @pytest.mark.asyncio
    @patch("bannershow.webscraping.images.requests.get")
    async def test_retrieve_runs_off_loop(self, mock_get):
        mock_get.return_value = _response(make_png())

        fetched = await ImageFetcher().retrieve("https://cdn.example.com/a.png")
        assert fetched.image.size == (4, 3)

    @pytest.mark.asyncio
    @patch("bannershow.webscraping.images.requests.get")
    async def test_retrieve_uses_given_executor(self, mock_get):
        mock_get.return_value = _response(make_png())

        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="test-image") as executor:
            fetched = await ImageFetcher().retrieve("https://cdn.example.com/a.png",
                                                    executor=executor)
        assert fetched.data == make_png()
        mock_get.assert_called_once()
