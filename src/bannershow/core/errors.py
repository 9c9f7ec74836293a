"""Error taxonomy for manifest and image loading."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Machine-readable failure kinds for a load attempt."""
    INVALID_URI = "INVALID_URI"
    NETWORK_ERROR = "NETWORK_ERROR"
    DECODE_ERROR = "DECODE_ERROR"
    INVALID_IMAGE_URI = "INVALID_IMAGE_URI"
    EMPTY_RESULT = "EMPTY_RESULT"


class ErrorResponse(BaseModel):
    """Serializable view of a failed load."""
    success: bool = False
    error_code: ErrorCode
    error_message: str
    details: Optional[dict] = None


class SlideshowError(Exception):
    """Base class for every failure that ends a load attempt."""

    def __init__(self, code: ErrorCode, message: str,
                 details: Optional[dict] = None,
                 cause: Optional[BaseException] = None):
        self.code = code
        self.message = message
        self.details = details
        self.cause = cause
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.code,
            error_message=self.message,
            details=self.details,
        )


class InvalidURIError(SlideshowError):
    def __init__(self, url: str):
        super().__init__(
            ErrorCode.INVALID_URI,
            f"Invalid URL: {url!r}",
            {"url": url},
        )


class NetworkError(SlideshowError):
    """Transport failure, HTTP error status, timeout or an empty body."""

    def __init__(self, url: str, cause: BaseException, what: str = "manifest"):
        super().__init__(
            ErrorCode.NETWORK_ERROR,
            f"Failed to download {what}: {cause} ({url})",
            {"url": url, "resource": what},
            cause=cause,
        )


class DecodeError(SlideshowError):
    """Payload is not a conforming manifest or not a decodable image."""

    def __init__(self, url: str, cause: BaseException, what: str = "manifest"):
        if what == "image":
            message = f"Invalid image: {url}"
        else:
            message = f"Failed to decode {what}: {cause}"
        super().__init__(
            ErrorCode.DECODE_ERROR,
            message,
            {"url": url, "resource": what},
            cause=cause,
        )


class InvalidImageURIError(SlideshowError):
    def __init__(self, ref: str):
        super().__init__(
            ErrorCode.INVALID_IMAGE_URI,
            f"Invalid image URL: {ref!r}",
            {"image": ref},
        )


class EmptyResultError(SlideshowError):
    def __init__(self):
        super().__init__(
            ErrorCode.EMPTY_RESULT,
            "No images were loaded.",
        )
