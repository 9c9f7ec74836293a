"""Slide data models, before and after the image is downloaded."""

import uuid
from typing import Any, Optional
from pydantic import BaseModel, Field


class SlideSpec(BaseModel):
    """A slide as declared in the manifest.

    ``order`` need not be unique or contiguous.
    """
    title: Optional[str] = None
    image_ref: str = Field(alias="image")
    interval_seconds: Optional[float] = Field(default=None, alias="interval", gt=0)
    order: int

    model_config = {"frozen": True, "populate_by_name": True}


class LoadedSlide(BaseModel):
    """A slide whose image has been downloaded and decoded.

    ``image`` is the decoded ``PIL.Image.Image``; ``data`` keeps the raw
    payload so outer layers can re-serve it without re-encoding.
    """
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    title: Optional[str] = None
    image_ref: str
    interval_seconds: Optional[float] = None
    order_key: int
    data: bytes = Field(repr=False)
    image: Any = Field(repr=False)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @classmethod
    def from_spec(cls, spec: SlideSpec, data: bytes, image: Any) -> "LoadedSlide":
        return cls(
            title=spec.title,
            image_ref=spec.image_ref,
            interval_seconds=spec.interval_seconds,
            order_key=spec.order,
            data=data,
            image=image,
        )

    @property
    def format(self) -> str:
        fmt = getattr(self.image, "format", None)
        return (fmt or "png").lower()

    @property
    def size(self) -> tuple[int, int]:
        return tuple(getattr(self.image, "size", (0, 0)))

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "order": self.order_key,
            "title": self.title or "(untitled)",
            "image": self.image_ref,
            "interval": self.interval_seconds,
            "format": self.format,
            "size": list(self.size),
        }
