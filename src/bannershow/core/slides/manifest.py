"""Manifest models: the remote JSON document describing a slideshow."""

from pydantic import BaseModel, Field

from .slide import SlideSpec

DEFAULT_INTERVAL = 10.0  # seconds, used until a manifest is installed


class ManifestConfig(BaseModel):
    """Global playback settings."""
    interval: float = Field(gt=0)

    model_config = {"frozen": True}


class Manifest(BaseModel):
    """A parsed manifest. Unknown JSON keys are ignored."""
    config: ManifestConfig
    slides: list[SlideSpec]

    def ordered_slides(self) -> list[SlideSpec]:
        """Slides ascending by ``order``; ties keep their manifest position."""
        return sorted(self.slides, key=lambda s: s.order)
