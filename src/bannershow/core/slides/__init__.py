"""Slides package — public API re-exports."""

from .manifest import ManifestConfig, Manifest, DEFAULT_INTERVAL
from .slide import SlideSpec, LoadedSlide

__all__ = [
    "ManifestConfig",
    "Manifest",
    "DEFAULT_INTERVAL",
    "SlideSpec",
    "LoadedSlide",
]
