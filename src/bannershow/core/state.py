"""Observable playback state: loading / error / ready plus the current index."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, model_validator

from .slides import LoadedSlide


class Phase(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class PlaybackState(BaseModel):
    """An immutable snapshot of the slideshow.

    The controller publishes a new snapshot on every transition; readers
    never see a partially installed slide collection.
    """
    phase: Phase = Phase.LOADING
    message: Optional[str] = None
    slides: tuple[LoadedSlide, ...] = ()
    current_index: int = 0
    loaded_count: int = 0
    total_count: int = 0

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_phase(self) -> "PlaybackState":
        if self.phase is Phase.READY:
            if not self.slides:
                raise ValueError("ready state requires at least one slide")
            if not 0 <= self.current_index < len(self.slides):
                raise ValueError(
                    f"current_index {self.current_index} out of range "
                    f"for {len(self.slides)} slides"
                )
        else:
            if self.slides:
                raise ValueError(f"{self.phase.value} state cannot hold slides")
            if self.phase is Phase.ERROR and not self.message:
                raise ValueError("error state requires a message")
        if self.phase is Phase.LOADING and not 0 <= self.loaded_count <= self.total_count:
            raise ValueError("loaded_count must lie within total_count")
        return self

    # ── Constructors ────────────────────────────────────────────────────

    @classmethod
    def loading(cls, loaded_count: int = 0, total_count: int = 0) -> "PlaybackState":
        return cls(phase=Phase.LOADING, loaded_count=loaded_count,
                   total_count=total_count)

    @classmethod
    def error(cls, message: str) -> "PlaybackState":
        return cls(phase=Phase.ERROR, message=message)

    @classmethod
    def ready(cls, slides, current_index: int = 0) -> "PlaybackState":
        slides = tuple(slides)
        return cls(phase=Phase.READY, slides=slides, current_index=current_index,
                   loaded_count=len(slides), total_count=len(slides))

    # ── Derived snapshots ───────────────────────────────────────────────

    def with_progress(self, loaded_count: int, total_count: Optional[int] = None) -> "PlaybackState":
        """Loading snapshot with an updated counter. Never moves backwards."""
        total = self.total_count if total_count is None else total_count
        return PlaybackState.loading(max(self.loaded_count, loaded_count), total)

    def with_index(self, index: int) -> "PlaybackState":
        return PlaybackState.ready(self.slides, index % len(self.slides))

    # ── Accessors ───────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self.phase is Phase.LOADING

    @property
    def is_ready(self) -> bool:
        return self.phase is Phase.READY

    @property
    def is_error(self) -> bool:
        return self.phase is Phase.ERROR

    @property
    def current_slide(self) -> Optional[LoadedSlide]:
        if 0 <= self.current_index < len(self.slides):
            return self.slides[self.current_index]
        return None

    def to_summary(self) -> dict:
        summary = {
            "phase": self.phase.value,
            "slide_count": len(self.slides),
        }
        if self.phase is Phase.LOADING:
            summary["loaded_count"] = self.loaded_count
            summary["total_count"] = self.total_count
        elif self.phase is Phase.ERROR:
            summary["message"] = self.message
        else:
            slide = self.current_slide
            summary["current_index"] = self.current_index
            summary["current_slide"] = slide.to_summary() if slide else None
        return summary
