"""BannerShow MCP Server - remote control and status for a banner slideshow."""

from mcp.server.fastmcp import FastMCP, Context, Image
import json
import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Any, Optional

from pydantic import BaseModel, Field

# SDK imports
from bannershow.core.controller import SlideshowController
from bannershow.core.loader import AssetLoader
from bannershow.intake.remote import RemoteControl, RemoteSignal
from bannershow.webscraping.images import ImageFetcher, DEFAULT_IMAGE_TIMEOUT
from bannershow.webscraping.manifest import ManifestFetcher, DEFAULT_MANIFEST_TIMEOUT

# Configure logging
logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger("BannerShow")


class ServerSettings(BaseModel):
    """Runtime configuration, read from BANNERSHOW_* environment variables."""
    manifest_url: str = ""
    manifest_timeout: float = Field(default=DEFAULT_MANIFEST_TIMEOUT, gt=0)
    image_timeout: float = Field(default=DEFAULT_IMAGE_TIMEOUT, gt=0)
    max_downloads: int = Field(default=0, ge=0)  # 0 = unbounded

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> "ServerSettings":
        env = os.environ if environ is None else environ
        return cls(
            manifest_url=env.get("BANNERSHOW_MANIFEST_URL", ""),
            manifest_timeout=float(env.get("BANNERSHOW_MANIFEST_TIMEOUT", DEFAULT_MANIFEST_TIMEOUT)),
            image_timeout=float(env.get("BANNERSHOW_IMAGE_TIMEOUT", DEFAULT_IMAGE_TIMEOUT)),
            max_downloads=int(env.get("BANNERSHOW_MAX_DOWNLOADS", 0)),
        )


def build_controller(settings: ServerSettings) -> SlideshowController:
    return SlideshowController(
        manifest_url=settings.manifest_url,
        manifest_fetcher=ManifestFetcher(timeout=settings.manifest_timeout),
        loader=AssetLoader(
            ImageFetcher(timeout=settings.image_timeout),
            max_concurrency=settings.max_downloads or None,
        ),
    )


# ── Global State ────────────────────────────────────────────────────────

_controller: Optional[SlideshowController] = None
_remote: Optional[RemoteControl] = None


def get_controller() -> SlideshowController:
    if _controller is None:
        raise Exception("Slideshow is not running. The server lifespan has not started.")
    return _controller


def _report(controller: SlideshowController) -> str:
    """JSON summary of the state, or the typed error response after a failed load."""
    error = controller.last_error
    if error is not None:
        return error.to_response().model_dump_json(indent=2)
    return json.dumps(controller.state.to_summary(), indent=2)


# ── Server Setup ────────────────────────────────────────────────────────

@asynccontextmanager
async def server_lifespan(server: FastMCP) -> AsyncIterator[Dict[str, Any]]:
    global _controller, _remote
    settings = ServerSettings.from_env()
    _controller = build_controller(settings)
    _remote = RemoteControl(_controller)
    try:
        logger.info("BannerShow server starting up")
        if settings.manifest_url:
            _controller.request_reload()
        else:
            logger.warning("BANNERSHOW_MANIFEST_URL is not set - call reload_slides with a URL")
        yield {}
    finally:
        _controller.close()
        _controller = None
        _remote = None
        logger.info("BannerShow server shut down")


mcp = FastMCP("BannerShow", lifespan=server_lifespan)


# ═══════════════════════════════════════════════════════════════════════
# PLAYBACK TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def reload_slides(ctx: Context, url: str = "") -> str:
    """Fetch the manifest again and download every image.

    Parameters:
    - url: Manifest URL (defaults to BANNERSHOW_MANIFEST_URL or the last URL used)
    """
    controller = get_controller()
    if url:
        controller.manifest_url = url
    await controller.reload()
    return _report(controller)


@mcp.tool()
async def next_slide(ctx: Context) -> str:
    """Skip to the next slide and restart its timer."""
    controller = get_controller()
    if not controller.state.is_ready:
        return f"Error: Slideshow is not ready (phase: {controller.state.phase.value})."
    controller.advance()
    return json.dumps(controller.state.to_summary(), indent=2)


@mcp.tool()
async def previous_slide(ctx: Context) -> str:
    """Go back to the previous slide and restart its timer."""
    controller = get_controller()
    if not controller.state.is_ready:
        return f"Error: Slideshow is not ready (phase: {controller.state.phase.value})."
    controller.retreat()
    return json.dumps(controller.state.to_summary(), indent=2)


@mcp.tool()
async def press_remote(ctx: Context, button: str) -> str:
    """Simulate a remote-control button press.

    Parameters:
    - button: play_pause (reloads), next/right, or previous/left
    """
    signal = RemoteControl.from_name(button)
    if signal is None:
        available = ", ".join(s.value for s in RemoteSignal)
        return f"Error: Unknown button '{button}'. Available: {available}"

    controller = get_controller()
    task = _remote.handle(signal)
    if task is not None:
        await task
    return _report(controller)


# ═══════════════════════════════════════════════════════════════════════
# STATUS TOOLS
# ═══════════════════════════════════════════════════════════════════════

@mcp.tool()
async def get_playback_state(ctx: Context) -> str:
    """Get the slideshow phase, load progress or error, and the current slide."""
    controller = get_controller()
    summary = controller.state.to_summary()
    summary["manifest_url"] = controller.manifest_url
    summary["default_interval"] = controller.config.interval
    if controller.state.is_ready:
        summary["current_interval"] = controller.current_interval()
    if controller.last_error is not None:
        summary["error"] = controller.last_error.to_response().model_dump(mode="json")
    return json.dumps(summary, indent=2)


@mcp.tool()
async def list_slides(ctx: Context) -> str:
    """List loaded slides in playback order."""
    state = get_controller().state
    if not state.slides:
        return f"No slides loaded (phase: {state.phase.value})."
    return json.dumps([s.to_summary() for s in state.slides], indent=2)


@mcp.tool()
async def get_current_slide(ctx: Context) -> Image:
    """Return the image of the slide currently on screen."""
    slide = get_controller().current_slide
    if slide is None:
        raise Exception("No slide on screen. Use reload_slides first.")
    return Image(data=slide.data, format=slide.format)


# ═══════════════════════════════════════════════════════════════════════
# MCP PROMPT
# ═══════════════════════════════════════════════════════════════════════

@mcp.prompt()
def slideshow_workflow() -> str:
    """How to drive the banner slideshow"""
    return """You are operating a banner slideshow. Follow this workflow:

1. **Load**: Use reload_slides() (optionally with a manifest URL) to fetch the
   manifest and download every banner. The call returns once the slideshow is
   ready or has failed.

2. **Check**: Use get_playback_state() to see the phase (loading, error, ready),
   the download progress, or the error message.

3. **Navigate**: Use next_slide() and previous_slide(), or press_remote() with
   play_pause / next / previous. Slides also advance on their own timers.

4. **Inspect**: Use list_slides() for the playback order and get_current_slide()
   to view the banner on screen.

Tips:
- A single broken image fails the whole load; fix the manifest and reload.
- Each slide uses its own interval when set, otherwise the manifest default.
"""


# ── Main ────────────────────────────────────────────────────────────────

def main():
    """Run the MCP server"""
    mcp.run()


if __name__ == "__main__":
    main()
