"""Remote-control input: three discrete signals mapped onto the controller.

Any input source (MCP tools, a web remote, a keyboard loop, GPIO) can feed
signals in. ``handle`` must run on the event loop; ``post`` may be called from
any thread.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from ..core.controller import SlideshowController

logger = logging.getLogger("BannerShow.intake.remote")


class RemoteSignal(str, Enum):
    PLAY_PAUSE = "play_pause"
    NEXT = "next"
    PREVIOUS = "previous"


_ALIASES: dict[str, RemoteSignal] = {
    "play_pause": RemoteSignal.PLAY_PAUSE,
    "playpause": RemoteSignal.PLAY_PAUSE,
    "play": RemoteSignal.PLAY_PAUSE,
    "pause": RemoteSignal.PLAY_PAUSE,
    "reload": RemoteSignal.PLAY_PAUSE,
    "select": RemoteSignal.PLAY_PAUSE,
    "next": RemoteSignal.NEXT,
    "right": RemoteSignal.NEXT,
    "prev": RemoteSignal.PREVIOUS,
    "previous": RemoteSignal.PREVIOUS,
    "left": RemoteSignal.PREVIOUS,
}


class RemoteControl:
    """Routes remote signals to a controller it is explicitly given."""

    def __init__(self, controller: SlideshowController,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.controller = controller
        self._loop = loop

    @staticmethod
    def from_name(name: str) -> Optional[RemoteSignal]:
        """Translate a button or command name into a signal; None if unknown."""
        key = name.strip().lower().replace("-", "_").replace(" ", "_")
        return _ALIASES.get(key)

    def handle(self, signal: RemoteSignal) -> Optional[asyncio.Task]:
        """Dispatch one signal. Returns the reload task for PLAY_PAUSE."""
        logger.debug(f"Remote signal: {signal.value}")
        if signal is RemoteSignal.PLAY_PAUSE:
            return self.controller.request_reload()
        if signal is RemoteSignal.NEXT:
            self.controller.advance()
        elif signal is RemoteSignal.PREVIOUS:
            self.controller.retreat()
        return None

    def post(self, signal: RemoteSignal) -> None:
        """Thread-safe entry point: hand the signal to the controller's loop."""
        if self._loop is None:
            raise RuntimeError("RemoteControl.post needs the loop the controller runs on")
        self._loop.call_soon_threadsafe(self.handle, signal)
