"""
Voice Scheduler - timers around listening and speaking

Three timers, each cancellable, none overlapping itself:
1. Debounce: interim transcripts restart the window; only the settled
   text is dispatched
2. Listen: after a prompt is spoken, wait a cool-down before listening
   again so the assistant does not hear itself
3. Resume grace: right after the host app comes back to the foreground
   listening is held off, and a listen attempt is retried later

All timers run on the asyncio event loop of the caller. Callbacks run
on that loop too.
"""

import asyncio
from typing import Callable, Optional

import structlog

from shopsahai.config import VoiceSettings


logger = structlog.get_logger(__name__)


class OneShotTimer:
    """A named timer that can be restarted or cancelled."""

    def __init__(self, name: str):
        self.name = name
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def start(self, delay_ms: int, callback: Callable[..., None], *args) -> None:
        """(Re)start the timer. A pending callback is dropped."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay_ms / 1000, self._fire, callback, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., None], args: tuple) -> None:
        self._handle = None
        callback(*args)


class VoiceScheduler:
    """Debounce, cool-down and resume-grace timing for one voice session."""

    def __init__(self, settings: VoiceSettings):
        self._settings = settings
        self.debounce_timer = OneShotTimer("debounce")
        self.listen_timer = OneShotTimer("listen")
        self._resumed_at: Optional[float] = None

    def debounce(self, callback: Callable[..., None], *args) -> None:
        """Run callback once deliveries have been quiet for the debounce window."""
        self.debounce_timer.start(self._settings.debounce_ms, callback, *args)

    def schedule_listen(self, callback: Callable[[], None], delay_ms: Optional[int] = None) -> None:
        """Start listening after the cool-down (or the given delay)."""
        delay = self._settings.speech_cooldown_ms if delay_ms is None else delay_ms
        self.listen_timer.start(delay, callback)

    def cancel_listen(self) -> None:
        if self.listen_timer.pending:
            logger.debug("auto_listen_cancelled")
        self.listen_timer.cancel()

    def mark_resumed(self) -> None:
        """Record that the host app just came back to the foreground."""
        self._resumed_at = asyncio.get_running_loop().time()

    def in_resume_grace(self) -> bool:
        if self._resumed_at is None:
            return False
        elapsed_ms = (asyncio.get_running_loop().time() - self._resumed_at) * 1000
        return elapsed_ms < self._settings.resume_grace_ms

    @property
    def resume_retry_ms(self) -> int:
        return self._settings.resume_retry_ms

    def cancel_all(self) -> None:
        self.debounce_timer.cancel()
        self.listen_timer.cancel()
