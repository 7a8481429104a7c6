"""
Background saving on the asyncio event loop.

Two timers drive saving: a debounce timer re-armed by every edit, and a
periodic timer that flushes unsaved changes at a fixed interval. Each timer
has at most one live handle.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional


logger = logging.getLogger(__name__)


class AutoSaveScheduler:
    """Debounced and periodic auto-save."""

    def __init__(self, save: Callable[[], None], is_dirty: Callable[[], bool],
                 debounce_seconds: float = 2.5, interval_seconds: float = 15.0,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.save = save
        self.is_dirty = is_dirty
        self.debounce_seconds = debounce_seconds
        self.interval_seconds = interval_seconds
        self._loop = loop
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._interval_handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_running(self) -> bool:
        return self._interval_handle is not None

    @property
    def pending(self) -> bool:
        """Whether a debounced save is waiting."""
        return self._debounce_handle is not None

    def start(self) -> None:
        """
        Start the periodic flush.

        Must be called from a running event loop unless one was given.
        """
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._cancel_interval()
        self._interval_handle = self._loop.call_later(self.interval_seconds, self._tick)
        logger.info(f"Auto-save started (debounce {self.debounce_seconds}s, interval {self.interval_seconds}s)")

    def schedule(self) -> None:
        """Re-arm the debounce timer after an edit."""
        if self._loop is None:
            logger.debug("Auto-save not started; edit not scheduled")
            return
        self._cancel_debounce()
        self._debounce_handle = self._loop.call_later(self.debounce_seconds, self._flush)

    def stop(self) -> None:
        """Cancel both timers."""
        self._cancel_debounce()
        self._cancel_interval()
        logger.info("Auto-save stopped")

    def _flush(self) -> None:
        self._debounce_handle = None
        self._save_if_dirty()

    def _tick(self) -> None:
        self._interval_handle = self._loop.call_later(self.interval_seconds, self._tick)
        self._save_if_dirty()

    def _save_if_dirty(self) -> None:
        if self.is_dirty():
            logger.debug("Auto-saving document")
            self.save()

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _cancel_interval(self) -> None:
        if self._interval_handle is not None:
            self._interval_handle.cancel()
            self._interval_handle = None
