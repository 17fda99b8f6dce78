"""Periodic breadcrumb sampler used while a stage is recording."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

from .config import TRACKING_INTERVAL_SECONDS
from .errors import RallyMapperError

__all__ = ["TrackingSampler"]

LOGGER = logging.getLogger(__name__)

TimerFactory = Callable[..., Any]


class TrackingSampler:
    """Call ``sample`` every ``interval_s`` seconds until stopped.

    Each tick runs ``sample`` while holding the sampler lock and ``stop``
    takes the same lock, so once ``stop`` returns no further sample can land.
    Ticks from an earlier start are discarded by generation number.
    """

    def __init__(
        self,
        sample: Callable[[], None],
        interval_s: float = TRACKING_INTERVAL_SECONDS,
        *,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        if interval_s <= 0:
            raise ValueError("interval_s must be > 0")
        self._sample = sample
        self._interval = float(interval_s)
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._active = False
        self._generation = 0

    @property
    def is_running(self) -> bool:
        return self._active

    @property
    def interval_s(self) -> float:
        return self._interval

    def start(self) -> None:
        with self._lock:
            if self._active:
                return
            self._active = True
            self._generation += 1
            self._schedule(self._generation)
        LOGGER.info("Auto tracking started (every %ss)", self._interval)

    def stop(self) -> None:
        with self._lock:
            was_active = self._active
            self._active = False
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if was_active:
            LOGGER.info("Auto tracking stopped")

    def _schedule(self, generation: int) -> None:
        timer = self._timer_factory(self._interval, self._tick, args=(generation,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _tick(self, generation: int) -> None:
        with self._lock:
            if not self._active or generation != self._generation:
                return
            try:
                self._sample()
            except RallyMapperError as exc:
                LOGGER.warning("Tracking sample skipped: %s", exc)
            self._schedule(generation)
