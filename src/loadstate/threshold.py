"""Debounce gate that delays showing transient loading states."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger

from .errors import ConfigurationError
from .observable import ObservableCell
from .types import ReceiveState


class Timer(Protocol):
    """Timer abstraction used by the gate."""

    def set_timer(self, delay_seconds: float, callback: Callable[[], None]) -> Any: ...

    def clear_timer(self, handle: Any) -> None: ...


class LoopTimer:
    """Timer backed by ``call_later`` on an asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    def set_timer(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(delay_seconds, callback)

    def clear_timer(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class RenderThresholdGate:
    """Decide whether a loading or not-started state may be shown yet.

    Without a threshold the gate is always open. With one, ``PENDING`` only
    opens the gate after ``threshold_ms`` has elapsed without another state
    change. Settled states open it at once and ``UNLOADED`` closes it again
    for the next cycle. ``NOT_STARTED`` leaves the gate as it was.
    """

    def __init__(self, threshold_ms: float | None = None, *, timer: Timer | None = None) -> None:
        if threshold_ms is not None and threshold_ms < 0:
            raise ConfigurationError(f"minimum render threshold must be non-negative, got {threshold_ms}")
        self.threshold_ms = threshold_ms
        self._timer: Timer | None = timer
        if threshold_ms is not None and timer is None:
            try:
                self._timer = LoopTimer()
            except RuntimeError as exc:
                raise ConfigurationError("a render threshold needs a timer or a running event loop") from exc
        self._handle: Any = None
        self._state: ReceiveState | None = None
        self.visible: ObservableCell[bool] = ObservableCell(threshold_ms is None, name="loadstate.gate.visible")

    @property
    def is_open(self) -> bool:
        return self.visible.value

    @property
    def timer_armed(self) -> bool:
        return self._handle is not None

    def observe(self, state: ReceiveState) -> None:
        """Feed the current dominant state; repeated states are ignored."""
        if state is self._state:
            return
        self._cancel()

        if state is ReceiveState.PENDING and self.threshold_ms is not None and not self.is_open:
            # The state is only recorded once the timer is armed.
            self._handle = self._timer.set_timer(self.threshold_ms / 1000, self._on_elapsed)
            self._state = state
            logger.debug("gate.timer.armed threshold_ms={}", self.threshold_ms)
            return

        self._state = state
        if self.threshold_ms is None or state.is_settled:
            self._set_open(True)
        elif state is ReceiveState.UNLOADED:
            self._set_open(False)

    def close(self) -> None:
        """Release the timer; call when the observing context ends."""
        self._cancel()

    def _on_elapsed(self) -> None:
        self._handle = None
        logger.debug("gate.timer.elapsed threshold_ms={}", self.threshold_ms)
        self._set_open(True)

    def _cancel(self) -> None:
        if self._handle is None:
            return
        self._timer.clear_timer(self._handle)
        self._handle = None
        logger.debug("gate.timer.cancelled")

    def _set_open(self, is_open: bool) -> None:
        if self.visible.value != is_open:
            self.visible.value = is_open
