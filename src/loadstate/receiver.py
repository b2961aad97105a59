"""Lifecycle state machine for one asynchronous operation."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from functools import partial
from typing import Generic, TypeVar

from loguru import logger

from .errors import message_of, resolve_error_message
from .observable import Computed, ObservableCell, ReadOnlyObservable
from .types import ReceiverSnapshot, ReceiveState

T = TypeVar("T")


class Receiver(Generic[T]):
    """Own the state of one long-running task and its eventual result.

    Every state-resetting call advances a generation counter. A future handed
    to :meth:`start` only applies its outcome when the counter still matches
    the value it was started with, so results of superseded or reset
    operations never overwrite newer state.
    """

    def __init__(self, default_error_message: str, *, name: str = "receiver") -> None:
        self.name = name
        self.default_error_message = default_error_message
        self._generation = 0
        self._outstanding: dict[int, asyncio.Future[T]] = {}
        self._data: ObservableCell[ReceiverSnapshot[T]] = ObservableCell(
            ReceiverSnapshot.not_started(), name=f"loadstate.{name}.data"
        )
        self.is_busy: Computed[bool] = Computed(
            [self._data], lambda: self._data.value.is_busy, name=f"loadstate.{name}.busy"
        )

    @property
    def data(self) -> ReadOnlyObservable[ReceiverSnapshot[T]]:
        """Observable snapshot with state, error message and result."""
        return self._data

    @property
    def snapshot(self) -> ReceiverSnapshot[T]:
        return self._data.value

    @property
    def state(self) -> ReceiveState:
        return self._data.value.state

    @property
    def generation(self) -> int:
        return self._generation

    def can_start(self) -> bool:
        return self._data.value.state is not ReceiveState.PENDING

    def start(self, factory: Callable[[], Awaitable[T]] | None = None) -> Receiver[T]:
        """Mark the receiver pending and optionally run ``factory``.

        The factory is called immediately and must return an awaitable. It is
        scheduled on the running loop and its outcome is applied through
        :meth:`succeeded` or :meth:`failed`. Calling ``start`` while pending
        does nothing, the factory is not called.

        Returns the receiver itself so it can be created and started in one
        expression.
        """
        if not self.can_start():
            logger.debug("receiver.start.ignored name={} generation={}", self.name, self._generation)
            return self

        generation = self._advance()
        self._data.value = ReceiverSnapshot.pending()
        logger.debug("receiver.start name={} generation={}", self.name, generation)
        if factory is None:
            return self

        try:
            awaitable = factory()
        except Exception as exc:
            self._apply_failure(generation, exc)
            return self

        try:
            future = asyncio.ensure_future(awaitable, loop=asyncio.get_running_loop())
        except (TypeError, ValueError, RuntimeError) as exc:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            self._apply_failure(generation, exc)
            return self

        self._outstanding[generation] = future
        future.add_done_callback(partial(self._on_settled, generation))
        return self

    def succeeded(self, result: T) -> None:
        generation = self._advance()
        self._data.value = ReceiverSnapshot.received(result)
        logger.debug("receiver.received name={} generation={}", self.name, generation)

    def failed(self, message: str | None = None) -> None:
        generation = self._advance()
        error_message = resolve_error_message(message, self.default_error_message)
        self._data.value = ReceiverSnapshot.failed(error_message)
        logger.debug("receiver.failed name={} generation={} error={}", self.name, generation, error_message)

    def reset(self) -> None:
        """Move to unloaded, dropping any retained result.

        Outstanding futures are ignored once they settle.
        """
        generation = self._advance()
        self._data.value = ReceiverSnapshot.unloaded()
        logger.debug("receiver.reset name={} generation={}", self.name, generation)

    async def wait(self) -> ReceiverSnapshot[T]:
        """Wait for the current operation, if any, and return the snapshot."""
        future = self._outstanding.get(self._generation)
        if future is not None:
            await asyncio.wait([future])
        return self._data.value

    def _advance(self) -> int:
        self._generation += 1
        return self._generation

    def _is_current(self, generation: int) -> bool:
        if generation == self._generation:
            return True
        logger.debug(
            "receiver.settle.stale name={} generation={} current={}", self.name, generation, self._generation
        )
        return False

    def _apply_failure(self, generation: int, exc: BaseException) -> None:
        if self._is_current(generation):
            self.failed(message_of(exc))

    def _on_settled(self, generation: int, future: asyncio.Future[T]) -> None:
        self._outstanding.pop(generation, None)
        if future.cancelled():
            if self._is_current(generation):
                self.failed()
            return

        # Retrieve the exception even for stale futures so the loop never reports it.
        exc = future.exception()
        if exc is not None:
            self._apply_failure(generation, exc)
        elif self._is_current(generation):
            self.succeeded(future.result())
