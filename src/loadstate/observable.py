"""Minimal observable cells backed by blinker signals."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from typing import Any, Generic, TypeVar

from blinker import Signal
from loguru import logger

T = TypeVar("T")

Unsubscribe = Callable[[], None]


class ReadOnlyObservable(ABC, Generic[T]):
    """Read side of a cell: current value plus change subscription."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._changed = Signal(name)

    @property
    @abstractmethod
    def value(self) -> T:
        """Current value."""

    def subscribe(self, handler: Callable[[T], None]) -> Unsubscribe:
        """Call ``handler`` with the new value after every change."""

        def _receiver(sender: Any, *, value: T) -> None:
            try:
                handler(value)
            except Exception:
                logger.exception("observable.subscriber.error name={}", self.name)

        self._changed.connect(_receiver, weak=False)
        return lambda: self._changed.disconnect(_receiver)

    def _notify(self, value: T) -> None:
        self._changed.send(self, value=value)


class ObservableCell(ReadOnlyObservable[T]):
    """A mutable cell; every write replaces the value and notifies subscribers."""

    def __init__(self, initial: T, *, name: str = "loadstate.cell") -> None:
        super().__init__(name)
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self._value = value
        self._notify(value)


class Computed(ReadOnlyObservable[T]):
    """Read-only projection recomputed on demand from source cells."""

    def __init__(
        self,
        sources: Iterable[ReadOnlyObservable[Any]],
        compute: Callable[[], T],
        *,
        name: str = "loadstate.computed",
    ) -> None:
        super().__init__(name)
        self._compute = compute
        self._unsubscribes = [source.subscribe(self._on_source_changed) for source in sources]

    @property
    def value(self) -> T:
        return self._compute()

    def _on_source_changed(self, _value: Any) -> None:
        self._notify(self._compute())

    def detach(self) -> None:
        """Stop following the source cells."""
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
