from __future__ import annotations

from collections.abc import Callable

import pytest


class ManualTimer:
    """Deterministic timer driven by ``advance`` instead of a real clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.cleared: list[int] = []
        self._pending: dict[int, tuple[float, Callable[[], None]]] = {}
        self._next_handle = 0

    @property
    def armed(self) -> int:
        return len(self._pending)

    def set_timer(self, delay_seconds: float, callback: Callable[[], None]) -> int:
        self._next_handle += 1
        self._pending[self._next_handle] = (self.now + delay_seconds, callback)
        return self._next_handle

    def clear_timer(self, handle: int) -> None:
        self._pending.pop(handle, None)
        self.cleared.append(handle)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted((at, handle) for handle, (at, _) in self._pending.items() if at <= self.now)
        for _, handle in due:
            entry = self._pending.pop(handle, None)
            if entry is not None:
                entry[1]()


@pytest.fixture
def manual_timer() -> ManualTimer:
    return ManualTimer()
