"""Shared data types for receivers and aggregation."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ReceiveState(str, Enum):
    """Lifecycle state of one asynchronous operation."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    RECEIVED = "received"
    FAILED = "failed"
    UNLOADED = "unloaded"

    @property
    def is_settled(self) -> bool:
        """Whether the state is final for visibility purposes."""
        return self in (ReceiveState.RECEIVED, ReceiveState.FAILED)


@dataclass(frozen=True)
class ReceiverSnapshot(Generic[T]):
    """Immutable point-in-time value of a receiver.

    ``result`` only carries meaning when ``state`` is ``RECEIVED`` and
    ``error_message`` is only non-empty when ``state`` is ``FAILED``; other
    shapes are rejected. The named constructors build the legal ones.
    """

    state: ReceiveState
    error_message: str = ""
    result: T | None = None

    def __post_init__(self) -> None:
        if self.result is not None and self.state is not ReceiveState.RECEIVED:
            raise ValueError(f"a {self.state.value} snapshot cannot carry a result")
        if self.error_message and self.state is not ReceiveState.FAILED:
            raise ValueError(f"a {self.state.value} snapshot cannot carry an error message")

    @property
    def is_busy(self) -> bool:
        return self.state is ReceiveState.PENDING

    @property
    def has_result(self) -> bool:
        return self.state is ReceiveState.RECEIVED

    @classmethod
    def not_started(cls) -> ReceiverSnapshot[T]:
        return cls(ReceiveState.NOT_STARTED)

    @classmethod
    def pending(cls) -> ReceiverSnapshot[T]:
        return cls(ReceiveState.PENDING)

    @classmethod
    def unloaded(cls) -> ReceiverSnapshot[T]:
        return cls(ReceiveState.UNLOADED)

    @classmethod
    def received(cls, result: T) -> ReceiverSnapshot[T]:
        return cls(ReceiveState.RECEIVED, result=result)

    @classmethod
    def failed(cls, message: str) -> ReceiverSnapshot[T]:
        return cls(ReceiveState.FAILED, error_message=message)


AggregateCounts = dict[ReceiveState, int]
AggregationPolicy = Callable[[Sequence[ReceiverSnapshot[Any]]], ReceiveState]
