"""Bind several receivers to one render decision."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from loguru import logger

from .aggregate import counts_by_state, dominant_state, error_messages, results
from .observable import ObservableCell, Unsubscribe
from .receiver import Receiver
from .threshold import RenderThresholdGate, Timer
from .types import AggregateCounts, AggregationPolicy, ReceiverSnapshot, ReceiveState

R = TypeVar("R")


@dataclass(frozen=True)
class LoadingFrame:
    state: ReceiveState
    visible: bool


@dataclass(frozen=True)
class LoadingBranches(Generic[R]):
    """What to produce for each aggregate state.

    ``when_unloaded`` falls back to ``when_not_started`` when omitted.
    """

    when_received: Callable[..., R]
    when_error: Callable[[list[str]], R]
    when_loading: R
    when_not_started: R
    when_unloaded: R | None = None


class LoadingView:
    """Follow a fixed set of receivers and pick one branch to show.

    The view subscribes to every receiver and recomputes the dominant state on
    each change. The render threshold gate is local to the view and must be
    released with :meth:`close`.
    """

    def __init__(
        self,
        receivers: Sequence[Receiver[Any]],
        *,
        threshold_ms: float | None = None,
        policy: AggregationPolicy | None = None,
        timer: Timer | None = None,
    ) -> None:
        self._receivers = tuple(receivers)
        self._policy = policy
        self._gate = RenderThresholdGate(threshold_ms, timer=timer)
        state = dominant_state(self.snapshots, policy)
        self._gate.observe(state)
        self.changes: ObservableCell[LoadingFrame] = ObservableCell(
            LoadingFrame(state, self._gate.is_open), name="loadstate.loading.changes"
        )
        self._unsubscribes: list[Unsubscribe] = [
            receiver.data.subscribe(self._on_change) for receiver in self._receivers
        ]
        self._unsubscribes.append(self._gate.visible.subscribe(self._on_change))

    @property
    def receivers(self) -> tuple[Receiver[Any], ...]:
        return self._receivers

    @property
    def snapshots(self) -> tuple[ReceiverSnapshot[Any], ...]:
        return tuple(receiver.snapshot for receiver in self._receivers)

    @property
    def counts(self) -> AggregateCounts:
        return counts_by_state(self.snapshots)

    @property
    def state(self) -> ReceiveState:
        return self.changes.value.state

    @property
    def is_visible(self) -> bool:
        return self.changes.value.visible

    @property
    def gate(self) -> RenderThresholdGate:
        return self._gate

    def select(self, branches: LoadingBranches[R]) -> R | None:
        """Return the branch for the current state, or ``None`` while hidden."""
        state = self.state
        snapshots = self.snapshots
        if state is ReceiveState.FAILED:
            return branches.when_error(error_messages(snapshots))
        if state is ReceiveState.RECEIVED:
            return branches.when_received(*results(snapshots))
        if state is ReceiveState.UNLOADED:
            if branches.when_unloaded is not None:
                return branches.when_unloaded
            return branches.when_not_started
        if not self.is_visible:
            return None
        if state is ReceiveState.NOT_STARTED:
            return branches.when_not_started
        return branches.when_loading

    def close(self) -> None:
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes.clear()
        self._gate.close()

    def __enter__(self) -> LoadingView:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_change(self, _value: object) -> None:
        state = dominant_state(self.snapshots, self._policy)
        self._gate.observe(state)
        frame = LoadingFrame(state, self._gate.is_open)
        if frame == self.changes.value:
            return
        logger.debug("loading.frame state={} visible={}", frame.state.value, frame.visible)
        self.changes.value = frame
