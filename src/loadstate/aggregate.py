"""Reduce many receiver snapshots to counts and one dominant state."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from .types import AggregateCounts, AggregationPolicy, ReceiverSnapshot, ReceiveState

DEFAULT_PRIORITY_ORDER: tuple[ReceiveState, ...] = (
    ReceiveState.FAILED,
    ReceiveState.PENDING,
    ReceiveState.NOT_STARTED,
    ReceiveState.UNLOADED,
    ReceiveState.RECEIVED,
)


def counts_by_state(snapshots: Iterable[ReceiverSnapshot[Any]]) -> AggregateCounts:
    """Count snapshots per state; every state is present, zero when unused."""
    counts: AggregateCounts = dict.fromkeys(ReceiveState, 0)
    for snapshot in snapshots:
        counts[snapshot.state] += 1
    return counts


def priority_policy(order: Sequence[ReceiveState]) -> AggregationPolicy:
    """Build an aggregation policy that picks the first present state of ``order``.

    Falls back to ``NOT_STARTED`` when none of the states in ``order`` occur.
    """
    order = tuple(order)

    def _policy(snapshots: Sequence[ReceiverSnapshot[Any]]) -> ReceiveState:
        counts = counts_by_state(snapshots)
        return next((state for state in order if counts[state] > 0), ReceiveState.NOT_STARTED)

    return _policy


default_policy: AggregationPolicy = priority_policy(DEFAULT_PRIORITY_ORDER)


def dominant_state(
    snapshots: Sequence[ReceiverSnapshot[Any]],
    policy: AggregationPolicy | None = None,
) -> ReceiveState:
    """Choose the single state that represents all snapshots.

    Any failure wins, then anything pending, not started, unloaded; only an
    all-received list is ``RECEIVED``. An empty list is ``NOT_STARTED``.
    ``policy`` replaces this rule entirely when given.
    """
    return (policy or default_policy)(snapshots)


def error_messages(snapshots: Iterable[ReceiverSnapshot[Any]]) -> list[str]:
    return [snapshot.error_message for snapshot in snapshots if snapshot.error_message]


def results(snapshots: Iterable[ReceiverSnapshot[Any]]) -> tuple[Any, ...]:
    """Results in input order, one per snapshot."""
    return tuple(snapshot.result for snapshot in snapshots)
