"""loadstate - race-free state for in-flight asynchronous operations."""

from .aggregate import (
    DEFAULT_PRIORITY_ORDER,
    counts_by_state,
    dominant_state,
    error_messages,
    priority_policy,
    results,
)
from .errors import ConfigurationError, LoadStateError, OperationFailed
from .loading import LoadingBranches, LoadingFrame, LoadingView
from .observable import Computed, ObservableCell, ReadOnlyObservable
from .receiver import Receiver
from .threshold import LoopTimer, RenderThresholdGate, Timer
from .types import AggregateCounts, AggregationPolicy, ReceiverSnapshot, ReceiveState

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_PRIORITY_ORDER",
    "AggregateCounts",
    "AggregationPolicy",
    "Computed",
    "ConfigurationError",
    "LoadStateError",
    "LoadingBranches",
    "LoadingFrame",
    "LoadingView",
    "LoopTimer",
    "ObservableCell",
    "OperationFailed",
    "ReadOnlyObservable",
    "ReceiveState",
    "Receiver",
    "ReceiverSnapshot",
    "RenderThresholdGate",
    "Timer",
    "counts_by_state",
    "dominant_state",
    "error_messages",
    "priority_policy",
    "results",
]
