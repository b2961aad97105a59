import asyncio

import pytest

from loadstate import ConfigurationError, LoadingBranches, LoadingFrame, LoadingView, Receiver, ReceiveState

BRANCHES: LoadingBranches[str] = LoadingBranches(
    when_received=lambda *values: "received:" + ",".join(str(value) for value in values),
    when_error=lambda errors: "error:" + "|".join(errors),
    when_loading="loading",
    when_not_started="not-started",
    when_unloaded="unloaded",
)


def _receivers(count: int) -> list[Receiver[str]]:
    return [Receiver[str]("Default Error", name=f"r{index}") for index in range(count)]


def test_view_without_threshold_shows_not_started() -> None:
    with LoadingView(_receivers(2)) as view:
        assert view.state is ReceiveState.NOT_STARTED
        assert view.select(BRANCHES) == "not-started"


def test_view_with_threshold_hides_not_started_initially(manual_timer) -> None:
    with LoadingView(_receivers(1), threshold_ms=200, timer=manual_timer) as view:
        assert view.is_visible is False
        assert view.select(BRANCHES) is None


def test_view_passes_results_in_receiver_order() -> None:
    first, second = _receivers(2)
    with LoadingView([first, second]) as view:
        second.succeeded("b")
        assert view.select(BRANCHES) == "not-started"
        first.succeeded("a")

        assert view.state is ReceiveState.RECEIVED
        assert view.select(BRANCHES) == "received:a,b"


def test_view_collects_error_messages() -> None:
    first, second, third = _receivers(3)
    with LoadingView([first, second, third]) as view:
        first.failed("first broke")
        second.succeeded("fine")
        third.failed()

        assert view.select(BRANCHES) == "error:first broke|Default Error"


def test_unloaded_falls_back_to_not_started_branch() -> None:
    (receiver,) = _receivers(1)
    branches = LoadingBranches(
        when_received=lambda value: value,
        when_error=lambda errors: errors[0],
        when_loading="loading",
        when_not_started="not-started",
    )
    with LoadingView([receiver]) as view:
        receiver.reset()

        assert view.state is ReceiveState.UNLOADED
        assert view.select(branches) == "not-started"
        assert view.select(BRANCHES) == "unloaded"


def test_fast_operation_never_shows_loading(manual_timer) -> None:
    (receiver,) = _receivers(1)
    shown: list[str | None] = []
    with LoadingView([receiver], threshold_ms=200, timer=manual_timer) as view:
        view.changes.subscribe(lambda _frame: shown.append(view.select(BRANCHES)))

        receiver.start()
        manual_timer.advance(0.05)
        receiver.succeeded("quick")
        manual_timer.advance(1)

    assert "loading" not in shown
    assert shown[-1] == "received:quick"


def test_slow_operation_shows_loading_after_threshold(manual_timer) -> None:
    (receiver,) = _receivers(1)
    frames: list[LoadingFrame] = []
    with LoadingView([receiver], threshold_ms=200, timer=manual_timer) as view:
        view.changes.subscribe(frames.append)

        receiver.start()
        assert view.select(BRANCHES) is None

        manual_timer.advance(0.25)
        assert view.select(BRANCHES) == "loading"

        receiver.succeeded("slow")

    assert frames == [
        LoadingFrame(ReceiveState.PENDING, False),
        LoadingFrame(ReceiveState.PENDING, True),
        LoadingFrame(ReceiveState.RECEIVED, True),
    ]


def test_counts_follow_receivers() -> None:
    first, second = _receivers(2)
    with LoadingView([first, second]) as view:
        first.start()

        assert view.counts[ReceiveState.PENDING] == 1
        assert view.counts[ReceiveState.NOT_STARTED] == 1


def test_custom_policy_is_used() -> None:
    first, second = _receivers(2)

    def any_received(snapshots) -> ReceiveState:
        if any(snapshot.state is ReceiveState.RECEIVED for snapshot in snapshots):
            return ReceiveState.RECEIVED
        return ReceiveState.PENDING

    with LoadingView([first, second], policy=any_received) as view:
        first.succeeded("one")

        assert view.state is ReceiveState.RECEIVED


def test_close_stops_following_receivers(manual_timer) -> None:
    (receiver,) = _receivers(1)
    view = LoadingView([receiver], threshold_ms=200, timer=manual_timer)
    receiver.start()
    view.close()
    view.close()
    receiver.succeeded("late")

    assert view.state is ReceiveState.PENDING
    assert manual_timer.armed == 0


@pytest.mark.asyncio
async def test_view_follows_real_operations() -> None:
    async def operation(value: str, delay: float) -> str:
        await asyncio.sleep(delay)
        return value

    first, second = _receivers(2)
    with LoadingView([first, second], threshold_ms=0) as view:
        first.start(lambda: operation("a", 0.01))
        second.start(lambda: operation("b", 0.02))
        await asyncio.gather(first.wait(), second.wait())

        assert view.select(BRANCHES) == "received:a,b"


def test_threshold_view_outside_event_loop_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        LoadingView(_receivers(1), threshold_ms=200)


@pytest.mark.asyncio
async def test_threshold_view_on_running_loop_follows_pending() -> None:
    (receiver,) = _receivers(1)
    with LoadingView([receiver], threshold_ms=200) as view:
        receiver.start()

        assert view.state is ReceiveState.PENDING
        assert view.gate.timer_armed is True
