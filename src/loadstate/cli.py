"""Command line entry point for loadstate."""

from __future__ import annotations

import asyncio
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import get_settings
from .errors import OperationFailed
from .loading import LoadingBranches, LoadingFrame, LoadingView
from .receiver import Receiver

app = typer.Typer(
    name="loadstate",
    help="Track asynchronous operations and decide what to show.",
    add_completion=False,
    rich_markup_mode="rich",
)

_BRANCHES: LoadingBranches[str] = LoadingBranches(
    when_received=lambda *values: "received: " + ", ".join(str(value) for value in values),
    when_error=lambda errors: "error: " + "; ".join(errors),
    when_loading="loading",
    when_not_started="not started",
    when_unloaded="unloaded",
)


async def _operation(index: int, delay: float, fail: bool) -> str:
    await asyncio.sleep(delay)
    if fail:
        raise OperationFailed(f"operation {index} failed")
    return f"op{index}"


async def run_simulation(
    delays: list[float],
    failing: set[int],
    threshold_ms: float | None,
    default_error: str,
) -> list[tuple[float, LoadingFrame, str | None]]:
    """Run one receiver per delay and record every frame the view produces."""
    loop = asyncio.get_running_loop()
    started_at = loop.time()
    receivers = [Receiver[str](default_error, name=f"op{index}") for index in range(len(delays))]
    timeline: list[tuple[float, LoadingFrame, str | None]] = []

    with LoadingView(receivers, threshold_ms=threshold_ms) as view:

        def _record(frame: LoadingFrame) -> None:
            elapsed_ms = (loop.time() - started_at) * 1000
            timeline.append((elapsed_ms, frame, view.select(_BRANCHES)))

        _record(view.changes.value)
        view.changes.subscribe(_record)
        for index, (receiver, delay) in enumerate(zip(receivers, delays, strict=True)):
            receiver.start(lambda index=index, delay=delay: _operation(index, delay, index in failing))
        await asyncio.gather(*(receiver.wait() for receiver in receivers))
    return timeline


@app.command()
def simulate(
    delay: Annotated[list[float], typer.Option("--delay", "-d", help="Operation duration in seconds, repeatable")],
    fail: Annotated[Optional[list[int]], typer.Option("--fail", "-f", help="Index of an operation that fails")] = None,
    threshold_ms: Annotated[
        Optional[float], typer.Option("--threshold-ms", "-t", help="Minimum render threshold in milliseconds")
    ] = None,
) -> None:
    """Simulate concurrent operations and print what a view would show."""
    settings = get_settings()
    if threshold_ms is None:
        threshold_ms = settings.minimum_render_threshold_ms
    if threshold_ms is not None and threshold_ms < 0:
        raise typer.BadParameter("threshold must be non-negative", param_hint="--threshold-ms")
    failing = set(fail or [])
    out_of_range = sorted(index for index in failing if not 0 <= index < len(delay))
    if out_of_range:
        raise typer.BadParameter(
            f"no operation with index {out_of_range[0]}, expected 0..{len(delay) - 1}", param_hint="--fail"
        )

    timeline = asyncio.run(run_simulation(delay, failing, threshold_ms, settings.default_error_message))

    table = Table(title="loadstate simulation")
    table.add_column("elapsed ms", justify="right")
    table.add_column("state")
    table.add_column("visible")
    table.add_column("shows")
    for elapsed_ms, frame, shown in timeline:
        table.add_row(f"{elapsed_ms:.0f}", frame.state.value, str(frame.visible), shown or "-")
    Console().print(table)


@app.command()
def version() -> None:
    """Print the installed version."""
    typer.echo(__version__)
