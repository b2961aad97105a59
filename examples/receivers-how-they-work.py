"""loadstate examples - receivers, aggregation and the render threshold.

This module walks through the typical flow:
1. A service owns one receiver per independent request
2. A view follows several receivers and picks one branch to show
3. A minimum render threshold hides loading states of fast requests
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loadstate import LoadingBranches, LoadingView, OperationFailed, Receiver
from loadstate.logging_utils import configure_logging

# ============================================================================
# SERVICE
# ============================================================================


@dataclass(frozen=True)
class Dashboard:
    title: str
    widgets: int


class DashboardService:
    """Loads dashboard data and the current user's name."""

    def __init__(self) -> None:
        self.dashboard = Receiver[Dashboard]("Unable to load dashboard.", name="dashboard")
        self.user = Receiver[str]("Unable to load user.", name="user")

    def load(self, *, fail_user: bool = False) -> None:
        self.dashboard.start(lambda: self._fetch_dashboard())
        self.user.start(lambda: self._fetch_user(fail_user))

    async def _fetch_dashboard(self) -> Dashboard:
        await asyncio.sleep(0.3)
        return Dashboard(title="Operations", widgets=4)

    async def _fetch_user(self, fail: bool) -> str:
        await asyncio.sleep(0.05)
        if fail:
            raise OperationFailed("user service unavailable")
        return "ada"


# ============================================================================
# VIEW
# ============================================================================

BRANCHES: LoadingBranches[str] = LoadingBranches(
    when_received=lambda dashboard, user: f"{dashboard.title} ({dashboard.widgets} widgets) for {user}",
    when_error=lambda errors: "Errors: " + "; ".join(errors),
    when_loading="Loading...",
    when_not_started="Nothing requested yet.",
)


async def show(fail_user: bool) -> None:
    service = DashboardService()
    with LoadingView([service.dashboard, service.user], threshold_ms=100) as view:
        view.changes.subscribe(lambda frame: print(f"[{frame.state.value}] {view.select(BRANCHES) or ''}"))
        service.load(fail_user=fail_user)
        await asyncio.gather(service.dashboard.wait(), service.user.wait())


if __name__ == "__main__":
    configure_logging(level="DEBUG")
    print("=== successful load ===")
    asyncio.run(show(fail_user=False))
    print("=== failing user request ===")
    asyncio.run(show(fail_user=True))
