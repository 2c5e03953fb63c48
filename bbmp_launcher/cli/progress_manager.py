"""
Manages a Rich progress display for the launcher's fractional progress channels
(jar download and Java installation).
"""

import asyncio
from collections.abc import Callable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
    TimeRemainingColumn,
)

from bbmp_launcher.core.events import EventBus


class ProgressManager:
    """
    Renders one progress bar per watched event channel. A bar appears with the
    first progress event, so downloads of unknown size show no bar at all.
    """

    def __init__(self, console: Console, events: EventBus):
        self.console = console
        self.events = events
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            "[progress.percentage]{task.percentage:>3.0f}%",
            "•",
            TimeElapsedColumn(),
            "•",
            TimeRemainingColumn(),
            console=console,
            transient=False,
        )
        self._tasks: dict[str, TaskID] = {}
        self._unsubscribers: list[Callable[[], None]] = []

    def watch(self, channel: str, description: str) -> None:
        """Shows progress events of ``channel`` under ``description``."""

        def on_progress(fraction: float) -> None:
            task_id = self._tasks.get(channel)
            if task_id is None:
                task_id = self.progress.add_task(description, total=1.0)
                self._tasks[channel] = task_id
            self.progress.update(task_id, completed=fraction)

        self._unsubscribers.append(self.events.subscribe(channel, on_progress))

    async def __aenter__(self):
        self.progress.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()
        await asyncio.sleep(0.1)
        self.progress.stop()
