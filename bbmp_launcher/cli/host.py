"""
Terminal implementation of the launcher's window host.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt

log = logging.getLogger(__name__)


class ConsoleHost:
    """Asks for files on the terminal; there is no window to pin on top."""

    def __init__(self, console: Console):
        self.console = console
        self.always_on_top = False

    def choose_file(self, title: str) -> str | None:
        answer = Prompt.ask(
            f"[cyan]{title}[/cyan] [dim](leave empty to cancel)[/dim]",
            console=self.console,
            default="",
            show_default=False,
        ).strip()
        if not answer:
            return None
        path = Path(answer).expanduser()
        if not path.is_file():
            self.console.print(f"[yellow]⚠️  '{path}' is not a file.[/yellow]")
            return None
        return str(path.resolve())

    def set_always_on_top(self, enabled: bool) -> None:
        self.always_on_top = enabled
        log.debug(f"always_on_top={enabled} (no window in terminal mode)")
