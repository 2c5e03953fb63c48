"""
Operations the launcher delegates to the user interface hosting it.
"""

from typing import Protocol


class WindowHost(Protocol):
    """What a UI must provide for window-bound boundary operations."""

    def choose_file(self, title: str) -> str | None:
        """Lets the user pick a file. Returns None when the dialog is cancelled."""
        ...

    def set_always_on_top(self, enabled: bool) -> None:
        """Pins or unpins the launcher window above other windows."""
        ...


class HeadlessHost:
    """A host without any window: file choice is always cancelled."""

    def __init__(self):
        self.always_on_top = False

    def choose_file(self, title: str) -> str | None:
        return None

    def set_always_on_top(self, enabled: bool) -> None:
        self.always_on_top = enabled
