"""
Fire-and-forget notification channels from the launcher to whatever UI is
attached. Subscribers of a channel are called synchronously, in subscription
order, on the event loop thread.
"""

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

log = logging.getLogger(__name__)

DOWNLOAD_PROGRESS = "download-progress"
RUNTIME_PROGRESS = "runtime-progress"
PROCESS_LOG = "process-log"
PROCESS_EXIT = "process-exit"

CHANNELS = (DOWNLOAD_PROGRESS, RUNTIME_PROGRESS, PROCESS_LOG, PROCESS_EXIT)

Subscriber = Callable[[Any], None]


class EventBus:
    """Ordered publish/subscribe hub with a fixed set of channels."""

    def __init__(self):
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, channel: str, callback: Subscriber) -> Callable[[], None]:
        """
        Registers ``callback`` on ``channel``.

        Returns:
            A function that removes the subscription again.
        """
        if channel not in CHANNELS:
            raise ValueError(f"Unknown event channel: {channel}")
        self._subscribers[channel].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[channel]:
                self._subscribers[channel].remove(callback)

        return unsubscribe

    def emit(self, channel: str, payload: Any) -> None:
        """
        Delivers ``payload`` to every subscriber. A failing subscriber is logged
        and does not stop delivery to the others.
        """
        for callback in list(self._subscribers.get(channel, ())):
            try:
                callback(payload)
            except Exception as e:
                log.warning(f"Subscriber of '{channel}' failed: {e}")
                log.debug("Full traceback:", exc_info=True)

    def sink(self, channel: str) -> Callable[[Any], None]:
        """Returns a one-argument callable that emits on ``channel``."""
        return lambda payload: self.emit(channel, payload)
