"""
Boundary operations exposed to the UI. Every call answers with an
OperationResult; no exception crosses this layer.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from bbmp_launcher.exceptions import InstallError
from bbmp_launcher.models.config import LaunchOptions
from bbmp_launcher.models.records import OperationResult

from .orchestrator import LaunchOrchestrator

log = logging.getLogger(__name__)


class BoundaryDispatcher:
    """Routes named UI requests to the orchestrator and wraps the outcome."""

    def __init__(self, orchestrator: LaunchOrchestrator):
        self.orchestrator = orchestrator
        self._routes: dict[str, Callable[..., Awaitable[OperationResult]]] = {
            "download-latest": self.download_latest,
            "download-jar-url": self.download_from_url,
            "check-java": self.check_runtime,
            "install-java": self.install_runtime,
            "launch": self.launch,
            "stop": self.stop,
            "is-running": self.is_running,
            "pick-java": self.pick_runtime_executable,
            "set-always-on-top": self.set_always_on_top,
        }

    @property
    def operations(self) -> list[str]:
        return list(self._routes)

    async def dispatch(self, operation: str, *args: Any) -> OperationResult:
        """Invokes a boundary operation by its channel name."""
        handler = self._routes.get(operation)
        if handler is None:
            return OperationResult(ok=False, error=f"Unknown operation: {operation}")
        try:
            return await handler(*args)
        except TypeError as e:
            return OperationResult.failure(e)

    async def _guard(self, name: str, call: Callable[[], Awaitable[Any]]) -> OperationResult:
        try:
            return OperationResult.success(await call())
        except Exception as e:
            log.debug(f"Operation '{name}' failed: {e}", exc_info=True)
            return OperationResult.failure(e)

    async def download_latest(self) -> OperationResult:
        return await self._guard("download-latest", self.orchestrator.download_latest)

    async def download_from_url(self, url: str) -> OperationResult:
        return await self._guard(
            "download-jar-url", lambda: self.orchestrator.download_from_url(url)
        )

    async def check_runtime(self) -> OperationResult:
        return await self._guard("check-java", self.orchestrator.check_runtime)

    async def install_runtime(self) -> OperationResult:
        result = await self._guard("install-java", self.orchestrator.install_runtime)
        if result.ok and not result.value.found:
            return OperationResult(
                ok=False,
                value=result.value,
                error=OperationResult.failure(
                    InstallError("No java executable found in the unpacked runtime")
                ).error,
            )
        return result

    async def launch(
        self, options: LaunchOptions | dict[str, Any] | None = None
    ) -> OperationResult:
        async def _launch():
            opts = options
            if not isinstance(opts, LaunchOptions):
                opts = LaunchOptions(**(opts or {}))
            return await self.orchestrator.launch(opts)

        return await self._guard("launch", _launch)

    async def stop(self) -> OperationResult:
        return await self._guard("stop", self._stop)

    async def _stop(self) -> None:
        self.orchestrator.stop()

    async def is_running(self) -> OperationResult:
        return OperationResult.success(self.orchestrator.is_running())

    async def pick_runtime_executable(self) -> OperationResult:
        async def _pick():
            return self.orchestrator.pick_runtime_executable()

        return await self._guard("pick-java", _pick)

    async def set_always_on_top(self, enabled: bool) -> OperationResult:
        async def _apply():
            self.orchestrator.set_always_on_top(enabled)

        return await self._guard("set-always-on-top", _apply)
