"""
The launch orchestrator: wires transport, release resolution, the artifact
store, runtime provisioning and process supervision into one context object.
"""

import asyncio
import logging
from pathlib import Path

from bbmp_launcher.api.releases import ReleaseResolver
from bbmp_launcher.models.config import LaunchOptions, LauncherConfig
from bbmp_launcher.models.records import (
    ArtifactRecord,
    LaunchResult,
    RuntimeHandle,
    RuntimeStatus,
)
from bbmp_launcher.net.transport import Transport
from bbmp_launcher.runtime.provisioner import RuntimeProvisioner
from bbmp_launcher.runtime.supervisor import ProcessSupervisor
from bbmp_launcher.storage.artifacts import ArtifactStore
from bbmp_launcher.utils.path import create_dir

from .events import (
    DOWNLOAD_PROGRESS,
    PROCESS_EXIT,
    PROCESS_LOG,
    RUNTIME_PROGRESS,
    EventBus,
)
from .host import HeadlessHost, WindowHost

log = logging.getLogger(__name__)


def build_launch_arguments(jar_path: str, options: LaunchOptions) -> list[str]:
    """Positional proxy arguments following the java executable."""
    args = [
        "-jar",
        jar_path,
        "-port",
        str(options.port),
        "-ip",
        options.server,
        "-rport",
        str(options.rport),
    ]
    if options.devmode:
        args += ["-devmode", "true"]
    return args


class LaunchOrchestrator:
    """
    Owns every launcher component and the single process session.

    Methods raise LauncherError subclasses; use BoundaryDispatcher for the
    error-to-result conversion the UI expects.
    """

    def __init__(
        self,
        config: LauncherConfig,
        events: EventBus | None = None,
        host: WindowHost | None = None,
        transport: Transport | None = None,
        store: ArtifactStore | None = None,
        provisioner: RuntimeProvisioner | None = None,
        supervisor: ProcessSupervisor | None = None,
    ):
        self.config = config
        self.events = events or EventBus()
        self.host = host or HeadlessHost()
        self.data_dir = Path(config.data_dir)

        self.transport = transport or Transport(
            user_agent=config.user_agent,
            max_redirects=config.max_redirects,
            request_timeout=config.request_timeout,
        )
        self.store = store or ArtifactStore(
            self.data_dir,
            self.transport,
            ReleaseResolver(self.transport, config.release_url),
            product_name=config.product_name,
            on_progress=self.events.sink(DOWNLOAD_PROGRESS),
        )
        self.provisioner = provisioner or RuntimeProvisioner(
            self.data_dir, self.transport, runtime_version=config.runtime_version
        )
        self.supervisor = supervisor or ProcessSupervisor(
            on_log=self.events.sink(PROCESS_LOG),
            on_exit=self.events.sink(PROCESS_EXIT),
        )

    async def download_latest(self) -> ArtifactRecord:
        return await self.store.ensure_artifact()

    async def download_from_url(self, url: str) -> ArtifactRecord:
        return await self.store.download_from_url(url)

    async def check_runtime(self) -> RuntimeStatus:
        return await self.provisioner.detect_runtime()

    async def install_runtime(self) -> RuntimeHandle:
        return await self.provisioner.install_runtime(
            self.events.sink(RUNTIME_PROGRESS)
        )

    async def resolve_java(self, explicit_path: str | None = None) -> str:
        """
        Picks the java executable for a launch: an explicit path wins, then java
        on PATH, then a runtime installed earlier, then a fresh install. If all
        of that yields nothing the bare command is returned and the spawn is
        left to fail.
        """
        if explicit_path:
            return explicit_path

        status = await self.provisioner.detect_runtime()
        if status.available:
            return status.executable

        installed = await asyncio.to_thread(self.provisioner.locate_executable)
        if installed.found:
            status = await self.provisioner.detect_runtime(installed.executable_path)
            if status.available:
                log.debug(f"Using previously installed runtime {installed.executable_path}")
                return installed.executable_path

        log.info("[yellow]No Java runtime found, installing one...[/yellow]")
        handle = await self.install_runtime()
        if handle.found:
            return handle.executable_path

        log.warning(
            "[yellow]Java installation produced no executable; "
            f"falling back to '{self.provisioner.default_command}'.[/yellow]"
        )
        return self.provisioner.default_command

    async def launch(self, options: LaunchOptions | None = None) -> LaunchResult:
        """
        Ensures the jar and a runtime are present, then starts the proxy.

        Raises:
            AlreadyRunningError: Immediately, before any I/O, if a session is
            active or another launch is being prepared.
        """
        options = options or LaunchOptions()
        self.supervisor.reserve()
        try:
            artifact = await self.store.ensure_artifact()
            java = await self.resolve_java(options.java_path)
            argv = [java, *build_launch_arguments(artifact.local_path, options)]
            await asyncio.to_thread(create_dir, self.data_dir)
            await self.supervisor.spawn(argv, cwd=self.data_dir)
        except BaseException:
            self.supervisor.release()
            raise

        cmd = " ".join(argv)
        log.info(f"[green]✓ Started {artifact.version_tag}[/green]: [dim]{cmd}[/dim]")
        return LaunchResult(cmd=cmd, version=artifact.version_tag, argv=argv)

    def stop(self) -> bool:
        return self.supervisor.stop()

    def is_running(self) -> bool:
        return self.supervisor.is_running()

    def pick_runtime_executable(self) -> str | None:
        return self.host.choose_file("Select Java executable")

    def set_always_on_top(self, enabled: bool) -> None:
        self.host.set_always_on_top(bool(enabled))

    async def close(self) -> None:
        """Stops any running child and releases network resources."""
        await self.supervisor.shutdown()
        await self.transport.close()

    async def __aenter__(self) -> "LaunchOrchestrator":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
