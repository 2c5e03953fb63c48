"""
Detects a usable Java runtime and installs an Eclipse Temurin build into the
user-data directory when none is available.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path

from bbmp_launcher.exceptions import InstallError, NetworkError
from bbmp_launcher.models.records import RuntimeHandle, RuntimeStatus
from bbmp_launcher.net.transport import ProgressCallback, Transport

from .platforms import (
    PlatformProfile,
    distribution_url,
    extraction_command,
    normalize_arch,
    profile_for,
    runtime_candidates,
)

log = logging.getLogger(__name__)


class RuntimeProvisioner:
    """Finds or installs the Java runtime needed to run the proxy jar."""

    def __init__(
        self,
        data_dir: Path,
        transport: Transport,
        runtime_version: int = 17,
        platform_key: str | None = None,
        arch: str | None = None,
    ):
        """
        Args:
            data_dir: Directory receiving the archive and the unpacked runtime.
            transport: Used to download the runtime archive.
            runtime_version: Java feature release to install.
            platform_key: Profile key ('win32', 'darwin', 'linux'); defaults to
            the running system.
            arch: Machine identifier; defaults to the running system.
        """
        self.data_dir = Path(data_dir)
        self.transport = transport
        self.runtime_version = runtime_version
        self.profile: PlatformProfile = profile_for(platform_key)
        self.arch = normalize_arch(arch)

    @property
    def runtime_dir(self) -> Path:
        return self.data_dir / f"jre{self.runtime_version}"

    @property
    def staging_path(self) -> Path:
        return self.data_dir / f"temurin{self.runtime_version}{self.profile.archive_ext}"

    @property
    def default_command(self) -> str:
        """Bare java command resolved through PATH."""
        return self.profile.java_command

    def distribution_url(self) -> str:
        return distribution_url(self.profile, self.arch, self.runtime_version)

    async def detect_runtime(self, executable: str | None = None) -> RuntimeStatus:
        """
        Runs ``<java> -version``. The runtime counts as available when its
        stderr mentions 'version'; a missing executable is simply unavailable.
        """
        executable = executable or self.default_command
        try:
            process = await asyncio.create_subprocess_exec(
                executable,
                "-version",
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            log.debug(f"Java probe '{executable}' could not start: {e}")
            return RuntimeStatus(available=False, executable=executable)

        _, stderr = await process.communicate()
        banner = stderr.decode("utf-8", errors="replace")
        available = "version" in banner
        log.debug(
            f"Java probe '{executable}' exited {process.returncode}, "
            f"available={available}"
        )
        return RuntimeStatus(
            available=available,
            executable=executable,
            banner=banner.strip().splitlines()[0] if banner.strip() else "",
        )

    def locate_executable(self) -> RuntimeHandle:
        """Returns the first candidate java path present in the runtime directory."""
        for relative in runtime_candidates(self.runtime_version):
            candidate = self.runtime_dir / relative
            if candidate.is_file():
                return RuntimeHandle(str(candidate))
        return RuntimeHandle(None)

    async def install_runtime(
        self, on_progress: ProgressCallback | None = None
    ) -> RuntimeHandle:
        """
        Downloads the runtime archive for this platform, unpacks it into a fresh
        runtime directory and locates java inside it.

        Raises:
            InstallError: If the download or a disk write fails, or the extractor
            cannot run or exits non-zero.
        """
        url = self.distribution_url()
        archive = self.staging_path
        log.info(
            f"Installing Java {self.runtime_version} "
            f"([cyan]{self.profile.os_name}/{self.arch}[/cyan])..."
        )
        try:
            await self.transport.download_file(url, archive, on_progress)
        except (NetworkError, OSError) as e:
            raise InstallError(f"Java download failed: {e}") from e

        try:
            await asyncio.to_thread(self._reset_runtime_dir)
        except OSError as e:
            raise InstallError(
                f"Could not prepare runtime directory {self.runtime_dir}: {e}"
            ) from e
        await self._extract(archive)

        handle = await asyncio.to_thread(self.locate_executable)
        if handle.found:
            log.info(f"[green]✓ Java installed at {handle.executable_path}[/green]")
        else:
            log.warning(
                f"[yellow]Java archive unpacked but no executable found in "
                f"{self.runtime_dir}[/yellow]"
            )
        return handle

    def _reset_runtime_dir(self) -> None:
        if self.runtime_dir.exists():
            shutil.rmtree(self.runtime_dir)
        self.runtime_dir.mkdir(parents=True, exist_ok=True)

    async def _extract(self, archive: Path) -> None:
        argv = extraction_command(self.profile, archive, self.runtime_dir)
        log.debug(f"Extracting runtime: {' '.join(argv)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise InstallError(f"{argv[0]} could not be started: {e}") from e

        _, stderr = await process.communicate()
        if process.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip()
            raise InstallError(
                f"{os.path.basename(argv[0])} extract failed "
                f"(exit {process.returncode})" + (f": {detail}" if detail else "")
            )
