"""
Keeps downloaded proxy jars in the user-data directory, one file per release tag.
Presence of the file is the only cache record; entries are never evicted.
"""

import asyncio
import logging
import os
from pathlib import Path

from bbmp_launcher.api.releases import ReleaseResolver
from bbmp_launcher.models.config import PRODUCT_NAME
from bbmp_launcher.models.records import ArtifactRecord
from bbmp_launcher.net.transport import ProgressCallback, Transport
from bbmp_launcher.utils.path import filename_from_url, guess_version_label, safe_tag

log = logging.getLogger(__name__)


class ArtifactStore:
    """Maps release tags to local jar paths and downloads missing ones."""

    def __init__(
        self,
        data_dir: Path,
        transport: Transport,
        resolver: ReleaseResolver,
        product_name: str = PRODUCT_NAME,
        on_progress: ProgressCallback | None = None,
    ):
        """
        Args:
            data_dir: Directory holding the jars.
            transport: Used for every download.
            resolver: Finds the latest release for ``ensure_artifact``.
            product_name: Prefix of the cached jar file names.
            on_progress: Receives download progress fractions.
        """
        self.data_dir = Path(data_dir)
        self.transport = transport
        self.resolver = resolver
        self.product_name = product_name
        self.on_progress = on_progress

    def jar_path(self, version_tag: str = "latest") -> Path:
        """
        Deterministic local path of the jar for a release tag. The tag comes from
        the remote feed, so it is reduced to a single safe path component.
        """
        return self.data_dir / f"{self.product_name}-{safe_tag(version_tag)}.jar"

    async def ensure_artifact(self) -> ArtifactRecord:
        """
        Returns the jar of the latest release, downloading it only when no file
        exists yet at its path.
        """
        release = await self.resolver.get_latest_release()
        path = self.jar_path(release.tag)

        if await asyncio.to_thread(os.path.isfile, path):
            log.debug(f"Using cached {path.name}")
            return ArtifactRecord(str(path), release.tag, release.asset_name)

        log.info(f"Downloading [cyan]{release.asset_name}[/cyan] ({release.tag})...")
        await self.transport.download_file(release.asset_url, path, self.on_progress)
        log.info(f"[green]✓ Saved {path.name}[/green]")
        return ArtifactRecord(str(path), release.tag, release.asset_name)

    async def download_from_url(self, url: str) -> ArtifactRecord:
        """
        Downloads a jar from an arbitrary URL, skipping release resolution.
        The version label is guessed from the file name.
        """
        filename = filename_from_url(url)
        path = self.data_dir / filename
        log.info(f"Downloading [cyan]{filename}[/cyan] from custom URL...")
        await self.transport.download_file(url, path, self.on_progress)
        return ArtifactRecord(str(path), guess_version_label(filename), filename)
