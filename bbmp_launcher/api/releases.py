"""
Resolves the latest published release and picks its downloadable .jar asset.
"""

import logging
import re
from typing import Any

from bbmp_launcher.exceptions import NoAssetFoundError
from bbmp_launcher.models.records import ReleaseDescriptor
from bbmp_launcher.models.config import DEFAULT_RELEASE_URL
from bbmp_launcher.net.transport import Transport

log = logging.getLogger(__name__)

# Any jar is accepted; release file names change between versions
_JAR_ASSET_REGEX = re.compile(r"\.jar$", re.IGNORECASE)


def select_jar_asset(metadata: dict[str, Any]) -> ReleaseDescriptor:
    """
    Picks the first asset whose name ends with ``.jar`` from release metadata
    shaped like the GitHub releases API.

    Raises:
        NoAssetFoundError: If no asset matches. The message lists every asset
        name so a renamed or missing upload is easy to spot.
    """
    assets = metadata.get("assets") or []
    for asset in assets:
        name = asset.get("name") or ""
        if _JAR_ASSET_REGEX.search(name):
            return ReleaseDescriptor(
                tag=metadata.get("tag_name") or "latest",
                asset_url=asset.get("browser_download_url", ""),
                asset_name=name,
            )

    names = ", ".join(a.get("name") or "" for a in assets)
    raise NoAssetFoundError(
        f"No jar asset found in latest release. Assets: {names}"
    )


class ReleaseResolver:
    """Queries the release-metadata endpoint for the newest release."""

    def __init__(self, transport: Transport, release_url: str = DEFAULT_RELEASE_URL):
        self.transport = transport
        self.release_url = release_url

    async def get_latest_release(self) -> ReleaseDescriptor:
        """Fetches release metadata and returns its .jar asset."""
        metadata = await self.transport.fetch_json(self.release_url)
        if not isinstance(metadata, dict):
            raise NoAssetFoundError(
                f"Unexpected release metadata from {self.release_url}. Assets: "
            )
        release = select_jar_asset(metadata)
        log.debug(f"Latest release {release.tag}: {release.asset_name}")
        return release
