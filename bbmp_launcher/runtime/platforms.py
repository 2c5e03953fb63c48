"""
Platform matrix for the Java runtime download: one profile per operating system
describing the Adoptium OS name, the archive format and how to unpack it.
"""

import platform
import sys
from dataclasses import dataclass
from pathlib import Path

ADOPTIUM_BASE_URL = "https://api.adoptium.net/v3/binary/latest"

EXTRACT_EXPAND_ARCHIVE = "expand-archive"
EXTRACT_TAR = "tar"


@dataclass(frozen=True)
class PlatformProfile:
    """How the runtime is fetched and unpacked on one operating system."""

    os_name: str
    archive_ext: str
    extractor: str
    exe_suffix: str = ""

    @property
    def java_command(self) -> str:
        return f"java{self.exe_suffix}"


PLATFORM_PROFILES: dict[str, PlatformProfile] = {
    "win32": PlatformProfile("windows", ".zip", EXTRACT_EXPAND_ARCHIVE, ".exe"),
    "darwin": PlatformProfile("mac", ".tar.gz", EXTRACT_TAR),
    "linux": PlatformProfile("linux", ".tar.gz", EXTRACT_TAR),
}

# platform.machine() spellings -> Adoptium architecture names
ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "i386": "x32",
    "i686": "x32",
    "x86": "x32",
    "armv7l": "arm",
    "arm": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}


def current_platform_key() -> str:
    """Collapses sys.platform to one of the profile keys; other Unixes count as Linux."""
    if sys.platform.startswith("win"):
        return "win32"
    if sys.platform == "darwin":
        return "darwin"
    return "linux"


def profile_for(platform_key: str | None = None) -> PlatformProfile:
    return PLATFORM_PROFILES.get(
        platform_key or current_platform_key(), PLATFORM_PROFILES["linux"]
    )


def normalize_arch(machine: str | None = None) -> str:
    """Maps a machine identifier to its Adoptium name, passing unknown ones through."""
    machine = (machine if machine is not None else platform.machine()).lower()
    return ARCH_ALIASES.get(machine, machine)


def distribution_url(profile: PlatformProfile, arch: str, feature_version: int = 17) -> str:
    return (
        f"{ADOPTIUM_BASE_URL}/{feature_version}/ga/{profile.os_name}/{arch}"
        "/jdk/hotspot/normal/eclipse?project=jdk"
    )


def extraction_command(
    profile: PlatformProfile, archive: Path, destination: Path
) -> list[str]:
    """Command line that unpacks ``archive`` into ``destination``."""
    if profile.extractor == EXTRACT_EXPAND_ARCHIVE:
        return [
            "powershell.exe",
            "-NoProfile",
            "-Command",
            f'Expand-Archive -Path "{archive}" -DestinationPath "{destination}" -Force',
        ]
    return ["tar", "-xzf", str(archive), "-C", str(destination)]


def runtime_candidates(feature_version: int = 17) -> list[str]:
    """Relative paths, in search order, where an unpacked runtime keeps java."""
    return [
        "bin/java",
        "bin/java.exe",
        f"jdk-{feature_version}/bin/java",
        f"jdk-{feature_version}/bin/java.exe",
    ]
