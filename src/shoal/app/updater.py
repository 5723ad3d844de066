"""Release check for the presentation layer.

The simulator core never calls into this module. A front end asks whether a
newer release exists and, if so, where to download the binary for the host
platform.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Optional

import httpx

from ..sim.core.errors import UpdateCheckError

logger = logging.getLogger(__name__)

CURRENT_VERSION = "0.1.0"


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> "Version":
        parts = value.strip().lstrip("v").split(".")
        if len(parts) != 3:
            raise UpdateCheckError(f"invalid version: {value!r}")
        try:
            major, minor, patch = (int(part) for part in parts)
        except ValueError as exc:
            raise UpdateCheckError(f"invalid version {value!r}: {exc}") from exc
        return cls(major, minor, patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class Platform:
    name: str
    binary: str


def current_platform(platform: str = sys.platform) -> Platform:
    if platform.startswith("win"):
        return Platform("windows", "windows.exe")
    if platform.startswith("linux"):
        return Platform("linux", "linux")
    if platform == "darwin":
        return Platform("macos", "macos")
    return Platform("unsupported os", "unsupported operating system")


@dataclass(frozen=True)
class UpdateStatus:
    current: str
    latest: Optional[str]
    update_available: bool
    message: str
    download_url: Optional[str] = None


def version_from_url(url: str, delimiter: str) -> Version:
    """Read the version out of a release URL such as ``.../releases/tag/v1.2.3``."""

    path = httpx.URL(url).path
    _, sep, tail = path.rpartition(delimiter)
    if not sep or not tail:
        raise UpdateCheckError(f"cannot find a version in {url}")
    return Version.parse(tail)


def compare_versions(
    current: Version,
    latest: Version,
    platform: Platform,
    download_url: Optional[str] = None,
) -> UpdateStatus:
    if current == latest:
        return UpdateStatus(str(current), str(latest), False, "latest version")
    return UpdateStatus(
        str(current),
        str(latest),
        True,
        f"new version for {platform.name}, from {current} to {latest}",
        download_url,
    )


class UpdateChecker:
    """Resolve the latest published release by following the release redirect."""

    DEFAULT_TIMEOUT = 5.0

    def __init__(
        self,
        release_url: str,
        download_path: str = "/download/",
        version_delimiter: str = "/tag/",
        current_version: str = CURRENT_VERSION,
        platform: Optional[Platform] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.release_url = release_url
        self.download_path = download_path
        self.version_delimiter = version_delimiter
        self.current_version = Version.parse(current_version)
        self.platform = platform if platform is not None else current_platform()
        self.timeout = timeout

    def download_url(self) -> str:
        return f"{self.release_url.rstrip('/')}{self.download_path}{self.platform.binary}"

    async def fetch_latest(self, client: Optional[httpx.AsyncClient] = None) -> Version:
        owns_client = client is None
        if client is None:
            client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout), follow_redirects=True)
        try:
            response = await client.get(self.release_url)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpdateCheckError(f"error sending request: {exc}") from exc
        finally:
            if owns_client:
                await client.aclose()
        return version_from_url(str(response.url), self.version_delimiter)

    async def check(self, client: Optional[httpx.AsyncClient] = None) -> UpdateStatus:
        latest = await self.fetch_latest(client)
        status = compare_versions(self.current_version, latest, self.platform, self.download_url())
        logger.info("Release check: %s", status.message)
        return status
