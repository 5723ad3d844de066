import asyncio

import httpx
import pytest

from shoal.app.updater import (
    Platform,
    UpdateChecker,
    Version,
    compare_versions,
    current_platform,
    version_from_url,
)
from shoal.sim.core.errors import UpdateCheckError

RELEASES = "https://example.test/releases/latest"
LINUX = Platform("linux", "linux")


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), follow_redirects=True)


def _redirect_to(tag: str):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/releases/latest":
            return httpx.Response(302, headers={"Location": f"https://example.test/releases/tag/{tag}"})
        return httpx.Response(200, text="release page")

    return handler


def test_version_parse():
    assert Version.parse("1.2.3") == Version(1, 2, 3)
    assert Version.parse("v0.10.0") == Version(0, 10, 0)
    assert str(Version(4, 5, 6)) == "4.5.6"
    with pytest.raises(UpdateCheckError):
        Version.parse("1.2")
    with pytest.raises(UpdateCheckError):
        Version.parse("1.x.3")


def test_version_from_url():
    assert version_from_url("https://example.test/releases/tag/v2.0.1", "/tag/") == Version(2, 0, 1)
    with pytest.raises(UpdateCheckError):
        version_from_url("https://example.test/releases", "/tag/")


def test_compare_versions():
    same = compare_versions(Version(1, 0, 0), Version(1, 0, 0), LINUX, "url")
    assert same.update_available is False
    assert same.message == "latest version"
    assert same.download_url is None

    newer = compare_versions(Version(1, 0, 0), Version(1, 1, 0), LINUX, "url")
    assert newer.update_available is True
    assert newer.message == "new version for linux, from 1.0.0 to 1.1.0"
    assert newer.download_url == "url"


def test_current_platform():
    assert current_platform("win32").binary == "windows.exe"
    assert current_platform("linux").name == "linux"
    assert current_platform("darwin").name == "macos"
    assert current_platform("sunos5").name == "unsupported os"


def test_checker_follows_release_redirect():
    checker = UpdateChecker(RELEASES, current_version="0.1.0", platform=LINUX)

    async def exercise():
        async with _client(_redirect_to("v0.2.0")) as client:
            return await checker.check(client)

    status = asyncio.run(exercise())
    assert status.update_available is True
    assert status.latest == "0.2.0"
    assert status.download_url == "https://example.test/releases/latest/download/linux"


def test_checker_reports_up_to_date():
    checker = UpdateChecker(RELEASES, current_version="0.2.0", platform=LINUX)

    async def exercise():
        async with _client(_redirect_to("v0.2.0")) as client:
            return await checker.check(client)

    status = asyncio.run(exercise())
    assert status.update_available is False
    assert status.current == "0.2.0"


def test_checker_wraps_http_errors():
    checker = UpdateChecker(RELEASES, platform=LINUX)

    async def exercise():
        async with _client(lambda request: httpx.Response(404)) as client:
            await checker.check(client)

    with pytest.raises(UpdateCheckError):
        asyncio.run(exercise())
