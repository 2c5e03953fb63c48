"""
Handles the low-level HTTP work: JSON requests and streaming file downloads with
manual redirect following and fractional progress reporting.
"""

import asyncio
import logging
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any
from urllib.parse import urljoin

import aiofiles
import aiohttp

from bbmp_launcher.exceptions import HttpStatusError, NetworkError
from bbmp_launcher.utils.path import create_dir

log = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

_NETWORK_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


class Transport:
    """
    A small async HTTP client for the launcher.

    Redirects are followed by hand so every hop is visible in the debug log.
    ``max_redirects`` and ``request_timeout`` of 0 mean no hop limit and no
    deadline.
    """

    CHUNK_SIZE = 131072  # 128 KB

    def __init__(
        self,
        user_agent: str = "BBMP-Launcher",
        max_redirects: int = 0,
        request_timeout: float = 0,
    ):
        self.user_agent = user_agent
        self.max_redirects = max_redirects
        self.request_timeout = request_timeout
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Gets or creates the aiohttp session used for every request."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                timeout = aiohttp.ClientTimeout(
                    total=self.request_timeout or None,
                    sock_connect=None,
                    sock_read=None,
                )
                self._session = aiohttp.ClientSession(
                    timeout=timeout,
                    headers={"User-Agent": self.user_agent},
                )
                log.debug("Created HTTP session.")
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                log.debug("HTTP session closed.")
            self._session = None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @asynccontextmanager
    async def _open(
        self, url: str, headers: dict[str, str] | None = None
    ) -> AsyncIterator[aiohttp.ClientResponse]:
        """
        Issues a GET and follows any 3xx response carrying a Location header.
        Yields the first non-redirect response.
        """
        session = await self._get_session()
        current_url = url
        hops = 0
        while True:
            try:
                response = await session.get(
                    current_url, headers=headers, allow_redirects=False
                )
            except _NETWORK_ERRORS as e:
                raise NetworkError(f"Request to {current_url} failed: {e}") from e

            location = response.headers.get("Location")
            if 300 <= response.status < 400 and location:
                response.release()
                hops += 1
                if self.max_redirects and hops > self.max_redirects:
                    raise NetworkError(
                        f"Too many redirects ({hops}) while fetching {url}"
                    )
                next_url = urljoin(current_url, location)
                log.debug(f"Redirect {response.status}: {current_url} -> {next_url}")
                current_url = next_url
                continue
            break

        try:
            yield response
        finally:
            response.release()

    async def fetch_json(self, url: str) -> Any:
        """
        Fetches a URL and decodes its body as JSON.

        Raises:
            HttpStatusError: If the final response is not 200 OK.
            NetworkError: On connection failures or an undecodable body.
        """
        async with self._open(url, headers={"Accept": "application/json"}) as r:
            if r.status != 200:
                raise HttpStatusError(r.status, str(r.url))
            try:
                return await r.json(content_type=None)
            except ValueError as e:
                raise NetworkError(f"Invalid JSON received from {url}: {e}") from e
            except _NETWORK_ERRORS as e:
                raise NetworkError(f"Reading response from {url} failed: {e}") from e

    async def download_file(
        self,
        url: str,
        destination_path: str | os.PathLike,
        on_progress: ProgressCallback | None = None,
    ) -> str:
        """
        Streams a URL into ``destination_path``, creating its directory first.

        ``on_progress`` receives bytes-received / Content-Length after every
        chunk, and is never called when the server sends no usable length.
        The file is written in place, so a failed transfer can leave a partial
        file behind.
        """
        destination = Path(destination_path)
        await asyncio.to_thread(create_dir, destination.parent)

        # Identity encoding keeps Content-Length comparable to the bytes we read
        async with self._open(url, headers={"Accept-Encoding": "identity"}) as r:
            if r.status != 200:
                raise HttpStatusError(r.status, str(r.url))

            total = r.content_length or 0
            bytes_downloaded = 0
            log.debug(
                f"Downloading {r.url} -> {destination.name} "
                f"({total if total else 'unknown'} bytes)"
            )
            try:
                async with aiofiles.open(destination, "wb") as f:
                    async for chunk in r.content.iter_chunked(self.CHUNK_SIZE):
                        await f.write(chunk)
                        bytes_downloaded += len(chunk)
                        if on_progress and total:
                            on_progress(min(bytes_downloaded / total, 1.0))
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                raise NetworkError(f"Download of {url} interrupted: {e}") from e

        log.debug(f"Downloaded {bytes_downloaded} bytes to {destination}")
        return str(destination)
