"""Asynchronous HTTP byte source using httpx."""

import httpx
from typing import AsyncIterator, Optional

from ..core.model import EndOfStream, TruncatedRecordError
from .base import DEFAULT_CHUNK_SIZE, HTTP_ASYNC_TIMEOUT


# Global async client
_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=HTTP_ASYNC_TIMEOUT)
    return _client


class HTTPAsyncByteSource:
    """Sequential asynchronous reader over the body of a streamed HTTP GET."""

    def __init__(self, url: str, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.url = url
        self.bytes_read = 0
        self.content_length: Optional[int] = None
        self._chunk_size = chunk_size
        self._pending = bytearray()
        self._response: Optional[httpx.Response] = None
        self._chunks: Optional[AsyncIterator[bytes]] = None
        self._initialized = False

    async def _ensure_initialized(self):
        """Send the streaming GET if not already done."""
        if self._initialized:
            return

        client = _get_client()
        try:
            request = client.build_request("GET", self.url)
            response = await client.send(request, stream=True)
        except httpx.RequestError as e:
            raise IOError(f"GET request failed: {e}")

        if response.status_code >= 400:
            await response.aclose()
            raise IOError(f"GET request failed with status {response.status_code}")

        content_length_header = response.headers.get('content-length')
        if content_length_header:
            self.content_length = int(content_length_header)

        self._response = response
        self._chunks = response.aiter_bytes(self._chunk_size)
        self._initialized = True

    async def _fill(self, wanted: int) -> None:
        try:
            while len(self._pending) < wanted:
                try:
                    chunk = await self._chunks.__anext__()
                except StopAsyncIteration:
                    return
                self._pending.extend(chunk)
        except httpx.HTTPError as e:
            raise IOError(f"GET body read failed: {e}")

    async def readinto_exact(self, view: memoryview) -> None:
        """Fill `view` completely from the response body."""
        await self._ensure_initialized()
        requested = len(view)
        if requested == 0:
            return
        await self._fill(requested)
        got = min(requested, len(self._pending))
        view[:got] = self._pending[:got]
        del self._pending[:got]
        self.bytes_read += got
        if got == 0:
            raise EndOfStream(f"End of stream: requested {requested} bytes, none left")
        if got < requested:
            raise TruncatedRecordError(f"Not enough data: requested {requested} bytes, "
                                       f"but response only had {got}")

    async def read_exact(self, length: int) -> bytes:
        buf = bytearray(length)
        await self.readinto_exact(memoryview(buf))
        return bytes(buf)

    async def __aenter__(self):
        await self._ensure_initialized()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close this response; the shared client stays open."""
        if self._response is not None:
            await self._response.aclose()
            self._response = None


async def open_http_source_async(url: str) -> HTTPAsyncByteSource:
    """Create an asynchronous HTTP byte source."""
    source = HTTPAsyncByteSource(url)
    await source._ensure_initialized()
    return source


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
