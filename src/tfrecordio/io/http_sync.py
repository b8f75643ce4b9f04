"""Synchronous HTTP byte source using requests."""

import requests
from typing import Iterator, Optional

from ..core.model import EndOfStream, TruncatedRecordError
from .base import DEFAULT_CHUNK_SIZE, HTTP_TIMEOUT


# Module-level session for connection pooling
_session = None


def _get_session():
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPByteSource:
    """Sequential reader over the body of a streamed HTTP GET."""

    def __init__(self, url: str, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.url = url
        self.bytes_read = 0
        self.content_length: Optional[int] = None
        self._chunk_size = chunk_size
        self._pending = bytearray()
        self._session = _get_session()
        self._response = None
        self._chunks: Optional[Iterator[bytes]] = None

        # Start the GET immediately so bad URLs fail at open time
        self._start()

    def _start(self):
        """Open the streaming GET."""
        try:
            response = self._session.get(self.url, stream=True, timeout=HTTP_TIMEOUT)
        except requests.RequestException as e:
            raise IOError(f"GET request failed: {e}")

        if response.status_code >= 400:
            response.close()
            raise IOError(f"GET request failed with status {response.status_code}")

        content_length_header = response.headers.get('content-length')
        if content_length_header:
            self.content_length = int(content_length_header)

        self._response = response
        self._chunks = response.iter_content(chunk_size=self._chunk_size)

    def _fill(self, wanted: int) -> None:
        """Buffer chunks until `wanted` bytes are pending or the body ends."""
        try:
            while len(self._pending) < wanted:
                chunk = next(self._chunks, None)
                if chunk is None:
                    return
                self._pending.extend(chunk)
        except requests.RequestException as e:
            raise IOError(f"GET body read failed: {e}")

    def readinto_exact(self, view: memoryview) -> None:
        """Fill `view` completely from the response body."""
        requested = len(view)
        if requested == 0:
            return
        self._fill(requested)
        got = min(requested, len(self._pending))
        view[:got] = self._pending[:got]
        del self._pending[:got]
        self.bytes_read += got
        if got == 0:
            raise EndOfStream(f"End of stream: requested {requested} bytes, none left")
        if got < requested:
            raise TruncatedRecordError(f"Not enough data: requested {requested} bytes, "
                                       f"but response only had {got}")

    def read_exact(self, length: int) -> bytes:
        buf = bytearray(length)
        self.readinto_exact(memoryview(buf))
        return bytes(buf)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Release the connection back to the shared session."""
        if self._response is not None:
            self._response.close()
            self._response = None


def open_http_source(url: str) -> HTTPByteSource:
    """Create a synchronous HTTP byte source."""
    return HTTPByteSource(url)
