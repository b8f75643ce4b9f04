"""I/O layer for tfrecordio - sequential byte sources and sinks for the codec."""

# Re-export these for import convenience
from .base import ByteSource, AsyncByteSource, ByteSink
from .local import (
    LocalByteSource, LocalAsyncByteSource, LocalByteSink,
    open_local_source, open_local_source_async, open_local_sink,
)
from .http_sync import HTTPByteSource, open_http_source
from .http_async import HTTPAsyncByteSource, open_http_source_async, close_global_client


def _is_url(source) -> bool:
    return str(source).startswith(('http://', 'https://'))


def open_source(source):
    """Factory function to create appropriate ByteSource based on source type."""
    if hasattr(source, 'read_exact'):  # already a ByteSource
        return source
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_source(source)

    if _is_url(source):
        return open_http_source(str(source))
    else:
        return open_local_source(source)


async def open_source_async(source):
    """Factory function to create appropriate AsyncByteSource based on source type."""
    if hasattr(source, 'read_exact'):
        return source
    if hasattr(source, 'read'):  # BinaryIO
        return await open_local_source_async(source)

    if _is_url(source):
        return await open_http_source_async(str(source))
    else:
        return await open_local_source_async(source)


def open_sink(target, *, append: bool = False):
    """Factory function to create a ByteSink for a path or binary file object."""
    if hasattr(target, 'write_all'):  # already a ByteSink
        return target
    if _is_url(target):
        raise ValueError(f"Writing to URLs is not supported: {target}")
    return open_local_sink(target, append=append)
