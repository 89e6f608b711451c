"""Decoding of streamed chat completions.

The API streams completions as ``data: <json>`` lines terminated by
``data: [DONE]``. ``decode_stream`` turns the raw response bytes into text
fragments or, with ``raw=True``, the parsed JSON chunks.

Example:
    >>> async for fragment in decode_stream(response.aiter_bytes()):
    ...     print(fragment, end="")
"""

from .decoder import StreamChunk, StreamDecoder, decode_stream, extract_delta_content

__all__ = [
    "StreamChunk",
    "StreamDecoder",
    "decode_stream",
    "extract_delta_content",
]
