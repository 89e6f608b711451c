# src/pageindex_sdk/streaming/decoder.py

import codecs
import json
import logging
from collections.abc import AsyncIterable, AsyncIterator
from typing import Any

from pageindex_sdk.exceptions import StreamDecodeError
from pageindex_sdk.observability import names
from pageindex_sdk.observability.base import MetricsHook, NoOpMetricsHook

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
DEFAULT_MAX_LINE_LENGTH = 1024 * 1024

StreamChunk = str | dict[str, Any]


def extract_delta_content(chunk: Any) -> str:
    """Return ``choices[0].delta.content`` or "" when any step is missing."""
    if not isinstance(chunk, dict):
        return ""
    choices = chunk.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    first = choices[0]
    if not isinstance(first, dict):
        return ""
    delta = first.get("delta")
    if not isinstance(delta, dict):
        return ""
    content = delta.get("content")
    return content if isinstance(content, str) else ""


class StreamDecoder:
    """Incremental parser for ``data:`` framed completion streams.

    Bytes are decoded with an incremental UTF-8 decoder, so a multi-byte
    character split across reads is reassembled. The trailing partial line of
    every read is held back and prepended to the next one.

    The held-back line is capped at ``max_line_length`` characters. A line
    that outgrows it is dropped up to its terminating newline and counted in
    ``skipped``, like any other malformed frame.

    In text mode each frame yields its ``choices[0].delta.content`` (or
    nothing). In raw mode each frame yields the parsed JSON value.
    """

    def __init__(
        self, raw: bool = False, max_line_length: int = DEFAULT_MAX_LINE_LENGTH
    ) -> None:
        if max_line_length <= 0:
            raise ValueError("max_line_length must be > 0")
        self.raw = raw
        self.max_line_length = max_line_length
        self.done = False
        self.skipped = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._pending = ""
        self._discarding = False

    def feed(self, data: bytes) -> list[StreamChunk]:
        """Consume newly arrived bytes and return the complete frames in them."""
        if self.done:
            return []

        text = self._decoder.decode(data)
        if self._discarding:
            newline = text.find("\n")
            if newline < 0:
                return []
            text = text[newline + 1 :]
            self._discarding = False

        *lines, self._pending = (self._pending + text).split("\n")
        if len(self._pending) > self.max_line_length:
            self.skipped += 1
            logger.warning(
                "Dropping stream line longer than %d characters", self.max_line_length
            )
            self._pending = ""
            self._discarding = True
        return self._process(lines)

    def flush(self) -> list[StreamChunk]:
        """Process whatever is left once the transport is exhausted."""
        if self.done:
            return []

        tail = self._decoder.decode(b"", final=True)
        if self._discarding:
            self._discarding = False
            return []
        tail = self._pending + tail
        self._pending = ""
        return self._process(tail.split("\n"))

    def _process(self, lines: list[str]) -> list[StreamChunk]:
        out: list[StreamChunk] = []
        for line in lines:
            if not line.startswith(DATA_PREFIX):
                continue

            payload = line[len(DATA_PREFIX) :].strip()
            if payload == DONE_SENTINEL:
                self.done = True
                self._pending = ""
                break

            try:
                chunk = json.loads(payload)
            except json.JSONDecodeError:
                self.skipped += 1
                logger.debug("Skipping malformed stream frame: %.80s", payload)
                continue

            if self.raw:
                out.append(chunk)
                continue

            content = extract_delta_content(chunk)
            if content:
                out.append(content)
        return out


async def decode_stream(
    source: AsyncIterable[bytes],
    *,
    raw: bool = False,
    max_line_length: int = DEFAULT_MAX_LINE_LENGTH,
    metrics_hook: MetricsHook = NoOpMetricsHook(),
) -> AsyncIterator[StreamChunk]:
    """Lazily decode a completion stream.

    Args:
        source: Async iterable of raw byte chunks, e.g. ``response.aiter_bytes()``.
        raw: Yield parsed JSON chunks instead of text fragments.
        max_line_length: Longest partial line held between reads. Longer
            lines are dropped.
        metrics_hook: Optional metrics hook for observability.

    Yields:
        Text fragments (default) or parsed JSON chunks (``raw=True``).

    Raises:
        StreamDecodeError: If reading from ``source`` fails. Not retried.

    Note:
        Decoding stops at ``data: [DONE]`` without reading further from
        ``source``. Malformed frames are dropped, never raised.
    """
    decoder = StreamDecoder(raw=raw, max_line_length=max_line_length)
    iterator = source.__aiter__()
    mode = "raw" if raw else "text"
    yielded = 0

    try:
        while not decoder.done:
            try:
                data = await iterator.__anext__()
            except StopAsyncIteration:
                for chunk in decoder.flush():
                    yielded += 1
                    yield chunk
                break
            except Exception as exc:
                metrics_hook.increment(names.STREAM_ERRORS_TOTAL)
                logger.error("Stream transport failed after %d chunks: %s", yielded, exc)
                raise StreamDecodeError(f"Failed to read stream: {exc}") from exc

            for chunk in decoder.feed(data):
                yielded += 1
                yield chunk
    finally:
        metrics_hook.increment(
            names.STREAM_CHUNKS_TOTAL, yielded, labels={"mode": mode}
        )
        if decoder.skipped:
            metrics_hook.increment(names.STREAM_FRAMES_SKIPPED, decoder.skipped)
        logger.debug(
            "Stream finished: mode=%s, chunks=%d, skipped=%d, done_sentinel=%s",
            mode,
            yielded,
            decoder.skipped,
            decoder.done,
        )
