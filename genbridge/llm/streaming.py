"""
Streaming responses — a lazy, closable async iterator over neutral chunks.

A ResponseStream owns one native vendor stream for its whole life:

- the native stream is opened on the first `__anext__`, not before;
- each element is converted only when the consumer asks for it;
- the native stream is released exactly once, on exhaustion, on error,
  on `async with` exit, or on an explicit `aclose()`;
- a stream dropped mid-iteration (`break` without `async with`) schedules
  its own `aclose()` on the running loop;
- a closed stream is finished for good. Replaying means a fresh call.

Usage:
    stream = await generator.generate_content_stream(model=m, contents=c)
    async with stream:
        async for chunk in stream:
            print(chunk.text, end="", flush=True)

    # Breaking out of the loop early still closes the vendor stream,
    # because the `async with` block calls aclose().
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Optional

from google.genai import types

logger = logging.getLogger(__name__)

StreamOpener = Callable[[], Awaitable[Any]]
StreamConverter = Callable[[Any], AsyncIterator[types.GenerateContentResponse]]
ErrorHandler = Callable[[Exception], Exception]

# Strong references to close tasks scheduled from ResponseStream.__del__
_pending_closes: set[asyncio.Task] = set()


# ---------------------------------------------------------------------------
# Stream Stats
# ---------------------------------------------------------------------------

@dataclass
class StreamStats:
    """Statistics for one stream, final once the stream is closed."""

    provider: str = ""
    model: str = ""
    chunk_count: int = 0
    total_text_length: int = 0
    latency_ms: float = 0.0
    completed: bool = False     # True only if the native stream was exhausted


# ---------------------------------------------------------------------------
# Response Stream
# ---------------------------------------------------------------------------

class ResponseStream:
    """Async iterator of GenerateContentResponse bound to one native stream."""

    def __init__(
        self,
        opener: StreamOpener,
        converter: StreamConverter,
        *,
        error_handler: Optional[ErrorHandler] = None,
        provider: str = "",
        model: str = "",
    ):
        self._opener = opener
        self._converter = converter
        self._error_handler = error_handler
        self._native: Any = None
        self._chunks: Optional[AsyncIterator[types.GenerateContentResponse]] = None
        self._closed = False
        self._start: Optional[float] = None
        self._stats = StreamStats(provider=provider, model=model)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def stats(self) -> StreamStats:
        return self._stats

    def __aiter__(self) -> "ResponseStream":
        return self

    async def __anext__(self) -> types.GenerateContentResponse:
        if self._closed:
            raise StopAsyncIteration

        try:
            if self._chunks is None:
                self._start = time.monotonic()
                self._native = await self._opener()
                self._chunks = self._converter(self._native)
            response = await self._chunks.__anext__()
        except StopAsyncIteration:
            self._stats.completed = True
            await self.aclose()
            raise
        except Exception as exc:
            await self.aclose()
            error = self._error_handler(exc) if self._error_handler else exc
            if error is exc:
                raise
            raise error from exc

        self._stats.chunk_count += 1
        self._stats.total_text_length += len(response.text or "")
        return response

    async def aclose(self) -> None:
        """Release the native stream. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        try:
            if self._chunks is not None and hasattr(self._chunks, "aclose"):
                await self._chunks.aclose()
        finally:
            await _release_native(self._native)
            self._native = None
            self._record_stats()

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __del__(self) -> None:
        # Consumer broke out of `async for` and dropped the stream
        if self._closed or self._chunks is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(
                "llm_stream_dropped_without_loop",
                extra={"provider": self._stats.provider, "model": self._stats.model},
            )
            return
        task = loop.create_task(self.aclose())
        _pending_closes.add(task)
        task.add_done_callback(_pending_closes.discard)

    def _record_stats(self) -> None:
        if self._start is not None:
            self._stats.latency_ms = (time.monotonic() - self._start) * 1000

        logger.info(
            "llm_stream_completed" if self._stats.completed else "llm_stream_closed",
            extra={
                "provider": self._stats.provider,
                "model": self._stats.model,
                "chunks": self._stats.chunk_count,
                "text_length": self._stats.total_text_length,
                "latency_ms": round(self._stats.latency_ms, 1),
            },
        )


async def _release_native(native: Any) -> None:
    """Close a vendor stream; the openai SDK's close() is a coroutine."""
    if native is None:
        return
    close = getattr(native, "close", None)
    if close is None:
        close = getattr(native, "aclose", None)
    if close is None:
        return
    result = close()
    if inspect.isawaitable(result):
        await result


# ---------------------------------------------------------------------------
# Helper: Collect full stream into text
# ---------------------------------------------------------------------------

async def collect_text(
    stream: AsyncIterator[types.GenerateContentResponse],
) -> tuple[str, Optional[types.GenerateContentResponse]]:
    """
    Consume a full stream and return (full_text, last_response).

    Useful when streaming is wanted internally but the caller needs the
    whole text plus the final finish reason:

        stream = await generator.generate_content_stream(model=m, contents=c)
        text, last = await collect_text(stream)
    """
    collected: list[str] = []
    last: Optional[types.GenerateContentResponse] = None

    try:
        async for response in stream:
            last = response
            if response.text:
                collected.append(response.text)
    finally:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()

    return "".join(collected), last
